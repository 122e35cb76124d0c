import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from blogcore.db.session import Base


class UserSession(Base):
    """An authenticated login; rows past expires_after are swept on read."""
    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    last_ip = Column(String, nullable=False, default="")
    refresh_token = Column(String, nullable=True)
    expires_after = Column(DateTime, nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
