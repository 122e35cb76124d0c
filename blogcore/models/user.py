import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from blogcore.db.session import Base
from blogcore.utils.time_utils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    posts = relationship("Post", back_populates="author")
    sessions = relationship("UserSession", back_populates="user",
                            cascade="all, delete-orphan")
