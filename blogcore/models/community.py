import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import relationship

from blogcore.db.session import Base
from blogcore.utils.time_utils import utcnow

community_administrators = Table(
    "community_administrators",
    Base.metadata,
    Column("community_id", Uuid, ForeignKey("communities.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

community_subscribers = Table(
    "community_subscribers",
    Base.metadata,
    Column("community_id", Uuid, ForeignKey("communities.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Community(Base):
    __tablename__ = "communities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    creator_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    creator = relationship("User")
    administrators = relationship("User", secondary=community_administrators)
    subscribers = relationship("User", secondary=community_subscribers)
    # Members-only posts go with their community
    posts = relationship("Post", back_populates="community",
                         cascade="save-update, merge, delete", passive_deletes=True)

    def can_post(self, user_id) -> bool:
        return (self.creator_id == user_id
                or any(a.id == user_id for a in self.administrators))
