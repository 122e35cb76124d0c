import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import relationship

from blogcore.db.session import Base
from blogcore.utils.time_utils import utcnow

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

# The composite key makes a second like by the same user fail at the store
post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    community_id = Column(Uuid, ForeignKey("communities.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    reading_time = Column(Integer, nullable=False, default=0)
    image_url = Column(String, nullable=True)
    address_id = Column(Uuid, nullable=True)

    author = relationship("User", back_populates="posts")
    community = relationship("Community", back_populates="posts")
    tags = relationship("Tag", secondary=post_tags)
    liked_by = relationship("User", secondary=post_likes)
    comments = relationship("Comment", back_populates="post",
                            cascade="all, delete-orphan")
