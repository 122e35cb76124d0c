"""
Shared test fixtures.

Every test gets its own in-memory SQLite database with the full schema, plus
factories for the users, communities, tags and posts that the services work
against.
"""
import itertools
from datetime import timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blogcore.db.session import create_db_engine
from blogcore.init_db import initialize_database
from blogcore.models.comment import Comment
from blogcore.models.community import Community
from blogcore.models.post import Post
from blogcore.models.tag import Tag
from blogcore.models.user import User
from blogcore.utils.time_utils import utcnow


class RecordingNotifier:
    def __init__(self):
        self.post_ids = []

    def notify_subscribers_about_new_post(self, post_id):
        self.post_ids.append(post_id)


class FailingNotifier:
    def notify_subscribers_about_new_post(self, post_id):
        raise RuntimeError("mail queue is down")


@pytest.fixture
def db():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    initialize_database(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_user(db):
    counter = itertools.count()

    def _make(full_name="Test User"):
        user = User(full_name=full_name, email=f"user{next(counter)}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_community(db):
    def _make(creator, name="Test Community", admins=(), subscribers=()):
        community = Community(
            name=name,
            creator_id=creator.id,
            administrators=list(admins),
            subscribers=list(subscribers),
        )
        db.add(community)
        db.commit()
        return community

    return _make


@pytest.fixture
def make_tag(db):
    def _make(creator, name):
        tag = Tag(name=name, creator_id=creator.id)
        db.add(tag)
        db.commit()
        return tag

    return _make


@pytest.fixture
def make_post(db):
    """Insert a post directly, bypassing create_post's checks."""
    counter = itertools.count()
    base_time = utcnow() - timedelta(days=1)

    def _make(author, community=None, title=None, reading_time=5, tags=(),
              liked_by=(), comments=0, created_at=None):
        n = next(counter)
        post = Post(
            author_id=author.id,
            community_id=community.id if community is not None else None,
            created_at=created_at or base_time + timedelta(minutes=n),
            title=title or f"Post {n}",
            description=f"Description of post {n}",
            reading_time=reading_time,
            tags=list(tags),
            liked_by=list(liked_by),
        )
        db.add(post)
        db.flush()
        for i in range(comments):
            db.add(Comment(post_id=post.id, author_id=author.id, content=f"Comment {i}"))
        db.commit()
        return post

    return _make


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()
