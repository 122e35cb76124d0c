import logging

from blogcore.core.logging_config import configure_logging
from blogcore.db.session import engine, Base
# Import all models here so their tables are registered on Base.metadata
from blogcore.models.user import User
from blogcore.models.community import Community
from blogcore.models.tag import Tag
from blogcore.models.post import Post
from blogcore.models.comment import Comment
from blogcore.models.user_session import UserSession


def initialize_database(bind=None):
    logging.info("Initializing the database...")
    Base.metadata.create_all(bind=bind or engine)
    logging.info("Database initialization completed successfully.")


if __name__ == "__main__":
    configure_logging()
    initialize_database()
