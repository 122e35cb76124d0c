import logging

from blogcore.core.logging_config import configure_logging
from blogcore.init_db import initialize_database


def run_migrations():
    logging.info("Running database migrations...")
    initialize_database()
    logging.info("Migrations completed successfully.")


if __name__ == "__main__":
    configure_logging()
    run_migrations()
