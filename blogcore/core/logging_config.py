import logging

from blogcore.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None):
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(),
                        format=LOG_FORMAT)
