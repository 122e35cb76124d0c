from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from blogcore.config import settings

Base = declarative_base()


def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    # LIKE is case-insensitive for ASCII in SQLite unless told otherwise
    cursor.execute("PRAGMA case_sensitive_like = ON")
    cursor.close()


def create_db_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        connect_args = kwargs.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
    engine = create_engine(url, echo=settings.SQL_ECHO, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_pragmas)
    return engine


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
