# Expired sessions are swept lazily on every read, using one "now" per call
import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogcore.config import settings
from blogcore.core.errors import NotFoundError
from blogcore.models.user import User
from blogcore.models.user_session import UserSession
from blogcore.utils.time_utils import to_naive_utc, utcnow


def _current_time(now: datetime | None) -> datetime:
    return to_naive_utc(now) if now is not None else utcnow()


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def sweep_expired_sessions(db: Session, now: datetime | None = None) -> int:
    """Delete every session that expired before ``now``. Returns the number removed."""
    now = _current_time(now)
    removed = (db.query(UserSession)
               .filter(UserSession.expires_after < now)
               .delete(synchronize_session="fetch"))
    _commit(db)
    if removed:
        logging.debug(f"Swept {removed} expired sessions")
    return removed


def list_sessions(db: Session, user_id: UUID, now: datetime | None = None) -> list[UserSession]:
    now = _current_time(now)
    sweep_expired_sessions(db, now)

    return (db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.expires_after > now)
            .order_by(UserSession.expires_after)
            .all())


def get_session(db: Session, session_id: UUID, now: datetime | None = None) -> UserSession:
    now = _current_time(now)
    sweep_expired_sessions(db, now)

    session = (db.query(UserSession)
               .filter(UserSession.id == session_id, UserSession.expires_after > now)
               .first())
    if session is None:
        raise NotFoundError("Session not found")
    return session


def create_session(db: Session,
                   user_id: UUID,
                   lifetime: timedelta | None = None,
                   last_ip: str = "",
                   now: datetime | None = None) -> UserSession:
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise NotFoundError("User not found")

    lifetime = lifetime if lifetime is not None else timedelta(minutes=settings.SESSION_LIFETIME_MINUTES)
    session = UserSession(
        user_id=user_id,
        last_ip=last_ip,
        expires_after=_current_time(now) + lifetime,
    )
    db.add(session)
    _commit(db)

    logging.info(f"Session {session.id} opened for user {user_id}")
    return session


def delete_session(db: Session, session_id: UUID, user_id: UUID) -> None:
    session = (db.query(UserSession)
               .filter(UserSession.id == session_id, UserSession.user_id == user_id)
               .first())
    if session is None:
        raise NotFoundError("Session not found")

    db.delete(session)
    _commit(db)
    logging.info(f"Session {session_id} closed by user {user_id}")


def clear_sessions(db: Session, user_id: UUID) -> int:
    """Log the user out everywhere. Returns the number of sessions removed."""
    removed = (db.query(UserSession)
               .filter(UserSession.user_id == user_id)
               .delete(synchronize_session="fetch"))
    _commit(db)
    logging.info(f"Cleared {removed} sessions of user {user_id}")
    return removed


def refresh_session(db: Session,
                    session_id: UUID,
                    refresh_token: str,
                    expires_after: datetime) -> UserSession:
    session = db.query(UserSession).filter(UserSession.id == session_id).first()
    if session is None:
        raise NotFoundError("Session not found")

    session.refresh_token = refresh_token
    session.expires_after = to_naive_utc(expires_after)
    _commit(db)
    return session
