"""Session lifecycle and the expiry sweep that runs on every read."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from blogcore.config import settings
from blogcore.core.errors import NotFoundError
from blogcore.models.user_session import UserSession
from blogcore.services.session import (clear_sessions, create_session, delete_session,
                                       get_session, list_sessions, refresh_session,
                                       sweep_expired_sessions)

NOW = datetime(2025, 4, 21, 12, 0, 0)


def test_create_session(db, make_user):
    user = make_user()

    session = create_session(db, user.id, timedelta(hours=1), last_ip="10.0.0.1", now=NOW)

    assert session.user_id == user.id
    assert session.last_ip == "10.0.0.1"
    assert session.refresh_token is None
    assert session.expires_after == NOW + timedelta(hours=1)


def test_create_session_uses_configured_lifetime(db, make_user):
    session = create_session(db, make_user().id, now=NOW)
    assert session.expires_after == NOW + timedelta(minutes=settings.SESSION_LIFETIME_MINUTES)


def test_create_session_for_unknown_user(db):
    with pytest.raises(NotFoundError, match="User not found"):
        create_session(db, uuid.uuid4(), timedelta(hours=1))


def test_get_session(db, make_user):
    session = create_session(db, make_user().id, timedelta(hours=1), now=NOW)
    assert get_session(db, session.id, now=NOW + timedelta(minutes=30)).id == session.id


def test_get_unknown_session(db):
    with pytest.raises(NotFoundError, match="Session not found"):
        get_session(db, uuid.uuid4())


def test_expired_session_is_swept_on_get(db, make_user):
    session = create_session(db, make_user().id, timedelta(minutes=5), now=NOW)

    with pytest.raises(NotFoundError, match="Session not found"):
        get_session(db, session.id, now=NOW + timedelta(minutes=6))

    assert db.query(UserSession).count() == 0


def test_session_expiring_exactly_now_is_not_returned(db, make_user):
    session = create_session(db, make_user().id, timedelta(minutes=5), now=NOW)

    with pytest.raises(NotFoundError):
        get_session(db, session.id, now=NOW + timedelta(minutes=5))


def test_any_read_sweeps_every_users_expired_sessions(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    create_session(db, alice.id, timedelta(minutes=1), now=NOW)
    live = create_session(db, bob.id, timedelta(days=1), now=NOW)
    create_session(db, bob.id, timedelta(minutes=1), now=NOW)

    sessions = list_sessions(db, bob.id, now=NOW + timedelta(hours=1))

    assert [s.id for s in sessions] == [live.id]
    assert db.query(UserSession).filter(UserSession.user_id == alice.id).count() == 0


def test_list_sessions_returns_only_own_sessions(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    first = create_session(db, alice.id, timedelta(hours=1), now=NOW)
    second = create_session(db, alice.id, timedelta(hours=2), now=NOW)
    create_session(db, bob.id, timedelta(hours=1), now=NOW)

    assert [s.id for s in list_sessions(db, alice.id, now=NOW)] == [first.id, second.id]


def test_sweep_reports_removed_count(db, make_user):
    user = make_user()
    create_session(db, user.id, timedelta(minutes=1), now=NOW)
    create_session(db, user.id, timedelta(minutes=2), now=NOW)
    create_session(db, user.id, timedelta(hours=1), now=NOW)

    assert sweep_expired_sessions(db, NOW + timedelta(minutes=10)) == 2


def test_delete_session(db, make_user):
    user = make_user()
    session = create_session(db, user.id, timedelta(hours=1), now=NOW)

    delete_session(db, session.id, user.id)

    assert db.query(UserSession).count() == 0


def test_delete_session_of_another_user(db, make_user):
    owner = make_user()
    intruder = make_user()
    session = create_session(db, owner.id, timedelta(hours=1), now=NOW)

    with pytest.raises(NotFoundError, match="Session not found"):
        delete_session(db, session.id, intruder.id)
    assert db.query(UserSession).count() == 1


def test_clear_sessions(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    for _ in range(3):
        create_session(db, alice.id, timedelta(hours=1), now=NOW)
    create_session(db, bob.id, timedelta(hours=1), now=NOW)

    assert clear_sessions(db, alice.id) == 3
    assert db.query(UserSession).count() == 1


def test_refresh_session(db, make_user):
    session = create_session(db, make_user().id, timedelta(minutes=5), now=NOW)
    new_expiry = NOW + timedelta(days=30)

    refreshed = refresh_session(db, session.id, "refresh-token-2", new_expiry)

    assert refreshed.refresh_token == "refresh-token-2"
    assert refreshed.expires_after == new_expiry
    # Still reachable after the original lifetime ran out
    assert get_session(db, session.id, now=NOW + timedelta(days=1)).refresh_token == "refresh-token-2"


def test_refresh_unknown_session(db):
    with pytest.raises(NotFoundError, match="Session not found"):
        refresh_session(db, uuid.uuid4(), "token", NOW)


def test_refresh_with_offset_expiry_keeps_absolute_moment(db, make_user):
    session = create_session(db, make_user().id, timedelta(minutes=5), now=NOW)
    eastern = timezone(timedelta(hours=-5))
    # 09:00 at UTC-5 is 14:00 UTC, two hours after NOW
    expiry = datetime(2025, 4, 21, 9, 0, 0, tzinfo=eastern)

    refreshed = refresh_session(db, session.id, "token", expiry)

    assert refreshed.expires_after == NOW + timedelta(hours=2)
    assert get_session(db, session.id, now=NOW + timedelta(hours=1)).id == session.id


def test_aware_now_is_compared_in_utc(db, make_user):
    session = create_session(db, make_user().id, timedelta(hours=2), now=NOW)
    eastern = timezone(timedelta(hours=-5))
    # 08:00 at UTC-5 is 13:00 UTC, one hour after NOW
    one_hour_later = datetime(2025, 4, 21, 8, 0, 0, tzinfo=eastern)

    assert get_session(db, session.id, now=one_hour_later).id == session.id
    assert [s.id for s in list_sessions(db, session.user_id, now=one_hour_later)] == [session.id]


def test_create_session_with_aware_now(db, make_user):
    aware_now = NOW.replace(tzinfo=timezone.utc).astimezone(timezone(timedelta(hours=3)))

    session = create_session(db, make_user().id, timedelta(hours=1), now=aware_now)

    assert session.expires_after == NOW + timedelta(hours=1)
