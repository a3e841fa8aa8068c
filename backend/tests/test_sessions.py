from datetime import timedelta
from uuid import uuid4

import sqlalchemy as sa

from labshare.core.clock import as_utc, now_utc
from labshare.models.auth_session import AuthSession
from labshare.services.sessions import (
    create_session,
    delete_expired_sessions,
    delete_session,
    get_valid_session,
    revoke_all_student_sessions,
    revoke_session,
    touch_session,
)


def test_created_session_is_valid(db, settings, student):
    row = create_session(db, student.id)
    db.commit()
    found = get_valid_session(db, settings, row.id)
    assert found is not None
    assert found.student_id == student.id
    assert get_valid_session(db, settings, str(row.id)) is not None


def test_unknown_or_malformed_ids_are_invalid(db, settings):
    assert get_valid_session(db, settings, uuid4()) is None
    assert get_valid_session(db, settings, "not-a-uuid") is None


def test_revoked_session_is_invalid(db, settings, student):
    row = create_session(db, student.id)
    db.commit()
    assert revoke_session(db, row.id) is True
    db.commit()
    assert get_valid_session(db, settings, row.id) is None


def test_session_past_max_age_is_invalid(db, settings, student):
    t0 = now_utc()
    row = create_session(db, student.id, now=t0)
    db.commit()
    assert get_valid_session(db, settings, row.id, now=t0 + timedelta(days=7)) is not None
    assert get_valid_session(db, settings, row.id, now=t0 + timedelta(days=7, seconds=1)) is None


def test_revoke_and_delete_are_idempotent(db, student):
    row = create_session(db, student.id)
    db.commit()

    assert revoke_session(db, row.id) is True
    assert revoke_session(db, row.id) is False
    assert revoke_session(db, uuid4()) is False
    assert revoke_session(db, "garbage") is False

    assert delete_session(db, row.id) is True
    assert delete_session(db, row.id) is False
    assert delete_session(db, "garbage") is False
    db.commit()


def test_revoke_all_only_touches_one_student(db, settings, student):
    mine = [create_session(db, student.id) for _ in range(3)]
    db.commit()
    revoke_session(db, mine[0].id)

    assert revoke_all_student_sessions(db, student.id) == 2
    assert revoke_all_student_sessions(db, uuid4()) == 0
    db.commit()
    assert all(get_valid_session(db, settings, s.id) is None for s in mine)


def test_delete_expired_sessions_uses_creation_time(db, student):
    t0 = now_utc()
    old = create_session(db, student.id, now=t0 - timedelta(days=8))
    revoked_old = create_session(db, student.id, now=t0 - timedelta(days=9))
    fresh = create_session(db, student.id, now=t0 - timedelta(days=1))
    db.commit()
    revoke_session(db, revoked_old.id)
    db.commit()

    assert delete_expired_sessions(db, timedelta(days=7), now=t0) == 2
    db.commit()
    remaining = db.scalars(sa.select(AuthSession.id)).all()
    assert remaining == [fresh.id]
    assert old.id not in remaining


def test_naive_now_is_treated_as_utc(db, settings, student):
    t0 = now_utc()
    row = create_session(db, student.id, now=t0.replace(tzinfo=None))
    db.commit()
    naive_later = (t0 + timedelta(days=7, seconds=1)).replace(tzinfo=None)
    assert get_valid_session(db, settings, row.id, now=(t0 + timedelta(days=1)).replace(tzinfo=None)) is not None
    assert get_valid_session(db, settings, row.id, now=naive_later) is None


def test_touch_records_last_seen_without_affecting_validity(db, settings, student):
    t0 = now_utc()
    row = create_session(db, student.id, now=t0)
    db.commit()
    assert row.last_seen_at is None

    touch_session(db, row.id, now=t0 + timedelta(days=6))
    db.commit()

    found = get_valid_session(db, settings, row.id, now=t0 + timedelta(days=6))
    assert as_utc(found.last_seen_at) == t0 + timedelta(days=6)
    # Age still counts from creation.
    assert get_valid_session(db, settings, row.id, now=t0 + timedelta(days=8)) is None
