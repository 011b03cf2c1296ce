"""Refresh token store persistence."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.base import utcnow
from app.services.token_store import RefreshTokenStore


@pytest.fixture
def store(db_session):
    return RefreshTokenStore(db_session)


def test_create_and_find(store, db_session, make_user):
    user = make_user().user
    store.create("tok-1", user.id, utcnow() + timedelta(days=1))
    db_session.commit()

    record = store.find_by_token("tok-1")
    assert record is not None
    assert record.user_id == user.id
    assert not record.is_expired()
    assert store.find_by_token("tok-unknown") is None


def test_duplicate_token_violates_constraint(store, db_session, make_user):
    user = make_user().user
    store.create("tok-dup", user.id, utcnow() + timedelta(days=1))
    db_session.commit()
    db_session.expunge_all()

    with pytest.raises(IntegrityError):
        store.create("tok-dup", user.id, utcnow() + timedelta(days=1))
    db_session.rollback()


def test_delete_by_token_is_idempotent(store, db_session, make_user):
    user = make_user().user
    store.create("tok-2", user.id, utcnow() + timedelta(days=1))
    db_session.commit()

    assert store.delete_by_token("tok-2") == 1
    assert store.delete_by_token("tok-2") == 0
    db_session.commit()
    assert store.find_by_token("tok-2") is None


def test_delete_all_for_user_leaves_other_users_alone(store, db_session, make_user):
    alice = make_user().user
    bob = make_user().user
    for n in range(3):
        store.create(f"alice-{n}", alice.id, utcnow() + timedelta(days=1))
    db_session.commit()

    # registration already stored one token each
    assert store.count_for_user(alice.id) == 4
    assert store.delete_all_for_user(alice.id) == 4
    db_session.commit()

    assert store.count_for_user(alice.id) == 0
    assert store.count_for_user(bob.id) == 1


def test_consume_succeeds_only_once(store, db_session, make_user):
    user = make_user().user
    store.create("tok-once", user.id, utcnow() + timedelta(days=1))
    db_session.commit()

    assert store.consume("tok-once") is True
    assert store.consume("tok-once") is False
