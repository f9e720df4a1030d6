import pytest
from sqlalchemy.exc import OperationalError

from models.user import Role, User
from utils.errors import AppError, ErrorKind


def test_create_and_find(store):
    user = store.create(email="  Bob@Example.com ", password_hash="h", name="Bob")
    assert user.email == "bob@example.com"
    assert user.role is Role.USER
    assert user.refresh_token is None
    assert store.find_by_id(user.id) is user
    assert store.find_by_email("BOB@example.com").id == user.id


def test_missing_lookups_return_none(store):
    assert store.find_by_id("does-not-exist") is None
    assert store.find_by_id(None) is None
    assert store.find_by_email("nobody@example.com") is None


def test_unique_violation_becomes_conflict(store):
    store.create(email="dup@example.com", password_hash="h")
    with pytest.raises(AppError) as excinfo:
        store.create(email="dup@example.com", password_hash="h")
    assert excinfo.value.kind is ErrorKind.CONFLICT
    # session is usable again after the rollback
    assert store.list()[1] == 1


def test_set_refresh_token_and_clear(store):
    user = store.create(email="c@example.com", password_hash="h")
    store.set_refresh_token(user, "token-1")
    assert store.find_by_id(user.id).refresh_token == "token-1"
    store.set_refresh_token(user, None)
    assert store.find_by_id(user.id).refresh_token is None


def test_update_rejects_unknown_fields(store):
    user = store.create(email="d@example.com", password_hash="h")
    with pytest.raises(AttributeError):
        store.update(user, nickname="x")


def test_delete(store):
    user = store.create(email="e@example.com", password_hash="h")
    store.delete(user)
    assert store.find_by_id(user.id) is None


def test_list_pages(store):
    for i in range(5):
        store.create(email=f"user{i}@example.com", password_hash="h")
    rows, total = store.list(page=2, limit=2)
    assert total == 5
    assert len(rows) == 2
    assert all(isinstance(row, User) for row in rows)


def test_engine_errors_become_internal(store, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(store.storage, "get", broken)
    with pytest.raises(AppError) as excinfo:
        store.find_by_id("anything")
    assert excinfo.value.kind is ErrorKind.INTERNAL
    assert "locked" not in excinfo.value.message


def test_storage_get_returns_none_for_missing_id(store):
    assert store.storage.get(User, "does-not-exist") is None
