import pytest

from utils.errors import AppError, ErrorKind
from utils.password_hasher import PasswordHasher


@pytest.fixture
def hasher():
    return PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


def test_hash_is_salted_and_not_plaintext(hasher):
    first = hasher.hash("password123")
    second = hasher.hash("password123")
    assert first != second
    assert "password123" not in first
    assert first.startswith("$argon2id$")


def test_verify_accepts_matching_password(hasher):
    digest = hasher.hash("password123")
    assert hasher.verify("password123", digest) is True


def test_verify_returns_false_on_mismatch(hasher):
    digest = hasher.hash("password123")
    assert hasher.verify("wrongpassword", digest) is False


@pytest.mark.parametrize("digest", ["", None, "not-a-hash", "$argon2id$v=19$broken"])
def test_verify_returns_false_on_unusable_digest(hasher, digest):
    assert hasher.verify("password123", digest) is False


def test_needs_rehash_when_parameters_are_stronger(hasher):
    weak = hasher.hash("password123")
    stronger = PasswordHasher(time_cost=2, memory_cost=2048, parallelism=1)
    assert hasher.needs_rehash(weak) is False
    assert stronger.needs_rehash(weak) is True


def test_hashing_failure_is_internal(hasher, monkeypatch):
    import argon2
    from argon2.exceptions import HashingError

    def boom(self, password, **kwargs):
        raise HashingError("out of memory")

    monkeypatch.setattr(argon2.PasswordHasher, "hash", boom)
    with pytest.raises(AppError) as excinfo:
        hasher.hash("password123")
    assert excinfo.value.kind is ErrorKind.INTERNAL
    assert "password123" not in excinfo.value.message
