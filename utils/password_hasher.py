"""
Argon2 password hashing via argon2-cffi.

Plaintext passwords are only ever passed through; they are never returned,
stored or logged.
"""
from __future__ import annotations

import logging

import argon2
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from utils.errors import internal

logger = logging.getLogger(__name__)


class PasswordHasher:
    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._ph = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password (argon2id, random salt)."""
        try:
            return self._ph.hash(password)
        except HashingError as exc:
            logger.error("Password hashing failed: %s", exc.__class__.__name__)
            raise internal("Could not process password", code="HASHING_FAILED") from exc

    def verify(self, password: str, password_hash: str | None) -> bool:
        """
        Constant-time check of a plaintext password against a stored hash.
        A mismatch or an unreadable stored hash yields False.
        """
        if not password_hash:
            return False
        try:
            return self._ph.verify(password_hash, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            logger.warning("Stored password hash could not be verified")
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        # only called after verify() succeeded, so the hash is well formed
        return self._ph.check_needs_rehash(password_hash)
