"""
Credential store: the only code that reads or writes account rows.

Storage-engine failures never leave this module as SQLAlchemy exceptions:
unique-constraint violations become CONFLICT, everything else INTERNAL.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.db_storage import DBStorage
from models.user import Role, User
from utils.errors import AppError, conflict, internal

logger = logging.getLogger(__name__)

UNIQUE_MARKERS = ("unique constraint", "unique violation", "duplicate key", "duplicate entry")


def normalize_email(email: str) -> str:
    return email.strip().lower() if isinstance(email, str) else email


def _translate_storage_errors(fn):
    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except AppError:
            raise
        except IntegrityError as exc:
            message = str(getattr(exc, "orig", exc)).lower()
            if any(marker in message for marker in UNIQUE_MARKERS):
                raise conflict("Email already exists", code="EMAIL_TAKEN") from exc
            logger.exception("Integrity error in %s", fn.__name__)
            raise internal() from exc
        except SQLAlchemyError as exc:
            logger.exception("Storage error in %s", fn.__name__)
            raise internal() from exc

    return wrapper


class AccountStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    @_translate_storage_errors
    def find_by_id(self, account_id: str) -> User | None:
        if not account_id:
            return None
        return self.storage.get(User, str(account_id))

    @_translate_storage_errors
    def find_by_email(self, email: str) -> User | None:
        if not email:
            return None
        return self.session.query(User).filter(User.email == normalize_email(email)).first()

    @_translate_storage_errors
    def list(self, page: int = 1, limit: int = 20) -> Tuple[List[User], int]:
        query = self.session.query(User)
        total = query.count()
        rows = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    @_translate_storage_errors
    def create(self, email: str, password_hash: str, name: str | None = None, role: Role = Role.USER) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash, name=name, role=role)
        self.storage.new(user)
        self.storage.save()
        return user

    @_translate_storage_errors
    def update(self, user: User, **fields) -> User:
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
        for key, value in fields.items():
            if not hasattr(User, key):
                raise AttributeError(f"User has no field {key!r}")
            setattr(user, key, value)
        user.touch()
        self.storage.new(user)
        self.storage.save()
        return user

    def set_refresh_token(self, user: User, token: str | None) -> User:
        return self.update(user, refresh_token=token)

    @_translate_storage_errors
    def delete(self, user: User) -> None:
        self.storage.delete(user)
        self.storage.save()
