from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, String, Text, Enum

from models.base_model import Base, BaseModel


class Role(enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value) -> "Role":
        """Coerce a role name (any case) or Role into a Role; ValueError otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown role: {value!r}")


class User(BaseModel, Base):
    __tablename__ = "users"
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    # the single live refresh token for this account; null when signed out
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self):
        return f"<User id={self.id} role={self.role.value if self.role else None}>"


@dataclass(frozen=True)
class AccountView:
    """Public projection of a User. Holds no credential material."""

    id: str
    email: str
    name: str | None
    role: Role
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "AccountView":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role or Role.USER,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass(frozen=True)
class Identity:
    """Verified caller identity attached to the request by the auth interceptor."""

    id: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(id=user.id, email=user.email, role=user.role or Role.USER)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
