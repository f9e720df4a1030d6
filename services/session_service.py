"""
Session service: register / login / refresh / logout and the account
read & update paths.

State per account:
    registered, no session --login--> active session --refresh--> active session
    active session --logout--> registered, no session

The stored refresh token is the single live refresh credential for the
account; this service is the only writer of that field.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from models.account_store import AccountStore, normalize_email
from models.user import AccountView, Role, User
from utils.errors import AppError, ErrorKind, conflict, not_found, unauthorized
from utils.password_hasher import PasswordHasher
from utils.tokens import TokenAuthority, TokenError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass(frozen=True)
class SessionTokens:
    account: AccountView
    access_token: str
    refresh_token: str


def _tokens_match(stored: str | None, presented: str) -> bool:
    if not stored:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))


class SessionService:
    def __init__(self, store: AccountStore, hasher: PasswordHasher, tokens: TokenAuthority):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    # --- sessions -------------------------------------------------------

    def register(self, email: str, name: str | None, password: str, role: Role | str | None = None) -> AccountView:
        """Create an account. No tokens are issued; the caller logs in separately."""
        email = normalize_email(email)
        if not email or not password:
            raise AppError(ErrorKind.VALIDATION_FAILED, "email and password are required")
        role = self._parse_role(role) if role is not None else Role.USER

        if self.store.find_by_email(email) is not None:
            raise conflict("Email already exists", code="EMAIL_TAKEN")

        user = self.store.create(
            email=email,
            password_hash=self.hasher.hash(password),
            name=name,
            role=role,
        )
        logger.info("Registered account %s", user.id)
        return AccountView.from_user(user)

    def login(self, email: str, password: str) -> SessionTokens:
        """
        Verify credentials and start a session. Any previous session of the
        account ends, because its refresh token is overwritten.
        """
        user = self.store.find_by_email(email)
        if user is None or not self.hasher.verify(password or "", user.password_hash):
            logger.info("Rejected login attempt")
            raise unauthorized(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

        if self.hasher.needs_rehash(user.password_hash):
            self.store.update(user, password_hash=self.hasher.hash(password))
            logger.info("Upgraded password hash for account %s", user.id)

        session = self._start_session(user)
        logger.info("Account %s logged in", user.id)
        return session

    def refresh(self, presented: str | None) -> SessionTokens:
        """Exchange the live refresh token for a new pair (rotation)."""
        if not presented:
            raise unauthorized(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")
        try:
            claims = self.tokens.verify_refresh(presented)
        except TokenError as exc:
            logger.info("Refresh token rejected: %s", exc)
            raise unauthorized(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN") from exc

        account_id = claims.get("sub")
        if not account_id or not isinstance(account_id, str):
            raise unauthorized(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        user = self.store.find_by_id(account_id)
        if user is None:
            raise not_found()

        if not _tokens_match(user.refresh_token, presented):
            # logged out, rotated away, or superseded by a newer login
            logger.warning("Stale refresh token presented for account %s", user.id)
            raise unauthorized(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        session = self._start_session(user)
        logger.info("Rotated refresh token for account %s", user.id)
        return session

    def logout(self, account_id: str) -> None:
        user = self._require(account_id)
        if user.refresh_token is not None:
            self.store.set_refresh_token(user, None)
        logger.info("Account %s logged out", user.id)

    # --- accounts -------------------------------------------------------

    def get_by_id(self, account_id: str) -> AccountView:
        return AccountView.from_user(self._require(account_id))

    def list(self, page: int = 1, limit: int = 20) -> Tuple[List[AccountView], int]:
        rows, total = self.store.list(page=page, limit=limit)
        return [AccountView.from_user(row) for row in rows], total

    def update(self, account_id: str, patch: Dict[str, Any]) -> AccountView:
        user = self._require(account_id)
        changes: Dict[str, Any] = {}

        if patch.get("email") is not None:
            email = normalize_email(patch["email"])
            owner = self.store.find_by_email(email)
            if owner is not None and owner.id != user.id:
                raise conflict("Email already exists", code="EMAIL_TAKEN")
            changes["email"] = email
        if patch.get("name") is not None:
            changes["name"] = patch["name"]
        if patch.get("password") is not None:
            changes["password_hash"] = self.hasher.hash(patch["password"])
        if patch.get("role") is not None:
            changes["role"] = self._parse_role(patch["role"])

        if changes:
            user = self.store.update(user, **changes)
            logger.info("Updated account %s (%s)", user.id, ", ".join(sorted(changes)))
        return AccountView.from_user(user)

    def delete(self, account_id: str) -> None:
        user = self._require(account_id)
        self.store.delete(user)
        logger.info("Deleted account %s", account_id)

    # --- helpers --------------------------------------------------------

    def _require(self, account_id: str) -> User:
        user = self.store.find_by_id(account_id)
        if user is None:
            raise not_found()
        return user

    def _start_session(self, user: User) -> SessionTokens:
        pair = self.tokens.issue_pair(user.id, user.role.value)
        user = self.store.set_refresh_token(user, pair.refresh_token)
        return SessionTokens(
            account=AccountView.from_user(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )

    @staticmethod
    def _parse_role(value) -> Role:
        try:
            return Role.parse(value)
        except ValueError as exc:
            raise AppError(ErrorKind.VALIDATION_FAILED, "Unknown role", code="INVALID_ROLE") from exc
