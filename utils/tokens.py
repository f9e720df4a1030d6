"""
Token authority:
- HS256 JWTs via PyJWT
- access tokens: {sub, role}, short TTL, access secret
- refresh tokens: {sub}, long TTL, separate refresh secret
- every token carries a fresh jti so two tokens are never equal
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenAuthority:
    """Signs and verifies access and refresh tokens.

    All secrets and lifetimes are supplied by the caller; nothing here reads
    application config.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        issuer: str | None = None,
        leeway: int = 0,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self.algorithm = algorithm
        self.issuer = issuer
        self.leeway = leeway

    @property
    def access_ttl(self) -> timedelta:
        return self._ttls[ACCESS]

    @property
    def refresh_ttl(self) -> timedelta:
        return self._ttls[REFRESH]

    def issue_access(self, claims: Dict[str, Any]) -> str:
        return self._issue(ACCESS, claims)

    def issue_refresh(self, claims: Dict[str, Any]) -> str:
        return self._issue(REFRESH, claims)

    def issue_pair(self, account_id: str, role: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access({"sub": account_id, "role": role}),
            refresh_token=self.issue_refresh({"sub": account_id}),
        )

    def verify_access(self, token: str) -> Dict[str, Any]:
        return self._verify(ACCESS, token)

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return self._verify(REFRESH, token)

    def _issue(self, token_type: str, claims: Dict[str, Any]) -> str:
        now = _now()
        payload = dict(claims)
        if "sub" in payload:
            payload["sub"] = str(payload["sub"])
        payload.update(
            {
                "type": token_type,
                "jti": generate_jti(),
                "iat": now,
                "exp": now + self._ttls[token_type],
            }
        )
        if self.issuer:
            payload["iss"] = self.issuer
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def _verify(self, token_type: str, token: str) -> Dict[str, Any]:
        if not token or not isinstance(token, str):
            raise TokenInvalid("Token missing")
        try:
            decoded = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(f"Invalid token: {exc.__class__.__name__}") from exc

        if decoded.get("type") != token_type:
            raise TokenInvalid("Wrong token type")
        return decoded
