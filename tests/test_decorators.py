"""
Auth interceptor tests: bearer extraction, verification and identity attachment.
"""
from datetime import timedelta

import pytest
from flask import g

from models.user import Identity, Role
from tests.conftest import bearer
from utils.decorators import extract_bearer_token, jwt_required, roles_required
from utils.tokens import TokenAuthority


@pytest.fixture
def protected_app(app):
    @app.get("/_guarded")
    @jwt_required()
    def guarded():
        identity = g.current_identity
        return {"id": identity.id, "email": identity.email, "role": identity.role.value}

    @app.get("/_admin_only")
    @roles_required(Role.ADMIN)
    def admin_only():
        return {"ok": True}

    return app


@pytest.fixture
def guarded_client(protected_app):
    return protected_app.test_client()


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer ", None),
        ("bearer abc", None),
        ("Token abc", None),
        ("Bearer abc def", None),
        ("Bearer  abc", None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_missing_header_rejected_before_store_lookup(guarded_client, store, monkeypatch):
    calls = []
    monkeypatch.setattr(store, "find_by_id", lambda *a, **k: calls.append(a))
    resp = guarded_client.get("/_guarded")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "No token provided"
    assert calls == []


def test_malformed_scheme_rejected(guarded_client):
    resp = guarded_client.get("/_guarded", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "NO_TOKEN"


def test_valid_token_attaches_identity(guarded_client, service, tokens):
    account = service.register("a@x.com", "A", "password123")
    session = service.login("a@x.com", "password123")
    resp = guarded_client.get("/_guarded", headers=bearer(session.access_token))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["id"] == account.id == tokens.verify_access(session.access_token)["sub"]
    assert body == {"id": account.id, "email": "a@x.com", "role": "USER"}


def test_identity_holds_no_credentials():
    fields = set(Identity.__dataclass_fields__)
    assert fields == {"id", "email", "role"}


def test_refresh_token_is_not_accepted_as_bearer(guarded_client, service):
    service.register("a@x.com", "A", "password123")
    session = service.login("a@x.com", "password123")
    resp = guarded_client.get("/_guarded", headers=bearer(session.refresh_token))
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "INVALID_TOKEN"


def test_expired_access_token_rejected(guarded_client, protected_app, service):
    account = service.register("a@x.com", "A", "password123")
    cfg = protected_app.config
    stale = TokenAuthority(
        cfg["ACCESS_TOKEN_SECRET"],
        cfg["REFRESH_TOKEN_SECRET"],
        access_ttl=timedelta(seconds=-60),
        issuer=cfg["JWT_ISSUER"],
    )
    token = stale.issue_access({"sub": account.id, "role": "USER"})
    resp = guarded_client.get("/_guarded", headers=bearer(token))
    assert resp.status_code == 401


def test_deleted_account_token_rejected(guarded_client, service):
    account = service.register("a@x.com", "A", "password123")
    session = service.login("a@x.com", "password123")
    service.delete(account.id)
    resp = guarded_client.get("/_guarded", headers=bearer(session.access_token))
    assert resp.status_code == 401


def test_interceptor_does_not_consult_refresh_token(guarded_client, service):
    account = service.register("a@x.com", "A", "password123")
    session = service.login("a@x.com", "password123")
    service.logout(account.id)
    # access tokens stay valid until they expire
    resp = guarded_client.get("/_guarded", headers=bearer(session.access_token))
    assert resp.status_code == 200


def test_roles_required(guarded_client, service):
    service.register("u@x.com", "U", "password123")
    service.register("root@x.com", "Root", "password123", role="ADMIN")
    user_token = service.login("u@x.com", "password123").access_token
    admin_token = service.login("root@x.com", "password123").access_token

    assert guarded_client.get("/_admin_only").status_code == 401
    resp = guarded_client.get("/_admin_only", headers=bearer(user_token))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "FORBIDDEN"
    assert guarded_client.get("/_admin_only", headers=bearer(admin_token)).status_code == 200
