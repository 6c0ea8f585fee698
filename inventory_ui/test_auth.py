# inventory_ui/test_auth.py
# Unit tests for the session/identity context

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui.auth import (
    AUTH_AUTHENTICATED,
    AUTH_UNAUTHENTICATED,
    AUTH_UNKNOWN,
    DUPLICATE_EMAIL_MESSAGE,
    ENTRY_PAGE,
    SessionContext,
    extract_user,
)
from inventory_ui.models import Role
from conftest import fail, ok, user_json


@pytest.fixture
def ctx(client):
    return SessionContext(client)


def test_starts_resolving(ctx):
    assert ctx.status == AUTH_UNKNOWN
    assert ctx.is_resolving
    assert not ctx.is_authenticated
    assert ctx.role is None


def test_resolve_with_live_session(http, ctx):
    http.on("GET", "/auth/me", ok({"success": True, "data": {"user": user_json(20, "Ada Admin", Role.ADMIN)}}))

    assert ctx.resolve() == AUTH_AUTHENTICATED
    assert ctx.identity.name == "Ada Admin"
    assert ctx.role == Role.ADMIN


def test_resolve_accepts_flat_user(http, ctx):
    http.on("GET", "/auth/me", ok({"user": user_json(1, "Sam Staff", Role.STAFF)}))

    assert ctx.resolve() == AUTH_AUTHENTICATED
    assert ctx.role == Role.STAFF


def test_resolve_without_session(http, ctx):
    http.on("GET", "/auth/me", fail(401, "Not authenticated"))

    assert ctx.resolve() == AUTH_UNAUTHENTICATED
    assert ctx.identity is None
    assert ctx.last_error is None


def test_resolve_keeps_transport_error_for_login_page(http, ctx):
    http.on("GET", "/auth/me", fail(500, "Database offline"))

    assert ctx.resolve() == AUTH_UNAUTHENTICATED
    assert ctx.last_error == "Database offline"


def test_resolve_runs_once(http, ctx):
    http.on("GET", "/auth/me", fail(401))

    ctx.resolve()
    ctx.resolve()

    assert len(http.calls_to("GET", "/auth/me")) == 1


def test_sign_in_success(http, ctx):
    http.on("POST", "/auth/sign-in", ok({"data": {"user": user_json(10, "Cora Custodian", Role.PROPERTY_CUSTODIAN)}}))

    assert ctx.sign_in(" cora@example.com ", "pw") is None
    assert ctx.is_authenticated
    assert ctx.role == Role.PROPERTY_CUSTODIAN
    assert http.calls[0].json == {"email": "cora@example.com", "password": "pw"}


def test_sign_in_rejected(http, ctx):
    http.on("POST", "/auth/sign-in", fail(401))

    assert ctx.sign_in("a@b.c", "wrong") == "Invalid email or password."
    assert not ctx.is_authenticated


def test_sign_in_requires_credentials(http, ctx):
    assert ctx.sign_in("", "") == "Please enter your email and password."
    assert http.calls == []


def test_sign_up_duplicate_email(http, ctx):
    http.on("POST", "/auth/sign-up", fail(409))

    assert ctx.sign_up("New Person", "dup@example.com", "pw") == DUPLICATE_EMAIL_MESSAGE


def test_sign_up_sends_extra_fields(http, ctx):
    http.on("POST", "/auth/sign-up", ok({"success": True}, status=201))

    assert ctx.sign_up("New Person", "new@example.com", "pw", {"department": "IT"}) is None
    assert http.calls[0].json["department"] == "IT"
    assert not ctx.is_authenticated


def test_logout_clears_state_even_when_server_fails(http, ctx):
    http.on("POST", "/auth/sign-in", ok({"user": user_json(1, "Sam Staff", Role.STAFF)}))
    http.on("POST", "/auth/sign-out", fail(500))
    ctx.sign_in("sam@example.com", "pw")
    http.cookies.set("session", "abc")

    page = ctx.logout()

    assert page == ENTRY_PAGE
    assert ctx.status == AUTH_UNAUTHENTICATED
    assert ctx.identity is None
    assert len(http.cookies) == 0


def test_extract_user_ignores_malformed_payloads():
    assert extract_user(None) is None
    assert extract_user({"data": {"user": {"id": "x"}}}) is None
    assert extract_user({"data": []}) is None
