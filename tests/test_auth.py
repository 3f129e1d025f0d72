# tests/test_auth.py

import time
import uuid

import pytest
from conftest import add_profile, make_token, valid_claims
from fastapi import HTTPException

from fieldops.auth import SessionContext, build_session_context, verify_access_token


def _rejected(token):
    with pytest.raises(HTTPException) as exc:
        verify_access_token(token)
    assert exc.value.status_code == 401
    return exc.value


def test_valid_token_returns_claims():
    claims = verify_access_token(make_token(valid_claims("user-1")))
    assert claims["sub"] == "user-1"


def test_audience_may_be_a_list():
    claims = verify_access_token(make_token(valid_claims("user-1", aud=["other", "authenticated"])))
    assert claims["sub"] == "user-1"


def test_wrong_secret_rejected():
    assert _rejected(make_token(valid_claims("user-1"), secret="other")).detail == "Invalid token signature"


def test_wrong_algorithm_rejected():
    assert _rejected(make_token(valid_claims("user-1"), alg="none")).detail == "Invalid token algorithm"


def test_malformed_token_rejected():
    _rejected("not-a-jwt")


def test_expired_token_flags_header():
    error = _rejected(make_token(valid_claims("user-1", exp=int(time.time()) - 120)))
    assert error.headers == {"X-Token-Expired": "true"}


def test_wrong_audience_rejected():
    assert _rejected(make_token(valid_claims("user-1", aud="anon"))).detail == "Invalid token audience"


def test_missing_subject_rejected():
    assert _rejected(make_token(valid_claims(""))).detail == "Invalid token claims"


def test_session_context_from_profile(db):
    profile = add_profile(db, role="admin", sector="Suporte", username="sara")

    session = build_session_context(db, profile.id, "token@fieldops.test")

    assert session.role == "admin"
    assert session.sector == "Suporte"
    assert session.username == "sara"
    assert session.email == profile.email


def test_session_without_profile_has_no_role(db):
    session = build_session_context(db, "missing", "someone@fieldops.test")
    assert session == SessionContext(user_id="missing", email="someone@fieldops.test")


def test_display_name_falls_back():
    assert SessionContext(user_id="u1", email="a@b.c", full_name="Ana").display_name == "Ana"
    assert SessionContext(user_id="u1", email="a@b.c", username="ana").display_name == "ana"
    assert SessionContext(user_id="u1", email="a@b.c").display_name == "a@b.c"


# ============================================================================
# HTTP
# ============================================================================


def test_me_with_bearer_token(raw_client, db):
    profile = add_profile(db, role="user", sector="Comercial", username="carlos")
    token = make_token(valid_claims(profile.id, email=profile.email))

    response = raw_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["username"] == "carlos"
    assert response.json()["capabilities"]["edit_calendar"] is True


def test_missing_authorization_answers_401(raw_client):
    response = raw_client.get("/auth/me")
    assert response.status_code in (401, 403)


def test_bad_token_answers_401(raw_client):
    response = raw_client.get("/fleet", headers={"Authorization": f"Bearer {uuid.uuid4()}"})
    assert response.status_code == 401


def test_security_headers_present(raw_client):
    response = raw_client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "default-src 'none'" in response.headers["Content-Security-Policy"]
    assert "X-Content-Type-Options" not in raw_client.get("/health").headers
