# tests/conftest.py

import base64
import json
import os
import time
import uuid

# Must be set before fieldops is imported: config is read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from jose import jwt

from fieldops.auth import SessionContext, get_session_context
from fieldops.database import Base, SessionLocal, engine
from fieldops.main import app
from fieldops.models import Agent, Profile, UserRole


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class SessionHolder:
    """The caller every request is made as; None answers 401"""

    def __init__(self):
        self.current = None

    def login(self, role=None, sector=None, user_id=None, email=None, **extra) -> SessionContext:
        self.current = SessionContext(
            user_id=user_id or str(uuid.uuid4()),
            email=email or f"{role or 'anon'}@fieldops.test",
            role=role,
            sector=sector,
            **extra,
        )
        return self.current

    def __call__(self) -> SessionContext:
        if self.current is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return self.current


@pytest.fixture
def session_holder():
    return SessionHolder()


@pytest.fixture
def client(session_holder):
    app.dependency_overrides[get_session_context] = session_holder
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(session_holder):
    return session_holder.login


@pytest.fixture
def raw_client():
    """Client that authenticates with real bearer tokens"""
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# SEED HELPERS
# ============================================================================


def add_agent(db, name="Carlos", sector="Comercial", **fields) -> Agent:
    agent = Agent(name=name, sector=sector, **fields)
    db.add(agent)
    db.commit()
    db.refresh(agent)
    return agent


def add_profile(db, role="user", sector="Comercial", username=None, email=None, user_id=None) -> Profile:
    user_id = user_id or str(uuid.uuid4())
    profile = Profile(
        id=user_id,
        username=username or f"user-{user_id[:8]}",
        full_name=(username or "Usuário").title(),
        email=email or f"{user_id[:8]}@fieldops.test",
        sector=sector,
    )
    profile.role = UserRole(role=role)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


# ============================================================================
# TOKENS
# ============================================================================


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def make_token(claims: dict, secret: str = "test-secret", alg: str = "HS256") -> str:
    if alg == "HS256":
        return jwt.encode(claims, secret, algorithm=alg)
    # Algorithms the server must refuse are built by hand, unsigned
    header = _b64(json.dumps({"alg": alg, "typ": "JWT"}).encode())
    payload = _b64(json.dumps(claims).encode())
    return f"{header}.{payload}."


def valid_claims(sub: str, email: str = "someone@fieldops.test", **overrides) -> dict:
    claims = {
        "sub": sub,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return claims
