import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from sqlalchemy.orm import Session, joinedload

from .config import AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionContext:
    """Who is calling: built once per request and passed explicitly to services"""

    user_id: str
    email: Optional[str]
    username: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    sector: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email or self.user_id


def verify_access_token(token: str) -> dict:
    """
    Verify an access token issued by the hosted auth provider.

    Tokens are HS256 JWTs signed with the project's shared secret. Signature,
    expiry, audience and subject are checked; the decoded claims are returned.
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.warning(f"⚠️ Malformed token received: {str(e)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        ) from e

    alg = header.get("alg")
    if alg != ALGORITHM:
        logger.error(f"❌ Invalid token algorithm: {alg}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")

    try:
        claims = jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"verify_aud": False, "require_exp": True},
        )
    except ExpiredSignatureError as e:
        logger.info(f"ℹ️ Expired token rejected: {str(e)}")
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTClaimsError as e:
        logger.error(f"❌ Token claims rejected: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token claims") from e
    except JWTError as e:
        logger.error(f"❌ Token signature verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    aud = claims.get("aud")
    audiences = aud if isinstance(aud, list) else [aud]
    if AUTH_JWT_AUDIENCE not in audiences:
        logger.error("❌ Token audience mismatch")
        raise HTTPException(status_code=401, detail="Invalid token audience")

    if not claims.get("sub"):
        logger.error(f"❌ Token missing subject. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    logger.debug(f"✅ Token verified for user: {claims.get('email')}")
    return claims


def build_session_context(db: Session, user_id: str, email: Optional[str] = None) -> SessionContext:
    """Combine the token identity with the stored profile and role"""
    profile = (
        db.query(Profile).filter(Profile.id == user_id).options(joinedload(Profile.role)).first()
    )
    if not profile:
        # Signed in but never provisioned: no role, no sector, no capabilities
        logger.warning(f"⚠️ No profile for authenticated user {email or user_id}")
        return SessionContext(user_id=user_id, email=email)

    return SessionContext(
        user_id=profile.id,
        email=profile.email or email,
        username=profile.username,
        full_name=profile.full_name,
        role=profile.role.role if profile.role else None,
        sector=profile.sector,
    )


async def get_session_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> SessionContext:
    """Resolve the caller's session from the bearer token"""
    if not credentials:
        logger.error("❌ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    claims = verify_access_token(credentials.credentials)
    session = build_session_context(db, claims["sub"], claims.get("email"))
    logger.debug(f"✅ Session resolved: {session.email} role={session.role} sector={session.sector}")
    return session
