"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification/revocation
- FastAPI dependencies for protected routes, by role
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from hunter.core.config import get_settings
from hunter.db.postgres import get_db_session

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()

EXPIRING_TOKEN_TABLES = ("revoked_tokens", "password_reset_tokens")

STAFF_ROLES = ("ADMIN", "RECRUITER")


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token with a unique id (jti) so it can be revoked."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def purge_expired_tokens(db, table: str) -> None:
    """Drop rows of revoked_tokens or password_reset_tokens that have expired."""
    if table not in EXPIRING_TOKEN_TABLES:
        raise ValueError(f"Unknown token table: {table}")
    db.execute(
        text(f"DELETE FROM {table} WHERE expires_at < :now"),
        {"now": datetime.now(timezone.utc)}
    )


def revoke_token(payload: dict) -> None:
    """Put a token's jti on the deny list until the token expires."""
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    with get_db_session() as db:
        purge_expired_tokens(db, "revoked_tokens")
        exists = db.execute(
            text("SELECT jti FROM revoked_tokens WHERE jti = :jti"),
            {"jti": payload["jti"]}
        ).fetchone()
        if not exists:
            db.execute(
                text("INSERT INTO revoked_tokens (jti, expires_at) VALUES (:jti, :expires_at)"),
                {"jti": payload["jti"], "expires_at": expires_at}
            )


def is_token_revoked(jti: str) -> bool:
    with get_db_session() as db:
        row = db.execute(
            text("SELECT jti FROM revoked_tokens WHERE jti = :jti"),
            {"jti": jti}
        ).fetchone()
    return row is not None


async def get_token_payload(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """FastAPI dependency - a valid, unrevoked token payload."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub") or not payload.get("jti"):
        raise credentials_exception

    if is_token_revoked(payload["jti"]):
        raise credentials_exception

    return payload


async def get_current_user(payload: dict = Depends(get_token_payload)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, email, name, role, is_active FROM users WHERE user_id = :id"),
            {"id": int(payload["sub"])}
        )
        user = result.fetchone()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user[4]:  # is_active
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {"user_id": user[0], "email": user[1], "name": user[2], "role": user[3]}


async def get_current_staff(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require RECRUITER or ADMIN role."""
    if user["role"] not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return user


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require ADMIN role."""
    if user["role"] != "ADMIN":
        raise HTTPException(status_code=403, detail="Admins only")
    return user


async def get_current_applicant(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require APPLICANT role."""
    if user["role"] != "APPLICANT":
        raise HTTPException(status_code=403, detail="Applicants only")
    return user


def is_staff(user: dict) -> bool:
    return user["role"] in STAFF_ROLES
