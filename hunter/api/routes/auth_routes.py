"""
Authentication Routes

POST /auth/register - Register new user, returns token + user
POST /auth/login - Login and get JWT token
POST /auth/logout - Revoke the current token
GET /auth/validate - Restore a session from a stored token
POST /auth/reset-password - Email a password reset link
POST /auth/reset-password/confirm - Set a new password with a reset token
PUT /auth/change-password - Change password (logged in)
"""

import logging
import secrets
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from hunter.db.postgres import get_db_session, parse_timestamp, utcnow
from hunter.core.auth import (
    hash_password, verify_password, create_access_token, revoke_token,
    get_current_user, get_token_payload, purge_expired_tokens
)
from hunter.core.config import get_settings
from hunter.core.validation import INVALID_EMAIL, MIN_PASSWORD_LENGTH, PASSWORD_TOO_SHORT, is_valid_email
from hunter.services.email_service import EmailDeliveryError, send_password_reset
from hunter.schemas.schemas import (
    RegisterRequest, LoginRequest, AuthResponse, ValidateResponse, ResetPasswordRequest,
    ResetPasswordConfirm, ChangePasswordRequest, MessageResponse
)

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user_id: int, email: str, name: str, role: str) -> dict:
    token = create_access_token(data={"sub": str(user_id), "role": role})
    return {"token": token, "user": {"id": user_id, "email": email, "name": name, "role": role}}


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: RegisterRequest):
    """Register a new account and log it in."""
    with get_db_session() as db:
        # Check email exists
        result = db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already exists")

        now = utcnow()
        result = db.execute(
            text("""
                INSERT INTO users (name, email, password_hash, role, is_active, created_at, updated_at)
                VALUES (:name, :email, :password_hash, :role, :active, :now, :now)
                RETURNING user_id
            """),
            {
                "name": request.name.strip(),
                "email": request.email,
                "password_hash": hash_password(request.password),
                "role": request.role.value,
                "active": True,
                "now": now
            }
        )
        user_id = result.fetchone()[0]

    logger.info(f"Registered user {user_id} as {request.role.value}")
    return _auth_response(user_id, request.email, request.name.strip(), request.role.value)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, name, password_hash, role, is_active FROM users WHERE email = :email"),
            {"email": request.email}
        )
        user = result.fetchone()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user_id, name, password_hash, role, is_active = user

    if not verify_password(request.password, password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return _auth_response(user_id, request.email, name, role)


@router.post("/logout", response_model=MessageResponse)
async def logout(payload: dict = Depends(get_token_payload)):
    """Revoke the token used for this request."""
    revoke_token(payload)
    return MessageResponse(message="Logged out successfully")


@router.get("/validate", response_model=ValidateResponse)
async def validate(user: dict = Depends(get_current_user)):
    """Return the user behind a stored token."""
    return {"user": {"id": user["user_id"], "email": user["email"], "name": user["name"], "role": user["role"]}}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest):
    """Create a reset token and mail the link."""
    email = request.email.strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail=INVALID_EMAIL)

    token = secrets.token_urlsafe(32)
    with get_db_session() as db:
        user = db.execute(
            text("SELECT user_id, name FROM users WHERE email = :email"),
            {"email": email}
        ).fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        purge_expired_tokens(db, "password_reset_tokens")
        db.execute(
            text("""
                INSERT INTO password_reset_tokens (token, user_id, expires_at)
                VALUES (:token, :uid, :expires_at)
            """),
            {
                "token": token, "uid": user[0],
                "expires_at": utcnow() + timedelta(minutes=settings.reset_token_expire_minutes)
            }
        )

    try:
        send_password_reset(email, user[1], token)
    except EmailDeliveryError:
        raise HTTPException(status_code=500, detail="Failed to send reset email")

    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password/confirm", response_model=MessageResponse)
async def confirm_reset_password(request: ResetPasswordConfirm):
    """Consume a reset token and set the new password."""
    if not request.token or not request.new_password:
        raise HTTPException(status_code=400, detail="Token and new password are required")
    if len(request.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=PASSWORD_TOO_SHORT)

    with get_db_session() as db:
        row = db.execute(
            text("SELECT user_id, expires_at FROM password_reset_tokens WHERE token = :token"),
            {"token": request.token}
        ).fetchone()

        if not row or parse_timestamp(row[1]) < utcnow():
            raise HTTPException(status_code=400, detail="Invalid or expired token")

        db.execute(
            text("UPDATE users SET password_hash = :hash, updated_at = :now WHERE user_id = :uid"),
            {"hash": hash_password(request.new_password), "now": utcnow(), "uid": row[0]}
        )
        db.execute(
            text("DELETE FROM password_reset_tokens WHERE token = :token"),
            {"token": request.token}
        )

    logger.info(f"Password reset for user {row[0]}")
    return MessageResponse(message="Password reset successfully")


@router.put("/change-password", response_model=MessageResponse)
async def change_password(request: ChangePasswordRequest, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        db.execute(
            text("UPDATE users SET password_hash = :hash, updated_at = :now WHERE user_id = :uid"),
            {"hash": hash_password(request.new_password), "now": utcnow(), "uid": user["user_id"]}
        )
    return MessageResponse(message="Password updated successfully")
