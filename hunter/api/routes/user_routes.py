"""
User Routes

GET /users/me - Current user's profile
PUT /users/me - Update profile fields
GET /users - List users (admin only)
PUT /users/{user_id}/role - Change a user's role (admin only)
PUT /users/{user_id}/status - Activate / deactivate a user (admin only)
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow, contains_pattern
from hunter.core.auth import get_current_user, get_current_admin
from hunter.schemas.schemas import ProfileUpdate, UserProfile, RoleUpdate, StatusUpdate

router = APIRouter(prefix="/users", tags=["Users"])

PROFILE_COLUMNS = "user_id, name, email, role, is_active, phone, location, bio, created_at"


def _profile(row: dict) -> dict:
    return {
        "id": row["user_id"], "name": row["name"], "email": row["email"], "role": row["role"],
        "is_active": bool(row["is_active"]), "phone": row["phone"], "location": row["location"],
        "bio": row["bio"], "created_at": parse_timestamp(row["created_at"]),
    }


def _get_profile(user_id: int) -> dict:
    rows = execute_raw_sql(f"SELECT {PROFILE_COLUMNS} FROM users WHERE user_id = :id", {"id": user_id})
    if not rows:
        raise HTTPException(status_code=404, detail="User not found")
    return _profile(rows[0])


@router.get("/me", response_model=UserProfile)
async def get_me(user: dict = Depends(get_current_user)):
    return _get_profile(user["user_id"])


@router.put("/me", response_model=UserProfile)
async def update_me(update: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update only the fields that were sent."""
    fields = update.model_dump(exclude_unset=True)
    # name and email cannot be cleared
    fields = {k: v for k, v in fields.items() if v is not None or k not in ("name", "email")}
    if not fields:
        return _get_profile(user["user_id"])

    with get_db_session() as db:
        if "email" in fields:
            taken = db.execute(
                text("SELECT user_id FROM users WHERE email = :email AND user_id != :id"),
                {"email": fields["email"], "id": user["user_id"]}
            ).fetchone()
            if taken:
                raise HTTPException(status_code=400, detail="Email already exists")

        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        db.execute(
            text(f"UPDATE users SET {assignments}, updated_at = :now WHERE user_id = :id"),
            {**fields, "now": utcnow(), "id": user["user_id"]}
        )

    return _get_profile(user["user_id"])


@router.get("", response_model=List[UserProfile])
async def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search in name or email"),
    admin: dict = Depends(get_current_admin)
):
    sql = f"SELECT {PROFILE_COLUMNS} FROM users WHERE 1=1"
    params = {}
    if role:
        sql += " AND role = :role"
        params["role"] = role.upper()
    if search:
        sql += " AND (LOWER(name) LIKE LOWER(:search) ESCAPE '\\' OR LOWER(email) LIKE LOWER(:search) ESCAPE '\\')"
        params["search"] = contains_pattern(search)
    sql += " ORDER BY created_at DESC, user_id DESC"

    return [_profile(r) for r in execute_raw_sql(sql, params)]


@router.put("/{user_id}/role", response_model=UserProfile)
async def update_role(user_id: int, update: RoleUpdate, admin: dict = Depends(get_current_admin)):
    _get_profile(user_id)
    with get_db_session() as db:
        db.execute(
            text("UPDATE users SET role = :role, updated_at = :now WHERE user_id = :id"),
            {"role": update.role.value, "now": utcnow(), "id": user_id}
        )
    return _get_profile(user_id)


@router.put("/{user_id}/status", response_model=UserProfile)
async def update_status(user_id: int, update: StatusUpdate, admin: dict = Depends(get_current_admin)):
    if user_id == admin["user_id"] and not update.is_active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    _get_profile(user_id)
    with get_db_session() as db:
        db.execute(
            text("UPDATE users SET is_active = :active, updated_at = :now WHERE user_id = :id"),
            {"active": update.is_active, "now": utcnow(), "id": user_id}
        )
    return _get_profile(user_id)
