"""
Schedule Routes

POST /schedules - Book an interview slot for an application
GET /schedules - Own schedules (applicant) or all (recruiter/admin)
"""

import logging
from datetime import timezone
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow
from hunter.core.auth import get_current_user, is_staff
from hunter.schemas.schemas import ScheduleCreate, ScheduleResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["Schedules"])

SCHEDULE_COLUMNS = "schedule_id, application_id, user_id, job_id, scheduled_at, created_at"


def _schedule(row: dict) -> dict:
    return {
        "id": row["schedule_id"], "application_id": row["application_id"],
        "user_id": row["user_id"], "job_id": row["job_id"],
        "date": parse_timestamp(row["scheduled_at"]),
        "created_at": parse_timestamp(row["created_at"]),
    }


@router.post("", response_model=ScheduleResponse, status_code=201)
async def create_schedule(schedule: ScheduleCreate, user: dict = Depends(get_current_user)):
    if not (schedule.application_id and schedule.user_id and schedule.job_id and schedule.date):
        raise HTTPException(status_code=400, detail="Missing required fields")
    if not is_staff(user) and schedule.user_id != user["user_id"]:
        raise HTTPException(status_code=403, detail="Unauthorized")

    rows = execute_raw_sql(
        "SELECT user_id, job_id FROM applications WHERE application_id = :aid",
        {"aid": schedule.application_id}
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Application not found")
    if rows[0]["user_id"] != schedule.user_id or rows[0]["job_id"] != schedule.job_id:
        raise HTTPException(status_code=400, detail="Application does not match user and job")

    date = parse_timestamp(schedule.date).astimezone(timezone.utc)
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO schedules (application_id, user_id, job_id, scheduled_at, created_at)
                VALUES (:aid, :uid, :jid, :date, :now)
                RETURNING schedule_id
            """),
            {
                "aid": schedule.application_id, "uid": schedule.user_id, "jid": schedule.job_id,
                "date": date, "now": utcnow()
            }
        )
        schedule_id = result.fetchone()[0]

    logger.info(f"Interview {schedule_id} scheduled for application {schedule.application_id}")
    rows = execute_raw_sql(f"SELECT {SCHEDULE_COLUMNS} FROM schedules WHERE schedule_id = :sid",
                           {"sid": schedule_id})
    return _schedule(rows[0])


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(user: dict = Depends(get_current_user)):
    if is_staff(user):
        rows = execute_raw_sql(f"SELECT {SCHEDULE_COLUMNS} FROM schedules ORDER BY scheduled_at")
    else:
        rows = execute_raw_sql(
            f"SELECT {SCHEDULE_COLUMNS} FROM schedules WHERE user_id = :uid ORDER BY scheduled_at",
            {"uid": user["user_id"]}
        )
    return [_schedule(r) for r in rows]
