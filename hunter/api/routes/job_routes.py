"""
Job Routes

POST /jobs - Create job posting (recruiter/admin)
GET /jobs - List jobs with status/search/department filters, sorting and pagination
GET /jobs/export.csv - Export the filtered list as CSV
GET /jobs/{job_id} - Get job details (with wizard posting fields)
PUT /jobs/{job_id} - Update job (recruiter/admin)
DELETE /jobs/{job_id} - Delete job (recruiter/admin)
"""

import csv
import io
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import Response
from sqlalchemy import text

from hunter.db.postgres import get_db_session, parse_timestamp, utcnow
from hunter.core.auth import get_current_user, get_current_staff
from hunter.services.job_service import (
    SORT_COLUMNS, insert_job, replace_job_lists, load_job_lists, get_job_row, job_to_dict, search_jobs
)
from hunter.services.mongo_service import JobPostingService
from hunter.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobListResponse, JobStatus, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

CSV_HEADER = ["ID", "Title", "Department", "Applicants", "Status", "Posted"]


def _status_filter(status: Optional[str]) -> Optional[str]:
    """'All' or nothing means no filter; anything else must be a job status."""
    if not status or status.lower() == "all":
        return None
    try:
        return JobStatus(status.upper()).value
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid status")


def _check_sort(sort: str, direction: str) -> None:
    if sort not in SORT_COLUMNS:
        raise HTTPException(status_code=400, detail="Invalid sort field")
    if direction.lower() not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="Invalid sort direction")


def _load_job(job_id: int, with_posting: bool = False) -> dict:
    row = get_job_row(job_id)
    if not row:
        raise HTTPException(status_code=404, detail="Job not found")
    posting = JobPostingService().get_by_job(job_id) if with_posting else None
    return job_to_dict(row, load_job_lists([job_id])[job_id], posting)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, staff: dict = Depends(get_current_staff)):
    """Create a new job posting. Only recruiters and admins can create jobs."""
    data = job.model_dump()
    data["type"] = job.type.value
    data["status"] = job.status.value

    with get_db_session() as db:
        job_id = insert_job(db, staff["user_id"], data)

    logger.info(f"Job {job_id} created by user {staff['user_id']}")
    return _load_job(job_id)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: Optional[str] = Query(None, description="ACTIVE, INACTIVE, CLOSED or All"),
    search: Optional[str] = Query(None, description="Search in title or department"),
    department: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort: str = Query("created_at"),
    direction: str = Query("desc"),
    user: dict = Depends(get_current_user)
):
    """List jobs with filters, sorting and pagination."""
    _check_sort(sort, direction)
    rows, total = search_jobs(
        status=_status_filter(status), search=search, department=department,
        sort=sort, direction=direction, limit=page_size, offset=(page - 1) * page_size
    )
    lists = load_job_lists([r["job_id"] for r in rows])
    jobs = [job_to_dict(r, lists[r["job_id"]]) for r in rows]

    return JobListResponse(jobs=jobs, total=total, page=page, page_size=page_size)


@router.get("/export.csv")
async def export_jobs(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    sort: str = Query("created_at"),
    direction: str = Query("desc"),
    staff: dict = Depends(get_current_staff)
):
    """Download the filtered job list as CSV."""
    _check_sort(sort, direction)
    rows, _ = search_jobs(
        status=_status_filter(status), search=search, department=department,
        sort=sort, direction=direction
    )

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for r in rows:
        writer.writerow([
            r["job_id"], r["title"], r["department"] or "", r["applicants"], r["status"],
            parse_timestamp(r["created_at"]).date().isoformat()
        ])

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="jobs.csv"'}
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, user: dict = Depends(get_current_user)):
    """Get details of a specific job."""
    return _load_job(job_id, with_posting=True)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, staff: dict = Depends(get_current_staff)):
    """Update the fields that were sent."""
    _load_job(job_id)
    fields = update.model_dump(exclude_unset=True)
    skills = fields.pop("skills", None)
    requirements = fields.pop("requirements", None)
    if fields.get("title") is None:
        fields.pop("title", None)
    if "type" in fields:
        job_type = fields.pop("type")
        if job_type is not None:
            fields["job_type"] = job_type.value
    if "status" in fields:
        status = fields.pop("status")
        if status is not None:
            fields["status"] = status.value

    with get_db_session() as db:
        if fields:
            assignments = ", ".join(f"{name} = :{name}" for name in fields)
            db.execute(
                text(f"UPDATE jobs SET {assignments}, updated_at = :now WHERE job_id = :jid"),
                {**fields, "now": utcnow(), "jid": job_id}
            )
        replace_job_lists(db, job_id, skills, requirements)

    return _load_job(job_id, with_posting=True)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, staff: dict = Depends(get_current_staff)):
    """Delete a job with its questions, applications and schedules."""
    _load_job(job_id)
    params = {"jid": job_id}
    with get_db_session() as db:
        db.execute(text("""
            DELETE FROM answers WHERE question_id IN (SELECT question_id FROM questions WHERE job_id = :jid)
               OR application_id IN (SELECT application_id FROM applications WHERE job_id = :jid)
        """), params)
        db.execute(text("DELETE FROM schedules WHERE job_id = :jid"), params)
        db.execute(text("DELETE FROM applications WHERE job_id = :jid"), params)
        db.execute(text("DELETE FROM questions WHERE job_id = :jid"), params)
        db.execute(text("DELETE FROM job_skills WHERE job_id = :jid"), params)
        db.execute(text("DELETE FROM jobs WHERE job_id = :jid"), params)

    JobPostingService().delete_by_job(job_id)
    logger.info(f"Job {job_id} deleted by user {staff['user_id']}")
    return MessageResponse(message="Job deleted successfully")
