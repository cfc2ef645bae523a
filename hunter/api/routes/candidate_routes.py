"""
Candidate Routes (recruiter/admin)

A candidate is an application seen from the hiring side.

GET /admin/candidates - List candidates, filter by job, search name or job title
GET /admin/candidates/{candidate_id} - One candidate
PUT /admin/candidates/{candidate_id}/status - Move a candidate through the pipeline
POST /admin/candidates/compare - Side by side view of two or more candidates
GET /admin/candidates/{candidate_id}/resume - Download the stored resume
GET /admin/jobs - Job options for the candidate filter
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow, contains_pattern
from hunter.core.auth import get_current_staff
from hunter.utils.file_upload import resolve_public_path, get_file_extension
from hunter.schemas.schemas import (
    CandidateResponse, CandidateStatusUpdate, CompareRequest, JobOption
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Candidates"])

CANDIDATE_SELECT = """
    SELECT a.application_id, a.full_name, a.email, a.phone, a.job_id, j.title AS job_title,
           a.status, a.interview_score, a.resume_path, a.updated_at
    FROM applications a JOIN jobs j ON a.job_id = j.job_id
"""


def _candidate(row: dict) -> dict:
    return {
        "id": row["application_id"], "name": row["full_name"], "email": row["email"],
        "phone": row["phone"], "job_id": row["job_id"], "job_title": row["job_title"],
        "status": row["status"], "interview_score": row["interview_score"],
        "resume_url": row["resume_path"], "last_updated": parse_timestamp(row["updated_at"]),
    }


def _get_candidate_row(candidate_id: int) -> dict:
    rows = execute_raw_sql(CANDIDATE_SELECT + " WHERE a.application_id = :aid", {"aid": candidate_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return rows[0]


@router.get("/candidates", response_model=List[CandidateResponse])
async def list_candidates(
    job_id: Optional[int] = Query(None, alias="jobId"),
    search: Optional[str] = Query(None, description="Search in name or job title"),
    staff: dict = Depends(get_current_staff)
):
    sql = CANDIDATE_SELECT + " WHERE 1=1"
    params = {}
    if job_id is not None:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id
    if search:
        sql += " AND (LOWER(a.full_name) LIKE LOWER(:search) ESCAPE '\\' OR LOWER(j.title) LIKE LOWER(:search) ESCAPE '\\')"
        params["search"] = contains_pattern(search)
    sql += " ORDER BY a.updated_at DESC, a.application_id DESC"

    return [_candidate(r) for r in execute_raw_sql(sql, params)]


@router.get("/candidates/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(candidate_id: int, staff: dict = Depends(get_current_staff)):
    return _candidate(_get_candidate_row(candidate_id))


@router.put("/candidates/{candidate_id}/status", response_model=CandidateResponse)
async def update_candidate_status(candidate_id: int, update: CandidateStatusUpdate,
                                  staff: dict = Depends(get_current_staff)):
    _get_candidate_row(candidate_id)
    with get_db_session() as db:
        db.execute(
            text("UPDATE applications SET status = :status, updated_at = :now WHERE application_id = :aid"),
            {"status": update.status.value, "now": utcnow(), "aid": candidate_id}
        )
    logger.info(f"Candidate {candidate_id} moved to {update.status.value}")
    return _candidate(_get_candidate_row(candidate_id))


@router.post("/candidates/compare", response_model=List[CandidateResponse])
async def compare_candidates(request: CompareRequest, staff: dict = Depends(get_current_staff)):
    """The requested candidates in the order given."""
    ids = list(dict.fromkeys(request.candidate_ids))
    if len(ids) < 2:
        raise HTTPException(status_code=400, detail="Select at least two candidates to compare")
    return [_candidate(_get_candidate_row(cid)) for cid in ids]


@router.get("/candidates/{candidate_id}/resume")
async def download_resume(candidate_id: int, staff: dict = Depends(get_current_staff)):
    row = _get_candidate_row(candidate_id)
    path = resolve_public_path(row["resume_path"], "resumes")
    if path is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=f"{row['full_name']}-resume{get_file_extension(path.name)}"
    )


@router.get("/jobs", response_model=List[JobOption])
async def job_options(staff: dict = Depends(get_current_staff)):
    rows = execute_raw_sql("SELECT job_id, title FROM jobs ORDER BY title, job_id")
    return [{"id": r["job_id"], "title": r["title"]} for r in rows]
