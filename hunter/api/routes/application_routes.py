"""
Application Routes

POST /applications - Apply to a job (applicant, multipart with resume)
GET /applications - Own applications (applicant) or all (recruiter/admin)
GET /applications/{application_id} - One application with its job title
POST /upload - Store a resume and return its path
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow
from hunter.core.auth import get_current_user, get_current_applicant, is_staff
from hunter.core.validation import INVALID_EMAIL, is_valid_email
from hunter.services.job_service import get_job_row
from hunter.utils.file_upload import (
    store_resume, read_resume, read_stored_resume, save_bytes, extract_resume_text
)
from hunter.schemas.schemas import ApplicationResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])

APPLICATION_SELECT = """
    SELECT a.application_id, a.job_id, j.title AS job_title, a.user_id, a.full_name, a.email,
           a.phone, a.cover_letter, a.status, a.resume_path, a.created_at, a.updated_at
    FROM applications a JOIN jobs j ON a.job_id = j.job_id
"""


def application_to_dict(row: dict) -> dict:
    return {
        "id": row["application_id"], "job_id": row["job_id"], "job": {"title": row["job_title"]},
        "user_id": row["user_id"], "full_name": row["full_name"], "email": row["email"],
        "phone": row["phone"], "cover_letter": row["cover_letter"], "status": row["status"],
        "resume_url": row["resume_path"], "created_at": parse_timestamp(row["created_at"]),
        "updated_at": parse_timestamp(row["updated_at"]),
    }


def get_application_row(application_id: int) -> Optional[dict]:
    rows = execute_raw_sql(APPLICATION_SELECT + " WHERE a.application_id = :aid", {"aid": application_id})
    return rows[0] if rows else None


def get_owned_application(application_id: int, user: dict) -> dict:
    """The application row if it exists and the user may see it (owner or staff)."""
    row = get_application_row(application_id)
    if not row:
        raise HTTPException(status_code=404, detail="Application not found")
    if not is_staff(user) and row["user_id"] != user["user_id"]:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return row


async def _resume_from_request(resume: Optional[UploadFile], resume_url: Optional[str]):
    """(public path, text) from an uploaded file or a path returned by /upload."""
    if resume is not None and resume.filename:
        return await store_resume(resume)
    if resume_url:
        content, ext = read_stored_resume(resume_url)
        return resume_url, extract_resume_text(content, ext)
    raise HTTPException(status_code=400, detail="Resume is required")


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
async def create_application(
    job_id: Optional[int] = Form(None),
    full_name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    cover_letter: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    resume_url: Optional[str] = Form(None),
    applicant: dict = Depends(get_current_applicant)
):
    """Apply to an active job. The resume is stored and its text extracted."""
    if not job_id or not full_name.strip() or not email.strip() or not phone.strip():
        raise HTTPException(status_code=400, detail="All fields are required")
    if not is_valid_email(email.strip()):
        raise HTTPException(status_code=400, detail=INVALID_EMAIL)

    job = get_job_row(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job["status"] != "ACTIVE":
        raise HTTPException(status_code=400, detail="This job is not accepting applications")

    existing = execute_raw_sql(
        "SELECT application_id FROM applications WHERE job_id = :jid AND user_id = :uid",
        {"jid": job_id, "uid": applicant["user_id"]}
    )
    if existing:
        raise HTTPException(status_code=400, detail="You have already applied to this job")

    resume_path, resume_text = await _resume_from_request(resume, resume_url)

    now = utcnow()
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO applications (job_id, user_id, full_name, email, phone, cover_letter,
                    resume_path, resume_text, status, created_at, updated_at)
                VALUES (:jid, :uid, :name, :email, :phone, :cover, :path, :resume_text,
                    'PENDING', :now, :now)
                RETURNING application_id
            """),
            {
                "jid": job_id, "uid": applicant["user_id"], "name": full_name.strip(),
                "email": email.strip().lower(), "phone": phone.strip(), "cover": cover_letter,
                "path": resume_path, "resume_text": resume_text, "now": now
            }
        )
        application_id = result.fetchone()[0]

    logger.info(f"Application {application_id} submitted for job {job_id}")
    return application_to_dict(get_application_row(application_id))


@router.get("/applications", response_model=List[ApplicationResponse])
async def list_applications(user: dict = Depends(get_current_user)):
    if is_staff(user):
        rows = execute_raw_sql(APPLICATION_SELECT + " ORDER BY a.created_at DESC, a.application_id DESC")
    else:
        rows = execute_raw_sql(
            APPLICATION_SELECT + " WHERE a.user_id = :uid ORDER BY a.created_at DESC, a.application_id DESC",
            {"uid": user["user_id"]}
        )
    return [application_to_dict(r) for r in rows]


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: int, user: dict = Depends(get_current_user)):
    return application_to_dict(get_owned_application(application_id, user))


@router.post("/upload", response_model=UploadResponse)
async def upload_resume(
    resume: UploadFile = File(None, description="Resume file (PDF, DOC or DOCX)"),
    user: dict = Depends(get_current_user)
):
    """Store a resume ahead of an application or profile update."""
    content, ext = await read_resume(resume)
    return UploadResponse(file_path=save_bytes(content, "resumes", ext))
