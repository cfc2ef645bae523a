"""
Report Routes (recruiter/admin)

GET /admin/reports - List reports (search job title or candidate name, filter, sort)
POST /admin/reports - Create a manual report
GET /admin/reports/{report_id} - One report
GET /admin/reports/{report_id}/export - Download as text
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import PlainTextResponse

from hunter.db.postgres import execute_raw_sql
from hunter.core.auth import get_current_staff
from hunter.services.mongo_service import ReportService
from hunter.services.report_service import format_report_text
from hunter.schemas.schemas import ReportCreate, ReportResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/reports", tags=["Reports"])


def _report(doc: dict) -> dict:
    return {
        "id": doc["_id"],
        "job_id": doc.get("job_id"),
        "job_title": doc.get("job_title") or "Unknown Job",
        "candidate_id": doc.get("candidate_id"),
        "candidate_name": doc.get("candidate_name") or "Unknown Candidate",
        "report_type": doc["report_type"],
        "generated_date": doc["generated_date"],
        "details": doc.get("details") or {},
    }


def _get_report(report_id: str) -> dict:
    doc = ReportService().get(report_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Report not found")
    return doc


@router.get("", response_model=List[ReportResponse])
async def list_reports(
    search: Optional[str] = Query(None, description="Search in job title or candidate name"),
    job_id: Optional[int] = Query(None, alias="jobId"),
    report_type: Optional[str] = Query(None, alias="reportType"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    staff: dict = Depends(get_current_staff)
):
    if report_type == "all":
        report_type = None
    docs = ReportService().list(
        search=search, job_id=job_id, report_type=report_type, ascending=sort_order == "asc"
    )
    return [_report(d) for d in docs]


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(report: ReportCreate, staff: dict = Depends(get_current_staff)):
    """Manual report for a candidate's application to a job."""
    rows = execute_raw_sql(
        """
        SELECT a.job_id, a.full_name, j.title
        FROM applications a JOIN jobs j ON a.job_id = j.job_id
        WHERE a.application_id = :aid
        """,
        {"aid": report.candidate_id}
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Candidate not found")
    if rows[0]["job_id"] != report.job_id:
        raise HTTPException(status_code=400, detail="Candidate did not apply to this job")

    service = ReportService()
    report_id = service.insert(
        report.job_id, report.candidate_id, report.report_type.strip(),
        report.details.model_dump(exclude_none=True),
        job_title=rows[0]["title"], candidate_name=rows[0]["full_name"]
    )
    logger.info(f"Report {report_id} created by user {staff['user_id']}")
    return _report(service.get(report_id))


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, staff: dict = Depends(get_current_staff)):
    return _report(_get_report(report_id))


@router.get("/{report_id}/export", response_class=PlainTextResponse)
async def export_report(report_id: str, staff: dict = Depends(get_current_staff)):
    doc = _get_report(report_id)
    return PlainTextResponse(
        format_report_text(doc),
        headers={"Content-Disposition": f'attachment; filename="report-{report_id}.txt"'}
    )
