"""
Report Service

Builds the 'Interview Summary' report from an interview session's feedback
history and renders reports as plain text for download.
"""

import logging
from collections import Counter
from typing import List, Optional

from sqlalchemy import text

from hunter.db.postgres import execute_raw_sql, get_db_session, utcnow
from hunter.services.mongo_service import ReportService

logger = logging.getLogger(__name__)

INTERVIEW_SUMMARY = "Interview Summary"


def _mean(values: List[int]) -> Optional[float]:
    if not values:
        return None
    return round(sum(values) / len(values) * 10, 1)


def build_summary_details(feedback_history: List[dict]) -> dict:
    """
    Scores are the mean 1-10 scores as percentages; notes are the last overall
    assessment; the recommendation is the most frequent one.
    """
    if not feedback_history:
        return {"notes": "No answers were recorded."}

    technical = _mean([f["technical_score"] for f in feedback_history])
    communication = _mean([f["communication_score"] for f in feedback_history])
    cultural_fit = _mean([f["cultural_fit_score"] for f in feedback_history])
    recommendation = Counter(f["recommendation"] for f in feedback_history).most_common(1)[0][0]

    return {
        "interview_score": round((technical + communication + cultural_fit) / 3, 1),
        "technical_expertise": technical,
        "english_fluency": communication,
        "team_fit": cultural_fit,
        "notes": feedback_history[-1].get("overall_assessment") or None,
        "recommendations": recommendation,
    }


def create_session_report(session: dict) -> str:
    """Store the summary report for an interview session and return its id."""
    details = build_summary_details(session.get("feedback_history") or [])
    job_id = None
    candidate_id = None
    job_title = session["job_details"]["title"]
    candidate_name = session["applicant_details"]["name"]

    application_id = session.get("application_id")
    if application_id:
        rows = execute_raw_sql("""
            SELECT a.application_id, a.job_id, a.full_name, j.title
            FROM applications a JOIN jobs j ON a.job_id = j.job_id
            WHERE a.application_id = :aid
        """, {"aid": application_id})
        if rows:
            job_id, candidate_id = rows[0]["job_id"], rows[0]["application_id"]
            job_title, candidate_name = rows[0]["title"], rows[0]["full_name"]
            with get_db_session() as db:
                db.execute(
                    text("""
                        UPDATE applications
                        SET interview_score = :score,
                            status = CASE WHEN status = 'PENDING' THEN 'INTERVIEWED' ELSE status END,
                            updated_at = :now
                        WHERE application_id = :aid
                    """),
                    {"score": details.get("interview_score"), "now": utcnow(), "aid": application_id}
                )

    report_id = ReportService().insert(
        job_id, candidate_id, INTERVIEW_SUMMARY, details,
        job_title=job_title, candidate_name=candidate_name, session_id=session["_id"]
    )
    logger.info(f"Interview summary report {report_id} created for session {session['_id']}")
    return report_id


def _percent(value) -> str:
    return f"{value:g}%"


def format_report_text(report: dict) -> str:
    """Plain-text export; absent detail fields are left out."""
    details = report.get("details") or {}
    lines = [
        f"Report ID: {report['_id']}",
        f"Job Title: {report.get('job_title') or 'Unknown Job'}",
        f"Candidate: {report.get('candidate_name') or 'Unknown Candidate'}",
        f"Report Type: {report['report_type']}",
        f"Generated Date: {report['generated_date'].date().isoformat()}",
        "",
        "--- Details ---",
    ]
    for key, label in (
        ("interview_score", "Interview Score"),
        ("english_fluency", "English Fluency"),
        ("technical_expertise", "Technical Expertise"),
        ("ai_readiness", "AI Readiness"),
        ("team_fit", "Team Fit"),
    ):
        if details.get(key) is not None:
            lines.append(f"{label}: {_percent(details[key])}")
    if details.get("notes"):
        lines.extend(["", f"Notes: {details['notes']}"])
    if details.get("recommendations"):
        lines.extend(["", f"Recommendations: {details['recommendations']}"])
    return "\n".join(lines)
