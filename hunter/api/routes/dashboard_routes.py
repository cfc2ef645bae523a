"""
Dashboard Routes (recruiter/admin)

GET /admin/dashboard - Hiring overview
POST /admin/assistant/chat - Hunter AI assistant chat
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from hunter.db.postgres import execute_raw_sql, parse_timestamp, utcnow
from hunter.core.auth import get_current_staff
from hunter.services.ai_client import AIClientError, get_ai_client
from hunter.schemas.schemas import DashboardResponse, AssistantChatRequest, AssistantChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Dashboard"])

ACTIVITY_LIMIT = 5
UPCOMING_LIMIT = 5
ASSISTANT_PROMPT = "You are a helpful HR assistant. Please provide a concise response"


def _recent_activity() -> list:
    jobs = execute_raw_sql(
        f"SELECT job_id, title, created_at FROM jobs ORDER BY created_at DESC, job_id DESC LIMIT {ACTIVITY_LIMIT}"
    )
    applications = execute_raw_sql(f"""
        SELECT a.application_id, a.full_name, j.title, a.created_at
        FROM applications a JOIN jobs j ON a.job_id = j.job_id
        ORDER BY a.created_at DESC, a.application_id DESC LIMIT {ACTIVITY_LIMIT}
    """)

    activity = [
        {"action": f"Posted new job: {j['title']}", "type": "job",
         "time": parse_timestamp(j["created_at"]), "link": f"/jobs/{j['job_id']}"}
        for j in jobs
    ] + [
        {"action": f"New application from {a['full_name']} for {a['title']}", "type": "application",
         "time": parse_timestamp(a["created_at"]), "link": f"/candidates/{a['application_id']}"}
        for a in applications
    ]
    activity.sort(key=lambda item: item["time"], reverse=True)
    return activity[:ACTIVITY_LIMIT]


def _upcoming_interviews() -> list:
    rows = execute_raw_sql("""
        SELECT s.schedule_id, a.full_name, j.title, s.scheduled_at
        FROM schedules s
        JOIN applications a ON s.application_id = a.application_id
        JOIN jobs j ON s.job_id = j.job_id
    """)
    now = utcnow()
    upcoming = [
        {"id": r["schedule_id"], "candidate": r["full_name"], "position": r["title"],
         "date": parse_timestamp(r["scheduled_at"])}
        for r in rows
    ]
    upcoming = [u for u in upcoming if u["date"] > now]
    upcoming.sort(key=lambda item: item["date"])
    return upcoming


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(staff: dict = Depends(get_current_staff)):
    jobs = execute_raw_sql("""
        SELECT COUNT(*) AS total,
               SUM(CASE WHEN status = 'ACTIVE' THEN 1 ELSE 0 END) AS active
        FROM jobs
    """)[0]
    stages = execute_raw_sql("""
        SELECT COUNT(*) AS applied,
               SUM(CASE WHEN status = 'INTERVIEWED' THEN 1 ELSE 0 END) AS interviewed,
               SUM(CASE WHEN status = 'SHORTLISTED' THEN 1 ELSE 0 END) AS shortlisted,
               SUM(CASE WHEN status = 'HIRED' THEN 1 ELSE 0 END) AS hired,
               AVG(interview_score) AS avg_score
        FROM applications
    """)[0]

    total_jobs = jobs["total"] or 0
    applied = stages["applied"] or 0
    upcoming = _upcoming_interviews()
    avg_score = stages["avg_score"]

    return {
        "active_jobs": jobs["active"] or 0,
        "applicants_per_job": round(applied / total_jobs) if total_jobs else 0,
        "candidate_stages": {
            "applied": applied,
            "interviewed": stages["interviewed"] or 0,
            "shortlisted": stages["shortlisted"] or 0,
            "hired": stages["hired"] or 0,
        },
        "recent_activity": _recent_activity(),
        "upcoming_interviews": upcoming[:UPCOMING_LIMIT],
        "performance_metrics": {
            "total_hires": stages["hired"] or 0,
            "active_interviews": len(upcoming),
            "avg_interview_score": round(float(avg_score), 1) if avg_score is not None else None,
        },
    }


@router.post("/assistant/chat", response_model=AssistantChatResponse)
async def assistant_chat(request: AssistantChatRequest, staff: dict = Depends(get_current_staff)):
    """Answer the recruiter's question, with the earlier turns as context."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Please enter a message")

    messages = [{"role": "system", "content": ASSISTANT_PROMPT}]
    for turn in request.history:
        messages.append({
            "role": "assistant" if turn.sender == "bot" else "user",
            "content": turn.message,
        })
    messages.append({"role": "user", "content": request.message.strip()})

    try:
        reply = get_ai_client().chat_messages(messages, temperature=0.7, max_tokens=500)
    except AIClientError as e:
        logger.error(f"Assistant chat failed: {e}")
        raise HTTPException(status_code=502, detail="Sorry, I encountered an error. Please try again.")

    return AssistantChatResponse(reply=reply.strip())
