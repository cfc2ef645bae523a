"""
Interview Question Routes (recruiter/admin)

GET /questions - List questions, optionally for one job or matching a search
POST /questions - Add a question to a job
PUT /questions/{question_id} - Edit a question
DELETE /questions/{question_id} - Delete a question
POST /questions/{job_id}/generate - Generate questions for a job with AI
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow, contains_pattern
from hunter.core.auth import get_current_staff
from hunter.services.ai_client import AIClientError
from hunter.services.job_service import get_job_row, load_job_lists
from hunter.services.question_service import generate_bank_questions
from hunter.schemas.schemas import QuestionCreate, QuestionUpdate, QuestionResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["Interview Questions"])

EMPTY_TEXT = "Question text cannot be empty."

QUESTION_SELECT = """
    SELECT q.question_id, q.job_id, j.title AS job_title, q.text, q.generated_by, q.created_at
    FROM questions q JOIN jobs j ON q.job_id = j.job_id
"""


def _question(row: dict) -> dict:
    return {
        "id": row["question_id"], "job_id": row["job_id"], "job_title": row["job_title"],
        "text": row["text"], "generated_by": row["generated_by"],
        "created_at": parse_timestamp(row["created_at"]),
    }


def _get_question(question_id: int) -> dict:
    rows = execute_raw_sql(QUESTION_SELECT + " WHERE q.question_id = :qid", {"qid": question_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Question not found")
    return _question(rows[0])


def _insert_question(db, job_id: int, question: str, generated_by: str) -> int:
    result = db.execute(
        text("""
            INSERT INTO questions (job_id, text, generated_by, created_at)
            VALUES (:jid, :text, :by, :now)
            RETURNING question_id
        """),
        {"jid": job_id, "text": question, "by": generated_by, "now": utcnow()}
    )
    return result.fetchone()[0]


@router.get("", response_model=List[QuestionResponse])
async def list_questions(
    job_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Search in question text or job title"),
    staff: dict = Depends(get_current_staff)
):
    sql = QUESTION_SELECT + " WHERE 1=1"
    params = {}
    if job_id is not None:
        sql += " AND q.job_id = :jid"
        params["jid"] = job_id
    if search:
        sql += " AND (LOWER(q.text) LIKE LOWER(:search) ESCAPE '\\' OR LOWER(j.title) LIKE LOWER(:search) ESCAPE '\\')"
        params["search"] = contains_pattern(search)
    sql += " ORDER BY q.job_id, q.question_id"

    return [_question(r) for r in execute_raw_sql(sql, params)]


@router.post("", response_model=QuestionResponse, status_code=201)
async def create_question(question: QuestionCreate, staff: dict = Depends(get_current_staff)):
    if not question.text.strip():
        raise HTTPException(status_code=400, detail=EMPTY_TEXT)
    if not get_job_row(question.job_id):
        raise HTTPException(status_code=404, detail="Job not found")

    with get_db_session() as db:
        question_id = _insert_question(db, question.job_id, question.text.strip(), "MANUAL")
    return _get_question(question_id)


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(question_id: int, update: QuestionUpdate,
                          staff: dict = Depends(get_current_staff)):
    if not update.text.strip():
        raise HTTPException(status_code=400, detail=EMPTY_TEXT)
    _get_question(question_id)

    with get_db_session() as db:
        db.execute(
            text("UPDATE questions SET text = :text WHERE question_id = :qid"),
            {"text": update.text.strip(), "qid": question_id}
        )
    return _get_question(question_id)


@router.delete("/{question_id}", response_model=MessageResponse)
async def delete_question(question_id: int, staff: dict = Depends(get_current_staff)):
    _get_question(question_id)
    with get_db_session() as db:
        db.execute(text("DELETE FROM answers WHERE question_id = :qid"), {"qid": question_id})
        db.execute(text("DELETE FROM questions WHERE question_id = :qid"), {"qid": question_id})
    return MessageResponse(message="Question deleted successfully")


@router.post("/{job_id}/generate", response_model=List[QuestionResponse], status_code=201)
async def generate_questions(job_id: int, staff: dict = Depends(get_current_staff)):
    """Ask the AI for questions about the job and store the new ones."""
    job = get_job_row(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    try:
        generated = generate_bank_questions(
            job["title"], load_job_lists([job_id])[job_id]["requirements"], job["description"]
        )
    except AIClientError as e:
        logger.error(f"Question generation failed for job {job_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate questions")
    if not generated:
        raise HTTPException(status_code=502, detail="Failed to generate questions")

    existing = {
        r["text"].strip().lower()
        for r in execute_raw_sql("SELECT text FROM questions WHERE job_id = :jid", {"jid": job_id})
    }
    new_ids = []
    with get_db_session() as db:
        for question in generated:
            if question.lower() in existing:
                continue
            existing.add(question.lower())
            new_ids.append(_insert_question(db, job_id, question, "AI"))

    logger.info(f"Generated {len(new_ids)} questions for job {job_id}")
    return [_get_question(qid) for qid in new_ids]
