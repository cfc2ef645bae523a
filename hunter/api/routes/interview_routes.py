"""
Interview Chat Routes

The question-by-question chat an applicant goes through after scheduling.

GET /interviews/{application_id}/questions - The job's questions in order
POST /interviews/{application_id}/answers - Answer one question
POST /answers - Store a recorded answer reference
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from hunter.db.postgres import get_db_session, execute_raw_sql, parse_timestamp, utcnow
from hunter.core.auth import get_current_user, is_staff
from hunter.api.routes.application_routes import get_owned_application
from hunter.schemas.schemas import (
    QuestionResponse, AnswerSubmit, AnswerProgress, RecordedAnswerCreate, RecordedAnswerResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Interview Chat"])

NEXT_QUESTION = "Answer submitted! Next question loaded."
COMPLETED = "Interview completed! Thank you for your responses."


def _job_questions(job_id: int) -> List[dict]:
    return execute_raw_sql(
        """
        SELECT q.question_id, q.job_id, j.title AS job_title, q.text, q.generated_by, q.created_at
        FROM questions q JOIN jobs j ON q.job_id = j.job_id
        WHERE q.job_id = :jid ORDER BY q.question_id
        """,
        {"jid": job_id}
    )


@router.get("/interviews/{application_id}/questions", response_model=List[QuestionResponse])
async def interview_questions(application_id: int, user: dict = Depends(get_current_user)):
    application = get_owned_application(application_id, user)
    return [
        {
            "id": r["question_id"], "job_id": r["job_id"], "job_title": r["job_title"],
            "text": r["text"], "generated_by": r["generated_by"],
            "created_at": parse_timestamp(r["created_at"]),
        }
        for r in _job_questions(application["job_id"])
    ]


@router.post("/interviews/{application_id}/answers", response_model=AnswerProgress)
async def submit_answer(application_id: int, submission: AnswerSubmit,
                        user: dict = Depends(get_current_user)):
    """
    Store an answer. When every question of the job has one, the application
    moves to INTERVIEWED.
    """
    application = get_owned_application(application_id, user)
    if not submission.answer.strip():
        raise HTTPException(status_code=400, detail="Please provide an answer")

    question_ids = [q["question_id"] for q in _job_questions(application["job_id"])]
    if submission.question_id not in question_ids:
        raise HTTPException(status_code=400, detail="Question does not belong to this job")

    with get_db_session() as db:
        db.execute(
            text("""
                DELETE FROM answers
                WHERE application_id = :aid AND question_id = :qid AND response_url IS NULL
            """),
            {"aid": application_id, "qid": submission.question_id}
        )
        db.execute(
            text("""
                INSERT INTO answers (application_id, question_id, answer_text, created_at)
                VALUES (:aid, :qid, :answer, :now)
            """),
            {"aid": application_id, "qid": submission.question_id,
             "answer": submission.answer.strip(), "now": utcnow()}
        )
        answered = db.execute(
            text("""
                SELECT COUNT(DISTINCT question_id) FROM answers
                WHERE application_id = :aid AND answer_text IS NOT NULL
            """),
            {"aid": application_id}
        ).fetchone()[0]

        completed = answered >= len(question_ids)
        if completed and application["status"] == "PENDING":
            db.execute(
                text("""
                    UPDATE applications SET status = 'INTERVIEWED', updated_at = :now
                    WHERE application_id = :aid
                """),
                {"now": utcnow(), "aid": application_id}
            )

    if completed:
        logger.info(f"Interview chat completed for application {application_id}")

    return AnswerProgress(
        answered=answered, total=len(question_ids), completed=completed,
        message=COMPLETED if completed else NEXT_QUESTION
    )


@router.post("/answers", response_model=RecordedAnswerResponse, status_code=201)
async def create_recorded_answer(answer: RecordedAnswerCreate, user: dict = Depends(get_current_user)):
    if user["role"] not in ("ADMIN", "APPLICANT"):
        raise HTTPException(status_code=403, detail="Unauthorized")
    if not (answer.schedule_id and answer.question_id and answer.response_url):
        raise HTTPException(status_code=400, detail="Missing required fields")

    schedules = execute_raw_sql(
        "SELECT user_id, job_id, application_id FROM schedules WHERE schedule_id = :sid",
        {"sid": answer.schedule_id}
    )
    if not schedules:
        raise HTTPException(status_code=404, detail="Schedule not found")
    schedule = schedules[0]
    if not is_staff(user) and schedule["user_id"] != user["user_id"]:
        raise HTTPException(status_code=403, detail="Unauthorized")

    questions = execute_raw_sql(
        "SELECT job_id FROM questions WHERE question_id = :qid", {"qid": answer.question_id}
    )
    if not questions or questions[0]["job_id"] != schedule["job_id"]:
        raise HTTPException(status_code=400, detail="Question does not belong to this job")

    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO answers (application_id, schedule_id, question_id, response_url, created_at)
                VALUES (:aid, :sid, :qid, :url, :now)
                RETURNING answer_id
            """),
            {"aid": schedule["application_id"], "sid": answer.schedule_id,
             "qid": answer.question_id, "url": answer.response_url, "now": utcnow()}
        )
        answer_id = result.fetchone()[0]

    return RecordedAnswerResponse(
        id=answer_id, schedule_id=answer.schedule_id, question_id=answer.question_id,
        response_url=answer.response_url
    )
