"""
AI Interview Bot Routes

Stateless (the client keeps the conversation):
GET /interview/stages - Stages with durations and tips
GET /interview/help - Help guides
POST /interview/generate-question - Question for a stage
POST /interview/process-response - Transcribe + analyse a recorded answer (multipart)
POST /interview/process-text-response - Analyse a typed answer

Sessions (the server keeps the conversation):
POST /interview/sessions - Start an interview
GET /interview/sessions/{session_id} - Current state with countdown and progress
POST /interview/sessions/{session_id}/text - Answer by text
POST /interview/sessions/{session_id}/audio - Answer by recording (multipart)
POST /interview/sessions/{session_id}/complete - Finish and create the summary report
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from pydantic import TypeAdapter, ValidationError

from hunter.core.auth import get_current_user, is_staff
from hunter.api.routes.application_routes import get_owned_application
from hunter.services.ai_client import AIClientError
from hunter.services.interview_service import (
    HELP_GUIDES, STAGES_BY_NAME, InterviewBot, InterviewSessionManager, SessionBusyError,
    SessionClosedError, list_stages, count_user_messages, stage_progress, time_remaining
)
from hunter.services.mongo_service import InterviewSessionService
from hunter.services.report_service import create_session_report
from hunter.utils.file_upload import read_audio
from hunter.schemas.schemas import (
    StageInfo, HelpGuide, GenerateQuestionRequest, QuestionReply, TextResponseRequest,
    ProcessedResponse, SessionCreate, SessionTextRequest, SessionResponse, JobDetails,
    ApplicantDetails, ChatMessage
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interview", tags=["Interview Bot"])

_messages_adapter = TypeAdapter(List[ChatMessage])


def _dump(model) -> dict:
    return model.model_dump(mode="json")


def _parse_form_json(raw: Optional[str], parse, name: str):
    """Parse one of the JSON-encoded multipart fields."""
    if not raw:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    try:
        return parse(raw)
    except (ValidationError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


def session_response(session: dict) -> dict:
    stage = session["stage"]
    return {
        "id": session["_id"],
        "state": session["state"],
        "stage": stage,
        "stage_description": STAGES_BY_NAME[stage]["description"],
        "time_remaining": time_remaining(stage, session["stage_started_at"]),
        "stage_progress": stage_progress(count_user_messages(session["messages"]), stage),
        "current_question": session["current_question"],
        "messages": session["messages"],
        "current_analysis": session.get("current_analysis"),
        "feedback_history": session.get("feedback_history") or [],
        "report_id": session.get("report_id"),
    }


def _get_session(session_id: str, user: dict) -> dict:
    session = InterviewSessionService().get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Interview session not found")
    if not is_staff(user) and session["user_id"] != user["user_id"]:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return session


def _run_answer(session_id: str, **kwargs) -> dict:
    try:
        session = InterviewSessionManager().answer(session_id, **kwargs)
    except SessionBusyError:
        raise HTTPException(status_code=409, detail="The previous answer is still being processed")
    except SessionClosedError:
        raise HTTPException(status_code=400, detail="This interview has already been completed")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIClientError as e:
        logger.error(f"Interview session {session_id} failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to process response")
    return session_response(session)


# ============================================================
# STATELESS ENDPOINTS
# ============================================================

@router.get("/stages", response_model=List[StageInfo])
async def get_stages():
    return list_stages()


@router.get("/help", response_model=List[HelpGuide])
async def get_help():
    return HELP_GUIDES


@router.post("/generate-question", response_model=QuestionReply)
async def generate_question(request: GenerateQuestionRequest, user: dict = Depends(get_current_user)):
    try:
        question = InterviewBot().generate_question(
            _dump(request.job_details), _dump(request.applicant_details),
            request.interview_stage.value, [_dump(m) for m in request.previous_messages]
        )
    except AIClientError as e:
        logger.error(f"Question generation failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate question")
    return QuestionReply(question=question)


@router.post("/process-response", response_model=ProcessedResponse)
async def process_response(
    audio: Optional[UploadFile] = File(None),
    question: str = Form(""),
    job_details: Optional[str] = Form(None, alias="jobDetails"),
    applicant_details: Optional[str] = Form(None, alias="applicantDetails"),
    previous_messages: Optional[str] = Form(None, alias="previousMessages"),
    user: dict = Depends(get_current_user)
):
    """Transcribe a recorded answer, analyse it and ask the next question."""
    content, filename = await read_audio(audio)
    job = _parse_form_json(job_details, JobDetails.model_validate_json, "jobDetails")
    applicant = _parse_form_json(applicant_details, ApplicantDetails.model_validate_json, "applicantDetails")
    messages = _parse_form_json(previous_messages or "[]", _messages_adapter.validate_json, "previousMessages")

    bot = InterviewBot()
    try:
        transcription = bot.transcribe(content, filename)
        analysis = bot.analyze_response(transcription, question, _dump(job), _dump(applicant))
        history = [_dump(m) for m in messages] + [{"role": "user", "content": transcription}]
        next_question = bot.generate_next_question(_dump(job), history)
    except AIClientError as e:
        logger.error(f"Processing recorded response failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to process response")

    return {"transcription": transcription, "analysis": analysis, "next_question": next_question}


@router.post("/process-text-response", response_model=ProcessedResponse)
async def process_text_response(request: TextResponseRequest, user: dict = Depends(get_current_user)):
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Please provide an answer")

    job = _dump(request.job_details)
    bot = InterviewBot()
    try:
        analysis = bot.analyze_response(
            request.message.strip(), request.question, job, _dump(request.applicant_details)
        )
        history = [
            {"role": "assistant", "content": request.question},
            {"role": "user", "content": request.message.strip()},
        ]
        next_question = bot.generate_next_question(job, history)
    except AIClientError as e:
        logger.error(f"Processing text response failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to process response")

    return {"analysis": analysis, "next_question": next_question}


# ============================================================
# SESSION ENDPOINTS
# ============================================================

@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(request: SessionCreate, user: dict = Depends(get_current_user)):
    if request.application_id is not None:
        get_owned_application(request.application_id, user)
    try:
        session = InterviewSessionManager().start(
            user["user_id"], _dump(request.job_details), _dump(request.applicant_details),
            request.application_id
        )
    except AIClientError as e:
        logger.error(f"Starting interview failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate question")
    return session_response(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, user: dict = Depends(get_current_user)):
    return session_response(_get_session(session_id, user))


@router.post("/sessions/{session_id}/text", response_model=SessionResponse)
async def answer_text(session_id: str, request: SessionTextRequest, user: dict = Depends(get_current_user)):
    _get_session(session_id, user)
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Please provide an answer")
    return _run_answer(session_id, text=request.message)


@router.post("/sessions/{session_id}/audio", response_model=SessionResponse)
async def answer_audio(session_id: str, audio: Optional[UploadFile] = File(None),
                       user: dict = Depends(get_current_user)):
    _get_session(session_id, user)
    content, filename = await read_audio(audio)
    return _run_answer(session_id, audio=content, filename=filename)


@router.post("/sessions/{session_id}/complete", response_model=SessionResponse)
async def complete_session(session_id: str, user: dict = Depends(get_current_user)):
    _get_session(session_id, user)
    try:
        session = InterviewSessionManager().complete(session_id, create_session_report)
    except SessionBusyError:
        raise HTTPException(status_code=409, detail="The previous answer is still being processed")
    except SessionClosedError:
        raise HTTPException(status_code=400, detail="This interview has already been completed")
    return session_response(session)
