"""
Job Wizard Routes (recruiter/admin)

POST /admin/job-drafts - Start a new draft
GET /admin/job-drafts/{draft_id} - Get a draft
PUT /admin/job-drafts/{draft_id}/setup - Setup step: generate questions, go to Questions
PUT /admin/job-drafts/{draft_id}/questions - Edit questions, go to Customization
POST /admin/job-drafts/{draft_id}/templates - Save the question block as a template
PUT /admin/job-drafts/{draft_id}/templates/{template_id} - Rename a template
PUT /admin/job-drafts/{draft_id}/customization - Customization step, go to Invite Candidate
PUT /admin/job-drafts/{draft_id}/candidates - Invited candidate emails
POST /admin/job-drafts/{draft_id}/back - Previous step
POST /admin/job-drafts/{draft_id}/submit - Create the job
POST /admin/job-assistant - Create a draft from a chat message
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from hunter.core.auth import get_current_staff
from hunter.services.ai_client import AIClientError
from hunter.services.job_wizard import (
    LAST_STEP, WizardError, draft_to_dict, missing_setup_fields, dedupe, new_template,
    rename_template, submit_draft, assistant_turn
)
from hunter.services.mongo_service import JobDraftService
from hunter.services.question_service import (
    QuestionGenerationError, generate_wizard_questions, format_question_block
)
from hunter.schemas.schemas import (
    DraftSetup, DraftQuestionsUpdate, TemplateRename, DraftCustomization, DraftCandidates,
    JobDraftResponse, DraftSubmitResponse, JobAssistantRequest, JobAssistantResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Job Wizard"])


def _get_draft(draft_id: str, staff: dict) -> dict:
    draft = JobDraftService().get(draft_id)
    if not draft or (draft["created_by"] != staff["user_id"] and staff["role"] != "ADMIN"):
        raise HTTPException(status_code=404, detail="Draft not found")
    if draft.get("submitted"):
        raise HTTPException(status_code=400, detail="Job already submitted")
    return draft


def _save(draft_id: str, fields: dict) -> dict:
    return draft_to_dict(JobDraftService().update(draft_id, fields))


@router.post("/job-drafts", response_model=JobDraftResponse, status_code=201)
async def create_draft(staff: dict = Depends(get_current_staff)):
    service = JobDraftService()
    draft_id = service.create(staff["user_id"])
    return draft_to_dict(service.get(draft_id))


@router.get("/job-drafts/{draft_id}", response_model=JobDraftResponse)
async def get_draft(draft_id: str, staff: dict = Depends(get_current_staff)):
    draft = JobDraftService().get(draft_id)
    if not draft or (draft["created_by"] != staff["user_id"] and staff["role"] != "ADMIN"):
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft_to_dict(draft)


@router.put("/job-drafts/{draft_id}/setup", response_model=JobDraftResponse)
async def setup_step(draft_id: str, setup: DraftSetup, staff: dict = Depends(get_current_staff)):
    """Save the setup fields, generate questions and move to the Questions step."""
    _get_draft(draft_id, staff)
    values = setup.model_dump()
    if missing_setup_fields(values):
        raise HTTPException(status_code=400, detail="Please fill in all required fields")

    try:
        questions = generate_wizard_questions(
            setup.job_title.strip(), setup.question_types or ["technical"], setup.difficulty,
            setup.question_count, setup.complexity
        )
    except QuestionGenerationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIClientError:
        raise HTTPException(status_code=502, detail="Failed to generate questions. Please try again.")

    return _save(draft_id, {
        "setup": values,
        "generated_questions": questions,
        "questions": [q["question"] for q in questions],
        "custom_questions": format_question_block(questions),
        "active_step": 1,
    })


@router.put("/job-drafts/{draft_id}/questions", response_model=JobDraftResponse)
async def questions_step(draft_id: str, update: DraftQuestionsUpdate,
                         staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    if draft["active_step"] < 1:
        raise HTTPException(status_code=400, detail="Complete the setup step first")
    questions = [q.strip() for q in update.questions]
    if not questions or not all(questions):
        raise HTTPException(status_code=400, detail="Some questions are empty")
    return _save(draft_id, {"questions": questions, "active_step": max(draft["active_step"], 2)})


@router.post("/job-drafts/{draft_id}/templates", response_model=JobDraftResponse)
async def save_template(draft_id: str, staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    if not draft.get("custom_questions"):
        raise HTTPException(status_code=400, detail="No questions to save")
    return _save(draft_id, {"templates": (draft.get("templates") or []) + [new_template(draft)]})


@router.put("/job-drafts/{draft_id}/templates/{template_id}", response_model=JobDraftResponse)
async def rename_draft_template(draft_id: str, template_id: str, update: TemplateRename,
                                staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    templates = rename_template(draft, template_id, update.name)
    if templates is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return _save(draft_id, {"templates": templates})


@router.put("/job-drafts/{draft_id}/customization", response_model=JobDraftResponse)
async def customization_step(draft_id: str, custom: DraftCustomization,
                             staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    if draft["active_step"] < 2:
        raise HTTPException(status_code=400, detail="Complete the questions step first")
    values = custom.model_dump()
    values["skills"] = dedupe(custom.skills)
    return _save(draft_id, {"customization": values, "active_step": LAST_STEP})


@router.put("/job-drafts/{draft_id}/candidates", response_model=JobDraftResponse)
async def candidates_step(draft_id: str, update: DraftCandidates,
                          staff: dict = Depends(get_current_staff)):
    _get_draft(draft_id, staff)
    return _save(draft_id, {"candidates": dedupe(update.candidates)})


@router.post("/job-drafts/{draft_id}/back", response_model=JobDraftResponse)
async def back_step(draft_id: str, staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    return _save(draft_id, {"active_step": max(draft["active_step"] - 1, 0)})


@router.post("/job-drafts/{draft_id}/submit", response_model=DraftSubmitResponse, status_code=201)
async def submit(draft_id: str, staff: dict = Depends(get_current_staff)):
    draft = _get_draft(draft_id, staff)
    try:
        return submit_draft(draft, staff["user_id"])
    except WizardError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/job-assistant", response_model=JobAssistantResponse)
async def job_assistant(request: JobAssistantRequest, staff: dict = Depends(get_current_staff)):
    """One turn of the job creation chat."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Please enter a message")
    return assistant_turn(
        staff["user_id"], request.message, request.awaiting,
        request.pending_job_title, request.pending_company
    )
