"""
Job Wizard Service

Steps: Setup -> Questions -> Customization -> Invite Candidate.

A draft document (job_drafts) carries the active step and everything entered
so far. Submitting the last step creates the SQL job, its question rows and the
job_postings document with the free-form wizard fields.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import text

from hunter.db.postgres import get_db_session, utcnow
from hunter.services import job_assistant
from hunter.services.job_service import insert_job
from hunter.services.mongo_service import JobDraftService, JobPostingService

logger = logging.getLogger(__name__)

STEPS = ["Setup", "Questions", "Customization", "Invite Candidate"]
LAST_STEP = len(STEPS) - 1

REQUIRED_SETUP_FIELDS = ("job_title", "deadline", "language", "timezone")


class WizardError(Exception):
    """A wizard action is not allowed in the draft's current state."""


def draft_to_dict(draft: dict) -> dict:
    return {
        "id": draft["_id"],
        "active_step": draft["active_step"],
        "step_name": STEPS[draft["active_step"]],
        "setup": draft.get("setup") or {},
        "questions": draft.get("questions") or [],
        "generated_questions": draft.get("generated_questions") or [],
        "custom_questions": draft.get("custom_questions") or "",
        "templates": draft.get("templates") or [],
        "customization": draft.get("customization") or {},
        "candidates": draft.get("candidates") or [],
        "submitted": draft.get("submitted", False),
        "job_id": draft.get("job_id"),
    }


def missing_setup_fields(setup: dict) -> bool:
    return any(not (setup.get(f) or "").strip() for f in REQUIRED_SETUP_FIELDS)


def dedupe(values) -> list:
    """Drop blanks and repeats, keeping first-seen order."""
    return list(dict.fromkeys(v.strip() for v in values if v and v.strip()))


def new_template(draft: dict) -> dict:
    templates = draft.get("templates") or []
    return {
        "id": uuid.uuid4().hex,
        "name": f"Template {len(templates) + 1}",
        "content": draft.get("custom_questions") or "",
    }


def rename_template(draft: dict, template_id: str, name: str) -> Optional[list]:
    """Templates with one renamed; None if the id is unknown. Blank names change nothing."""
    templates = draft.get("templates") or []
    if not any(t["id"] == template_id for t in templates):
        return None
    name = name.strip()
    if not name:
        return templates
    return [dict(t, name=name) if t["id"] == template_id else t for t in templates]


def submit_draft(draft: dict, user_id: int) -> dict:
    """Create the job from a draft on the last step."""
    if draft.get("submitted"):
        raise WizardError("Job already submitted")
    if draft["active_step"] != LAST_STEP:
        raise WizardError("Complete all steps before submitting")

    setup = draft.get("setup") or {}
    custom = draft.get("customization") or {}
    questions = [q for q in (draft.get("questions") or []) if q.strip()]

    with get_db_session() as db:
        job_id = insert_job(db, user_id, {
            "title": setup["job_title"],
            "department": setup.get("company"),
            "location": custom.get("location"),
            "type": "Full-time",
            "salary": custom.get("salary"),
            "description": setup.get("description"),
            "skills": custom.get("skills") or [],
            "status": "ACTIVE",
        })
        for question in questions:
            db.execute(
                text("""
                    INSERT INTO questions (job_id, text, generated_by, created_at)
                    VALUES (:jid, :text, 'AI', :now)
                """),
                {"jid": job_id, "text": question, "now": utcnow()}
            )

    JobPostingService().upsert(job_id, {
        "company": setup.get("company"),
        "deadline": setup.get("deadline"),
        "language": setup.get("language"),
        "timezone": setup.get("timezone"),
        "experience": custom.get("experience"),
        "remote": custom.get("remote", False),
        "assessment": custom.get("assessment", False),
        "interview_rounds": custom.get("interview_rounds", 1),
        "coding_challenge": custom.get("coding_challenge", False),
        "system_design": custom.get("system_design", False),
        "pair_programming": custom.get("pair_programming", False),
        "custom_questions": draft.get("custom_questions") or "",
        "candidates": draft.get("candidates") or [],
        "post_to_linkedin": custom.get("post_to_linkedin", False),
        "post_to_indeed": custom.get("post_to_indeed", False),
    })
    JobDraftService().update(draft["_id"], {"submitted": True, "job_id": job_id})
    logger.info(f"Job {job_id} created from draft {draft['_id']}")

    return {
        "job_id": job_id,
        "post_to_linkedin": custom.get("post_to_linkedin", False),
        "post_to_indeed": custom.get("post_to_indeed", False),
    }


# ============================================================
# ASSISTANT TURN
# ============================================================

def _create_assistant_draft(user_id: int, job_title: str, company: str) -> dict:
    jobs = job_assistant.jobs_for_company(company)
    if job_title not in jobs:
        return {"reply": f"Job title \"{job_title}\" is not available for {company}. "
                         f"Available jobs: {', '.join(jobs)}"}

    details = job_assistant.generate_job_details(job_title, company)
    posting = job_assistant.default_posting(job_title, company)
    draft_id = JobDraftService().create(user_id, {
        "setup": {
            "job_title": job_title,
            "company": company,
            "deadline": posting["deadline"],
            "language": "English",
            "timezone": "UTC",
            "description": details["description"],
        },
        "customization": {
            "skills": details["skills"],
            "experience": posting["experience"],
            "salary": posting["salary"],
            "location": posting["location"],
            "remote": posting["remote"],
        },
    })
    reply = f"Created a draft job posting for {job_title} at {company}."
    if not details["generated"]:
        reply += " Failed to generate description and skills. Using defaults."
    return {"reply": reply, "draft_id": draft_id}


def assistant_turn(user_id: int, message: str, awaiting: Optional[str] = None,
                   pending_job_title: Optional[str] = None,
                   pending_company: Optional[str] = None) -> dict:
    """One message of the job creation chat."""
    if awaiting == "jobTitle":
        job_title = job_assistant.match_job_title(message)
        if not job_title:
            return {"reply": job_assistant.suggest("jobTitle", message), "awaiting": "jobTitle",
                    "pending_company": pending_company}
        if pending_company:
            return _create_assistant_draft(user_id, job_title, pending_company)
        return {"reply": "I still need the company name. Which company is this job for?",
                "awaiting": "company", "pending_job_title": job_title}

    if awaiting == "company":
        company = job_assistant.match_company(message)
        if not company:
            return {"reply": job_assistant.suggest("company", message), "awaiting": "company",
                    "pending_job_title": pending_job_title}
        if pending_job_title:
            return _create_assistant_draft(user_id, pending_job_title, company)
        return {"reply": "I still need the job title. What role are you creating this job for?",
                "awaiting": "jobTitle", "pending_company": company}

    job_title, company = job_assistant.extract_job_and_company(message)
    if job_title and company:
        return _create_assistant_draft(user_id, job_title, company)
    if job_title:
        return {"reply": f"I understood the job title ({job_title}), but I need the company name. "
                         "Which company is this job for?",
                "awaiting": "company", "pending_job_title": job_title}
    if company:
        return {"reply": f"I understood the company name ({company}), but I need the job title. "
                         "What role are you creating this job for?",
                "awaiting": "jobTitle", "pending_company": company}

    return {"reply": "I couldn't understand the job title or company from your message. "
                     "Please provide both, for example: \"I need a Software Engineer at Google\". "
                     f"Available companies: {', '.join(job_assistant.company_names())}. "
                     f"Available job titles: {', '.join(job_assistant.unique_job_titles())}."}
