"""
Onboarding Service - chat-style wizard that collects an applicant's details.

name -> experience -> education -> skills -> done

The collected answers form the ApplicantDetails the interview bot needs.
"""

from typing import Optional

from hunter.services.mongo_service import OnboardingService

STEPS = [
    ("name", "Welcome to HunterBot! I'm your AI career assistant. What's your full name?"),
    ("experience", "Nice to meet you! Tell me about your work experience."),
    ("education", "Great. What is your educational background?"),
    ("skills", "Which skills should interviewers know about? Separate them with commas."),
    ("done", "You're all set! Ready to browse jobs or start a practice interview?"),
]
DONE = len(STEPS) - 1


class OnboardingError(Exception):
    pass


def split_skills(answer: str) -> list:
    return [s.strip() for s in answer.split(",") if s.strip()]


def state_for(doc: Optional[dict]) -> dict:
    step = doc["step"] if doc else 0
    name, prompt = STEPS[step]
    return {
        "step": step,
        "step_name": name,
        "prompt": prompt,
        "answers": (doc or {}).get("answers", {}),
        "completed": step == DONE,
    }


def get_state(user_id: int) -> dict:
    return state_for(OnboardingService().get_by_user(user_id))


def answer(user_id: int, text: str) -> dict:
    """Store the answer for the current step and advance one step."""
    text = (text or "").strip()
    if not text:
        raise OnboardingError("Please provide an answer")

    service = OnboardingService()
    doc = service.get_by_user(user_id)
    step = doc["step"] if doc else 0
    if step == DONE:
        raise OnboardingError("Onboarding is already complete")

    answers = dict((doc or {}).get("answers", {}))
    name = STEPS[step][0]
    answers[name] = split_skills(text) if name == "skills" else text
    if name == "skills" and not answers[name]:
        raise OnboardingError("Please list at least one skill")

    service.save(user_id, step + 1, answers)
    return get_state(user_id)


def reset(user_id: int) -> dict:
    OnboardingService().reset(user_id)
    return get_state(user_id)


def applicant_details(user_id: int) -> Optional[dict]:
    """The collected ApplicantDetails, or None until onboarding is done."""
    state = get_state(user_id)
    if not state["completed"]:
        return None
    answers = state["answers"]
    return {
        "name": answers["name"],
        "experience": answers["experience"],
        "education": answers["education"],
        "skills": answers["skills"],
    }
