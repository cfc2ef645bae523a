"""
Onboarding Routes (applicant)

GET /onboarding - Current step, bot prompt and answers so far
POST /onboarding/answer - Answer the current step
POST /onboarding/reset - Start over
GET /onboarding/applicant-details - The collected details, once complete
"""

from fastapi import APIRouter, HTTPException, Depends

from hunter.core.auth import get_current_applicant
from hunter.services import onboarding_service
from hunter.services.onboarding_service import OnboardingError
from hunter.schemas.schemas import OnboardingAnswer, OnboardingState, ApplicantDetails

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


@router.get("", response_model=OnboardingState)
async def get_onboarding(applicant: dict = Depends(get_current_applicant)):
    return onboarding_service.get_state(applicant["user_id"])


@router.post("/answer", response_model=OnboardingState)
async def answer_step(request: OnboardingAnswer, applicant: dict = Depends(get_current_applicant)):
    try:
        return onboarding_service.answer(applicant["user_id"], request.answer)
    except OnboardingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/reset", response_model=OnboardingState)
async def reset_onboarding(applicant: dict = Depends(get_current_applicant)):
    return onboarding_service.reset(applicant["user_id"])


@router.get("/applicant-details", response_model=ApplicantDetails)
async def get_applicant_details(applicant: dict = Depends(get_current_applicant)):
    details = onboarding_service.applicant_details(applicant["user_id"])
    if details is None:
        raise HTTPException(status_code=404, detail="Onboarding is not complete")
    return details
