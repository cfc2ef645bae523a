"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from hunter.api.routes.auth_routes import router as auth_router
from hunter.api.routes.user_routes import router as user_router
from hunter.api.routes.job_routes import router as job_router
from hunter.api.routes.job_wizard_routes import router as job_wizard_router
from hunter.api.routes.question_routes import router as question_router
from hunter.api.routes.application_routes import router as application_router
from hunter.api.routes.candidate_routes import router as candidate_router
from hunter.api.routes.schedule_routes import router as schedule_router
from hunter.api.routes.interview_routes import router as interview_router
from hunter.api.routes.interview_bot_routes import router as interview_bot_router
from hunter.api.routes.report_routes import router as report_router
from hunter.api.routes.dashboard_routes import router as dashboard_router
from hunter.api.routes.settings_routes import router as settings_router
from hunter.api.routes.onboarding_routes import router as onboarding_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(job_router)
api_router.include_router(job_wizard_router)
api_router.include_router(question_router)
api_router.include_router(application_router)
api_router.include_router(candidate_router)
api_router.include_router(schedule_router)
api_router.include_router(interview_router)
api_router.include_router(interview_bot_router)
api_router.include_router(report_router)
api_router.include_router(dashboard_router)
api_router.include_router(settings_router)
api_router.include_router(onboarding_router)
