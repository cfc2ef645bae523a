"""
Hunter AI Recruiting API - Main Application

FastAPI backend for the Hunter AI applicant tracking front-end:
- PostgreSQL for structured data
- MongoDB for documents (postings, drafts, interview sessions, reports)
- OpenAI-compatible AI for questions, transcription and answer analysis
- JWT authentication

Run: uvicorn hunter.main:app --reload
"""

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError

from hunter import __version__
from hunter.api.routes import api_router
from hunter.core.config import get_settings
from hunter.db.mongodb import init_mongo_indexes, test_mongo_connection
from hunter.db.postgres import init_db, test_postgres_connection
from hunter.utils.file_upload import UPLOAD_URL_PREFIX, upload_root

settings = get_settings()

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Hunter AI Recruiting API",
    description="""
    Backend for the Hunter AI applicant tracking system.

    ## Features
    - **Authentication**: JWT login for admins, recruiters and applicants
    - **Jobs**: Postings, the creation wizard and the AI job assistant
    - **Candidates**: Applications, resumes, pipeline status, schedules
    - **Interviews**: Question chat and the staged AI interview bot
    - **Reports**: Interview summaries with text export
    - **Dashboard**: Hiring overview and HR assistant chat

    ## Databases
    - PostgreSQL: users, jobs, questions, applications, schedules, answers
    - MongoDB: job postings, drafts, interview sessions, reports, settings, onboarding
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first validation problem as a plain message."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message})


# Include API routes
app.include_router(api_router, prefix="/api")

# Stored resumes and logos
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_root())), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables and MongoDB indexes."""
    try:
        init_db()
        logger.info("Database tables ready")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Hunter AI Recruiting API", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
