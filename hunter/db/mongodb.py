"""
MongoDB Connection Utility

MongoDB stores:
- Job posting details captured by the creation wizard
- Job drafts (wizard progress)
- AI interview sessions (transcripts, analyses)
- Candidate reports
- Admin settings and applicant onboarding progress

WHY MongoDB for these?
- Schema-flexible: wizard fields and AI outputs vary in structure
- Document-oriented: a session or draft is read and written as one unit
- No joins needed: Each document is self-contained
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from hunter.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the hunter_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def set_mongo_client(client: MongoClient) -> None:
    """Replace the client (used by tests and scripts)."""
    global _client, _db
    _client = client
    _db = None


def get_collection(name: str) -> Collection:
    """Get a specific collection by name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "job_postings": "job_postings",
    "job_drafts": "job_drafts",
    "interview_sessions": "interview_sessions",
    "reports": "reports",
    "settings": "settings",
    "onboarding": "onboarding",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["job_postings"]].create_index("job_id", unique=True)
    db[COLLECTIONS["job_drafts"]].create_index("created_by")
    db[COLLECTIONS["interview_sessions"]].create_index("user_id")
    db[COLLECTIONS["reports"]].create_index([
        ("job_id", 1),
        ("candidate_id", 1)
    ])
    db[COLLECTIONS["onboarding"]].create_index("user_id", unique=True)

    logger.info("MongoDB indexes created successfully")
