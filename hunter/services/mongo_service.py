"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. job_postings        - Free-form job fields captured by the creation wizard
2. job_drafts          - In-progress job wizard state
3. interview_sessions  - AI interview bot transcripts, analyses and locks
4. reports             - Candidate reports
5. settings            - Admin settings (one document)
6. onboarding          - Applicant onboarding progress (one per user)

Datetimes are stored as naive UTC, which is what pymongo hands back.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, List
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from hunter.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS
# ============================================================

def now_utc() -> datetime:
    """Naive UTC timestamp for document fields."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id from a URL; None if it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_docs(docs: list) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# JOB POSTINGS COLLECTION
# Wizard fields that have no column in the jobs table
# ============================================================

class JobPostingService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["job_postings"])

    def upsert(self, job_id: int, fields: dict) -> None:
        doc = dict(fields)
        doc["job_id"] = job_id
        doc["updated_at"] = now_utc()
        self.collection.update_one(
            {"job_id": job_id},
            {"$set": doc, "$setOnInsert": {"created_at": now_utc()}},
            upsert=True
        )

    def get_by_job(self, job_id: int) -> Optional[dict]:
        doc = self.collection.find_one({"job_id": job_id}, {"_id": 0})
        return doc

    def delete_by_job(self, job_id: int) -> bool:
        result = self.collection.delete_one({"job_id": job_id})
        return result.deleted_count > 0


# ============================================================
# JOB DRAFTS COLLECTION
# ============================================================

class JobDraftService:
    """
    Stores job wizard drafts.
    A draft tracks the active step plus everything entered so far.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["job_drafts"])

    def create(self, created_by: int, fields: dict = None) -> str:
        doc = {
            "created_by": created_by,
            "active_step": 0,
            "setup": {},
            "questions": [],
            "generated_questions": [],
            "custom_questions": "",
            "templates": [],
            "customization": {},
            "candidates": [],
            "submitted": False,
            "job_id": None,
            "created_at": now_utc(),
            "updated_at": now_utc(),
        }
        doc.update(fields or {})
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get(self, draft_id: str) -> Optional[dict]:
        oid = to_object_id(draft_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def update(self, draft_id: str, fields: dict) -> Optional[dict]:
        """Set fields and return the updated draft."""
        oid = to_object_id(draft_id)
        if oid is None:
            return None
        fields = dict(fields)
        fields["updated_at"] = now_utc()
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)


# ============================================================
# INTERVIEW SESSIONS COLLECTION
# ============================================================

class InterviewSessionService:
    """
    Stores AI interview bot sessions.

    The 'state' field doubles as a lock: a session is either 'idle',
    'processing' (one request in flight) or 'completed'.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["interview_sessions"])

    def insert(self, doc: dict) -> str:
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get(self, session_id: str) -> Optional[dict]:
        oid = to_object_id(session_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def update(self, session_id: str, fields: dict) -> None:
        self.collection.update_one({"_id": ObjectId(session_id)}, {"$set": fields})

    def acquire(self, session_id: str, stale_before: datetime) -> Optional[dict]:
        """
        Atomically move a session into 'processing'.

        Succeeds when the session is idle, or when a previous request has held
        the lock since before stale_before. Returns the locked session or None;
        its lock_id must be passed back to release().
        """
        doc = self.collection.find_one_and_update(
            {
                "_id": ObjectId(session_id),
                "$or": [
                    {"state": "idle"},
                    {"state": "processing", "processing_since": {"$lt": stale_before}},
                ],
            },
            {"$set": {"state": "processing", "processing_since": now_utc(), "lock_id": uuid.uuid4().hex}},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def release(self, session_id: str, lock_id: str, fields: dict = None, state: str = "idle") -> bool:
        """
        Leave 'processing' for state, optionally saving fields in the same write.

        Only the holder of lock_id may release. Returns False when the lock
        was taken over in the meantime; nothing is written then.
        """
        update = dict(fields or {})
        update.update({"state": state, "processing_since": None, "lock_id": None})
        result = self.collection.update_one(
            {"_id": ObjectId(session_id), "state": "processing", "lock_id": lock_id},
            {"$set": update}
        )
        return result.matched_count == 1


# ============================================================
# REPORTS COLLECTION
# ============================================================

class ReportService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["reports"])

    def insert(self, job_id: Optional[int], candidate_id: Optional[int], report_type: str,
               details: dict, job_title: str, candidate_name: str,
               session_id: str = None) -> str:
        """Job title and candidate name are stored as they were when the report was made."""
        doc = {
            "job_id": job_id,
            "candidate_id": candidate_id,
            "job_title": job_title,
            "candidate_name": candidate_name,
            "report_type": report_type,
            "details": details,
            "session_id": session_id,
            "generated_date": now_utc(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get(self, report_id: str) -> Optional[dict]:
        oid = to_object_id(report_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def list(self, search: str = None, job_id: int = None, report_type: str = None,
             ascending: bool = False) -> List[dict]:
        query = {}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"job_title": pattern}, {"candidate_name": pattern}]
        if job_id is not None:
            query["job_id"] = job_id
        if report_type:
            query["report_type"] = report_type
        cursor = self.collection.find(query).sort("generated_date", 1 if ascending else -1)
        return serialize_docs(list(cursor))


# ============================================================
# SETTINGS COLLECTION
# A single document keyed by name
# ============================================================

class SettingsService:

    KEY = "admin"

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["settings"])

    def get(self) -> Optional[dict]:
        return self.collection.find_one({"key": self.KEY}, {"_id": 0, "key": 0})

    def update_tab(self, tab: str, values: dict) -> dict:
        update = {f"{tab}.{k}": v for k, v in values.items()}
        update["updated_at"] = now_utc()
        self.collection.update_one({"key": self.KEY}, {"$set": update}, upsert=True)
        return self.get()

    def unset_field(self, tab: str, field: str) -> None:
        self.collection.update_one({"key": self.KEY}, {"$unset": {f"{tab}.{field}": ""}})


# ============================================================
# ONBOARDING COLLECTION
# ============================================================

class OnboardingService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["onboarding"])

    def get_by_user(self, user_id: int) -> Optional[dict]:
        return self.collection.find_one({"user_id": user_id}, {"_id": 0})

    def save(self, user_id: int, step: int, answers: dict) -> None:
        self.collection.update_one(
            {"user_id": user_id},
            {"$set": {"step": step, "answers": answers, "updated_at": now_utc()}},
            upsert=True
        )

    def reset(self, user_id: int) -> None:
        self.collection.delete_one({"user_id": user_id})
