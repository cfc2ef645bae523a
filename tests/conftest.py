"""
Shared fixtures.

The environment is set before anything from hunter is imported: settings are
cached and the SQL engine is created at import time.
"""

import json
import os
import re
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="hunter-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'hunter.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["AI_API_KEY"] = "test-key"
os.environ["AI_TIMEOUT"] = "60"
os.environ["SMTP_HOST"] = ""

import mongomock
import pytest
from fastapi.testclient import TestClient

from hunter.db.mongodb import set_mongo_client
from hunter.db.postgres import engine
from hunter.db.schema import metadata
from hunter.main import app
from hunter.services.ai_client import AIClientError, set_ai_client


ANALYSIS_REPLY = """1. Technical knowledge assessment: 8/10 - solid grasp of the stack
2. Communication skills assessment: 7/10 - clear but brief
3. Cultural fit assessment: 9/10 - collaborative attitude
4. Key strengths demonstrated:
Clear structure
Relevant examples

5. Areas for improvement:
More detail on testing

6. Overall assessment: Strong answer with good examples.
7. Recommendation: Hire"""

WIZARD_REPLY = """Here are your questions:
[
  {"category": "Python", "question": "How do you structure a large FastAPI project?",
   "difficulty": "intermediate", "complexity": 3, "estimatedTime": 10,
   "keyPoints": ["Routers", "Dependency injection"]},
  {"category": "Databases", "question": "When would you choose MongoDB over PostgreSQL?",
   "difficulty": "intermediate", "complexity": 4, "estimatedTime": 8,
   "keyPoints": ["Schema flexibility", "Joins"]}
]"""

BANK_REPLY = """1. Describe a production incident you resolved.
2. How do you review code?
- How do you test asynchronous code?

4. What is your approach to API versioning?"""

_JOB_DETAILS_RE = re.compile(r"for a (.+?) position at (.+?)\. Return")


class FakeAIClient:
    """Scripted stand-in for AIClient. Queued replies win over the defaults."""

    def __init__(self):
        self.calls = []
        self.replies = []
        self.fail = False
        self.transcript = "I have five years of Python experience."
        self.questions_asked = 0

    def chat(self, system_prompt, user_content, temperature=0.7, max_tokens=1000):
        return self.chat_messages(
            [{"role": "system", "content": system_prompt}, {"role": "user", "content": user_content}],
            temperature=temperature, max_tokens=max_tokens
        )

    def chat_messages(self, messages, temperature=0.7, max_tokens=1000):
        self.calls.append(messages)
        if self.fail:
            raise AIClientError("AI backend unavailable")
        if self.replies:
            return self.replies.pop(0)
        return self._default(messages[-1]["content"])

    def transcribe(self, audio, filename="answer.webm"):
        self.calls.append([{"role": "audio", "content": filename}])
        if self.fail:
            raise AIClientError("AI backend unavailable")
        return self.transcript

    def test_connection(self):
        return not self.fail

    def _default(self, prompt):
        if "Analyze the following interview response" in prompt:
            return ANALYSIS_REPLY
        if "valid JSON array" in prompt:
            return WIZARD_REPLY
        match = _JOB_DETAILS_RE.search(prompt)
        if match:
            title, company = match.groups()
            return "```json\n" + json.dumps({
                "description": f"{company} is hiring a {title} to build great products.",
                "skills": ["Python", "System Design", "Communication"],
            }) + "\n```"
        if "Return one question per line" in prompt:
            return BANK_REPLY
        self.questions_asked += 1
        return f"Interview question {self.questions_asked}: tell me about a recent project?"


@pytest.fixture(autouse=True)
def ai():
    """Fresh tables, an in-memory MongoDB and a fake AI client for every test."""
    metadata.drop_all(engine)
    metadata.create_all(engine)
    set_mongo_client(mongomock.MongoClient())
    fake = FakeAIClient()
    set_ai_client(fake)
    yield fake
    set_ai_client(None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """register(role, email=None, name=None) -> (headers, user)"""
    counter = {"n": 0}

    def _register(role, email=None, name=None):
        counter["n"] += 1
        email = email or f"{role.lower()}{counter['n']}@example.com"
        response = client.post("/api/auth/register", json={
            "name": name or f"{role.title()} {counter['n']}",
            "email": email,
            "password": "secret123",
            "role": role,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]

    return _register


@pytest.fixture
def admin_headers(register):
    return register("ADMIN")[0]


@pytest.fixture
def recruiter_headers(register):
    return register("RECRUITER")[0]


@pytest.fixture
def applicant(register):
    """(headers, user) for an applicant account."""
    return register("APPLICANT", name="Jane Applicant")


@pytest.fixture
def make_job(client, recruiter_headers):
    def _make_job(**overrides):
        payload = {
            "title": "Backend Engineer",
            "department": "Engineering",
            "location": "Remote",
            "type": "Full-time",
            "description": "Build APIs",
            "requirements": ["3+ years Python"],
            "skills": ["Python", "SQL"],
            "status": "ACTIVE",
        }
        payload.update(overrides)
        response = client.post("/api/jobs", json=payload, headers=recruiter_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_job


@pytest.fixture
def apply(client, applicant):
    """apply(job_id, headers=None, filename="resume.doc") -> response of POST /api/applications"""
    def _apply(job_id, headers=None, filename="resume.doc", content=b"resume bytes"):
        response = client.post(
            "/api/applications",
            data={"job_id": str(job_id), "full_name": "Jane Applicant",
                  "email": "jane@example.com", "phone": "555-0100"},
            files={"resume": (filename, content, "application/octet-stream")},
            headers=headers or applicant[0],
        )
        return response

    return _apply
