"""
Interview Bot Service

The AI interviewer:
1. Greets the candidate and asks a first question for the current stage
2. Analyses every answer (typed or transcribed from audio)
3. Asks the next question, building on the conversation
4. Moves through the stages as answers accumulate

Session state lives in MongoDB (interview_sessions). A session holds at most
one request in flight; the 'processing' lock expires after ai_timeout seconds.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from hunter.core.config import get_settings
from hunter.services.ai_client import get_ai_client
from hunter.services.analysis_parser import parse_analysis
from hunter.services.mongo_service import InterviewSessionService, now_utc

logger = logging.getLogger(__name__)

settings = get_settings()


GREETING = (
    "Hello! I'm your AI interviewer. I'll be conducting your interview today. "
    "Are you ready to begin?"
)

ANSWERS_PER_STAGE = 3

# (name, description, duration in minutes, tips)
STAGES = [
    {
        "name": "introduction",
        "description": "Initial introduction and background discussion",
        "duration": 5,
        "tips": [
            "Be concise and clear about your background",
            "Highlight relevant experience",
            "Show enthusiasm for the role",
        ],
    },
    {
        "name": "technical",
        "description": "Technical skills and knowledge assessment",
        "duration": 15,
        "tips": [
            "Think aloud while solving problems",
            "Ask clarifying questions if needed",
            "Explain your thought process",
        ],
    },
    {
        "name": "behavioral",
        "description": "Behavioral and situational questions",
        "duration": 10,
        "tips": [
            "Use the STAR method for responses",
            "Be specific with examples",
            "Show how you handle challenges",
        ],
    },
    {
        "name": "case_study",
        "description": "Case study and problem-solving",
        "duration": 20,
        "tips": [
            "Break down the problem systematically",
            "Consider multiple perspectives",
            "Propose practical solutions",
        ],
    },
    {
        "name": "system_design",
        "description": "System design and architecture discussion",
        "duration": 25,
        "tips": [
            "Start with high-level architecture",
            "Consider scalability and performance",
            "Discuss trade-offs and alternatives",
        ],
    },
    {
        "name": "closing",
        "description": "Final questions and wrap-up",
        "duration": 5,
        "tips": [
            "Ask thoughtful questions about the role",
            "Express your interest in the position",
            "Thank the interviewer for their time",
        ],
    },
]

STAGES_BY_NAME = {stage["name"]: stage for stage in STAGES}

STAGE_TIPS = {
    "introduction": [
        "Start with a brief personal introduction",
        "Highlight your most relevant experience",
        "Explain your interest in the role and company",
        "Be prepared to discuss your career goals",
        "Show enthusiasm and confidence",
    ],
    "technical": [
        "Think aloud while solving problems",
        "Ask clarifying questions if needed",
        "Explain your thought process clearly",
        "Consider edge cases and error handling",
        "Write clean, efficient, and well-documented code",
        "Test your solutions with different inputs",
        "Discuss time and space complexity",
    ],
    "behavioral": [
        "Use the STAR method (Situation, Task, Action, Result)",
        "Be specific with examples from your experience",
        "Focus on your role and contributions",
        "Highlight both successes and learning experiences",
        "Show how you handle challenges and conflicts",
        "Demonstrate your teamwork and leadership skills",
        "Be honest about your strengths and weaknesses",
    ],
    "case_study": [
        "Break down the problem systematically",
        "Consider multiple perspectives and solutions",
        "Discuss trade-offs and alternatives",
        "Propose practical and scalable solutions",
        "Consider business impact and constraints",
        "Show your analytical and problem-solving skills",
        "Communicate your reasoning clearly",
    ],
    "system_design": [
        "Start with high-level architecture",
        "Consider scalability and performance",
        "Discuss data models and relationships",
        "Address security and privacy concerns",
        "Consider failure scenarios and recovery",
        "Discuss monitoring and observability",
        "Show your understanding of distributed systems",
    ],
    "closing": [
        "Ask thoughtful questions about the role",
        "Express your interest in the position",
        "Thank the interviewer for their time",
        "Ask about next steps in the process",
        "Show enthusiasm for the opportunity",
        "Be professional and courteous",
        "Follow up with a thank-you note",
    ],
}

HELP_GUIDES = [
    {
        "title": "Interview Tips",
        "content": "Here are some general tips to help you succeed in your interview:",
        "tips": [
            "Prepare thoroughly by researching the company and role",
            "Practice common interview questions",
            "Dress professionally and maintain good posture",
            "Listen carefully to questions before responding",
            "Take a moment to think before answering complex questions",
            "Be honest and authentic in your responses",
            "Show enthusiasm and interest in the position",
        ],
    },
    {
        "title": "Technical Interview Guide",
        "content": "For technical interviews, keep these points in mind:",
        "tips": [
            "Review fundamental concepts and algorithms",
            "Practice coding problems on a whiteboard or paper",
            "Explain your thought process clearly",
            "Write clean, efficient, and well-documented code",
            "Test your solutions with different inputs",
            "Consider edge cases and error handling",
            "Ask clarifying questions when needed",
        ],
    },
    {
        "title": "Behavioral Interview Guide",
        "content": "For behavioral interviews, follow these guidelines:",
        "tips": [
            "Use the STAR method (Situation, Task, Action, Result)",
            "Prepare specific examples from your experience",
            "Focus on your role and contributions",
            "Highlight both successes and learning experiences",
            "Show how you handle challenges and conflicts",
            "Demonstrate your teamwork and leadership skills",
            "Be honest about your strengths and weaknesses",
        ],
    },
]

# The session flow walks these stages; case_study and system_design are
# available to the stateless endpoints only.
_PROGRESSION = [(3, "introduction"), (6, "technical"), (9, "behavioral")]
_STAGE_START = {"introduction": 0, "technical": 3, "behavioral": 6, "closing": 9}


class SessionBusyError(Exception):
    """Another request for the session is still being processed."""


class SessionClosedError(Exception):
    """The session has already been completed."""


# ============================================================
# STAGE HELPERS
# ============================================================

def stage_for_answer_count(user_messages: int) -> str:
    """Stage for a conversation with this many user messages."""
    for limit, name in _PROGRESSION:
        if user_messages < limit:
            return name
    return "closing"


def count_user_messages(messages: List[dict]) -> int:
    return sum(1 for m in messages if m["role"] == "user")


def stage_progress(user_messages: int, stage: str) -> float:
    """Answers given in the current stage, as a percentage of ANSWERS_PER_STAGE."""
    in_stage = max(user_messages - _STAGE_START.get(stage, 0), 0)
    return min(in_stage / ANSWERS_PER_STAGE * 100, 100.0)


def time_remaining(stage: str, stage_started_at, now=None) -> int:
    """Seconds left in the stage countdown, floored at 0."""
    now = now or now_utc()
    total = STAGES_BY_NAME[stage]["duration"] * 60
    elapsed = int((now - stage_started_at).total_seconds())
    return max(total - elapsed, 0)


def list_stages() -> List[dict]:
    return [dict(stage, stage_tips=STAGE_TIPS[stage["name"]]) for stage in STAGES]


def _join(values) -> str:
    return ", ".join(values or [])


def _transcript(messages: List[dict]) -> str:
    return "\n".join(f"{m['role']}: {m['content']}" for m in messages)


# ============================================================
# AI INTERVIEWER
# ============================================================

class InterviewBot:
    """Prompts for questions and answer analysis."""

    def generate_question(self, job: dict, applicant: dict, stage: str,
                          previous_messages: List[dict]) -> str:
        prompt = f"""You are an AI interviewer for the position of {job['title']}.
Job Description: {job.get('description', '')}
Required Skills: {_join(job.get('skills'))}

Applicant Details:
Name: {applicant['name']}
Experience: {applicant.get('experience', '')}
Education: {applicant.get('education', '')}
Skills: {_join(applicant.get('skills'))}

Current Interview Stage: {stage}

Previous Conversation:
{_transcript(previous_messages)}

Generate an appropriate question for this stage of the interview.
The question should be relevant to the job requirements and the applicant's background."""

        return get_ai_client().chat(
            "You are an experienced technical interviewer.", prompt, temperature=0.7
        ).strip()

    def analyze_response(self, response: str, question: str, job: dict, applicant: dict) -> dict:
        prompt = f"""Analyze the following interview response:

Question: {question}
Response: {response}

Job Details:
Title: {job['title']}
Requirements: {_join(job.get('requirements'))}
Skills: {_join(job.get('skills'))}

Applicant Details:
Experience: {applicant.get('experience', '')}
Education: {applicant.get('education', '')}
Skills: {_join(applicant.get('skills'))}

Provide a detailed analysis including:
1. Technical knowledge assessment (score 1-10)
2. Communication skills assessment (score 1-10)
3. Cultural fit assessment (score 1-10)
4. Key strengths demonstrated
5. Areas for improvement
6. Overall assessment
7. Recommendation (Hire/Consider/Reject)"""

        text = get_ai_client().chat(
            "You are an experienced hiring manager analyzing interview responses.",
            prompt,
            temperature=0.3
        )
        return parse_analysis(text)

    def generate_next_question(self, job: dict, previous_messages: List[dict],
                               stage: Optional[str] = None) -> str:
        prompt = f"""Generate the next interview question based on:

Job: {job['title']}
Previous conversation:
{_transcript(previous_messages)}

The question should:
1. Be relevant to the job requirements
2. Build upon previous responses
3. Help assess the candidate's fit for the role"""
        if stage:
            prompt += f"\n4. Fit the '{stage}' stage of the interview"

        return get_ai_client().chat(
            "You are an experienced interviewer.", prompt, temperature=0.7
        ).strip()

    def transcribe(self, audio: bytes, filename: str) -> str:
        return get_ai_client().transcribe(audio, filename).strip()


# ============================================================
# SESSIONS
# ============================================================

class InterviewSessionManager:
    """
    Server-held interview loop:
        idle -> processing (answer analysed, next question asked) -> idle
    until the session is completed.
    """

    def __init__(self):
        self.sessions = InterviewSessionService()
        self.bot = InterviewBot()

    def start(self, user_id: int, job: dict, applicant: dict,
              application_id: Optional[int] = None) -> dict:
        now = now_utc()
        messages = [{"role": "assistant", "content": GREETING, "timestamp": now}]
        question = self.bot.generate_question(job, applicant, "introduction", messages)
        messages.append({"role": "assistant", "content": question, "timestamp": now_utc()})

        session_id = self.sessions.insert({
            "user_id": user_id,
            "application_id": application_id,
            "job_details": job,
            "applicant_details": applicant,
            "messages": messages,
            "current_question": question,
            "stage": "introduction",
            "stage_started_at": now,
            "state": "idle",
            "processing_since": None,
            "lock_id": None,
            "current_analysis": None,
            "feedback_history": [],
            "report_id": None,
            "created_at": now,
        })
        logger.info(f"Interview session {session_id} started for user {user_id}")
        return self.sessions.get(session_id)

    def _lock(self, session_id: str) -> dict:
        stale_before = now_utc() - timedelta(seconds=settings.ai_timeout)
        session = self.sessions.acquire(session_id, stale_before)
        if session is None:
            current = self.sessions.get(session_id)
            if current and current["state"] == "completed":
                raise SessionClosedError(session_id)
            raise SessionBusyError(session_id)
        return session

    def answer(self, session_id: str, text: Optional[str] = None,
               audio: Optional[bytes] = None, filename: str = "answer.webm") -> dict:
        """Record one answer (text, or audio to transcribe) and ask the next question."""
        session = self._lock(session_id)
        try:
            if audio is not None:
                text = self.bot.transcribe(audio, filename)
            if not (text or "").strip():
                raise ValueError("Please provide an answer")
            text = text.strip()
            job = session["job_details"]
            applicant = session["applicant_details"]
            question = session["current_question"]

            analysis = self.bot.analyze_response(text, question, job, applicant)

            messages = session["messages"]
            messages.append({"role": "user", "content": text, "timestamp": now_utc()})
            answered = count_user_messages(messages)
            stage = stage_for_answer_count(answered)

            next_question = self.bot.generate_next_question(job, messages, stage)
            now = now_utc()
            messages.append({"role": "assistant", "content": next_question, "timestamp": now})

            feedback = dict(analysis, timestamp=now, question=question, response=text)
            fields = {
                "messages": messages,
                "current_question": next_question,
                "current_analysis": analysis,
                "feedback_history": session["feedback_history"] + [feedback],
                "stage": stage,
            }
            if stage != session["stage"]:
                fields["stage_started_at"] = now
                logger.info(f"Interview session {session_id} moved to stage '{stage}'")
        except Exception:
            self.sessions.release(session_id, session["lock_id"])
            raise

        if not self.sessions.release(session_id, session["lock_id"], fields):
            logger.warning(f"Interview session {session_id} lock was taken over; answer discarded")
            raise SessionBusyError(session_id)
        return self.sessions.get(session_id)

    def complete(self, session_id: str, report_id_factory) -> dict:
        """
        Close the session. report_id_factory(session) stores the summary
        report and returns its id.
        """
        session = self._lock(session_id)
        try:
            report_id = report_id_factory(session)
        except Exception:
            self.sessions.release(session_id, session["lock_id"])
            raise

        closed = self.sessions.release(
            session_id, session["lock_id"],
            {"report_id": report_id, "completed_at": now_utc()},
            state="completed"
        )
        if not closed:
            logger.warning(f"Interview session {session_id} lock was taken over before report {report_id} was saved")
            raise SessionBusyError(session_id)
        logger.info(f"Interview session {session_id} completed, report {report_id}")
        return self.sessions.get(session_id)

