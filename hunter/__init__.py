"""
Hunter AI Recruiting API
Backend for the Hunter AI applicant tracking front-end.

Architecture:
- PostgreSQL: Structured data (users, jobs, questions, applications, schedules)
- MongoDB: Documents (job postings, drafts, interview sessions, reports, settings)
- OpenAI-compatible AI: question generation, transcription, answer analysis
"""

__version__ = "1.0.0"
