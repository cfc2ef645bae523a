"""
Relational schema - table definitions for the SQL store.

Queries throughout the app are plain SQL via text(); these definitions exist
so the schema lives in one place and can be created on startup.

Tables:
- users, password_reset_tokens, revoked_tokens
- jobs, job_skills
- questions, answers
- applications, schedules
"""

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Boolean, Float, DateTime,
    ForeignKey, UniqueConstraint, func
)

metadata = MetaData()


users = Table(
    "users", metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("phone", String(50)),
    Column("location", String(200)),
    Column("bio", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
)

password_reset_tokens = Table(
    "password_reset_tokens", metadata,
    Column("token", String(64), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.user_id"), nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=False),
)

# Logged-out JWTs, kept until their own expiry
revoked_tokens = Table(
    "revoked_tokens", metadata,
    Column("jti", String(64), primary_key=True),
    Column("expires_at", DateTime(timezone=True), nullable=False),
)

jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True, autoincrement=True),
    Column("created_by", Integer, ForeignKey("users.user_id")),
    Column("title", String(200), nullable=False),
    Column("department", String(100)),
    Column("location", String(200)),
    Column("job_type", String(20), nullable=False),
    Column("salary", String(100)),
    Column("description", Text),
    Column("external_url", String(500)),
    Column("status", String(20), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
)

# kind is 'skill' or 'requirement'
job_skills = Table(
    "job_skills", metadata,
    Column("job_id", Integer, ForeignKey("jobs.job_id"), primary_key=True),
    Column("kind", String(20), primary_key=True),
    Column("position", Integer, primary_key=True),
    Column("value", String(500), nullable=False),
)

questions = Table(
    "questions", metadata,
    Column("question_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id"), nullable=False),
    Column("text", Text, nullable=False),
    Column("generated_by", String(20), nullable=False, server_default="MANUAL"),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id"), nullable=False),
    Column("full_name", String(100), nullable=False),
    Column("email", String(255), nullable=False),
    Column("phone", String(50)),
    Column("cover_letter", Text),
    Column("resume_path", String(500)),
    Column("resume_text", Text),
    Column("status", String(20), nullable=False, server_default="PENDING"),
    Column("interview_score", Float),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
)

schedules = Table(
    "schedules", metadata,
    Column("schedule_id", Integer, primary_key=True, autoincrement=True),
    Column("application_id", Integer, ForeignKey("applications.application_id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id"), nullable=False),
    Column("job_id", Integer, ForeignKey("jobs.job_id"), nullable=False),
    Column("scheduled_at", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

# Typed answers (interview chat) or recorded-answer references (response_url)
answers = Table(
    "answers", metadata,
    Column("answer_id", Integer, primary_key=True, autoincrement=True),
    Column("application_id", Integer, ForeignKey("applications.application_id")),
    Column("schedule_id", Integer, ForeignKey("schedules.schedule_id")),
    Column("question_id", Integer, ForeignKey("questions.question_id"), nullable=False),
    Column("answer_text", Text),
    Column("response_url", String(500)),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)
