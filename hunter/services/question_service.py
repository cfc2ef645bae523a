"""
Question Generation Service

Two flavours of AI-generated interview questions:

1. Wizard questions - structured JSON (category, difficulty, complexity,
   estimated time, key points), rendered into a text block the recruiter
   can edit and save as a template.
2. Question bank - five plain questions for an existing job.
"""

import json
import logging
import re
from typing import List

from hunter.services.ai_client import get_ai_client

logger = logging.getLogger(__name__)

NO_QUESTIONS = "No questions were generated"
EMPTY_QUESTION = "Some questions are empty"
PARSE_FAILED = "Failed to parse generated questions. Please try again."

BANK_SIZE = 5
RULE_WIDTH = 50

# "1.", "2)", "-", "*", "•" at the start of a line
_NUMBERING_RE = re.compile(r"^\s*(?:\d+\s*[.)]|[-*•])\s*")


class QuestionGenerationError(Exception):
    """The AI reply could not be turned into usable questions."""


# ============================================================
# WIZARD QUESTIONS
# ============================================================

def build_wizard_prompt(job_title: str, question_types: List[str], difficulty: str,
                        count: int, complexity: int) -> str:
    return f"""You are an expert interviewer. Generate {count} interview questions for a {job_title} position.

Format your response as a valid JSON array ONLY, with no additional text. Example format:
[
  {{
    "category": "Social Media Strategy",
    "question": "Describe your experience developing and implementing a social media content calendar. What metrics did you use to measure success?",
    "difficulty": "{difficulty}",
    "complexity": {complexity},
    "estimatedTime": 10,
    "keyPoints": [
      "Content planning and organization",
      "Platform-specific strategies",
      "Analytics and KPI tracking",
      "Team collaboration process"
    ]
  }}
]

Requirements:
- Generate exactly {count} questions
- Focus on {', '.join(question_types)} aspects
- Match the specified difficulty level: {difficulty}
- Complexity should be between 1-5
- Include 3-4 key points for each question
- Estimated time should be realistic (5-15 minutes)
- Questions should be detailed and specific to {job_title} role

Keep the response in strict JSON format."""


def _number(value, default):
    try:
        return int(value) if value else default
    except (TypeError, ValueError):
        return default


def parse_wizard_questions(text: str, difficulty: str, complexity: int) -> List[dict]:
    """
    Parse the JSON array out of an AI reply.

    The array is taken from the first '[' to the last ']'. Missing fields get
    defaults; an empty list or a blank question is rejected.
    """
    start = text.find("[")
    end = text.rfind("]") + 1
    try:
        if start < 0 or end <= start:
            raise ValueError("No JSON array in reply")
        parsed = json.loads(text[start:end])
        if not isinstance(parsed, list):
            raise ValueError("Response is not an array")
        questions = [
            {
                "category": str(item.get("category") or "General"),
                "question": str(item.get("question") or ""),
                "difficulty": str(item.get("difficulty") or difficulty),
                "complexity": _number(item.get("complexity"), complexity),
                "estimated_time": _number(item.get("estimatedTime"), 5),
                "key_points": [str(p) for p in item["keyPoints"]]
                if isinstance(item.get("keyPoints"), list) else [],
            }
            for item in parsed
        ]
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Could not parse generated questions: {e}")
        raise QuestionGenerationError(PARSE_FAILED) from e

    if not questions:
        raise QuestionGenerationError(NO_QUESTIONS)
    if any(not q["question"].strip() for q in questions):
        raise QuestionGenerationError(EMPTY_QUESTION)
    return questions


def generate_wizard_questions(job_title: str, question_types: List[str], difficulty: str,
                              count: int, complexity: int) -> List[dict]:
    prompt = build_wizard_prompt(job_title, question_types, difficulty, count, complexity)
    reply = get_ai_client().chat(
        "You are an expert interviewer.", prompt, temperature=0.7, max_tokens=2048
    )
    return parse_wizard_questions(reply.strip(), difficulty, complexity)


def format_question_block(questions: List[dict]) -> str:
    """Editable text rendering of wizard questions."""
    blocks = []
    for index, q in enumerate(questions, start=1):
        key_points = "\n".join(f"• {point}" for point in q["key_points"])
        blocks.append(
            f"Question {index}:\n"
            f"[{q['category']}] ({q['difficulty']} Level, Complexity: {q['complexity']}/5)\n\n"
            f"{q['question']}\n\n"
            f"Estimated Time: {q['estimated_time']} minutes\n\n"
            f"Key Points to Look For:\n{key_points}\n"
            f"{chr(0x2500) * RULE_WIDTH}\n"
        )
    return "\n".join(blocks)


# ============================================================
# QUESTION BANK
# ============================================================

def clean_question_lines(text: str, limit: int = BANK_SIZE) -> List[str]:
    """One question per line, numbering and bullets stripped, blanks dropped."""
    lines = []
    for line in text.split("\n"):
        line = _NUMBERING_RE.sub("", line.strip()).strip()
        if line:
            lines.append(line)
    return lines[:limit]


def generate_bank_questions(title: str, requirements: List[str], description: str) -> List[str]:
    prompt = (
        f"Generate {BANK_SIZE} interview questions for a {title} role. "
        f"Consider the following requirements: {', '.join(requirements) or 'None'}. "
        f"Description: {description or 'None'}. "
        "Ensure questions are concise and relevant to the role. "
        "Return one question per line."
    )
    reply = get_ai_client().chat(
        "You are an experienced technical interviewer.", prompt, max_tokens=500
    )
    return clean_question_lines(reply)
