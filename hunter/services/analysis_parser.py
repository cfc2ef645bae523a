"""
Analysis Parser - turns the AI's free-text answer analysis into structured data.

The analysis prompt asks for a numbered list:
    1. Technical knowledge assessment (score 1-10)
    2. Communication skills assessment (score 1-10)
    3. Cultural fit assessment (score 1-10)
    4. Key strengths demonstrated
    5. Areas for improvement
    6. Overall assessment
    7. Recommendation (Hire/Consider/Reject)

Each field is pulled out by its section heading; anything missing falls back
to a neutral default instead of failing the request.
"""

import re
from typing import List

TECHNICAL_SECTION = "Technical knowledge assessment"
COMMUNICATION_SECTION = "Communication skills assessment"
CULTURAL_FIT_SECTION = "Cultural fit assessment"
STRENGTHS_SECTION = "Key strengths demonstrated"
IMPROVEMENT_SECTION = "Areas for improvement"
OVERALL_SECTION = "Overall assessment"

MAX_SCORE = 10
DEFAULT_RECOMMENDATION = "Consider"
RECOMMENDATIONS = ("Hire", "Consider", "Reject")

_RECOMMENDATION_RE = re.compile(r"Recommendation:\s*(Hire|Consider|Reject)", re.IGNORECASE)


def _section_body(text: str, section: str):
    # Text after "<section>:" up to the next numbered line, a blank line or the end
    pattern = re.escape(section) + r":(.*?)(?=\n\d|\n\n|\Z)"
    return re.search(pattern, text, re.IGNORECASE | re.DOTALL)


def extract_score(text: str, section: str) -> int:
    if not text:
        return 0
    # Same line as the heading; "85/100" is not a score out of ten
    match = re.search(re.escape(section) + r".*?(\d+)\s*/\s*10\b", text, re.IGNORECASE)
    return min(int(match.group(1)), MAX_SCORE) if match else 0


def extract_list(text: str, section: str) -> List[str]:
    if not text:
        return []
    match = _section_body(text, section)
    if not match:
        return []
    return [item.strip() for item in match.group(1).split("\n") if item.strip()]


def extract_section(text: str, section: str) -> str:
    if not text:
        return ""
    match = _section_body(text, section)
    return match.group(1).strip() if match else ""


def extract_recommendation(text: str) -> str:
    if not text:
        return DEFAULT_RECOMMENDATION
    match = _RECOMMENDATION_RE.search(text)
    if not match:
        return DEFAULT_RECOMMENDATION
    # The match is case-insensitive; normalize to the canonical spelling
    return match.group(1).capitalize()


def parse_analysis(text: str) -> dict:
    """Structured analysis with snake_case keys (see schemas.Analysis)."""
    return {
        "technical_score": extract_score(text, TECHNICAL_SECTION),
        "communication_score": extract_score(text, COMMUNICATION_SECTION),
        "cultural_fit_score": extract_score(text, CULTURAL_FIT_SECTION),
        "strengths": extract_list(text, STRENGTHS_SECTION),
        "areas_for_improvement": extract_list(text, IMPROVEMENT_SECTION),
        "overall_assessment": extract_section(text, OVERALL_SECTION),
        "recommendation": extract_recommendation(text),
    }
