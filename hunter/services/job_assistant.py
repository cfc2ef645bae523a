"""
Job Assistant - create a job draft from a chat message.

"I need a Software Engineer at Google" -> job title + company -> AI writes
a description and skills -> a prefilled wizard draft.

The conversation is stateless on the server: when one of the two values is
missing, the reply says what it is waiting for and echoes what it already
knows, and the client sends that back with the next message.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

from hunter.services.ai_client import AIClientError, extract_json, get_ai_client

logger = logging.getLogger(__name__)

COMPANIES = [
    {"name": "Outrank Strategy", "jobs": [
        "SEO Specialist", "Content Strategist", "Digital Marketing Manager", "PPC Specialist",
        "Social Media Manager", "Web Analytics Specialist", "Technical SEO Expert",
        "Content Writer", "Link Building Specialist", "SEO Project Manager"]},
    {"name": "Google", "jobs": [
        "Software Engineer", "Product Manager", "Data Scientist", "UX Designer",
        "DevOps Engineer", "Cloud Architect"]},
    {"name": "Microsoft", "jobs": [
        "Software Developer", "Cloud Engineer", "Machine Learning Engineer", "Program Manager",
        "Full Stack Developer"]},
    {"name": "Amazon", "jobs": [
        "Software Development Engineer", "Solutions Architect", "Technical Program Manager",
        "Data Engineer", "Frontend Engineer"]},
    {"name": "Meta", "jobs": [
        "Software Engineer", "Product Designer", "Data Scientist", "Security Engineer",
        "AR/VR Developer"]},
    {"name": "Apple", "jobs": [
        "iOS Developer", "Machine Learning Engineer", "Systems Engineer", "Hardware Engineer",
        "QA Engineer"]},
    {"name": "Tencent", "jobs": [
        "Game Developer", "AI Researcher", "Backend Engineer", "Product Manager", "UI/UX Designer"]},
    {"name": "Alibaba", "jobs": [
        "Cloud Engineer", "E-commerce Specialist", "Data Analyst", "Software Engineer",
        "Logistics Manager"]},
    {"name": "Samsung", "jobs": [
        "Hardware Engineer", "Mobile Software Developer", "AI Engineer", "Product Manager",
        "Quality Assurance Engineer"]},
    {"name": "Toyota", "jobs": [
        "Automotive Engineer", "Software Developer", "Data Analyst", "Supply Chain Manager",
        "Robotics Engineer"]},
    {"name": "Siemens", "jobs": [
        "Industrial Engineer", "Software Developer", "Automation Engineer", "Project Manager",
        "Cybersecurity Specialist"]},
    {"name": "HSBC", "jobs": [
        "Financial Analyst", "Risk Manager", "Data Scientist", "Software Engineer",
        "Compliance Officer"]},
    {"name": "Reliance Industries", "jobs": [
        "Petroleum Engineer", "Data Scientist", "Software Developer", "Retail Manager",
        "Supply Chain Analyst"]},
    {"name": "Shopify", "jobs": [
        "Frontend Developer", "Backend Developer", "Product Manager", "UX Designer",
        "Data Engineer"]},
    {"name": "NVIDIA", "jobs": [
        "AI Engineer", "GPU Software Developer", "Systems Engineer", "Data Scientist",
        "Product Manager"]},
    {"name": "SAP", "jobs": [
        "ERP Consultant", "Software Developer", "Cloud Architect", "Data Analyst",
        "Solution Architect"]},
    {"name": "Naspers", "jobs": [
        "Software Engineer", "Product Manager", "Data Analyst", "Digital Marketing Specialist",
        "E-commerce Manager"]},
    {"name": "Atlassian", "jobs": [
        "Software Engineer", "Product Manager", "DevOps Engineer", "Technical Writer",
        "UX Designer"]},
    {"name": "Novartis", "jobs": [
        "Biomedical Engineer", "Data Scientist", "Clinical Research Manager",
        "Regulatory Affairs Specialist", "Software Developer"]},
    {"name": "Qantas", "jobs": [
        "Aviation Engineer", "Data Analyst", "Software Developer", "Customer Experience Manager",
        "Operations Manager"]},
    {"name": "Accenture", "jobs": [
        "Management Consultant", "Software Engineer", "Cloud Architect", "Data Analyst",
        "Cybersecurity Consultant", "Digital Transformation Specialist"]},
    {"name": "Alliance", "jobs": [
        "Actuarial Analyst", "Risk Manager", "Insurance Underwriter", "Data Scientist",
        "Software Developer", "Claims Manager"]},
    {"name": "Lear", "jobs": [
        "Automotive Engineer", "Manufacturing Engineer", "Supply Chain Manager",
        "Quality Assurance Engineer", "Embedded Software Developer"]},
]

JOB_SYNONYMS = {
    "software developer": "Software Engineer",
    "sde": "Software Engineer",
    "ml engineer": "Machine Learning Engineer",
    "ux designer": "Product Designer",
    "frontend engineer": "Frontend Engineer",
}

TECH_GIANTS = ("Google", "Microsoft", "Amazon", "Meta", "Apple")
DEFAULT_SKILLS = ["Teamwork", "Communication", "Problem-solving"]


def company_names() -> List[str]:
    return [c["name"] for c in COMPANIES]


def all_job_titles() -> List[str]:
    """Every title in catalog order (a title listed by several companies repeats)."""
    return [job for c in COMPANIES for job in c["jobs"]]


def jobs_for_company(company: str) -> List[str]:
    for c in COMPANIES:
        if c["name"] == company:
            return c["jobs"]
    return []


def extract_job_and_company(prompt: str) -> Tuple[Optional[str], Optional[str]]:
    """Find a known company and job title mentioned in free text."""
    text = prompt.lower()

    company = next((name for name in company_names() if name.lower() in text), None)
    job_title = next((job for job in all_job_titles() if job.lower() in text), None)
    if job_title is None:
        job_title = next((title for syn, title in JOB_SYNONYMS.items() if syn in text), None)

    return job_title, company


def match_job_title(answer: str) -> Optional[str]:
    """Resolve a clarification answer: exact title first, then any synonym it contains."""
    answer = answer.strip().lower()
    exact = next((job for job in all_job_titles() if job.lower() == answer), None)
    if exact:
        return exact
    return next((title for syn, title in JOB_SYNONYMS.items() if syn in answer), None)


def match_company(answer: str) -> Optional[str]:
    answer = answer.strip().lower()
    return next((name for name in company_names() if name.lower() == answer), None)


def unique_job_titles() -> List[str]:
    return list(dict.fromkeys(all_job_titles()))


def suggest(kind: str, answer: str) -> str:
    """'Did you mean' text for an unknown job title or company."""
    answer = answer.strip()
    if kind == "jobTitle":
        options, label = unique_job_titles(), "job titles"
    else:
        options, label = company_names(), "companies"

    similar = [o for o in options if answer.lower() in o.lower()]
    if similar:
        hint = f" Did you mean one of these: {', '.join(similar)}?"
    else:
        hint = f" Available {label} are: {', '.join(options)}."

    what = "job title" if kind == "jobTitle" else "company"
    return f"I couldn't find the {what} \"{answer}\" in my list.{hint} Please try again."


def generate_job_details(job_title: str, company: str) -> dict:
    """
    AI-written description and skills, falling back to defaults when the
    reply is unusable or doesn't mention the job and company.
    """
    prompt = f"""Generate a job description and a list of required skills for a {job_title} position at {company}. Return the result in JSON format only, with no additional text.

Expected JSON format:
{{
  "description": "string",
  "skills": ["string"]
}}

Requirements:
- The description should be 2-3 sentences long, professional, and tailored to the job title and company.
- The skills should be a list of 3-5 relevant skills for the job title.
- Do not include any other fields."""

    default = {
        "description": f"We are looking for a {job_title} to join {company}. "
                       "The ideal candidate will contribute to our mission of innovation and excellence.",
        "skills": list(DEFAULT_SKILLS),
        "generated": False,
    }
    try:
        reply = get_ai_client().chat("You are an HR assistant.", prompt, temperature=0.5)
        parsed = extract_json(reply)
    except (AIClientError, ValueError) as e:
        logger.warning(f"Job details generation failed, using defaults: {e}")
        return default

    if not isinstance(parsed, dict) or not parsed.get("description") or not isinstance(parsed.get("skills"), list):
        logger.warning("Job details reply is missing description or skills, using defaults")
        return default

    description = str(parsed["description"])
    if job_title.lower() not in description.lower() or company.lower() not in description.lower():
        logger.warning("Generated description does not match the job title or company, using defaults")
        return default

    return {"description": description, "skills": [str(s) for s in parsed["skills"]], "generated": True}


def default_posting(job_title: str, company: str) -> dict:
    """Salary, experience and location guesses for an assistant-created job."""
    senior = "senior" in job_title.lower() or "lead" in job_title.lower()
    giant = company in TECH_GIANTS
    if senior:
        salary = "$150,000 - $200,000" if giant else "$100,000 - $150,000"
    else:
        salary = "$100,000 - $150,000" if giant else "$80,000 - $120,000"
    return {
        "experience": "Senior" if senior else "Mid Level",
        "salary": salary,
        "location": f"{company} Headquarters" if giant else "Remote",
        "remote": True,
        "deadline": (date.today() + timedelta(days=30)).isoformat(),
    }
