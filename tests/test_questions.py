import pytest

from hunter.services.question_service import (
    QuestionGenerationError, clean_question_lines, format_question_block, parse_wizard_questions
)


def test_question_crud(client, make_job, recruiter_headers):
    job = make_job()

    created = client.post("/api/questions", json={"jobId": job["id"], "text": " Why Python? "},
                          headers=recruiter_headers)
    assert created.status_code == 201
    question = created.json()
    assert question["text"] == "Why Python?"
    assert question["jobTitle"] == "Backend Engineer"
    assert question["generatedBy"] == "MANUAL"

    updated = client.put(f"/api/questions/{question['id']}", json={"text": "Why FastAPI?"},
                         headers=recruiter_headers)
    assert updated.json()["text"] == "Why FastAPI?"

    deleted = client.delete(f"/api/questions/{question['id']}", headers=recruiter_headers)
    assert deleted.json()["message"] == "Question deleted successfully"
    assert client.get("/api/questions", headers=recruiter_headers).json() == []


def test_question_text_required(client, make_job, recruiter_headers):
    job = make_job()
    response = client.post("/api/questions", json={"jobId": job["id"], "text": "   "},
                           headers=recruiter_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Question text cannot be empty."


def test_question_for_unknown_job(client, recruiter_headers):
    response = client.post("/api/questions", json={"jobId": 999, "text": "Hello?"}, headers=recruiter_headers)
    assert response.status_code == 404


def test_list_filters(client, make_job, recruiter_headers):
    backend = make_job(title="Backend Engineer")
    designer = make_job(title="Product Designer")
    client.post("/api/questions", json={"jobId": backend["id"], "text": "Explain indexes"},
                headers=recruiter_headers)
    client.post("/api/questions", json={"jobId": designer["id"], "text": "Show your portfolio"},
                headers=recruiter_headers)

    by_job = client.get("/api/questions", params={"job_id": designer["id"]}, headers=recruiter_headers).json()
    by_title = client.get("/api/questions", params={"search": "backend"}, headers=recruiter_headers).json()

    assert [q["text"] for q in by_job] == ["Show your portfolio"]
    assert [q["text"] for q in by_title] == ["Explain indexes"]


def test_applicants_cannot_manage_questions(client, applicant):
    assert client.get("/api/questions", headers=applicant[0]).status_code == 403


def test_generate_skips_existing_questions(client, make_job, recruiter_headers):
    job = make_job()
    client.post("/api/questions", json={"jobId": job["id"], "text": "how do you review code?"},
                headers=recruiter_headers)

    response = client.post(f"/api/questions/{job['id']}/generate", headers=recruiter_headers)

    assert response.status_code == 201
    generated = response.json()
    assert [q["text"] for q in generated] == [
        "Describe a production incident you resolved.",
        "How do you test asynchronous code?",
        "What is your approach to API versioning?",
    ]
    assert all(q["generatedBy"] == "AI" for q in generated)

    again = client.post(f"/api/questions/{job['id']}/generate", headers=recruiter_headers)
    assert again.json() == []


def test_generate_prompt_mentions_requirements(client, make_job, recruiter_headers, ai):
    job = make_job()
    client.post(f"/api/questions/{job['id']}/generate", headers=recruiter_headers)

    prompt = ai.calls[-1][-1]["content"]
    assert "Backend Engineer role" in prompt
    assert "3+ years Python" in prompt


def test_generate_failure(client, make_job, recruiter_headers, ai):
    job = make_job()
    ai.fail = True

    response = client.post(f"/api/questions/{job['id']}/generate", headers=recruiter_headers)

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to generate questions"


# ============================================================
# PARSING
# ============================================================

def test_clean_question_lines():
    text = "1. First?\n\n2) Second?\n• Third?\n* Fourth?\n- Fifth?\nSixth?"
    assert clean_question_lines(text) == ["First?", "Second?", "Third?", "Fourth?", "Fifth?"]


def test_parse_wizard_questions_fills_defaults():
    reply = 'Sure! [{"question": "What is a closure?", "complexity": "x"}] Good luck.'

    questions = parse_wizard_questions(reply, "beginner", 2)

    assert questions == [{
        "category": "General", "question": "What is a closure?", "difficulty": "beginner",
        "complexity": 2, "estimated_time": 5, "key_points": [],
    }]


@pytest.mark.parametrize("reply, message", [
    ("no array here", "Failed to parse generated questions. Please try again."),
    ("[]", "No questions were generated"),
    ('[{"question": "  "}]', "Some questions are empty"),
    ('{"question": "x"}', "Failed to parse generated questions. Please try again."),
])
def test_parse_wizard_questions_errors(reply, message):
    with pytest.raises(QuestionGenerationError) as exc:
        parse_wizard_questions(reply, "intermediate", 3)
    assert str(exc.value) == message


def test_format_question_block():
    block = format_question_block([{
        "category": "SQL", "question": "Explain joins.", "difficulty": "advanced",
        "complexity": 4, "estimated_time": 12, "key_points": ["Inner", "Outer"],
    }])

    assert block.startswith("Question 1:\n[SQL] (advanced Level, Complexity: 4/5)\n\nExplain joins.\n\n")
    assert "Estimated Time: 12 minutes" in block
    assert "Key Points to Look For:\n• Inner\n• Outer\n" in block
