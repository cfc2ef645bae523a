from hunter.db.postgres import execute_raw_sql

SETUP = {
    "jobTitle": "Backend Engineer",
    "deadline": "2030-06-30",
    "language": "English",
    "timezone": "UTC",
    "company": "Acme",
    "description": "Own our APIs",
    "questionTypes": ["technical"],
    "difficulty": "intermediate",
    "questionCount": 2,
    "complexity": 3,
}


def _new_draft(client, headers):
    response = client.post("/api/admin/job-drafts", headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


def test_setup_requires_fields(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)

    response = client.put(f"/api/admin/job-drafts/{draft_id}/setup",
                          json=dict(SETUP, deadline=""), headers=recruiter_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please fill in all required fields"


def test_setup_generates_questions(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)

    draft = client.put(f"/api/admin/job-drafts/{draft_id}/setup", json=SETUP,
                       headers=recruiter_headers).json()

    assert draft["activeStep"] == 1
    assert draft["stepName"] == "Questions"
    assert draft["questions"] == [
        "How do you structure a large FastAPI project?",
        "When would you choose MongoDB over PostgreSQL?",
    ]
    assert draft["generatedQuestions"][0]["keyPoints"] == ["Routers", "Dependency injection"]
    assert draft["customQuestions"].startswith("Question 1:\n[Python] (intermediate Level, Complexity: 3/5)")


def test_setup_reports_unparseable_reply(client, recruiter_headers, ai):
    draft_id = _new_draft(client, recruiter_headers)
    ai.replies.append("Sorry, I cannot help with that.")

    response = client.put(f"/api/admin/job-drafts/{draft_id}/setup", json=SETUP, headers=recruiter_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Failed to parse generated questions. Please try again."


def test_setup_ai_failure(client, recruiter_headers, ai):
    draft_id = _new_draft(client, recruiter_headers)
    ai.fail = True

    response = client.put(f"/api/admin/job-drafts/{draft_id}/setup", json=SETUP, headers=recruiter_headers)

    assert response.status_code == 502


def test_full_wizard_creates_job(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)
    base = f"/api/admin/job-drafts/{draft_id}"
    client.put(f"{base}/setup", json=SETUP, headers=recruiter_headers)

    questions = client.put(f"{base}/questions", json={"questions": ["Q one?", "Q two?"]},
                           headers=recruiter_headers).json()
    assert questions["activeStep"] == 2

    custom = client.put(f"{base}/customization", json={
        "skills": ["Python", "python ", "Python", "SQL"], "experience": "Senior", "salary": "$150k",
        "location": "Berlin", "remote": True, "interviewRounds": 3, "postToLinkedin": True,
    }, headers=recruiter_headers).json()
    assert custom["activeStep"] == 3
    assert custom["customization"]["skills"] == ["Python", "python", "SQL"]

    candidates = client.put(f"{base}/candidates",
                            json={"candidates": ["a@example.com", "A@example.com", "b@example.com"]},
                            headers=recruiter_headers).json()
    assert candidates["candidates"] == ["a@example.com", "b@example.com"]

    submitted = client.post(f"{base}/submit", headers=recruiter_headers)
    assert submitted.status_code == 201
    body = submitted.json()
    assert body["postToLinkedin"] is True
    assert body["postToIndeed"] is False

    job = client.get(f"/api/jobs/{body['jobId']}", headers=recruiter_headers).json()
    assert job["title"] == "Backend Engineer"
    assert job["department"] == "Acme"
    assert job["status"] == "ACTIVE"
    assert job["posting"]["interview_rounds"] == 3
    assert job["posting"]["candidates"] == ["a@example.com", "b@example.com"]

    rows = execute_raw_sql("SELECT text FROM questions WHERE job_id = :jid ORDER BY question_id",
                           {"jid": body["jobId"]})
    assert [r["text"] for r in rows] == ["Q one?", "Q two?"]

    again = client.post(f"{base}/submit", headers=recruiter_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Job already submitted"


def test_submit_before_last_step(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)
    response = client.post(f"/api/admin/job-drafts/{draft_id}/submit", headers=recruiter_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Complete all steps before submitting"


def test_back_never_goes_below_zero(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)
    base = f"/api/admin/job-drafts/{draft_id}"
    client.put(f"{base}/setup", json=SETUP, headers=recruiter_headers)

    first = client.post(f"{base}/back", headers=recruiter_headers).json()
    second = client.post(f"{base}/back", headers=recruiter_headers).json()

    assert first["activeStep"] == 0
    assert second["activeStep"] == 0


def test_templates(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)
    base = f"/api/admin/job-drafts/{draft_id}"
    client.put(f"{base}/setup", json=SETUP, headers=recruiter_headers)

    saved = client.post(f"{base}/templates", headers=recruiter_headers).json()
    template = saved["templates"][0]
    assert template["name"] == "Template 1"

    blank = client.put(f"{base}/templates/{template['id']}", json={"name": "  "},
                       headers=recruiter_headers).json()
    assert blank["templates"][0]["name"] == "Template 1"

    renamed = client.put(f"{base}/templates/{template['id']}", json={"name": "Backend set"},
                         headers=recruiter_headers).json()
    assert renamed["templates"][0]["name"] == "Backend set"

    missing = client.put(f"{base}/templates/unknown", json={"name": "X"}, headers=recruiter_headers)
    assert missing.status_code == 404


def test_invalid_candidate_email(client, recruiter_headers):
    draft_id = _new_draft(client, recruiter_headers)
    response = client.put(f"/api/admin/job-drafts/{draft_id}/candidates",
                          json={"candidates": ["not-an-email"]}, headers=recruiter_headers)
    assert response.json()["detail"] == "Invalid email format"


def test_drafts_are_private(client, register):
    owner, _ = register("RECRUITER")
    other, _ = register("RECRUITER")
    draft_id = _new_draft(client, owner)

    response = client.get(f"/api/admin/job-drafts/{draft_id}", headers=other)
    assert response.status_code == 404


# ============================================================
# JOB ASSISTANT
# ============================================================

def test_assistant_creates_draft_from_one_message(client, recruiter_headers):
    response = client.post("/api/admin/job-assistant",
                           json={"message": "I need a Software Engineer at Google"},
                           headers=recruiter_headers).json()

    assert response["reply"] == "Created a draft job posting for Software Engineer at Google."
    draft = client.get(f"/api/admin/job-drafts/{response['draftId']}", headers=recruiter_headers).json()
    assert draft["activeStep"] == 0
    assert draft["setup"]["job_title"] == "Software Engineer"
    assert draft["setup"]["description"] == "Google is hiring a Software Engineer to build great products."
    assert draft["customization"]["skills"] == ["Python", "System Design", "Communication"]
    assert draft["customization"]["salary"] == "$100,000 - $150,000"


def test_assistant_asks_for_missing_company(client, recruiter_headers):
    first = client.post("/api/admin/job-assistant", json={"message": "Hiring an ml engineer"},
                        headers=recruiter_headers).json()
    assert first["awaiting"] == "company"
    assert first["pendingJobTitle"] == "Machine Learning Engineer"

    wrong = client.post("/api/admin/job-assistant", json={
        "message": "Micro", "awaiting": "company", "pendingJobTitle": "Machine Learning Engineer",
    }, headers=recruiter_headers).json()
    assert wrong["awaiting"] == "company"
    assert "Did you mean one of these: Microsoft?" in wrong["reply"]

    done = client.post("/api/admin/job-assistant", json={
        "message": "Apple", "awaiting": "company", "pendingJobTitle": "Machine Learning Engineer",
    }, headers=recruiter_headers).json()
    assert done["draftId"]


def test_assistant_falls_back_to_default_description(client, recruiter_headers, ai):
    ai.fail = True
    response = client.post("/api/admin/job-assistant",
                           json={"message": "Data Engineer at Amazon"},
                           headers=recruiter_headers).json()

    assert response["reply"].endswith("Failed to generate description and skills. Using defaults.")
    draft = client.get(f"/api/admin/job-drafts/{response['draftId']}", headers=recruiter_headers).json()
    assert draft["customization"]["skills"] == ["Teamwork", "Communication", "Problem-solving"]


def test_assistant_rejects_title_not_offered_by_company(client, recruiter_headers):
    response = client.post("/api/admin/job-assistant",
                           json={"message": "iOS Developer at Google"},
                           headers=recruiter_headers).json()

    assert "is not available for Google" in response["reply"]
    assert response.get("draftId") is None
