import pytest
from sqlalchemy import text

from hunter.db.postgres import get_db_session
from hunter.utils.file_upload import MAX_RESUME_SIZE_BYTES, save_bytes


def test_apply_to_job(client, make_job, apply, applicant):
    job = make_job()

    response = apply(job["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["jobId"] == job["id"]
    assert body["job"] == {"title": "Backend Engineer"}
    assert body["userId"] == applicant[1]["id"]
    assert body["status"] == "PENDING"
    assert body["resumeUrl"].startswith("/uploads/resumes/")
    assert body["resumeUrl"].endswith(".doc")


def test_apply_twice(client, make_job, apply):
    job = make_job()
    apply(job["id"])

    again = apply(job["id"])

    assert again.status_code == 400
    assert again.json()["detail"] == "You have already applied to this job"


def test_apply_to_closed_job(client, make_job, apply):
    job = make_job(status="CLOSED")
    response = apply(job["id"])
    assert response.json()["detail"] == "This job is not accepting applications"


def test_apply_rejects_bad_file_type(client, make_job, apply):
    job = make_job()
    response = apply(job["id"], filename="resume.exe")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file type. Please upload a PDF, DOC, or DOCX file"


def test_apply_requires_fields(client, make_job, applicant):
    job = make_job()
    missing = client.post("/api/applications", data={"job_id": str(job["id"]), "full_name": "Jane"},
                          headers=applicant[0])
    bad_email = client.post("/api/applications", data={
        "job_id": str(job["id"]), "full_name": "Jane", "email": "jane", "phone": "1",
    }, headers=applicant[0])
    no_resume = client.post("/api/applications", data={
        "job_id": str(job["id"]), "full_name": "Jane", "email": "jane@example.com", "phone": "1",
    }, headers=applicant[0])

    assert missing.json()["detail"] == "All fields are required"
    assert bad_email.json()["detail"] == "Invalid email format"
    assert no_resume.json()["detail"] == "Resume is required"


def test_apply_with_uploaded_resume(client, make_job, applicant):
    job = make_job()
    upload = client.post("/api/upload", files={"resume": ("cv.pdf", b"%PDF-broken", "application/pdf")},
                         headers=applicant[0])
    file_path = upload.json()["filePath"]
    assert file_path.startswith("/uploads/resumes/")

    response = client.post("/api/applications", data={
        "job_id": str(job["id"]), "full_name": "Jane", "email": "jane@example.com", "phone": "1",
        "resume_url": file_path,
    }, headers=applicant[0])

    assert response.status_code == 201
    assert response.json()["resumeUrl"] == file_path


def test_apply_with_unknown_resume_path(client, make_job, applicant):
    job = make_job()
    response = client.post("/api/applications", data={
        "job_id": str(job["id"]), "full_name": "Jane", "email": "jane@example.com", "phone": "1",
        "resume_url": "/uploads/resumes/missing.pdf",
    }, headers=applicant[0])
    assert response.json()["detail"] == "Resume not found"


def _apply_with_path(client, job, applicant, resume_url):
    return client.post("/api/applications", data={
        "job_id": str(job["id"]), "full_name": "Jane", "email": "jane@example.com", "phone": "1",
        "resume_url": resume_url,
    }, headers=applicant[0])


@pytest.mark.parametrize("resume_url", [
    "/uploads/../hunter.db",
    "/uploads/resumes/../../hunter.db",
])
def test_apply_with_path_outside_uploads(client, make_job, applicant, resume_url):
    job = make_job()
    response = _apply_with_path(client, job, applicant, resume_url)
    assert response.status_code == 400
    assert response.json()["detail"] == "Resume not found"


def test_apply_with_stored_file_that_is_not_a_resume(client, make_job, applicant):
    job = make_job()
    logo = save_bytes(b"png", "logos", ".png")
    text_file = save_bytes(b"plain", "resumes", ".txt")

    assert _apply_with_path(client, job, applicant, logo).json()["detail"] == "Resume not found"
    wrong_type = _apply_with_path(client, job, applicant, text_file)
    assert wrong_type.status_code == 400
    assert wrong_type.json()["detail"] == "Invalid file type. Please upload a PDF, DOC, or DOCX file"


def test_resume_size_limit(client, make_job, apply, applicant):
    job = make_job()
    too_big = b"\x00" * (MAX_RESUME_SIZE_BYTES + 1)

    uploaded = apply(job["id"], filename="big.pdf", content=too_big)
    stored = _apply_with_path(client, job, applicant, save_bytes(too_big, "resumes", ".pdf"))

    assert uploaded.status_code == 413
    assert uploaded.json()["detail"] == "File too large. Maximum size: 5MB"
    assert stored.status_code == 413


def test_staff_cannot_apply(client, make_job, apply, recruiter_headers):
    job = make_job()
    assert apply(job["id"], headers=recruiter_headers).status_code == 403


def test_list_applications_by_owner(client, make_job, apply, register, recruiter_headers):
    job = make_job()
    apply(job["id"])
    other_headers, _ = register("APPLICANT")
    mine = apply(job["id"], headers=other_headers).json()

    own = client.get("/api/applications", headers=other_headers).json()
    everything = client.get("/api/applications", headers=recruiter_headers).json()

    assert [a["id"] for a in own] == [mine["id"]]
    assert len(everything) == 2


def test_get_other_applicants_application(client, make_job, apply, register):
    job = make_job()
    application = apply(job["id"]).json()
    stranger, _ = register("APPLICANT")

    response = client.get(f"/api/applications/{application['id']}", headers=stranger)

    assert response.status_code == 403


# ============================================================
# CANDIDATES
# ============================================================

def test_candidates_list_and_search(client, make_job, apply, register, recruiter_headers):
    backend = make_job(title="Backend Engineer")
    designer = make_job(title="Product Designer")
    apply(backend["id"])
    other_headers, _ = register("APPLICANT")
    apply(designer["id"], headers=other_headers)

    by_job = client.get("/api/admin/candidates", params={"jobId": designer["id"]},
                        headers=recruiter_headers).json()
    by_title = client.get("/api/admin/candidates", params={"search": "backend"},
                          headers=recruiter_headers).json()
    by_name = client.get("/api/admin/candidates", params={"search": "JANE"}, headers=recruiter_headers).json()

    assert [c["jobTitle"] for c in by_job] == ["Product Designer"]
    assert [c["jobTitle"] for c in by_title] == ["Backend Engineer"]
    assert len(by_name) == 2
    assert by_name[0]["name"] == "Jane Applicant"


def test_candidate_status(client, make_job, apply, recruiter_headers):
    job = make_job()
    candidate = apply(job["id"]).json()

    updated = client.put(f"/api/admin/candidates/{candidate['id']}/status", json={"status": "SHORTLISTED"},
                         headers=recruiter_headers)
    invalid = client.put(f"/api/admin/candidates/{candidate['id']}/status", json={"status": "MAYBE"},
                         headers=recruiter_headers)
    missing = client.get("/api/admin/candidates/999", headers=recruiter_headers)

    assert updated.json()["status"] == "SHORTLISTED"
    assert invalid.status_code == 400
    assert missing.json()["detail"] == "Candidate not found"


def test_compare_candidates(client, make_job, apply, register, recruiter_headers):
    job = make_job()
    first = apply(job["id"]).json()
    other_headers, _ = register("APPLICANT")
    second = apply(job["id"], headers=other_headers).json()

    compared = client.post("/api/admin/candidates/compare",
                           json={"candidateIds": [second["id"], first["id"], second["id"]]},
                           headers=recruiter_headers)
    too_few = client.post("/api/admin/candidates/compare", json={"candidateIds": [first["id"], first["id"]]},
                          headers=recruiter_headers)

    assert [c["id"] for c in compared.json()] == [second["id"], first["id"]]
    assert too_few.json()["detail"] == "Select at least two candidates to compare"


def test_download_resume(client, make_job, apply, recruiter_headers):
    job = make_job()
    candidate = apply(job["id"], content=b"my resume").json()

    response = client.get(f"/api/admin/candidates/{candidate['id']}/resume", headers=recruiter_headers)

    assert response.status_code == 200
    assert response.content == b"my resume"
    assert "Applicant-resume.doc" in response.headers["content-disposition"]


@pytest.mark.parametrize("resume_path", ["/uploads/resumes/gone.pdf", "/uploads/../hunter.db"])
def test_download_missing_resume(client, make_job, apply, recruiter_headers, resume_path):
    job = make_job()
    candidate = apply(job["id"]).json()
    with get_db_session() as db:
        db.execute(text("UPDATE applications SET resume_path = :path"), {"path": resume_path})

    response = client.get(f"/api/admin/candidates/{candidate['id']}/resume", headers=recruiter_headers)

    assert response.status_code == 404


def test_job_options(client, make_job, recruiter_headers):
    zeta = make_job(title="Zeta")
    alpha = make_job(title="Alpha")

    options = client.get("/api/admin/jobs", headers=recruiter_headers).json()

    assert options == [{"id": alpha["id"], "title": "Alpha"}, {"id": zeta["id"], "title": "Zeta"}]


# ============================================================
# SCHEDULES
# ============================================================

def test_schedule_interview(client, make_job, apply, applicant, recruiter_headers):
    job = make_job()
    application = apply(job["id"]).json()

    response = client.post("/api/schedules", json={
        "applicationId": application["id"], "userId": applicant[1]["id"], "jobId": job["id"],
        "date": "2030-05-01T10:00:00+02:00",
    }, headers=applicant[0])

    assert response.status_code == 201
    assert response.json()["date"].startswith("2030-05-01T08:00:00")
    assert len(client.get("/api/schedules", headers=applicant[0]).json()) == 1
    assert len(client.get("/api/schedules", headers=recruiter_headers).json()) == 1


def test_schedule_validation(client, make_job, apply, applicant, register):
    job = make_job()
    other_job = make_job(title="Other")
    application = apply(job["id"]).json()
    stranger_headers, stranger = register("APPLICANT")
    base = {"applicationId": application["id"], "userId": applicant[1]["id"], "jobId": job["id"],
            "date": "2030-05-01T10:00:00Z"}

    missing = client.post("/api/schedules", json=dict(base, date=None), headers=applicant[0])
    not_mine = client.post("/api/schedules", json=base, headers=stranger_headers)
    mismatch = client.post("/api/schedules", json=dict(base, jobId=other_job["id"]), headers=applicant[0])

    assert missing.json()["detail"] == "Missing required fields"
    assert not_mine.status_code == 403
    assert mismatch.json()["detail"] == "Application does not match user and job"
    assert client.get("/api/schedules", headers=stranger_headers).json() == []
