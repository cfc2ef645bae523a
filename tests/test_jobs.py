import csv
import io

import pytest

from hunter.services.mongo_service import JobPostingService


def test_create_job(client, make_job):
    job = make_job()

    assert job["title"] == "Backend Engineer"
    assert job["type"] == "Full-time"
    assert job["status"] == "ACTIVE"
    assert job["skills"] == ["Python", "SQL"]
    assert job["requirements"] == ["3+ years Python"]
    assert job["applicants"] == 0


def test_create_job_validation(client, recruiter_headers):
    no_title = client.post("/api/jobs", json={"title": "  "}, headers=recruiter_headers)
    bad_type = client.post("/api/jobs", json={"title": "X", "type": "Internship"}, headers=recruiter_headers)
    bad_status = client.post("/api/jobs", json={"title": "X", "status": "OPEN"}, headers=recruiter_headers)
    bad_url = client.post("/api/jobs", json={"title": "X", "externalUrl": "ftp://x"}, headers=recruiter_headers)

    assert no_title.json()["detail"] == "Title is required"
    assert bad_type.json()["detail"] == "Invalid job type"
    assert bad_status.json()["detail"] == "Invalid status"
    assert bad_url.json()["detail"] == "Invalid URL"


def test_applicants_cannot_create_jobs(client, applicant):
    response = client.post("/api/jobs", json={"title": "X"}, headers=applicant[0])
    assert response.status_code == 403


def test_status_filter_restricts_results(client, make_job, applicant):
    make_job(title="Active One", status="ACTIVE")
    make_job(title="Closed One", status="CLOSED")
    make_job(title="Inactive One", status="INACTIVE")
    headers = applicant[0]

    closed = client.get("/api/jobs", params={"status": "CLOSED"}, headers=headers).json()
    everything = client.get("/api/jobs", params={"status": "All"}, headers=headers).json()
    invalid = client.get("/api/jobs", params={"status": "OPEN"}, headers=headers)

    assert [j["title"] for j in closed["jobs"]] == ["Closed One"]
    assert all(j["status"] == "CLOSED" for j in closed["jobs"])
    assert everything["total"] == 3
    assert invalid.status_code == 400


def test_search_sort_and_pagination(client, make_job, applicant):
    make_job(title="Data Scientist", department="Analytics")
    make_job(title="Frontend Developer", department="Engineering")
    make_job(title="Backend Developer", department="Engineering")
    headers = applicant[0]

    by_department = client.get("/api/jobs", params={"search": "engineering", "sort": "title",
                                                     "direction": "asc"}, headers=headers).json()
    assert [j["title"] for j in by_department["jobs"]] == ["Backend Developer", "Frontend Developer"]

    page = client.get("/api/jobs", params={"sort": "title", "direction": "asc", "page": 2, "page_size": 2},
                      headers=headers).json()
    assert page["total"] == 3
    assert [j["title"] for j in page["jobs"]] == ["Frontend Developer"]

    bad_sort = client.get("/api/jobs", params={"sort": "salary"}, headers=headers)
    assert bad_sort.json()["detail"] == "Invalid sort field"


@pytest.mark.parametrize("search, expected", [
    ("100%", ["100% Remote Engineer"]),
    ("_", ["QA_Lead"]),
    ("%", ["100% Remote Engineer"]),
])
def test_search_treats_wildcards_literally(client, make_job, applicant, search, expected):
    make_job(title="100% Remote Engineer")
    make_job(title="QA_Lead")
    make_job(title="Platform Engineer")

    body = client.get("/api/jobs", params={"search": search}, headers=applicant[0]).json()

    assert [j["title"] for j in body["jobs"]] == expected


def test_update_job(client, make_job, recruiter_headers):
    job = make_job()

    response = client.put(f"/api/jobs/{job['id']}", json={"status": "CLOSED", "skills": ["Go"]},
                          headers=recruiter_headers)

    body = response.json()
    assert body["status"] == "CLOSED"
    assert body["skills"] == ["Go"]
    assert body["requirements"] == ["3+ years Python"]
    assert body["title"] == "Backend Engineer"


def test_get_job_merges_posting(client, make_job, applicant):
    job = make_job()
    JobPostingService().upsert(job["id"], {"deadline": "2030-01-01", "remote": True})

    body = client.get(f"/api/jobs/{job['id']}", headers=applicant[0]).json()

    assert body["posting"]["deadline"] == "2030-01-01"
    assert body["posting"]["remote"] is True


def test_delete_job(client, make_job, recruiter_headers, apply):
    job = make_job()
    apply(job["id"])
    JobPostingService().upsert(job["id"], {"deadline": "2030-01-01"})

    response = client.delete(f"/api/jobs/{job['id']}", headers=recruiter_headers)

    assert response.json()["message"] == "Job deleted successfully"
    assert client.get(f"/api/jobs/{job['id']}", headers=recruiter_headers).status_code == 404
    assert JobPostingService().get_by_job(job["id"]) is None


def test_export_csv(client, make_job, recruiter_headers, apply):
    job = make_job(title="Exported", department="Ops")
    apply(job["id"])

    response = client.get("/api/jobs/export.csv", headers=recruiter_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="jobs.csv"' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["ID", "Title", "Department", "Applicants", "Status", "Posted"]
    assert rows[1][1:5] == ["Exported", "Ops", "1", "ACTIVE"]
