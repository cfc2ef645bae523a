"""
Job Service - SQL helpers shared by the job, wizard and candidate routes.

A job is one row in `jobs` plus its ordered skills and requirements in
`job_skills`. The applicant count is computed from `applications`.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import text

from hunter.db.postgres import execute_raw_sql, parse_timestamp, utcnow, contains_pattern

JOB_COLUMNS = """
    j.job_id, j.title, j.department, j.location, j.job_type, j.salary, j.description,
    j.external_url, j.status, j.created_by, j.created_at,
    (SELECT COUNT(*) FROM applications a WHERE a.job_id = j.job_id) AS applicants
"""

SORT_COLUMNS = {
    "title": "LOWER(j.title)",
    "department": "LOWER(j.department)",
    "applicants": "applicants",
    "status": "j.status",
    "created_at": "j.created_at",
}


def insert_job(db, created_by: int, job: dict) -> int:
    """Insert a job row and its skill/requirement lists. Returns the new job_id."""
    now = utcnow()
    result = db.execute(
        text("""
            INSERT INTO jobs (created_by, title, department, location, job_type, salary,
                description, external_url, status, created_at, updated_at)
            VALUES (:created_by, :title, :department, :location, :job_type, :salary,
                :description, :external_url, :status, :now, :now)
            RETURNING job_id
        """),
        {
            "created_by": created_by, "title": job["title"], "department": job.get("department"),
            "location": job.get("location"), "job_type": job["type"], "salary": job.get("salary"),
            "description": job.get("description"), "external_url": job.get("external_url"),
            "status": job["status"], "now": now
        }
    )
    job_id = result.fetchone()[0]
    replace_job_lists(db, job_id, job.get("skills") or [], job.get("requirements") or [])
    return job_id


def replace_job_lists(db, job_id: int, skills: Optional[List[str]] = None,
                      requirements: Optional[List[str]] = None) -> None:
    """Rewrite the skills and/or requirements of a job (None leaves a list untouched)."""
    for kind, values in (("skill", skills), ("requirement", requirements)):
        if values is None:
            continue
        db.execute(
            text("DELETE FROM job_skills WHERE job_id = :jid AND kind = :kind"),
            {"jid": job_id, "kind": kind}
        )
        for position, value in enumerate(v.strip() for v in values if v and v.strip()):
            db.execute(
                text("""
                    INSERT INTO job_skills (job_id, kind, position, value)
                    VALUES (:jid, :kind, :pos, :value)
                """),
                {"jid": job_id, "kind": kind, "pos": position, "value": value}
            )


def load_job_lists(job_ids: List[int]) -> Dict[int, dict]:
    """Skills and requirements for several jobs, in their stored order."""
    lists = {job_id: {"skills": [], "requirements": []} for job_id in job_ids}
    if not job_ids:
        return lists

    placeholders = ", ".join(f":id{i}" for i in range(len(job_ids)))
    params = {f"id{i}": job_id for i, job_id in enumerate(job_ids)}
    rows = execute_raw_sql(
        f"""
            SELECT job_id, kind, value FROM job_skills
            WHERE job_id IN ({placeholders})
            ORDER BY job_id, kind, position
        """,
        params
    )
    for r in rows:
        key = "skills" if r["kind"] == "skill" else "requirements"
        lists[r["job_id"]][key].append(r["value"])
    return lists


def get_job_row(job_id: int) -> Optional[dict]:
    results = execute_raw_sql(f"SELECT {JOB_COLUMNS} FROM jobs j WHERE j.job_id = :jid", {"jid": job_id})
    return results[0] if results else None


def job_to_dict(row: dict, lists: dict, posting: Optional[dict] = None) -> dict:
    return {
        "id": row["job_id"], "title": row["title"], "department": row["department"],
        "location": row["location"], "type": row["job_type"], "salary": row["salary"],
        "description": row["description"], "requirements": lists["requirements"],
        "skills": lists["skills"], "external_url": row["external_url"],
        "status": row["status"], "applicants": row["applicants"],
        "created_by": row["created_by"], "created_at": parse_timestamp(row["created_at"]),
        "posting": posting,
    }


def search_jobs(status: Optional[str] = None, search: Optional[str] = None,
                department: Optional[str] = None, sort: str = "created_at",
                direction: str = "desc", limit: Optional[int] = None,
                offset: int = 0) -> Tuple[List[dict], int]:
    """Filtered, sorted job rows and the total before pagination."""
    where = " WHERE 1=1"
    params = {}

    if status:
        where += " AND j.status = :status"
        params["status"] = status
    if search:
        where += " AND (LOWER(j.title) LIKE LOWER(:search) ESCAPE '\\' OR LOWER(j.department) LIKE LOWER(:search) ESCAPE '\\')"
        params["search"] = contains_pattern(search)
    if department:
        where += " AND LOWER(j.department) = LOWER(:department)"
        params["department"] = department

    total = execute_raw_sql(f"SELECT COUNT(*) AS total FROM jobs j{where}", params)[0]["total"]

    order = "DESC" if direction.lower() == "desc" else "ASC"
    sql = f"SELECT {JOB_COLUMNS} FROM jobs j{where} ORDER BY {SORT_COLUMNS[sort]} {order}, j.job_id {order}"
    if limit is not None:
        sql += f" LIMIT {int(limit)} OFFSET {int(offset)}"

    return execute_raw_sql(sql, params), total
