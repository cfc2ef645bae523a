from datetime import timedelta
from unittest.mock import patch

from sqlalchemy import text

from hunter.db.postgres import execute_raw_sql, get_db_session, utcnow


def test_register_returns_token_and_user(client):
    response = client.post("/api/auth/register", json={
        "name": "Ada Recruiter", "email": "ada@example.com", "password": "secret123", "role": "RECRUITER",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"] == {"id": body["user"]["id"], "email": "ada@example.com",
                            "name": "Ada Recruiter", "role": "RECRUITER"}


def test_password_is_stored_hashed(client, register):
    register("APPLICANT", email="hash@example.com")
    row = execute_raw_sql("SELECT password_hash FROM users WHERE email = 'hash@example.com'")[0]
    assert row["password_hash"] != "secret123"
    assert row["password_hash"].startswith("$2")


def test_register_validation_messages(client):
    base = {"name": "A", "email": "a@example.com", "password": "secret123", "role": "APPLICANT"}

    bad_email = client.post("/api/auth/register", json=dict(base, email="not-an-email"))
    short_password = client.post("/api/auth/register", json=dict(base, password="123"))
    bad_role = client.post("/api/auth/register", json=dict(base, role="OWNER"))

    assert bad_email.status_code == 400
    assert bad_email.json() == {"detail": "Invalid email format"}
    assert short_password.json() == {"detail": "Password must be at least 6 characters"}
    assert bad_role.json() == {"detail": "Invalid role"}


def test_register_duplicate_email(client, register):
    register("APPLICANT", email="dup@example.com")
    response = client.post("/api/auth/register", json={
        "name": "Dup", "email": "dup@example.com", "password": "secret123", "role": "APPLICANT",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_login_with_invalid_email_never_queries_users(client):
    with patch("hunter.api.routes.auth_routes.get_db_session") as session:
        response = client.post("/api/auth/login", json={"email": "bad-email", "password": "secret123"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid email format"}
    session.assert_not_called()


def test_login(client, register):
    register("RECRUITER", email="rec@example.com")

    ok = client.post("/api/auth/login", json={"email": "rec@example.com", "password": "secret123"})
    wrong = client.post("/api/auth/login", json={"email": "rec@example.com", "password": "wrong-pass"})
    unknown = client.post("/api/auth/login", json={"email": "who@example.com", "password": "secret123"})

    assert ok.status_code == 200
    assert ok.json()["user"]["role"] == "RECRUITER"
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid email or password"
    assert unknown.status_code == 401


def test_validate_and_logout_revokes_token(client, register):
    headers, user = register("APPLICANT")

    validated = client.get("/api/auth/validate", headers=headers)
    assert validated.status_code == 200
    assert validated.json()["user"]["id"] == user["id"]

    logout = client.post("/api/auth/logout", headers=headers)
    assert logout.json()["message"] == "Logged out successfully"

    after = client.get("/api/auth/validate", headers=headers)
    assert after.status_code == 401


def test_deactivated_account_cannot_login(client, register, admin_headers):
    _, user = register("APPLICANT", email="gone@example.com")
    client.put(f"/api/users/{user['id']}/status", json={"isActive": False}, headers=admin_headers)

    response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "secret123"})
    assert response.status_code == 403


def test_password_reset_flow(client, register):
    register("APPLICANT", email="reset@example.com")

    with patch("hunter.api.routes.auth_routes.send_password_reset") as send:
        response = client.post("/api/auth/reset-password", json={"email": "reset@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset email sent"
    token = send.call_args[0][2]

    confirm = client.post("/api/auth/reset-password/confirm",
                          json={"token": token, "newPassword": "newsecret"})
    assert confirm.json()["message"] == "Password reset successfully"

    reused = client.post("/api/auth/reset-password/confirm",
                         json={"token": token, "newPassword": "another1"})
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Invalid or expired token"

    login = client.post("/api/auth/login", json={"email": "reset@example.com", "password": "newsecret"})
    assert login.status_code == 200


def _request_reset(client, email):
    with patch("hunter.api.routes.auth_routes.send_password_reset") as send:
        response = client.post("/api/auth/reset-password", json={"email": email})
    assert response.status_code == 200
    return send.call_args[0][2]


def test_expired_reset_token_is_rejected(client, register):
    register("APPLICANT", email="late@example.com")
    token = _request_reset(client, "late@example.com")
    with get_db_session() as db:
        db.execute(text("UPDATE password_reset_tokens SET expires_at = :past WHERE token = :token"),
                   {"past": utcnow() - timedelta(hours=1), "token": token})

    confirm = client.post("/api/auth/reset-password/confirm",
                          json={"token": token, "newPassword": "newsecret"})

    assert confirm.status_code == 400
    assert confirm.json()["detail"] == "Invalid or expired token"


def test_new_reset_token_purges_expired_ones(client, register):
    register("APPLICANT", email="purge@example.com")
    old = _request_reset(client, "purge@example.com")
    with get_db_session() as db:
        db.execute(text("UPDATE password_reset_tokens SET expires_at = :past WHERE token = :token"),
                   {"past": utcnow() - timedelta(hours=1), "token": old})

    new = _request_reset(client, "purge@example.com")

    tokens = [r["token"] for r in execute_raw_sql("SELECT token FROM password_reset_tokens")]
    assert tokens == [new]


def test_logout_purges_expired_revocations(client, register):
    headers, _ = register("APPLICANT")
    with get_db_session() as db:
        db.execute(text("INSERT INTO revoked_tokens (jti, expires_at) VALUES ('old-jti', :past)"),
                   {"past": utcnow() - timedelta(hours=1)})

    client.post("/api/auth/logout", headers=headers)

    jtis = [r["jti"] for r in execute_raw_sql("SELECT jti FROM revoked_tokens")]
    assert "old-jti" not in jtis
    assert len(jtis) == 1
    assert client.get("/api/auth/validate", headers=headers).status_code == 401


def test_password_reset_errors(client):
    missing = client.post("/api/auth/reset-password", json={"email": ""})
    unknown = client.post("/api/auth/reset-password", json={"email": "nobody@example.com"})
    no_token = client.post("/api/auth/reset-password/confirm", json={"newPassword": "secret123"})
    short = client.post("/api/auth/reset-password/confirm", json={"token": "abc", "newPassword": "123"})

    assert missing.json()["detail"] == "Email is required"
    assert unknown.status_code == 404
    assert no_token.json()["detail"] == "Token and new password are required"
    assert short.json()["detail"] == "Password must be at least 6 characters"


def test_reset_without_smtp_logs_instead_of_sending(client, register, caplog):
    register("APPLICANT", email="log@example.com")
    with caplog.at_level("WARNING", logger="hunter.services.email_service"):
        response = client.post("/api/auth/reset-password", json={"email": "log@example.com"})

    assert response.status_code == 200
    assert "reset-password/confirm?token=" in caplog.text


def test_change_password(client, register):
    headers, _ = register("APPLICANT", email="change@example.com")
    response = client.put("/api/auth/change-password", json={"newPassword": "changed1"}, headers=headers)
    assert response.json()["message"] == "Password updated successfully"

    login = client.post("/api/auth/login", json={"email": "change@example.com", "password": "changed1"})
    assert login.status_code == 200
