def test_profile_update(client, register):
    headers, user = register("APPLICANT", email="me@example.com")

    response = client.put("/api/users/me", json={"phone": "555-1234", "bio": "Python developer"},
                          headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user["id"]
    assert body["phone"] == "555-1234"
    assert body["bio"] == "Python developer"
    assert body["email"] == "me@example.com"
    assert body["isActive"] is True


def test_profile_email_must_be_valid_and_unique(client, register):
    register("APPLICANT", email="taken@example.com")
    headers, _ = register("APPLICANT", email="mine@example.com")

    invalid = client.put("/api/users/me", json={"email": "nope"}, headers=headers)
    taken = client.put("/api/users/me", json={"email": "taken@example.com"}, headers=headers)

    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid email format"
    assert taken.status_code == 400
    assert taken.json()["detail"] == "Email already exists"


def test_admin_lists_and_manages_users(client, register, admin_headers):
    _, applicant = register("APPLICANT", name="Sam Search")

    listed = client.get("/api/users", params={"search": "sam"}, headers=admin_headers)
    assert [u["id"] for u in listed.json()] == [applicant["id"]]

    promoted = client.put(f"/api/users/{applicant['id']}/role", json={"role": "RECRUITER"},
                          headers=admin_headers)
    assert promoted.json()["role"] == "RECRUITER"

    recruiters = client.get("/api/users", params={"role": "recruiter"}, headers=admin_headers)
    assert applicant["id"] in [u["id"] for u in recruiters.json()]


def test_user_admin_routes_require_admin(client, recruiter_headers):
    response = client.get("/api/users", headers=recruiter_headers)
    assert response.status_code == 403


def test_admin_cannot_deactivate_self(client, register):
    headers, admin = register("ADMIN")
    response = client.put(f"/api/users/{admin['id']}/status", json={"isActive": False}, headers=headers)
    assert response.status_code == 400
