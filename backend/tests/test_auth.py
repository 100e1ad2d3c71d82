from conftest import signup


def test_signup_returns_user_and_token(client):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "Chef@Example.com", "name": "  Chef  ", "password": "secret123"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    user = data["user"]
    assert user["email"] == "chef@example.com"
    assert user["name"] == "Chef"
    assert "id" in user
    assert "password" not in user
    assert "_id" not in user


def test_signup_duplicate_email_case_insensitive(client, db):
    signup(client, email="dup@example.com")

    resp = client.post(
        "/api/auth/signup",
        json={"email": "DUP@Example.COM", "name": "Other", "password": "secret123"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "User with this email already exists"}


def test_signup_creates_no_second_user(client, store):
    signup(client, email="dup@example.com")
    client.post("/api/auth/signup", json={"email": "Dup@example.com", "name": "Other", "password": "secret123"})

    users = store.db["users"]._col
    assert users.count_documents({}) == 1


def test_signup_validation_messages(client):
    resp = client.post("/api/auth/signup", json={"email": "a@b.co", "name": "Al", "password": "123"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Password must be at least 6 characters"

    resp = client.post("/api/auth/signup", json={"email": "a@b.co", "name": "A", "password": "secret123"})
    assert resp.json()["error"] == "Name must be at least 2 characters"

    resp = client.post("/api/auth/signup", json={"email": "not-an-email", "name": "Al", "password": "secret123"})
    assert resp.json()["error"] == "Please enter a valid email"

    resp = client.post("/api/auth/signup", json={"name": "Al", "password": "secret123"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "email is required"


def test_login_ok(client):
    signup(client, email="cook@example.com", password="secret123")

    resp = client.post("/api/auth/login", json={"email": "COOK@example.com", "password": "secret123"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["token"]
    assert data["user"]["email"] == "cook@example.com"


def test_login_wrong_password_issues_no_token(client):
    signup(client, email="cook@example.com", password="secret123")

    resp = client.post("/api/auth/login", json={"email": "cook@example.com", "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_login_unknown_email(client):
    resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid email or password"


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}

    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid token"}


def test_me_returns_current_user(client):
    user, headers = signup(client)
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
    assert "password" not in resp.json()
