from lms_gradebook.core.security import create_access_token, decode_access_token, hash_password, verify_password

PASSWORD = "password123"


def login(client, email: str, password: str) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_login_token_opens_gradebook(client, seed_data):
    token = login(client, "instructor1@example.com", PASSWORD)
    r = client.get(f"/courses/{seed_data.course}/gradebook", headers=bearer(token))
    assert r.status_code == 200


def test_login_with_wrong_password(client):
    r = client.post("/auth/login", json={"email": "instructor1@example.com", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_register_then_me(client):
    r = client.post(
        "/auth/register",
        json={"email": "new.student@example.com", "password": "longenough1", "full_name": "New Student"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "student"

    token = login(client, "new.student@example.com", "longenough1")
    me = client.get("/auth/me", headers=bearer(token))
    assert me.status_code == 200
    assert me.json()["email"] == "new.student@example.com"
    assert me.json()["display_name"] == "New Student"


def test_register_duplicate_email(client):
    r = client.post("/auth/register", json={"email": "alice@example.com", "password": "longenough1"})
    assert r.status_code == 409


def test_token_for_unknown_user_is_rejected(client):
    token = create_access_token({"sub": "c" + "f" * 24})
    assert client.get("/auth/me", headers=bearer(token)).status_code == 401


def test_password_hashing():
    hashed = hash_password("s3cret-pass")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("s3cret-pass", "not-a-bcrypt-hash")


def test_token_round_trip():
    assert decode_access_token(create_access_token({"sub": "abc"})) == "abc"
    assert decode_access_token("garbage") is None


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_cannot_choose_role(client):
    r = client.post(
        "/auth/register",
        json={"email": "sneaky@example.com", "password": "longenough1", "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["role"] == "student"
    assert r.json()["display_name"] == "sneaky@example.com"
