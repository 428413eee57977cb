from app.auth_local import create_access_token, decode_access_token, hash_password, verify_password

def _register(client, email="lena.fischer@example.com", password="correct-horse-battery"):
    return client.post(
        "/auth/register",
        json={"email": email, "password": password, "first_name": "Lena", "last_name": "Fischer"},
    )

def test_register_then_login(client):
    resp = _register(client)
    assert resp.status_code == 201
    assert resp.json()["role"] == "customer"
    assert "password_hash" not in resp.json()

    token = client.post(
        "/auth/token", json={"username": "Lena.Fischer@example.com", "password": "correct-horse-battery"}
    )
    assert token.status_code == 200
    assert token.json()["token_type"] == "bearer"

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token.json()['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "lena.fischer@example.com"

def test_duplicate_email_conflicts(client):
    _register(client)
    assert _register(client).status_code == 409

def test_short_password_rejected(client):
    assert _register(client, password="short").status_code == 400

def test_wrong_password(client):
    _register(client)
    resp = client.post("/auth/token", json={"username": "lena.fischer@example.com", "password": "nope-nope-nope"})
    assert resp.status_code == 401

def test_unknown_user(client):
    resp = client.post("/auth/token", json={"username": "ghost@example.com", "password": "whatever123"})
    assert resp.status_code == 401

def test_missing_and_invalid_tokens(client):
    assert client.get("/api/auth/user").status_code == 401
    assert client.get("/api/auth/user", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401

def test_token_for_deleted_user_is_rejected(client):
    headers = {"Authorization": f"Bearer {create_access_token('no-such-user')}"}
    assert client.get("/api/auth/user", headers=headers).status_code == 401

def test_token_round_trip():
    claims = decode_access_token(create_access_token("user-1", role="admin"))
    assert claims["sub"] == "user-1"
    assert claims["role"] == "admin"
    assert decode_access_token("garbage") is None

def test_password_hashing():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("s3cret-pass", None)

def test_addresses(client, customer_headers, user_factory, headers_for):
    home = {"label": "Home", "full_name": "Maria Santos", "address": "Rua das Flores 456", "is_default": True}
    work = {"label": "Work", "full_name": "Maria Santos", "address": "Av. Paulista 1000", "is_default": True}

    first = client.post("/api/user/addresses", json=home, headers=customer_headers)
    assert first.status_code == 201
    client.post("/api/user/addresses", json=work, headers=customer_headers)

    listed = client.get("/api/user/addresses", headers=customer_headers).json()
    assert [(a["label"], a["is_default"]) for a in listed] == [("Home", False), ("Work", True)]

    stranger = headers_for(user_factory("other@example.com"))
    assert client.delete(f"/api/user/addresses/{first.json()['id']}", headers=stranger).status_code == 404
    assert client.delete(f"/api/user/addresses/{first.json()['id']}", headers=customer_headers).status_code == 204
    assert len(client.get("/api/user/addresses", headers=customer_headers).json()) == 1

def test_user_notifications_match_recipient_email(client, created_package, customer_headers):
    notes = client.get("/api/user/notifications", headers=customer_headers).json()
    assert len(notes) == 1
    assert notes[0]["type"] == "email"
    assert notes[0]["package_id"] == created_package["id"]

def test_password_longer_than_bcrypt_limit_rejected(client):
    assert _register(client, password="p" * 100).status_code == 400
    # 40 characters but 80 bytes
    assert _register(client, email="multi.byte@example.com", password="é" * 40).status_code == 400
    assert _register(client, email="exact.limit@example.com", password="p" * 72).status_code == 201
