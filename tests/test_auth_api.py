from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


PHONE = "01712345678"
PASSWORD = "pass1234"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


async def register(client, **overrides):
    payload = {"name": "Rahim", "phone": PHONE, "password": PASSWORD, "device_id": "dev-1", "fcm_token": "fcm-1"}
    payload.update(overrides)
    return await client.post("/api/auth/register", json=payload)


async def login(client, **overrides):
    payload = {"phone": PHONE, "password": PASSWORD, "device_id": "dev-1", "fcm_token": "fcm-1"}
    payload.update(overrides)
    return await client.post("/api/auth/login", json=payload)


async def test_register_returns_envelope_with_token(client):
    response = await register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "User registered successfully"
    data = body["data"]
    assert data["token"]
    assert data["device_id"] == "dev-1"
    assert data["user"]["phone"] == PHONE
    assert "password_hash" not in data["user"]
    assert data["user"]["fcm_tokens"] == [
        {"device_id": "dev-1", "device_type": "unknown", "fcm_token": "fcm-1", "logged_in": True}
    ]


async def test_register_rejects_malformed_phone(client):
    response = await register(client, phone="02712345678")

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "Validation failed"
    assert "phone" in body["errors"]


async def test_register_rejects_short_password(client):
    response = await register(client, password="abc")

    assert response.status_code == 422
    assert "password" in response.json()["errors"]


async def test_register_twice_with_same_phone(client):
    await register(client)

    response = await register(client, device_id="dev-2")

    assert response.status_code == 422
    assert response.json()["errors"] == {"phone": ["The phone has already been taken."]}


async def test_bad_credentials_share_one_response(client):
    await register(client)

    wrong_password = await login(client, password="wrong-pass")
    unknown_phone = await login(client, phone="01811111111")

    assert wrong_password.status_code == unknown_phone.status_code == 401
    assert wrong_password.json() == unknown_phone.json()
    assert wrong_password.json()["message"] == "Invalid credentials"


async def test_register_login_logout_scenario(client):
    registered = await register(client)
    t1 = registered.json()["data"]["token"]

    logged_in = await login(client, device_id="dev-2", fcm_token="fcm-2")
    assert logged_in.status_code == 200
    assert logged_in.json()["message"] == "Login successful"
    t2 = logged_in.json()["data"]["token"]
    assert t2 != t1
    devices = logged_in.json()["data"]["user"]["fcm_tokens"]
    assert [(d["device_id"], d["logged_in"]) for d in devices] == [("dev-1", True), ("dev-2", True)]
    assert (await client.get("/api/auth/me", headers=bearer(t1))).status_code == 200

    logged_out = await client.post("/api/auth/logout", json={"device_id": "dev-1"}, headers=bearer(t1))
    assert logged_out.status_code == 200
    assert logged_out.json() == {"status": "success", "message": "Logged out successfully", "data": []}

    rejected = await client.get("/api/auth/me", headers=bearer(t1))
    assert rejected.status_code == 401
    assert rejected.json()["status"] == "error"

    me = await client.get("/api/auth/me", headers=bearer(t2))
    assert me.status_code == 200
    states = {d["device_id"]: d["logged_in"] for d in me.json()["data"]["fcm_tokens"]}
    assert states == {"dev-1": False, "dev-2": True}


async def test_relogin_same_device_invalidates_previous_token(client):
    t1 = (await register(client)).json()["data"]["token"]

    response = await login(client, fcm_token="fcm-new")
    t2 = response.json()["data"]["token"]

    assert len(response.json()["data"]["user"]["fcm_tokens"]) == 1
    assert (await client.get("/api/auth/me", headers=bearer(t1))).status_code == 401
    assert (await client.get("/api/auth/me", headers=bearer(t2))).status_code == 200


async def test_logout_without_token(client):
    response = await client.post("/api/auth/logout", json={"device_id": "dev-1"})

    assert response.status_code == 401
    assert response.json()["message"] == "No authenticated user"


async def test_logout_without_body_uses_token_device(client):
    token = (await register(client)).json()["data"]["token"]

    response = await client.post("/api/auth/logout", headers=bearer(token))

    assert response.status_code == 200
    assert (await client.get("/api/auth/me", headers=bearer(token))).status_code == 401


async def test_devices_and_push_tokens(client):
    await register(client)
    token = (await login(client, device_id="dev-2", fcm_token="fcm-2")).json()["data"]["token"]
    await client.post("/api/auth/logout", json={"device_id": "dev-1"}, headers=bearer(token))

    all_devices = await client.get("/api/auth/devices", headers=bearer(token))
    active = await client.get("/api/auth/devices", params={"logged_in": "true"}, headers=bearer(token))
    push_tokens = await client.get("/api/auth/push-tokens", headers=bearer(token))

    assert [d["device_id"] for d in all_devices.json()["data"]] == ["dev-1", "dev-2"]
    assert [d["device_id"] for d in active.json()["data"]] == ["dev-2"]
    assert push_tokens.json()["data"] == ["fcm-2"]


async def test_garbage_bearer_token_is_rejected(client):
    response = await client.get("/api/auth/me", headers=bearer("not-a-token"))

    assert response.status_code == 401
    assert response.json() == {"status": "error", "message": "Unauthenticated.", "errors": None}


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_store_failure_returns_server_error_envelope(client, monkeypatch):
    await register(client)

    async def failing_commit(self):
        raise OperationalError("UPDATE device_registrations", {}, Exception("server closed the connection"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    response = await login(client, device_id="dev-2")

    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": "Login failed. Please try again.",
        "errors": None,
    }
