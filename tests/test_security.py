import pytest
from fastapi.testclient import TestClient
from jose import jwt
from starlette.websockets import WebSocketDisconnect

from app.core.config import settings
from app.core.security import create_access_token, verify_access_token
from app.main import app


def test_token_round_trip_yields_user_id():
    token = create_access_token({"user_id": "user-42"})
    token_data = verify_access_token(token)
    assert token_data is not None
    assert token_data.user_id == "user-42"


def test_sub_claim_is_accepted_as_identity():
    token = jwt.encode({"sub": "user-7"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    assert verify_access_token(token).user_id == "user-7"


def test_expired_token_is_rejected():
    token = create_access_token({"user_id": "user-42"}, expires_minutes=-1)
    assert verify_access_token(token) is None


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"user_id": "user-42"}, "another-secret", algorithm="HS256")
    assert verify_access_token(token) is None


def test_token_without_identity_is_rejected():
    token = create_access_token({"role": "admin"})
    assert verify_access_token(token) is None


def test_notification_socket_rejects_invalid_token():
    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws?token=not-a-jwt"):
            pass


async def test_invalid_bearer_token_is_unauthorized(client):
    response = await client.get("/bids/my", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
