from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import settings
from app.core.security import ALGORITHM, create_access_token, decode_token


def test_access_token_round_trip():
    token = create_access_token(subject="user-1")
    assert decode_token(token) == "user-1"


def test_expired_and_foreign_tokens_are_rejected():
    expired = create_access_token(subject="user-1", expires_delta=timedelta(seconds=-5))
    refresh = jwt.encode(
        {
            "sub": "user-1",
            "type": "refresh",
            "exp": datetime.now(timezone.utc) + timedelta(days=1),
        },
        settings.SECRET_KEY,
        algorithm=ALGORITHM,
    )
    forged = jwt.encode({"sub": "user-1"}, "not-the-secret", algorithm=ALGORITHM)

    assert decode_token(expired) is None
    assert decode_token(refresh) is None
    assert decode_token(forged) is None
    assert decode_token("garbage") is None


def test_expired_token_is_unauthorized(client, customer):
    token = create_access_token(subject=str(customer.id), expires_delta=timedelta(minutes=-1))

    resp = client.get("/api/v1/bookings/", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["error"] == "UNAUTHORIZED"
