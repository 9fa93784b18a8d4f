from datetime import timedelta

from src.api.utils.jwt import actor_from_authorization, generate_jwt, verify_jwt


def test_round_trip_token():
    payload = verify_jwt(generate_jwt("dev-1"))

    assert payload["user_id"] == "dev-1"


def test_expired_token_is_rejected():
    token = generate_jwt("dev-1", expires_delta=timedelta(seconds=-1))

    assert verify_jwt(token) is None


def test_actor_from_authorization_header():
    token = generate_jwt("user-1")

    assert actor_from_authorization(f"Bearer {token}") == "user-1"
    assert actor_from_authorization(f"Basic {token}") is None
    assert actor_from_authorization("Bearer not-a-jwt") is None
    assert actor_from_authorization(None) is None
