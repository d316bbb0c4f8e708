import uuid
import jwt
import pytest
from app.core import security
from app.core.security import (
    authenticate,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_roundtrip():
    stored = hash_password("hunter22")
    assert stored.startswith("$2b$")
    assert verify_password("hunter22", stored)
    assert not verify_password("hunter23", stored)


def test_password_hashes_are_salted():
    assert hash_password("same-password") != hash_password("same-password")


@pytest.mark.parametrize("stored", ["", "garbage", "md5$1$salt$digest", "$2b$12$tooshort"])
def test_verify_password_rejects_malformed_hash(stored):
    assert verify_password("anything", stored) is False


def test_token_authenticates_user():
    user_id = uuid.uuid4()
    token = create_access_token(user_id, "editor")

    current = authenticate(token)

    assert current.user_id == user_id
    assert current.role == "editor"


def test_token_is_hs256_jwt():
    token = create_access_token(uuid.uuid4(), "creator")
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_tampered_token_rejected():
    header, _, signature = create_access_token(uuid.uuid4(), "creator").split(".")
    forged_payload = create_access_token(uuid.uuid4(), "editor").split(".")[1]

    assert decode_access_token(f"{header}.{forged_payload}.{signature}") is None


def test_unsigned_token_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4()), "role": "creator"}, key=None, algorithm="none")
    assert authenticate(token) is None


def test_token_without_expiry_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4()), "role": "creator"}, security.settings.SECRET_KEY, algorithm="HS256")
    assert decode_access_token(token) is None


def test_expired_token_rejected():
    token = create_access_token(uuid.uuid4(), "creator", ttl_hours=-1)
    assert decode_access_token(token) is None


def test_token_from_other_secret_rejected(monkeypatch):
    token = create_access_token(uuid.uuid4(), "creator")
    monkeypatch.setattr(security.settings, "SECRET_KEY", "rotated-secret-key-of-at-least-32-bytes")
    assert authenticate(token) is None


@pytest.mark.parametrize("token", ["", "no-dot", "a.b.c"])
def test_malformed_token_rejected(token):
    assert authenticate(token) is None
