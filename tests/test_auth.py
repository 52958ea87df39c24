from datetime import timedelta

import pytest

import auth
from errors import DuplicateEmail, InvalidCredentials, Unauthenticated, ValidationFailed
from schemas import Role
from security import create_access_token, decode_token, hash_password, verify_password


def test_password_hash_round_trip():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret", "")


def test_register_returns_token_and_public_view(store):
    result = auth.register(store, "new@example.com", "pw123456", "New Person")
    assert result["token"]
    assert result["user"]["email"] == "new@example.com"
    assert result["user"]["role"] == "user"
    assert "passwordHash" not in result["user"]

    claims = decode_token(result["token"])
    assert claims["id"] == result["user"]["id"]
    assert claims["email"] == "new@example.com"
    assert claims["role"] == "user"


def test_register_store_owner(store):
    result = auth.register(store, "shop@example.com", "pw", "Shop", Role.STORE_OWNER)
    assert result["user"]["role"] == "store_owner"


def test_register_cannot_self_assign_admin(store):
    with pytest.raises(ValidationFailed):
        auth.register(store, "boss@example.com", "pw", "Boss", Role.ADMIN)


def test_register_twice_is_duplicate_and_first_token_still_valid(store):
    first = auth.register(store, "dup@example.com", "pw", "First")
    with pytest.raises(DuplicateEmail):
        auth.register(store, "dup@example.com", "other", "Second")

    caller = auth.caller_from_token(store, first["token"])
    assert caller.id == first["user"]["id"]
    assert len(store.load("users")) == 1


def test_email_match_is_case_sensitive(store):
    auth.register(store, "Casey@example.com", "pw", "Casey")
    auth.register(store, "casey@example.com", "pw", "casey")
    assert len(store.load("users")) == 2


def test_login_success(store, owner):
    result = auth.login(store, "owner@example.com", "owner123")
    assert result["user"]["id"] == owner.id
    assert auth.caller_from_token(store, result["token"]).role == Role.STORE_OWNER


def test_login_wrong_password_and_unknown_email_are_indistinguishable(store, owner):
    with pytest.raises(InvalidCredentials) as wrong_password:
        auth.login(store, "owner@example.com", "nope")
    with pytest.raises(InvalidCredentials) as unknown_email:
        auth.login(store, "nobody@example.com", "owner123")
    assert wrong_password.value.detail == unknown_email.value.detail
    assert wrong_password.value.status_code == unknown_email.value.status_code


def test_missing_token_is_unauthenticated(store):
    with pytest.raises(Unauthenticated):
        auth.caller_from_token(store, None)


def test_garbage_token_is_unauthenticated(store):
    with pytest.raises(Unauthenticated):
        auth.caller_from_token(store, "not-a-token")


def test_expired_token_is_unauthenticated(store, owner):
    token = create_access_token({"sub": owner.id}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(Unauthenticated):
        auth.caller_from_token(store, token)


def test_token_for_deleted_user_is_unauthenticated(store):
    result = auth.register(store, "gone@example.com", "pw", "Gone")
    store.save("users", [])
    with pytest.raises(Unauthenticated):
        auth.caller_from_token(store, result["token"])


def test_me_returns_public_view(store, owner_caller):
    profile = auth.me(store, owner_caller)
    assert profile["id"] == owner_caller.id
    assert profile["name"] == "Owner A"
    assert "passwordHash" not in profile
