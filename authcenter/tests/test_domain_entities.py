from datetime import UTC, datetime, timedelta

import pytest

from authcenter.domain import InvariantViolation, Session, User, UserRole

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _user(**overrides) -> User:
    fields = {
        "id": "u1",
        "email": "ann@example.com",
        "password_hash": "hashed:pw",
        "first_name": "Ann",
        "last_name": "Lee",
        "role": UserRole.STAFF,
    }
    fields.update(overrides)
    return User(**fields)


def test_user_role_accepts_only_known_roles() -> None:
    assert UserRole.is_valid("admin")
    assert UserRole.is_valid("therapist")
    assert UserRole.is_valid("staff")
    assert not UserRole.is_valid("Admin")
    assert not UserRole.is_valid("root")
    assert not UserRole.is_valid("")


def test_user_defaults_and_full_name() -> None:
    user = _user()
    assert user.is_active is True
    assert user.email_verified is False
    assert user.full_name == "Ann Lee"


def test_reset_token_requires_expiry() -> None:
    with pytest.raises(InvariantViolation):
        _user(password_reset_token="abc")

    with pytest.raises(InvariantViolation):
        _user(password_reset_expiry=NOW)

    user = _user(password_reset_token="abc", password_reset_expiry=NOW)
    assert user.password_reset_token == "abc"


def test_session_must_expire_after_creation() -> None:
    with pytest.raises(InvariantViolation):
        Session(
            id="s1",
            user_id="u1",
            email="ann@example.com",
            role=UserRole.STAFF,
            created_at=NOW,
            expires_at=NOW,
        )


def test_session_is_invalid_from_expiry_instant() -> None:
    session = Session(
        id="s1",
        user_id="u1",
        email="ann@example.com",
        role=UserRole.ADMIN,
        created_at=NOW,
        expires_at=NOW + timedelta(hours=2),
    )
    assert session.is_valid(NOW)
    assert session.is_valid(NOW + timedelta(hours=2) - timedelta(microseconds=1))
    assert not session.is_valid(NOW + timedelta(hours=2))
