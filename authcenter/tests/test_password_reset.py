from __future__ import annotations

import pytest

from authcenter.application.services.session_issuer import SessionIssuer
from authcenter.application.use_cases.users.login_user import LoginUserUseCase
from authcenter.application.use_cases.users.register_user import RegisterUserUseCase
from authcenter.application.use_cases.users.request_password_reset import (
    RESET_TOKEN_BYTES,
    RequestPasswordResetUseCase,
)
from authcenter.application.use_cases.users.reset_password import ResetPasswordUseCase
from authcenter.domain.users.exceptions import (
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    SessionNotFoundError,
)
from authcenter.infrastructure.sessions.in_memory_session_repository import (
    InMemorySessionRepository,
)
from authcenter.shared.errors import StoreError
from authcenter.tests.doubles import (
    RESET_LIFETIME,
    DeterministicHasher,
    FakeClock,
    InMemoryUserRepository,
    RecordingNotifier,
)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def request_reset(
    users: InMemoryUserRepository,
    hasher: DeterministicHasher,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> RequestPasswordResetUseCase:
    return RequestPasswordResetUseCase(
        users=users,
        password_hasher=hasher,
        notifications=notifier,
        reset_lifetime=RESET_LIFETIME,
        clock=clock,
    )


@pytest.fixture()
def reset(
    users: InMemoryUserRepository,
    sessions: InMemorySessionRepository,
    hasher: DeterministicHasher,
) -> ResetPasswordUseCase:
    return ResetPasswordUseCase(users=users, sessions=sessions, password_hasher=hasher)


@pytest.fixture()
def ann(users: InMemoryUserRepository, hasher: DeterministicHasher, issuer: SessionIssuer):
    register = RegisterUserUseCase(users=users, password_hasher=hasher, session_issuer=issuer)
    return register.execute("ann@example.com", "old-password", "Ann", "Lee", "therapist")


def _issued_token(notifier: RecordingNotifier) -> str:
    return notifier.sent[-1][1]


def test_request_reset_unknown_email_is_silent(
    request_reset: RequestPasswordResetUseCase, notifier: RecordingNotifier
) -> None:
    assert request_reset.execute("nobody@example.com") is None
    assert notifier.sent == []


def test_request_reset_stores_token_with_expiry(
    ann,
    request_reset: RequestPasswordResetUseCase,
    users: InMemoryUserRepository,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> None:
    request_reset.execute("ann@example.com")

    email, token, expires_at = notifier.sent[0]
    stored = users.get_by_email("ann@example.com")
    assert email == "ann@example.com"
    assert len(token) == RESET_TOKEN_BYTES * 2
    assert stored.password_reset_token == token
    assert stored.password_reset_expiry == expires_at == clock.now + RESET_LIFETIME


def test_request_reset_swallows_notifier_failure(
    ann,
    users: InMemoryUserRepository,
    hasher: DeterministicHasher,
    clock: FakeClock,
) -> None:
    use_case = RequestPasswordResetUseCase(
        users=users,
        password_hasher=hasher,
        notifications=RecordingNotifier(fail=True),
        reset_lifetime=RESET_LIFETIME,
        clock=clock,
    )

    assert use_case.execute("ann@example.com") is None
    assert users.get_by_email("ann@example.com").password_reset_token is not None


def test_reset_password_changes_password_and_revokes_sessions(
    ann,
    request_reset: RequestPasswordResetUseCase,
    reset: ResetPasswordUseCase,
    users: InMemoryUserRepository,
    sessions: InMemorySessionRepository,
    hasher: DeterministicHasher,
    issuer: SessionIssuer,
    notifier: RecordingNotifier,
) -> None:
    login = LoginUserUseCase(users=users, password_hasher=hasher, session_issuer=issuer)
    second = login.execute("ann@example.com", "old-password")
    request_reset.execute("ann@example.com")

    reset.execute(_issued_token(notifier), "new-password")

    stored = users.get_by_email("ann@example.com")
    assert stored.password_reset_token is None
    assert stored.password_reset_expiry is None
    for session_id in (ann.session_id, second.session_id):
        with pytest.raises(SessionNotFoundError):
            sessions.get(session_id)
    with pytest.raises(InvalidCredentialsError):
        login.execute("ann@example.com", "old-password")
    assert login.execute("ann@example.com", "new-password").session_id


def test_reset_token_is_single_use(
    ann,
    request_reset: RequestPasswordResetUseCase,
    reset: ResetPasswordUseCase,
    notifier: RecordingNotifier,
) -> None:
    request_reset.execute("ann@example.com")
    token = _issued_token(notifier)
    reset.execute(token, "new-password")

    with pytest.raises(InvalidOrExpiredTokenError):
        reset.execute(token, "another-password")


def test_reset_token_expires(
    ann,
    request_reset: RequestPasswordResetUseCase,
    reset: ResetPasswordUseCase,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> None:
    request_reset.execute("ann@example.com")
    clock.advance(seconds=RESET_LIFETIME.total_seconds())

    with pytest.raises(InvalidOrExpiredTokenError):
        reset.execute(_issued_token(notifier), "new-password")


def test_new_reset_request_replaces_previous_token(
    ann,
    request_reset: RequestPasswordResetUseCase,
    reset: ResetPasswordUseCase,
    notifier: RecordingNotifier,
) -> None:
    request_reset.execute("ann@example.com")
    first = _issued_token(notifier)
    request_reset.execute("ann@example.com")
    second = _issued_token(notifier)

    assert first != second
    with pytest.raises(InvalidOrExpiredTokenError):
        reset.execute(first, "new-password")
    reset.execute(second, "new-password")


@pytest.mark.parametrize("token", ["", "not-a-token"])
def test_reset_password_rejects_unknown_token(reset: ResetPasswordUseCase, token: str) -> None:
    with pytest.raises(InvalidOrExpiredTokenError) as excinfo:
        reset.execute(token, "new-password")

    assert excinfo.value.code == "invalid_or_expired_token"
    assert excinfo.value.status == 400


class _RevocationFails(InMemorySessionRepository):
    def delete_all_for_user(self, user_id: str) -> None:
        raise StoreError("sessions", "delete_all_for_user")


def test_reset_password_stands_when_revocation_fails(
    ann,
    request_reset: RequestPasswordResetUseCase,
    users: InMemoryUserRepository,
    hasher: DeterministicHasher,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> None:
    request_reset.execute("ann@example.com")
    reset = ResetPasswordUseCase(
        users=users, sessions=_RevocationFails(clock=clock), password_hasher=hasher
    )

    reset.execute(_issued_token(notifier), "new-password")

    assert users.get_by_email("ann@example.com").password_hash == "hashed:new-password"


def test_reset_password_keeps_concurrent_deactivation(
    ann,
    request_reset: RequestPasswordResetUseCase,
    reset: ResetPasswordUseCase,
    users: InMemoryUserRepository,
    notifier: RecordingNotifier,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    request_reset.execute("ann@example.com")
    lookup = users.get_by_reset_token

    def lookup_then_deactivate(token: str):
        user = lookup(token)
        users.set_active(user.id, False)
        return user

    monkeypatch.setattr(users, "get_by_reset_token", lookup_then_deactivate)

    reset.execute(_issued_token(notifier), "new-password")

    stored = users.get_by_email("ann@example.com")
    assert stored.password_hash == "hashed:new-password"
    assert stored.is_active is False
