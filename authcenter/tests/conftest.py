from __future__ import annotations

import pytest

from authcenter.application.services.session_issuer import SessionIssuer
from authcenter.infrastructure.sessions.in_memory_session_repository import (
    InMemorySessionRepository,
)
from authcenter.tests.doubles import (
    SESSION_LIFETIME,
    DeterministicHasher,
    FakeClock,
    FakeRedis,
    InMemoryUserRepository,
    StaticBearerTokens,
)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def users(clock: FakeClock) -> InMemoryUserRepository:
    return InMemoryUserRepository(clock)


@pytest.fixture()
def sessions(clock: FakeClock) -> InMemorySessionRepository:
    return InMemorySessionRepository(clock=clock)


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def issuer(sessions: InMemorySessionRepository, clock: FakeClock) -> SessionIssuer:
    return SessionIssuer(
        sessions=sessions,
        bearer_tokens=StaticBearerTokens(),
        session_lifetime=SESSION_LIFETIME,
        clock=clock,
    )


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()
