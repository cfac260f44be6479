# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from authcenter.application.interfaces import BearerTokenIssuer
from authcenter.domain.users.entities import Session, User
from authcenter.domain.users.repositories import SessionRepository
from authcenter.shared.utils.clock import Clock, utc_now


@dataclass(slots=True, frozen=True)
class PublicUser:
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    email_verified: bool
    created_at: int

    @classmethod
    def from_user(cls, user: User) -> PublicUser:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            is_active=user.is_active,
            email_verified=user.email_verified,
            created_at=int(user.created_at.timestamp()) if user.created_at else 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_active": self.is_active,
            "email_verified": self.email_verified,
            "created_at": self.created_at,
        }


@dataclass(slots=True, frozen=True)
class AuthResult:
    user: PublicUser
    token: str
    session_id: str
    expires_at: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "token": self.token,
            "session_id": self.session_id,
            "expires_at": self.expires_at,
        }


class SessionIssuer:
    """Creates the session and bearer token handed out by register and login."""

    def __init__(
        self,
        *,
        sessions: SessionRepository,
        bearer_tokens: BearerTokenIssuer,
        session_lifetime: timedelta,
        clock: Clock = utc_now,
    ) -> None:
        self._sessions = sessions
        self._bearer_tokens = bearer_tokens
        self._session_lifetime = session_lifetime
        self._clock = clock

    def issue(self, user: User) -> AuthResult:
        token = self._bearer_tokens.issue(user)
        session = self.new_session(user, self._clock())
        self._sessions.create(session)
        return AuthResult(
            user=PublicUser.from_user(user),
            token=token,
            session_id=session.id,
            expires_at=int(session.expires_at.timestamp()),
        )

    def new_session(self, user: User, now: datetime) -> Session:
        return Session(
            id=secrets.token_urlsafe(32),
            user_id=user.id,
            email=user.email,
            role=user.role,
            created_at=now,
            expires_at=now + self._session_lifetime,
        )


__all__ = ["AuthResult", "PublicUser", "SessionIssuer"]
