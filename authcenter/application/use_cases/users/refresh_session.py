# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import replace

from authcenter.domain.users.entities import Session
from authcenter.domain.users.exceptions import AccountDeactivatedError
from authcenter.domain.users.repositories import SessionRepository, UserRepository
from authcenter.shared.errors import operation_context
from authcenter.shared.logging import logger


class RefreshSessionUseCase:
    """Re-copy email and role from the user record into an existing session.

    The expiry is kept; refreshing never extends a session's lifetime.
    """

    def __init__(self, *, users: UserRepository, sessions: SessionRepository) -> None:
        self._users = users
        self._sessions = sessions

    def execute(self, session_id: str) -> Session:
        with operation_context("refresh_session"):
            session = self._sessions.get(session_id)
            user = self._users.get_by_id(session.user_id)
            if not user.is_active:
                raise AccountDeactivatedError()
            refreshed = replace(session, email=user.email, role=user.role)
            self._sessions.update(refreshed)

        if refreshed.role != session.role:
            logger.info(
                f"auth.session_refresh: role {session.role.value} -> {refreshed.role.value} "
                f"user_id={user.id}"
            )
        return refreshed
