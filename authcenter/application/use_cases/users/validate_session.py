# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authcenter.domain.users.entities import User
from authcenter.domain.users.exceptions import AccountDeactivatedError
from authcenter.domain.users.repositories import SessionRepository, UserRepository
from authcenter.shared.errors import operation_context


class ValidateSessionUseCase:
    """Resolve a session id to its current, active user.

    The user record is re-read on every call, so deactivating an account
    locks out all of its sessions without touching the session store.
    """

    def __init__(self, *, users: UserRepository, sessions: SessionRepository) -> None:
        self._users = users
        self._sessions = sessions

    def execute(self, session_id: str) -> User:
        with operation_context("validate_session"):
            session = self._sessions.get(session_id)
            user = self._users.get_by_id(session.user_id)
        if not user.is_active:
            raise AccountDeactivatedError()
        return user
