# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authcenter.domain.users.entities import Session
from authcenter.domain.users.repositories import SessionRepository
from authcenter.shared.errors import operation_context


class GetSessionUseCase:
    def __init__(self, *, sessions: SessionRepository) -> None:
        self._sessions = sessions

    def execute(self, session_id: str) -> Session:
        with operation_context("get_session"):
            return self._sessions.get(session_id)
