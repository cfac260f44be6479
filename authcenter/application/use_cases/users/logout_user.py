"""Use-case for revoking sessions."""

from __future__ import annotations

from authcenter.domain.users.repositories import SessionRepository
from authcenter.shared.errors import operation_context
from authcenter.shared.logging import logger


class LogoutUserUseCase:
    def __init__(self, *, sessions: SessionRepository) -> None:
        self._sessions = sessions

    def execute(self, session_id: str) -> None:
        if not session_id:
            return
        with operation_context("logout"):
            self._sessions.delete(session_id)
        logger.info("auth.logout: session revoked")
