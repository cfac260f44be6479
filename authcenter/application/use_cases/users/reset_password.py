# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authcenter.domain.users.exceptions import InvalidOrExpiredTokenError, UserNotFoundError
from authcenter.domain.users.repositories import (
    PasswordHasher,
    SessionRepository,
    UserRepository,
)
from authcenter.shared.errors import AppError, operation_context
from authcenter.shared.logging import logger


class ResetPasswordUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        sessions: SessionRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._password_hasher = password_hasher

    def execute(self, token: str, new_password: str) -> None:
        if not token:
            raise InvalidOrExpiredTokenError()

        with operation_context("reset_password"):
            try:
                # expiry is enforced by the store as part of the lookup
                user = self._users.get_by_reset_token(token)
            except UserNotFoundError:
                raise InvalidOrExpiredTokenError() from None

            hashed = self._password_hasher.hash(new_password)
            # single targeted write; flags changed since the lookup survive
            self._users.set_password(user.id, hashed)

        try:
            self._sessions.delete_all_for_user(user.id)
        except AppError:
            # Revocation is best-effort; the password change itself stands.
            logger.exception(f"auth.reset_password: session revocation failed user_id={user.id}")
        logger.info(f"auth.reset_password: ok user_id={user.id}")
