# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

from authcenter.application.interfaces import ResetNotificationPort
from authcenter.domain.users.exceptions import UserNotFoundError
from authcenter.domain.users.repositories import PasswordHasher, UserRepository
from authcenter.shared.errors import operation_context
from authcenter.shared.logging import logger
from authcenter.shared.utils.clock import Clock, utc_now

RESET_TOKEN_BYTES = 32


class RequestPasswordResetUseCase:
    """Issue a reset token for ``email`` if, and only if, the account exists.

    The caller sees the same outcome either way, including when delivery of
    the token fails.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        notifications: ResetNotificationPort,
        reset_lifetime: timedelta,
        clock: Clock = utc_now,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._notifications = notifications
        self._reset_lifetime = reset_lifetime
        self._clock = clock

    def execute(self, email: str) -> None:
        with operation_context("request_password_reset"):
            try:
                user = self._users.get_by_email(email)
            except UserNotFoundError:
                logger.info("auth.password_reset: requested for unknown email")
                return

            token = self._password_hasher.generate_token(RESET_TOKEN_BYTES)
            expires_at = self._clock() + self._reset_lifetime
            try:
                self._users.set_reset_token(user.email, token, expires_at)
            except UserNotFoundError:
                logger.info(f"auth.password_reset: user_id={user.id} vanished before token was stored")
                return

        try:
            self._notifications.send_reset_token(user.email, token, expires_at)
        except Exception:
            logger.exception(f"auth.password_reset: notification failed user_id={user.id}")
            return
        logger.info(f"auth.password_reset: token issued user_id={user.id}")
