# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authcenter.application.services.session_issuer import AuthResult, SessionIssuer
from authcenter.domain.users.exceptions import (
    AccountDeactivatedError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from authcenter.domain.users.repositories import PasswordHasher, UserRepository
from authcenter.shared.errors import AppError, operation_context
from authcenter.shared.logging import logger

_TIMING_DUMMY_PASSWORD = "authcenter-timing-equalization"


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        session_issuer: SessionIssuer,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._session_issuer = session_issuer
        self._dummy_hash: str | None = None

    def execute(self, email: str, password: str) -> AuthResult:
        with operation_context("login"):
            try:
                user = self._users.get_by_email(email)
            except UserNotFoundError:
                # Same hashing cost as a real check, so timing does not reveal the account.
                self._password_hasher.verify(password, self._timing_dummy_hash())
                logger.info("auth.login: rejected unknown email")
                raise InvalidCredentialsError() from None

            if not self._password_hasher.verify(password, user.password_hash):
                logger.info(f"auth.login: rejected bad password user_id={user.id}")
                raise InvalidCredentialsError()

            if not user.is_active:
                logger.info(f"auth.login: rejected deactivated user_id={user.id}")
                raise AccountDeactivatedError()

            try:
                self._users.update_last_login(user.id)
            except AppError:
                logger.exception(f"auth.login: failed to record last login user_id={user.id}")

            result = self._session_issuer.issue(user)

        logger.info(f"auth.login: ok user_id={user.id}")
        return result

    def _timing_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_hasher.hash(_TIMING_DUMMY_PASSWORD)
        return self._dummy_hash
