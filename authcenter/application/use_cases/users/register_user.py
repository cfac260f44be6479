# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from authcenter.application.services.session_issuer import AuthResult, SessionIssuer
from authcenter.domain.users.entities import User, UserRole
from authcenter.domain.users.exceptions import (
    EmailTakenError,
    InvalidRoleError,
    UserNotFoundError,
)
from authcenter.domain.users.repositories import PasswordHasher, UserRepository
from authcenter.shared.errors import operation_context
from authcenter.shared.logging import logger


class RegisterUserUseCase:
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

    def execute(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str,
    ) -> AuthResult:
        with operation_context("register"):
            if self._email_exists(email):
                raise EmailTakenError()
            if not UserRole.is_valid(role):
                raise InvalidRoleError(context={"allowed": [r.value for r in UserRole]})

            hashed = self._password_hasher.hash(password)
            user = User(
                id="",
                email=email,
                password_hash=hashed,
                first_name=first_name,
                last_name=last_name,
                role=UserRole(role),
            )
            # the store's unique index settles concurrent registrations
            persisted = self._users.add(user)
            result = self._session_issuer.issue(persisted)

        logger.info(f"auth.register: ok user_id={persisted.id} role={persisted.role.value}")
        return result

    def _email_exists(self, email: str) -> bool:
        try:
            self._users.get_by_email(email)
        except UserNotFoundError:
            return False
        return True
