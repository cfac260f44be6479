# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authcenter.shared.errors.base import DomainError


class EmailTakenError(DomainError):
    code = "email_taken"
    status = HTTPStatus.CONFLICT


DuplicateEmailError = EmailTakenError


class InvalidRoleError(DomainError):
    code = "invalid_role"


class WeakPasswordError(DomainError):
    code = "weak_password"
    status = HTTPStatus.UNPROCESSABLE_ENTITY


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class AccountDeactivatedError(DomainError):
    code = "account_deactivated"
    status = HTTPStatus.FORBIDDEN


class NotFoundError(DomainError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND


class UserNotFoundError(NotFoundError):
    code = "user_not_found"


class SessionNotFoundError(NotFoundError):
    code = "session_not_found"
    status = HTTPStatus.UNAUTHORIZED


class SessionExpiredError(DomainError):
    code = "session_expired"
    status = HTTPStatus.UNAUTHORIZED


class InvalidOrExpiredTokenError(DomainError):
    code = "invalid_or_expired_token"
