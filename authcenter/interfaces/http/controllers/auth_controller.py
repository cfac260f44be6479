# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from http import HTTPStatus
from typing import Any

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from authcenter.application.services.session_issuer import AuthResult
from authcenter.application.use_cases.users.get_session import GetSessionUseCase
from authcenter.application.use_cases.users.login_user import LoginUserUseCase
from authcenter.application.use_cases.users.logout_user import LogoutUserUseCase
from authcenter.application.use_cases.users.refresh_session import RefreshSessionUseCase
from authcenter.application.use_cases.users.register_user import RegisterUserUseCase
from authcenter.application.use_cases.users.request_password_reset import (
    RequestPasswordResetUseCase,
)
from authcenter.application.use_cases.users.reset_password import ResetPasswordUseCase
from authcenter.application.use_cases.users.validate_session import ValidateSessionUseCase
from authcenter.domain.users.entities import Session
from authcenter.interfaces.http.dto.auth import (
    LoginRequestDTO,
    MessageDTO,
    PasswordResetRequestDTO,
    RegisterRequestDTO,
    ResetPasswordDTO,
)
from authcenter.interfaces.http.session import SESSION_COOKIE, require_session
from authcenter.shared.config import SecurityConfig
from authcenter.shared.errors.validation import raise_validation_error
from authcenter.shared.logging import logger

RESET_REQUESTED_MESSAGE = "If the email exists, a password reset link has been sent"


def _message(message: str, data: dict[str, Any] | None = None) -> Response:
    return jsonify(MessageDTO(message=message, data=data).model_dump())


def _session_payload(session: Session) -> dict[str, Any]:
    return {
        "id": session.id,
        "user_id": session.user_id,
        "email": session.email,
        "role": session.role.value,
        "created_at": int(session.created_at.timestamp()),
        "expires_at": int(session.expires_at.timestamp()),
    }


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        get_session_use_case: GetSessionUseCase,
        validate_session_use_case: ValidateSessionUseCase,
        refresh_session_use_case: RefreshSessionUseCase,
        request_password_reset_use_case: RequestPasswordResetUseCase,
        reset_password_use_case: ResetPasswordUseCase,
        security: SecurityConfig,
        session_lifetime: timedelta,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._get_session_use_case = get_session_use_case
        self._validate_session_use_case = validate_session_use_case
        self._refresh_session_use_case = refresh_session_use_case
        self._request_password_reset_use_case = request_password_reset_use_case
        self._reset_password_use_case = reset_password_use_case
        self._security = security
        self._session_lifetime = session_lifetime

    def _with_session_cookie(self, response: Response, result: AuthResult) -> Response:
        response.set_cookie(
            SESSION_COOKIE,
            result.session_id,
            httponly=True,
            samesite=self._security.cookie_samesite,
            secure=self._security.cookie_secure,
            max_age=int(self._session_lifetime.total_seconds()),
        )
        return response

    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        result = self._register_use_case.execute(
            dto.email, dto.password, dto.first_name, dto.last_name, dto.role
        )
        response = _message("User registered successfully", result.to_dict())
        return self._with_session_cookie(response, result), HTTPStatus.CREATED

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        result = self._login_use_case.execute(dto.email, dto.password)
        response = _message("Login successful", result.to_dict())
        return self._with_session_cookie(response, result), HTTPStatus.OK

    def logout(self) -> tuple[Response, int]:
        self._logout_use_case.execute(g.session_id)
        response = _message("Logged out successfully")
        response.delete_cookie(SESSION_COOKIE)
        logger.info(f"auth.logout: ok user_id={g.user_id}")
        return response, HTTPStatus.OK

    def get_session(self) -> tuple[Response, int]:
        session = self._get_session_use_case.execute(g.session_id)
        return _message("Session retrieved", {"session": _session_payload(session)}), HTTPStatus.OK

    def refresh_session(self) -> tuple[Response, int]:
        session = self._refresh_session_use_case.execute(g.session_id)
        return _message("Session refreshed", {"session": _session_payload(session)}), HTTPStatus.OK

    def request_password_reset(self) -> tuple[Response, int]:
        try:
            dto = PasswordResetRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        self._request_password_reset_use_case.execute(dto.email)
        return _message(RESET_REQUESTED_MESSAGE), HTTPStatus.OK

    def reset_password(self) -> tuple[Response, int]:
        try:
            dto = ResetPasswordDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        self._reset_password_use_case.execute(dto.token, dto.new_password)
        return _message("Password reset successfully"), HTTPStatus.OK

    def as_blueprint(self) -> Blueprint:
        protected = require_session(self._validate_session_use_case)

        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule(
            "/request-password-reset",
            view_func=self.request_password_reset,
            methods=["POST"],
        )
        bp.add_url_rule("/reset-password", view_func=self.reset_password, methods=["POST"])
        bp.add_url_rule("/logout", view_func=protected(self.logout), methods=["POST"])
        bp.add_url_rule("/session", view_func=protected(self.get_session), methods=["GET"])
        bp.add_url_rule(
            "/session/refresh",
            view_func=protected(self.refresh_session),
            methods=["POST"],
        )
        return bp
