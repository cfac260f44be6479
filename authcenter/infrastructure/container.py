# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import cached_property

from redis import Redis
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from authcenter.application.services.bearer_tokens import JwtTokenIssuer
from authcenter.application.services.password_hashing import WerkzeugPasswordHasher
from authcenter.application.services.session_issuer import SessionIssuer
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
from authcenter.domain.users.repositories import SessionRepository
from authcenter.infrastructure.db import build_engine, build_session_factory, init_db
from authcenter.infrastructure.notifications import LoggingResetNotifier
from authcenter.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from authcenter.infrastructure.sessions.in_memory_session_repository import (
    InMemorySessionRepository,
)
from authcenter.infrastructure.sessions.redis_session_repository import (
    RedisSessionRepository,
)
from authcenter.interfaces.http.controllers.auth_controller import AuthController
from authcenter.interfaces.http.controllers.misc_controller import MiscController
from authcenter.shared.config import AppConfig
from authcenter.shared.logging import logger


class Container:
    """Wires stores, services and use cases from one ``AppConfig``.

    ``session_factory`` and ``redis_client`` override what the config would
    build, which is how tests plug in SQLite files and fake clients.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        session_factory: Callable[[], Session] | None = None,
        redis_client: Redis | None = None,
    ) -> None:
        self.config = config
        self._session_factory_override = session_factory
        self._redis_client_override = redis_client

    # Stores

    @cached_property
    def engine(self) -> Engine:
        engine = build_engine(self.config.database)
        init_db(engine)
        return engine

    @cached_property
    def session_factory(self) -> Callable[[], Session]:
        if self._session_factory_override is not None:
            return self._session_factory_override
        return build_session_factory(self.engine)

    @cached_property
    def redis_client(self) -> Redis:
        if self._redis_client_override is not None:
            return self._redis_client_override
        return Redis.from_url(self.config.redis.url, decode_responses=True)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.session_factory)

    @cached_property
    def session_repository(self) -> SessionRepository:
        backend = self.config.redis.session_backend
        logger.info(f"sessions: using {backend} backend")
        if backend == "memory":
            return InMemorySessionRepository()
        return RedisSessionRepository(
            self.redis_client, key_prefix=self.config.redis.key_prefix
        )

    # Services

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(
            method=self.config.password.hash_method,
            min_length=self.config.password.min_length,
        )

    @cached_property
    def bearer_tokens(self) -> JwtTokenIssuer:
        return JwtTokenIssuer(
            secret=self.config.jwt.secret,
            lifetime=self.config.jwt.expires_in,
            algorithm=self.config.jwt.algorithm,
        )

    @cached_property
    def session_issuer(self) -> SessionIssuer:
        return SessionIssuer(
            sessions=self.session_repository,
            bearer_tokens=self.bearer_tokens,
            session_lifetime=self.config.session.expires_in,
        )

    @cached_property
    def reset_notifier(self) -> LoggingResetNotifier:
        return LoggingResetNotifier()

    # Use cases

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            session_issuer=self.session_issuer,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            session_issuer=self.session_issuer,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(sessions=self.session_repository)

    @cached_property
    def get_session_use_case(self) -> GetSessionUseCase:
        return GetSessionUseCase(sessions=self.session_repository)

    @cached_property
    def validate_session_use_case(self) -> ValidateSessionUseCase:
        return ValidateSessionUseCase(
            users=self.user_repository, sessions=self.session_repository
        )

    @cached_property
    def refresh_session_use_case(self) -> RefreshSessionUseCase:
        return RefreshSessionUseCase(
            users=self.user_repository, sessions=self.session_repository
        )

    @cached_property
    def request_password_reset_use_case(self) -> RequestPasswordResetUseCase:
        return RequestPasswordResetUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            notifications=self.reset_notifier,
            reset_lifetime=self.config.password.reset_expires_in,
        )

    @cached_property
    def reset_password_use_case(self) -> ResetPasswordUseCase:
        return ResetPasswordUseCase(
            users=self.user_repository,
            sessions=self.session_repository,
            password_hasher=self.password_hasher,
        )

    # HTTP

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            get_session_use_case=self.get_session_use_case,
            validate_session_use_case=self.validate_session_use_case,
            refresh_session_use_case=self.refresh_session_use_case,
            request_password_reset_use_case=self.request_password_reset_use_case,
            reset_password_use_case=self.reset_password_use_case,
            security=self.config.security,
            session_lifetime=self.config.session.expires_in,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        redis_client = (
            self.redis_client if self.config.redis.session_backend == "redis" else None
        )
        return MiscController(session_factory=self.session_factory, redis_client=redis_client)
