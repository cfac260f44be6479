# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authcenter.domain.users.entities import User as DomainUser
from authcenter.domain.users.entities import UserRole
from authcenter.domain.users.exceptions import DuplicateEmailError, UserNotFoundError
from authcenter.domain.users.repositories import UserRepository
from authcenter.infrastructure.db.models import User
from authcenter.infrastructure.unit_of_work import unit_of_work_scope
from authcenter.shared.errors import StoreError
from authcenter.shared.logging import logger
from authcenter.shared.utils.clock import Clock, as_utc, utc_now


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        role=UserRole(row.role),
        is_active=bool(row.is_active),
        email_verified=bool(row.email_verified),
        last_login=as_utc(row.last_login) if row.last_login else None,
        password_reset_token=row.password_reset_token,
        password_reset_expiry=(
            as_utc(row.password_reset_expiry) if row.password_reset_expiry else None
        ),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: Callable[[], Session], *, clock: Clock = utc_now):
        self._session_factory = session_factory
        self._clock = clock

    @contextmanager
    def _scope(self, operation: str) -> Iterator[Session]:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.warning(f"users.store: {operation} failed: {type(exc).__name__}")
            raise StoreError("users", operation) from exc

    def add(self, user: DomainUser) -> DomainUser:
        now = self._clock()
        try:
            with self._scope("add") as session:
                row = User(
                    email=user.email,
                    password_hash=user.password_hash,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    role=user.role.value,
                    is_active=True,
                    email_verified=False,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
                session.flush()
                persisted = _to_domain(row)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc
        return persisted

    def get_by_id(self, user_id: str) -> DomainUser:
        with self._scope("get_by_id") as session:
            row = session.get(User, user_id)
            if row is None:
                raise UserNotFoundError()
            return _to_domain(row)

    def get_by_email(self, email: str) -> DomainUser:
        with self._scope("get_by_email") as session:
            row = session.scalars(select(User).where(User.email == email)).first()
            if row is None:
                raise UserNotFoundError()
            return _to_domain(row)

    def update(self, user: DomainUser) -> DomainUser:
        try:
            with self._scope("update") as session:
                row = session.get(User, user.id)
                if row is None:
                    raise UserNotFoundError()
                row.email = user.email
                row.password_hash = user.password_hash
                row.first_name = user.first_name
                row.last_name = user.last_name
                row.role = user.role.value
                row.is_active = user.is_active
                row.email_verified = user.email_verified
                row.password_reset_token = user.password_reset_token
                row.password_reset_expiry = user.password_reset_expiry
                row.updated_at = self._clock()
                session.flush()
                return _to_domain(row)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

    def update_last_login(self, user_id: str) -> None:
        now = self._clock()
        self._update_where(
            "update_last_login",
            User.id == user_id,
            {"last_login": now, "updated_at": now},
        )

    def set_reset_token(self, email: str, token: str, expires_at: datetime) -> None:
        self._update_where(
            "set_reset_token",
            User.email == email,
            {
                "password_reset_token": token,
                "password_reset_expiry": expires_at,
                "updated_at": self._clock(),
            },
        )

    def get_by_reset_token(self, token: str) -> DomainUser:
        with self._scope("get_by_reset_token") as session:
            row = session.scalars(
                select(User).where(
                    User.password_reset_token == token,
                    User.password_reset_expiry > self._clock(),
                )
            ).first()
            if row is None:
                raise UserNotFoundError()
            return _to_domain(row)

    def clear_reset_token(self, user_id: str) -> None:
        self._update_where(
            "clear_reset_token",
            User.id == user_id,
            {
                "password_reset_token": None,
                "password_reset_expiry": None,
                "updated_at": self._clock(),
            },
        )

    def set_password(self, user_id: str, password_hash: str) -> None:
        self._update_where(
            "set_password",
            User.id == user_id,
            {
                "password_hash": password_hash,
                "password_reset_token": None,
                "password_reset_expiry": None,
                "updated_at": self._clock(),
            },
        )

    def _update_where(self, operation: str, condition, values: dict) -> None:
        with self._scope(operation) as session:
            result = session.execute(update(User).where(condition).values(**values))
            if result.rowcount == 0:
                raise UserNotFoundError()
