# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import Session, User


class UserRepository(Protocol):
    """Durable user records.

    Lookups raise ``UserNotFoundError`` instead of returning ``None``; ``add``
    raises ``DuplicateEmailError`` from the store's own uniqueness constraint.
    Timestamps are always assigned by the store.
    """

    def add(self, user: User) -> User: ...
    def get_by_id(self, user_id: str) -> User: ...
    def get_by_email(self, email: str) -> User: ...
    def update(self, user: User) -> User: ...
    def update_last_login(self, user_id: str) -> None: ...
    def set_reset_token(self, email: str, token: str, expires_at: datetime) -> None: ...
    def get_by_reset_token(self, token: str) -> User: ...
    def clear_reset_token(self, user_id: str) -> None: ...

    def set_password(self, user_id: str, password_hash: str) -> None:
        """Replace the hash and clear the reset token; other fields are untouched."""
        ...


class SessionRepository(Protocol):
    """Expiring session records with a per-user index.

    ``get`` raises ``SessionNotFoundError`` for unknown ids and
    ``SessionExpiredError`` (after dropping the entry) once ``expires_at`` has
    passed, whatever the store's own TTL says.
    """

    def create(self, session: Session) -> None: ...
    def get(self, session_id: str) -> Session: ...
    def delete(self, session_id: str) -> None: ...
    def delete_all_for_user(self, user_id: str) -> None: ...
    def update(self, session: Session) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
    def generate_token(self, byte_length: int) -> str: ...
