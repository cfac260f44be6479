# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from authcenter.domain.exceptions import InvariantViolation


class UserRole(str, Enum):
    ADMIN = "admin"
    THERAPIST = "therapist"
    STAFF = "staff"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_


@dataclass(slots=True, frozen=True)
class User:

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool = True
    email_verified: bool = False
    last_login: datetime | None = None
    password_reset_token: str | None = None
    password_reset_expiry: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if (self.password_reset_token is None) != (self.password_reset_expiry is None):
            raise InvariantViolation(
                "reset token and its expiry must be set together",
                field="password_reset_token",
            )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(slots=True, frozen=True)
class Session:
    """Revocable authentication grant.

    ``email`` and ``role`` are copied from the user when the session is issued
    and stay as they were until the session is explicitly refreshed.
    """

    id: str
    user_id: str
    email: str
    role: UserRole
    created_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at <= self.created_at:
            raise InvariantViolation("session must expire after it is created", field="expires_at")

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at
