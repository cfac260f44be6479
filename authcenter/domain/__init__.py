# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .exceptions import DomainError, InvariantViolation
from .users.entities import Session, User, UserRole

__all__ = [
    "DomainError",
    "InvariantViolation",
    "Session",
    "User",
    "UserRole",
]
