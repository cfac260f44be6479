# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from authcenter.domain.users.entities import User


class BearerTokenIssuer(Protocol):
    def issue(self, user: User) -> str: ...


class ResetNotificationPort(Protocol):
    """Delivers a reset token to its owner; delivery is not confirmed or retried."""

    def send_reset_token(self, email: str, token: str, expires_at: datetime) -> None: ...
