# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from authcenter.application.interfaces import ResetNotificationPort
from authcenter.shared.logging import logger


class LoggingResetNotifier(ResetNotificationPort):
    """Stand-in delivery channel until an email transport is wired in."""

    def send_reset_token(self, email: str, token: str, expires_at: datetime) -> None:
        logger.info(
            f"Password reset issued for {email} exp={expires_at.isoformat()} tok={token[:8]}…"
        )
