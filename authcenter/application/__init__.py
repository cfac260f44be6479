# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import BearerTokenIssuer, ResetNotificationPort

__all__ = [
    "BearerTokenIssuer",
    "ResetNotificationPort",
]
