# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction of credentials before a log line reaches any sink."""

from __future__ import annotations

import re
from typing import Any

_REDACTED = "***REDACTED***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, flags), replacement)
    for pattern, replacement, flags in (
        # JWT signing secret
        (r"(jwt[_-]?secret\s*[:=]\s*['\"]?)[^\s'\"]{6,}", rf"\1{_REDACTED}", re.IGNORECASE),
        # bearer credentials, either JWTs or session ids
        (r"(bearer\s+)[\w\-.]{20,}", rf"\1{_REDACTED}", re.IGNORECASE),
        (r"(authorization\s*:\s*['\"]?)[^'\"\s]{10,}", rf"\1{_REDACTED}", re.IGNORECASE),
        # reset tokens and session ids
        (r"((?:reset[_-]?)?token\s*[:=]\s*['\"]?)[\w\-.]{16,}", rf"\1{_REDACTED}", re.IGNORECASE),
        (r"(session[_-]?id\s*[:=]\s*['\"]?)[\w\-.]{20,}", rf"\1{_REDACTED}", re.IGNORECASE),
        # passwords and their hashes
        (r"(password(?:_hash)?\s*[:=]\s*['\"]?)[^'\"\s]{6,}", rf"\1{_REDACTED}", re.IGNORECASE),
        # credentials embedded in database / redis URLs
        (r"((?:postgres(?:ql)?|mysql|redis|rediss)(?:\+\w+)?://[^:/@]*:)[^@]+@", rf"\1{_REDACTED}@", 0),
        # e-mail local parts
        (r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})", r"***@\1", 0),
    )
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: rewrites the message in place and never drops the record."""
    record["message"] = sanitize_message(record["message"])
    return True
