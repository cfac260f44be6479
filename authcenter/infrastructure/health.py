# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from redis import Redis
from sqlalchemy import text
from sqlalchemy.orm import Session


def check_database(session_factory: Callable[[], Session]) -> bool:
    with session_factory() as session:
        session.execute(text("SELECT 1"))
    return True


def check_redis(client: Redis) -> bool:
    return bool(client.ping())


__all__ = ["check_database", "check_redis"]
