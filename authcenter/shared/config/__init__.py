# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import (
    AppConfig,
    DatabaseConfig,
    JWTConfig,
    PasswordConfig,
    RedisConfig,
    SecurityConfig,
    SessionConfig,
    load_config,
    parse_duration,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "JWTConfig",
    "PasswordConfig",
    "RedisConfig",
    "SecurityConfig",
    "SessionConfig",
    "load_config",
    "parse_duration",
]
