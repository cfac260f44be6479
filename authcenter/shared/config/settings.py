# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import re
import sys
from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_by_name=True,
    extra="ignore",
)


def parse_duration(value: Any) -> Any:
    """Accept Go-style durations ("24h", "1h30m", "7200s") on top of pydantic's formats."""
    if not isinstance(value, str):
        return value
    raw = value.strip().lower()
    if not raw:
        return value
    if raw.isdigit():
        return timedelta(seconds=int(raw))
    parts = _DURATION_PART.findall(raw)
    if not parts or "".join(num + unit for num, unit in parts) != raw:
        return value
    seconds = sum(float(num) * _DURATION_UNITS[unit] for num, unit in parts)
    return timedelta(seconds=seconds)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///authcenter.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class RedisConfig(BaseSettings):
    url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    key_prefix: str = Field("auth", min_length=1, alias="REDIS_KEY_PREFIX")
    session_backend: str = Field("redis", alias="SESSION_BACKEND")

    model_config = _SECTION_CONFIG

    @field_validator("session_backend", mode="before")
    @classmethod
    def _parse_backend(cls, value: str) -> str:
        backend = str(value).strip().lower()
        if backend not in ("redis", "memory"):
            raise ValueError("SESSION_BACKEND must be 'redis' or 'memory'")
        return backend


class JWTConfig(BaseSettings):
    secret: str = Field("dev", alias="JWT_SECRET")
    expires_in: timedelta = Field(timedelta(hours=24), alias="JWT_EXPIRES_IN")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")

    model_config = _SECTION_CONFIG

    @field_validator("expires_in", mode="before")
    @classmethod
    def _parse_expires_in(cls, value: Any) -> Any:
        return parse_duration(value)


class SessionConfig(BaseSettings):
    expires_in: timedelta = Field(timedelta(seconds=7200), alias="SESSION_EXPIRES_IN")

    model_config = _SECTION_CONFIG

    @field_validator("expires_in", mode="before")
    @classmethod
    def _parse_expires_in(cls, value: Any) -> Any:
        return parse_duration(value)


class PasswordConfig(BaseSettings):
    reset_expires_in: timedelta = Field(
        timedelta(seconds=3600), alias="PASSWORD_RESET_EXPIRES_IN"
    )
    min_length: int = Field(8, ge=1, alias="PASSWORD_MIN_LENGTH")
    hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")

    model_config = _SECTION_CONFIG

    @field_validator("reset_expires_in", mode="before")
    @classmethod
    def _parse_reset_expires_in(cls, value: Any) -> Any:
        return parse_duration(value)


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("cookie_secure", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _redis_config_factory() -> RedisConfig:
    return RedisConfig()  # type: ignore[call-arg]


def _jwt_config_factory() -> JWTConfig:
    return JWTConfig()  # type: ignore[call-arg]


def _session_config_factory() -> SessionConfig:
    return SessionConfig()  # type: ignore[call-arg]


def _password_config_factory() -> PasswordConfig:
    return PasswordConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    port: int = Field(8080, ge=1, le=65535, alias="PORT")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    redis: RedisConfig = Field(default_factory=_redis_config_factory)
    jwt: JWTConfig = Field(default_factory=_jwt_config_factory)
    session: SessionConfig = Field(default_factory=_session_config_factory)
    password: PasswordConfig = Field(default_factory=_password_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        validate_by_name=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.jwt.secret in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure JWT_SECRET detected in production!\n"
                "   JWT_SECRET must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.security.cookie_secure:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if self.redis.session_backend == "memory":
            warnings.append("⚠️  Sessions are kept in process memory")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


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
