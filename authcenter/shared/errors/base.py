# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(self, "code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(self, "status", HTTPStatus.BAD_REQUEST)
        )
        super().__init__(code=resolved_code, status=resolved_status, context=context)


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, context=context)


class ValidationError(AppError):
    def __init__(
        self,
        code: str = "validation_error",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            context=context,
        )


class StoreError(InfrastructureError):
    """A user or session store call failed at the driver level."""

    def __init__(self, store: str, operation: str) -> None:
        super().__init__(
            code="store_unavailable",
            context={"store": store, "store_operation": operation},
        )


class RandomSourceError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__(code="random_source_failure")


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Tag infrastructure failures with the engine operation they interrupted."""
    try:
        yield
    except InfrastructureError as exc:
        exc.context = {**(exc.context or {}), "operation": operation}
        exc.add_note(f"during {operation}")
        raise


__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "RandomSourceError",
    "StoreError",
    "ValidationError",
    "operation_context",
]
