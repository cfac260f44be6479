# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time

from flask import Flask, Response, g, request

from authcenter.shared.logging import clear_correlation_id, logger, set_correlation_id

REQUEST_ID_HEADER = "X-Request-ID"

# Values that identify a session or credential are fingerprinted, never logged.
_CREDENTIAL_HEADERS = frozenset({"authorization", "cookie", "x-session-id"})
_CREDENTIAL_PARAMS = ("password", "token", "session", "secret")


def _fingerprint(value: str) -> str:
    return f"<sha256:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _session_carrier() -> str:
    """Where the caller put its session id, without revealing the id itself."""
    if request.headers.get("X-Session-ID"):
        return "header"
    if request.headers.get("Authorization", "").startswith("Bearer "):
        return "bearer"
    if request.cookies.get("session_id"):
        return "cookie"
    if request.args.get("session_id"):
        return "query"
    return "none"


def _safe_headers() -> dict[str, str]:
    return {
        key: _fingerprint(value) if key.lower() in _CREDENTIAL_HEADERS else value
        for key, value in request.headers.items()
    }


def _safe_args() -> dict[str, str]:
    return {
        key: "<redacted>" if any(word in key.lower() for word in _CREDENTIAL_PARAMS) else value
        for key, value in request.args.items()
    }


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:
    @app.before_request
    def _before_request() -> None:
        set_correlation_id(request.headers.get(REQUEST_ID_HEADER) or secrets.token_urlsafe(8))
        g.request_start_time = time.perf_counter()

        if debug_mode:
            logger.info(
                f"Request started: {request.method} {request.path} from {_client_ip()} "
                f"session={_session_carrier()} query={_safe_args()} headers={_safe_headers()} "
                f"body_size={len(request.data)}"
            )
        else:
            logger.info(f"Request: {request.method} {request.path} from {_client_ip()}")

    @app.after_request
    def _after_request(response: Response) -> Response:
        elapsed = time.perf_counter() - getattr(g, "request_start_time", time.perf_counter())
        user_id = getattr(g, "user_id", None)
        logger.info(
            f"Response: {request.method} {request.path} status={response.status_code} "
            f"duration={elapsed:.3f}s user={user_id or '-'}"
        )
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(
                f"Request error: {type(exc).__name__} on {request.method} {request.path}"
            )
        clear_correlation_id()


__all__ = ["configure_request_logging"]
