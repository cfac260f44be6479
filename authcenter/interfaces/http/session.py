# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g, jsonify, request

from authcenter.application.use_cases.users.validate_session import ValidateSessionUseCase
from authcenter.shared.errors import DomainError
from authcenter.shared.logging import logger

SESSION_HEADER = "X-Session-ID"
SESSION_COOKIE = "session_id"


def extract_session_id() -> str:
    """Session id from header, bearer, cookie, then query string; first non-empty wins."""
    session_id = request.headers.get(SESSION_HEADER, "").strip()
    if session_id:
        return session_id

    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        session_id = auth[7:].strip()
        if session_id:
            return session_id

    session_id = request.cookies.get(SESSION_COOKIE, "")
    if session_id:
        return session_id

    return request.args.get(SESSION_COOKIE, "")


def require_session(validate: ValidateSessionUseCase) -> Callable:
    """Reject requests without a live session; otherwise populate ``flask.g``.

    Engine errors (expired, deactivated, store down) propagate to the
    registered error handlers.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def inner(*a, **kw):
            session_id = extract_session_id()
            if not session_id:
                logger.warning(
                    f"No session id on {request.method} {request.path} "
                    f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
                )
                return jsonify({"error": "unauthorized"}), 401

            user = validate.execute(session_id)
            g.user = user
            g.session_id = session_id
            g.user_id = user.id
            g.user_role = user.role.value
            logger.debug(f"Session OK: user={user.id} {request.method} {request.path}")
            return f(*a, **kw)

        return inner

    return decorator


def optional_session(validate: ValidateSessionUseCase) -> Callable:
    """Populate ``flask.g`` when a live session is presented, else continue anonymously.

    Store failures still propagate.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def inner(*a, **kw):
            g.user = None
            session_id = extract_session_id()
            if session_id:
                try:
                    user = validate.execute(session_id)
                except DomainError as exc:
                    logger.debug(
                        f"Ignoring session ({exc.code}) on {request.method} {request.path}"
                    )
                else:
                    g.user = user
                    g.session_id = session_id
                    g.user_id = user.id
                    g.user_role = user.role.value
            return f(*a, **kw)

        return inner

    return decorator


def require_role(*roles: str) -> Callable:
    """Must be applied inside ``require_session``."""
    allowed = frozenset(roles)

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def inner(*a, **kw):
            role = getattr(g, "user_role", None)
            if role is None:
                return jsonify({"error": "unauthorized"}), 401
            if role not in allowed:
                logger.warning(
                    f"Role {role} denied on {request.method} {request.path} user={g.user_id}"
                )
                return jsonify({"error": "forbidden"}), 403
            return f(*a, **kw)

        return inner

    return decorator


__all__ = ["extract_session_id", "optional_session", "require_role", "require_session"]
