# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from http import HTTPStatus

from flask import Blueprint, jsonify
from redis import Redis, RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authcenter.infrastructure.health import check_database, check_redis
from authcenter.shared.logging import logger


class MiscController:
    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        redis_client: Redis | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._redis_client = redis_client

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/health", view_func=self.health, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"status": "ok", "service": "authcenter"}
        try:
            check_database(self._session_factory)
            status["database"] = "ok"
        except SQLAlchemyError as exc:
            logger.warning(f"health: database check failed: {type(exc).__name__}")
            status["status"] = "degraded"
            status["database"] = "error"

        if self._redis_client is not None:
            try:
                check_redis(self._redis_client)
                status["sessions"] = "ok"
            except RedisError as exc:
                logger.warning(f"health: redis check failed: {type(exc).__name__}")
                status["status"] = "degraded"
                status["sessions"] = "error"

        code = HTTPStatus.OK if status["status"] == "ok" else HTTPStatus.SERVICE_UNAVAILABLE
        return jsonify(status), code
