# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redis-backed session store.

Layout::

    <prefix>:session:<session_id>        JSON payload, PX = expires_at - now
    <prefix>:user_sessions:<user_id>     set of session ids, same TTL

Entry and index are written by separate commands. A crash in between leaves
either an index member pointing nowhere or a session missing from the index;
both disappear with the TTL and only affect bulk revocation.

The client must be created with ``decode_responses=True``.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from redis import Redis, RedisError

from authcenter.domain.users.entities import Session, UserRole
from authcenter.domain.users.exceptions import SessionExpiredError, SessionNotFoundError
from authcenter.domain.users.repositories import SessionRepository
from authcenter.shared.errors import StoreError
from authcenter.shared.logging import logger
from authcenter.shared.utils.clock import Clock, as_utc, utc_now


def dump_session(session: Session) -> str:
    return json.dumps(
        {
            "id": session.id,
            "user_id": session.user_id,
            "email": session.email,
            "role": session.role.value,
            "created_at": session.created_at.isoformat(),
            "expires_at": session.expires_at.isoformat(),
        }
    )


def load_session(raw: str | bytes) -> Session:
    data = json.loads(raw)
    return Session(
        id=data["id"],
        user_id=data["user_id"],
        email=data["email"],
        role=UserRole(data["role"]),
        created_at=as_utc(datetime.fromisoformat(data["created_at"])),
        expires_at=as_utc(datetime.fromisoformat(data["expires_at"])),
    )


class RedisSessionRepository(SessionRepository):
    def __init__(self, client: Redis, *, key_prefix: str = "auth", clock: Clock = utc_now) -> None:
        self._client = client
        self._prefix = key_prefix
        self._clock = clock

    def _session_key(self, session_id: str) -> str:
        return f"{self._prefix}:session:{session_id}"

    def _user_key(self, user_id: str) -> str:
        return f"{self._prefix}:user_sessions:{user_id}"

    @contextmanager
    def _commands(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as exc:
            logger.warning(f"sessions.redis: {operation} failed: {type(exc).__name__}")
            raise StoreError("sessions", operation) from exc

    def _ttl_ms(self, session: Session) -> int:
        return math.ceil((session.expires_at - self._clock()).total_seconds() * 1000)

    def create(self, session: Session) -> None:
        ttl_ms = self._ttl_ms(session)
        if ttl_ms <= 0:
            raise SessionExpiredError()
        user_key = self._user_key(session.user_id)
        with self._commands("create"):
            self._client.set(self._session_key(session.id), dump_session(session), px=ttl_ms)
            self._client.sadd(user_key, session.id)
            self._client.pexpire(user_key, ttl_ms)
        logger.debug(f"sessions.redis: created for user_id={session.user_id} ttl_ms={ttl_ms}")

    def get(self, session_id: str) -> Session:
        with self._commands("get"):
            raw = self._client.get(self._session_key(session_id))
        if raw is None:
            raise SessionNotFoundError()

        session = load_session(raw)
        if not session.is_valid(self._clock()):
            # Redis TTL and the embedded expiry are checked independently.
            try:
                self._remove(session)
            except StoreError:
                logger.warning(
                    f"sessions.redis: expired session left to TTL user_id={session.user_id}"
                )
            raise SessionExpiredError()
        return session

    def delete(self, session_id: str) -> None:
        key = self._session_key(session_id)
        with self._commands("delete"):
            raw = self._client.get(key)
            if raw is None:
                return
            session = load_session(raw)
        self._remove(session)

    def delete_all_for_user(self, user_id: str) -> None:
        user_key = self._user_key(user_id)
        with self._commands("delete_all_for_user"):
            session_ids = self._client.smembers(user_key)
            for session_id in session_ids:
                # DEL on an id that already expired is a no-op
                self._client.delete(self._session_key(session_id))
            self._client.delete(user_key)
        logger.info(f"sessions.redis: revoked {len(session_ids)} sessions user_id={user_id}")

    def update(self, session: Session) -> None:
        ttl_ms = self._ttl_ms(session)
        if ttl_ms <= 0:
            self._remove(session)
            raise SessionExpiredError()
        with self._commands("update"):
            # XX: a session revoked since it was read stays revoked
            written = self._client.set(
                self._session_key(session.id), dump_session(session), px=ttl_ms, xx=True
            )
        if not written:
            raise SessionNotFoundError()

    def _remove(self, session: Session) -> None:
        with self._commands("delete"):
            self._client.delete(self._session_key(session.id))
            self._client.srem(self._user_key(session.user_id), session.id)
