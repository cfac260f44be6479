# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from authcenter.domain.users.entities import Session
from authcenter.domain.users.exceptions import SessionExpiredError, SessionNotFoundError
from authcenter.domain.users.repositories import SessionRepository
from authcenter.shared.logging import logger
from authcenter.shared.utils.clock import Clock, utc_now


@dataclass(slots=True)
class _Entry:
    session: Session
    evict_at: float

    def is_evicted(self, now: float) -> bool:
        return now >= self.evict_at


@dataclass(slots=True)
class _Index:
    session_ids: set[str] = field(default_factory=set)
    evict_at: float = 0.0


class InMemorySessionRepository(SessionRepository):
    """Process-local session store with TTL eviction.

    Eviction runs on a monotonic clock, the embedded ``expires_at`` is
    checked against the wall clock, mirroring a TTL store whose clock is not
    the application's.
    """

    def __init__(
        self,
        *,
        clock: Clock = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._monotonic = monotonic
        self._lock = Lock()
        self._entries: dict[str, _Entry] = {}
        self._indexes: dict[str, _Index] = {}

    def _ttl_seconds(self, session: Session) -> float:
        return (session.expires_at - self._clock()).total_seconds()

    def create(self, session: Session) -> None:
        ttl = self._ttl_seconds(session)
        if ttl <= 0:
            raise SessionExpiredError()
        evict_at = self._monotonic() + ttl
        with self._lock:
            self._entries[session.id] = _Entry(session=session, evict_at=evict_at)
            index = self._live_index(session.user_id) or _Index()
            index.session_ids.add(session.id)
            index.evict_at = evict_at
            self._indexes[session.user_id] = index
        logger.debug(f"sessions.memory: created for user_id={session.user_id} ttl={ttl:.0f}s")

    def get(self, session_id: str) -> Session:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or entry.is_evicted(self._monotonic()):
                self._entries.pop(session_id, None)
                raise SessionNotFoundError()

            session = entry.session
            if not session.is_valid(self._clock()):
                self._drop(session)
                raise SessionExpiredError()
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is not None:
                self._drop(entry.session)

    def delete_all_for_user(self, user_id: str) -> None:
        with self._lock:
            index = self._indexes.pop(user_id, None)
            session_ids = index.session_ids if index else set()
            for session_id in session_ids:
                self._entries.pop(session_id, None)
        logger.info(f"sessions.memory: revoked {len(session_ids)} sessions user_id={user_id}")

    def update(self, session: Session) -> None:
        ttl = self._ttl_seconds(session)
        with self._lock:
            entry = self._entries.get(session.id)
            if entry is None or entry.is_evicted(self._monotonic()):
                self._entries.pop(session.id, None)
                raise SessionNotFoundError()
            if ttl <= 0:
                self._drop(session)
                raise SessionExpiredError()
            entry.session = session
            entry.evict_at = self._monotonic() + ttl

    def _live_index(self, user_id: str) -> _Index | None:
        index = self._indexes.get(user_id)
        if index is not None and self._monotonic() >= index.evict_at:
            self._indexes.pop(user_id, None)
            return None
        return index

    def _drop(self, session: Session) -> None:
        self._entries.pop(session.id, None)
        index = self._indexes.get(session.user_id)
        if index is not None:
            index.session_ids.discard(session.id)
