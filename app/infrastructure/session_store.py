"""
Name: Session Store

Responsibilities:
  - Map opaque session tokens to employee ids with a TTL
  - Support both in-memory (dev, single process) and Redis (shared) backends

Collaborators:
  - sessions.SessionManager: the only caller
  - config.py: SESSION_BACKEND, REDIS_URL, SESSION_TTL_SECONDS

Notes:
  - The in-memory backend loses sessions on restart
  - Redis errors surface as SessionStoreError (500) rather than logging
    everybody out silently
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

import redis

from ..config import Settings
from ..exceptions import SessionStoreError
from ..logger import logger


class SessionStore(ABC):
    """Abstract interface for session backends."""

    @abstractmethod
    def get(self, token: str) -> Optional[int]:
        """Employee id bound to token, None if unknown or expired."""
        ...

    @abstractmethod
    def set(self, token: str, employee_id: int, ttl_seconds: int) -> None:
        """Bind token to employee id for ttl_seconds."""
        ...

    @abstractmethod
    def delete(self, token: str) -> None:
        """Forget token (no-op when unknown)."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Drop every session."""
        ...


@dataclass
class SessionEntry:
    """Single session with absolute expiry (monotonic clock)."""

    employee_id: int
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemorySessionStore(SessionStore):
    """Thread-safe dict of sessions; expired entries are swept on every write."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = Lock()

    def get(self, token: str) -> Optional[int]:
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            if entry.is_expired(time.monotonic()):
                del self._sessions[token]
                return None
            return entry.employee_id

    def set(self, token: str, employee_id: int, ttl_seconds: int) -> None:
        with self._lock:
            now = time.monotonic()
            self._evict_expired(now)
            self._sessions[token] = SessionEntry(
                employee_id=employee_id,
                expires_at=now + ttl_seconds,
            )

    def _evict_expired(self, now: float) -> None:
        expired = [
            token
            for token, entry in self._sessions.items()
            if entry.is_expired(now)
        ]
        for token in expired:
            del self._sessions[token]

    def delete(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class RedisSessionStore(SessionStore):
    """
    Redis-backed sessions, shared across processes.

    Expiry is delegated to Redis (SETEX).
    """

    KEY_PREFIX = "employee-api:session:"

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self._client = client or redis.from_url(redis_url, decode_responses=True)

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def get(self, token: str) -> Optional[int]:
        try:
            value = self._client.get(self._key(token))
        except redis.RedisError as exc:
            raise SessionStoreError(f"Session lookup failed: {exc}") from exc
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning("Discarding malformed session entry")
            self.delete(token)
            return None

    def set(self, token: str, employee_id: int, ttl_seconds: int) -> None:
        try:
            self._client.setex(self._key(token), int(ttl_seconds), str(employee_id))
        except redis.RedisError as exc:
            raise SessionStoreError(f"Session write failed: {exc}") from exc

    def delete(self, token: str) -> None:
        try:
            self._client.delete(self._key(token))
        except redis.RedisError as exc:
            raise SessionStoreError(f"Session delete failed: {exc}") from exc

    def clear(self) -> None:
        try:
            keys = list(self._client.scan_iter(match=f"{self.KEY_PREFIX}*"))
            if keys:
                self._client.delete(*keys)
        except redis.RedisError as exc:
            raise SessionStoreError(f"Session clear failed: {exc}") from exc


def create_session_store(settings: Settings) -> SessionStore:
    """R: Backend selected by SESSION_BACKEND (validated in Settings)."""
    if settings.session_backend == "redis":
        logger.info("Using Redis session store")
        return RedisSessionStore(settings.redis_url)
    return InMemorySessionStore()
