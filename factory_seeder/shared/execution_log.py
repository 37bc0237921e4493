"""Execution logs and the short-lived store that carries them across a redirect.

Generation and custom-seed runs collect human-readable log entries which the
dashboard shows after the POST. Entries are mirrored to structlog so the
server log tells the same story.
"""

from __future__ import annotations

import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from factory_seeder.core.logging import get_logger

logger = get_logger(__name__)

LogLevel = Literal["debug", "info", "warning", "error"]
FlashType = Literal["success", "error", "info"]

DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class LogEntry:
    """One structured line of an execution log."""

    timestamp: datetime
    level: LogLevel
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "message": self.message,
        }


class ExecutionLog:
    """Collects log entries for one operation and mirrors them to structlog.

    Args:
        event_prefix: Prefix for the structlog event names (``factory.generate``).
        context: Extra key/values bound to every mirrored event.
    """

    def __init__(self, event_prefix: str, **context: Any) -> None:
        self.event_prefix = event_prefix
        self.context = context
        self.entries: list[LogEntry] = []

    def _add(self, level: LogLevel, message: str, event: str, **extra: Any) -> LogEntry:
        entry = LogEntry(timestamp=datetime.now(UTC), level=level, message=message)
        self.entries.append(entry)
        getattr(logger, level)(f"{self.event_prefix}.{event}", message=message, **self.context, **extra)
        return entry

    def debug(self, message: str, event: str = "debug", **extra: Any) -> LogEntry:
        return self._add("debug", message, event, **extra)

    def info(self, message: str, event: str = "info", **extra: Any) -> LogEntry:
        return self._add("info", message, event, **extra)

    def warning(self, message: str, event: str = "warning", **extra: Any) -> LogEntry:
        return self._add("warning", message, event, **extra)

    def error(self, message: str, event: str = "error", **extra: Any) -> LogEntry:
        return self._add("error", message, event, **extra)

    def to_list(self) -> list[dict[str, str]]:
        return [entry.to_dict() for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class StoredExecution:
    """Logs and flash message parked between a POST and the following GET."""

    logs: list[LogEntry]
    flash_type: FlashType | None = None
    flash_message: str | None = None
    created_at: float = field(default_factory=time.monotonic)


class ExecutionLogStore:
    """In-memory, time-boxed store for the redirect-after-post pattern.

    Entries are read once: ``retrieve`` removes what it returns. Expired
    entries are purged on every access. Nothing survives a restart.

    Args:
        ttl_seconds: Lifetime of an entry.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, StoredExecution] = {}
        self._lock = threading.Lock()

    def store(
        self,
        logs: list[LogEntry],
        flash_type: FlashType | None = None,
        flash_message: str | None = None,
    ) -> str:
        """Park logs and a flash message; returns the ID to redirect with."""
        with self._lock:
            self._cleanup_expired()
            log_id = secrets.token_hex(8)
            self._entries[log_id] = StoredExecution(
                logs=list(logs),
                flash_type=flash_type,
                flash_message=flash_message,
                created_at=self._clock(),
            )
        logger.debug("log_store.stored", log_id=log_id, entries=len(logs))
        return log_id

    def retrieve(self, log_id: str | None) -> StoredExecution | None:
        """Pop the entry for ``log_id``; None when unknown, blank or expired."""
        if not log_id:
            return None
        with self._lock:
            self._cleanup_expired()
            return self._entries.pop(log_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _cleanup_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = [key for key, entry in self._entries.items() if entry.created_at <= cutoff]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("log_store.expired", count=len(expired))

    def __len__(self) -> int:
        with self._lock:
            self._cleanup_expired()
            return len(self._entries)
