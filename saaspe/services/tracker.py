"""
Call tracking - best-effort diagnostics for every request attempt.

The client holds a CallObserver and reports each attempt to it. Observer
failures are logged and discarded; they never reach the caller.
"""

import functools
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol

from loguru import logger


class CallObserver(Protocol):
    """Anything that wants to hear about request attempts."""

    def track_call(
        self,
        method: str,
        endpoint: str,
        status: int | None,
        error: bool,
    ) -> None: ...


@dataclass
class ApiCallEntry:
    """A single tracked request attempt."""

    method: str
    endpoint: str
    status: int | None
    error: bool
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class ApiCallHistory:
    """
    Bounded in-memory history of request attempts.

    Usage:
        history = ApiCallHistory(max_size=20)
        client = ApiClient(base_url, observer=history)
        ...
        history.get_recent()
    """

    def __init__(self, max_size: int = 20):
        self._entries: deque[ApiCallEntry] = deque(maxlen=max_size)

    def track_call(
        self,
        method: str,
        endpoint: str,
        status: int | None,
        error: bool,
    ) -> None:
        self._entries.append(ApiCallEntry(method, endpoint, status, error))
        logger.debug(f"API call {method} {endpoint} -> {status} (error={error})")

    def get_recent(self, limit: int | None = None) -> list[ApiCallEntry]:
        """Most recent entries, oldest first."""
        entries = list(self._entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def fire_and_forget(func: Callable[..., Any]) -> Callable[..., None]:
    """
    Run ``func`` and discard both its result and any exception.

    Exceptions are logged at debug level only.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except Exception as e:
            logger.debug(f"Call tracking failed in {func.__name__}: {type(e).__name__}: {e}")

    return wrapper


@fire_and_forget
def safe_track_call(
    observer: CallObserver | None,
    method: str,
    endpoint: str,
    status: int | None,
    error: bool,
) -> None:
    """Report an attempt to ``observer`` without ever raising."""
    if observer is not None:
        observer.track_call(method, endpoint, status, error)
