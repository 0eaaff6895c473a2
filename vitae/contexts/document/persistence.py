"""
Snapshot persistence.

PersistenceGateway is the opaque load/save boundary; the document model owns the
snapshot format. SaveScheduler coalesces rapid mutations into a single write after
a quiescence window.

Usage:
    gateway = JsonFileGateway(Path("~/.vitae/resume_builder_data.json").expanduser())
    scheduler = SaveScheduler(gateway, delay=0.5)

    # On every model change (inside a running asyncio loop)
    scheduler.schedule(model.snapshot())

    # Before exit
    scheduler.flush()
"""

import asyncio
import json
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from vitae.contexts.document.logger import _log_debug, _log_warning, log_save
from vitae.exceptions import MalformedPersistedState

DEFAULT_DEBOUNCE_S = 0.5

# call_later(delay, callback) -> handle with cancel(); asyncio.AbstractEventLoop.call_later fits
CallLater = Callable[[float, Callable[[], None]], Any]


class PersistenceGateway(ABC):
    """Opaque storage for one serialized document snapshot."""

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        """
        Return the stored snapshot, or None if nothing is stored.

        Raises:
            MalformedPersistedState: If stored data cannot be decoded
        """

    @abstractmethod
    def save(self, snapshot: Dict[str, Any]) -> None:
        """Store a snapshot, replacing any previous one."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored snapshot."""


class InMemoryGateway(PersistenceGateway):
    """Gateway that keeps the serialized snapshot in memory (sessions without a data file)."""

    def __init__(self):
        self._payload: Optional[str] = None
        self.save_count = 0

    def load(self) -> Optional[Dict[str, Any]]:
        if self._payload is None:
            return None
        return json.loads(self._payload)

    def save(self, snapshot: Dict[str, Any]) -> None:
        self._payload = json.dumps(snapshot, ensure_ascii=False)
        self.save_count += 1

    def clear(self) -> None:
        self._payload = None


class JsonFileGateway(PersistenceGateway):
    """
    Gateway backed by a UTF-8 JSON file.

    Writes go to a temporary file in the same directory which then replaces the
    target, so a crash mid-write never leaves a truncated snapshot behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPersistedState(
                "Persisted snapshot is not valid JSON", source=self.path, original_error=e
            ) from e

    def save(self, snapshot: Dict[str, Any]) -> None:
        start = time.perf_counter()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
            os.replace(temp_name, self.path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

        log_save(self.path, time.perf_counter() - start)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SaveScheduler:
    """
    Debounced snapshot writer.

    Every schedule() cancels the pending write (if any) and schedules a new one
    `delay` seconds later, so a burst of mutations produces exactly one write of
    the latest snapshot. Writes run on the caller's thread via call_later, so no
    two writes are ever in flight.

    Args:
        gateway: Where snapshots are written
        delay: Quiescence window in seconds
        call_later: Timer function (delay, callback) -> cancellable handle.
                    Defaults to the running asyncio loop's call_later; outside a
                    loop, writes stay pending until flush().
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        delay: float = DEFAULT_DEBOUNCE_S,
        call_later: Optional[CallLater] = None,
    ):
        self.gateway = gateway
        self.delay = delay
        self._call_later = call_later
        self._handle: Any = None
        self._pending: Optional[Dict[str, Any]] = None

    @property
    def pending(self) -> bool:
        """Whether a write is waiting to fire."""
        return self._pending is not None

    def schedule(self, snapshot: Dict[str, Any]) -> None:
        """Replace any pending write with a write of `snapshot` after the delay."""
        self._cancel_handle()
        self._pending = snapshot

        call_later = self._call_later
        if call_later is None:
            try:
                call_later = asyncio.get_running_loop().call_later
            except RuntimeError:
                _log_debug("No running event loop; save pending until flush()")
                return

        self._handle = call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending write without saving."""
        self._cancel_handle()
        self._pending = None

    def flush(self) -> bool:
        """
        Write the pending snapshot immediately.

        Returns:
            True if a write happened
        """
        if self._pending is None:
            return False
        self._cancel_handle()
        self._fire()
        return True

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        snapshot, self._pending, self._handle = self._pending, None, None
        if snapshot is None:
            return
        try:
            self.gateway.save(snapshot)
        except OSError as e:
            # Persistence failures must not break editing; the next mutation retries
            _log_warning(f"Failed to save snapshot: {e}")
