"""Exclusive lock held by administrative commands while they mutate state.

``add``, ``rm``, ``sync`` and ``clean`` take the lock at ``<CSR_HOME>/csr.lock``
so that two of them never run setup scripts or rewrite bin links at the same
time. While held, the file records who holds it; a waiting command reports
that holder and gives up after ``max_wait_seconds``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import IO, Any, Optional

from csr.config.models import DEFAULT_LOCK_TIMEOUT
from csr.exceptions import FilesystemFailure, LockTimeout

__all__ = ["AdminLock", "read_lock_holder"]

logger = logging.getLogger(__name__)

WAIT_REPORT_PERIOD = 2.0
RETRY_INTERVAL = 0.2

_WINDOWS = sys.platform.startswith("win")


def read_lock_holder(lock_path: Path) -> str:
    """Describe the command currently holding ``lock_path``, for messages."""
    try:
        raw = lock_path.read_text().strip()
    except OSError:
        return "<unavailable>"
    if not raw:
        return "{}"
    try:
        holder = json.loads(raw)
    except ValueError:
        return raw[:120]
    if not isinstance(holder, dict):
        return raw[:120]
    return (
        f"pid={holder.get('pid')} ts={holder.get('ts')} "
        f"action={holder.get('action')}"
    )


def _try_lock(fh: IO[str]) -> bool:
    if _WINDOWS:
        import msvcrt

        try:
            msvcrt.locking(fh.fileno(), msvcrt.LK_NBLCK, 1)
        except OSError:
            return False
        return True

    import fcntl

    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


def _unlock(fh: IO[str]) -> None:
    if _WINDOWS:
        import msvcrt

        msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl

        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


class AdminLock:
    """Context manager around one administrative command.

    ``action`` names the command in the holder record (``pid``, ``ts``,
    ``action`` plus any ``metadata``); the record is cleared on release.
    """

    def __init__(
        self,
        path: Path,
        *,
        action: str,
        max_wait_seconds: float = DEFAULT_LOCK_TIMEOUT,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = path
        self.action = action
        self.max_wait_seconds = max_wait_seconds
        self._holder = {"action": action, **(metadata or {})}
        self._fh: Optional[IO[str]] = None

    def __enter__(self) -> "AdminLock":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fh = self.path.open("a+")
        except OSError as exc:
            raise FilesystemFailure(f"Unable to open lock {self.path}: {exc}") from exc
        try:
            self._wait_for(fh)
        except BaseException:
            fh.close()
            raise
        self._fh = fh
        self._record_holder()
        logger.debug("admin_lock_acquired action=%s path=%s", self.action, self.path)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._release()

    def _wait_for(self, fh: IO[str]) -> None:
        start = time.monotonic()
        reported = start
        while not _try_lock(fh):
            waited = time.monotonic() - start
            if waited >= self.max_wait_seconds:
                raise LockTimeout(
                    f"Timeout waiting for csr lock after {waited:.1f}s; "
                    f"another command holds it ({read_lock_holder(self.path)})"
                )
            if time.monotonic() - reported >= WAIT_REPORT_PERIOD:
                logger.info(
                    "admin_lock_busy action=%s holder=%s waited_s=%.1f",
                    self.action,
                    read_lock_holder(self.path),
                    waited,
                )
                reported = time.monotonic()
            time.sleep(RETRY_INTERVAL)

    def _record_holder(self) -> None:
        assert self._fh is not None
        record = {
            "pid": os.getpid(),
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **self._holder,
        }
        try:
            self._fh.seek(0)
            self._fh.truncate(0)
            self._fh.write(json.dumps(record))
            self._fh.flush()
        except OSError as exc:
            logger.debug("admin_lock_record_failed path=%s error=%s", self.path, exc)

    def _release(self) -> None:
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.seek(0)
            fh.truncate(0)
            fh.flush()
            _unlock(fh)
        except OSError as exc:
            logger.debug("admin_lock_release_failed path=%s error=%s", self.path, exc)
        finally:
            fh.close()
        logger.debug("admin_lock_released action=%s path=%s", self.action, self.path)
