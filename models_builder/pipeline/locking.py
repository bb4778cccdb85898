"""
Run exclusion.

Cleaning and emitting rewrite the models directory, so two runs must never
overlap on the same directory. One lock per resolved directory path is kept
for the lifetime of the process.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import GenerationInProgressError

_registry_lock = threading.Lock()
_locks: dict[str, threading.Lock] = {}


def _lock_for(directory: Path) -> threading.Lock:
    key = str(Path(directory).resolve())
    with _registry_lock:
        return _locks.setdefault(key, threading.Lock())


@contextmanager
def generation_lock(directory: Path, blocking: bool = False, timeout: float = -1) -> Iterator[None]:
    """
    Hold the generation lock of a models directory.

    Args:
        directory: The models directory
        blocking: Wait for a running generation instead of failing
        timeout: Seconds to wait when blocking, -1 for no limit

    Raises:
        GenerationInProgressError: If the lock is held by another run
    """
    lock = _lock_for(directory)
    acquired = lock.acquire(timeout=timeout) if blocking else lock.acquire(blocking=False)
    if not acquired:
        raise GenerationInProgressError(f"Models generation is already in progress for {directory}")
    try:
        yield
    finally:
        lock.release()
