"""
Process-lifetime memory of container images already pulled.

Entries are never evicted. An image removed from the runtime out of band is
not re-pulled.
"""

from __future__ import annotations

import logging
import threading

from .config import DEFAULT_PULL_TIMEOUT_MS
from .runtime import ContainerRuntime

logger = logging.getLogger(__name__)


class ImageCache:
    """Pulls each image at most once, serializing callers per image."""

    def __init__(self, runtime: ContainerRuntime | None = None):
        self.runtime = runtime or ContainerRuntime()
        self._loaded: set[str] = set()
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def __contains__(self, image: object) -> bool:
        with self._guard:
            return image in self._loaded

    @property
    def loaded(self) -> frozenset[str]:
        with self._guard:
            return frozenset(self._loaded)

    def mark_loaded(self, image: str) -> None:
        """Record ``image`` as present without pulling it."""
        with self._guard:
            self._loaded.add(image)

    def _lock_for(self, image: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(image)
            if lock is None:
                lock = self._locks[image] = threading.Lock()
            return lock

    def ensure_loaded(self, image: str, pull_timeout_ms: int | None = DEFAULT_PULL_TIMEOUT_MS) -> None:
        """
        Make sure ``image`` has been pulled during this process's lifetime.

        Raises:
            PullTimeout: the pull exceeded ``pull_timeout_ms``.
            PullFailed: the pull exited non-zero.
        """
        if pull_timeout_ms is None or pull_timeout_ms <= 0:
            pull_timeout_ms = DEFAULT_PULL_TIMEOUT_MS
        if image in self:
            logger.debug("Image %s already loaded", image)
            return

        with self._lock_for(image):
            # Another caller may have finished the pull while we waited.
            if image in self:
                return
            self.runtime.pull(image, pull_timeout_ms)
            self.mark_loaded(image)
