"""
Background readers that drain a child process's output streams.

Each collector owns one stream and one list of lines; nothing is shared
between collectors, so no locking is needed. A collector keeps reading after
its process has been killed until the stream closes, so output flushed before
termination is kept.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import IO

from .models import Console, OutputLine

logger = logging.getLogger(__name__)


def _strip_newline(raw: str) -> str:
    if raw.endswith("\r\n"):
        return raw[:-2]
    if raw.endswith(("\n", "\r")):
        return raw[:-1]
    return raw


class StreamCollector:
    """Reads one text stream line by line on a dedicated thread."""

    def __init__(self, console: Console, stream: IO[str]):
        self.console = console
        self.stream = stream
        self.output_lines: list[OutputLine] = []
        self.error: BaseException | None = None
        self._thread = threading.Thread(
            target=self._drain,
            name=f"playground-{console.value.lower()}",
            daemon=True,
        )

    def start(self) -> "StreamCollector":
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _drain(self) -> None:
        try:
            for raw in self.stream:
                self.output_lines.append(
                    OutputLine(
                        console=self.console,
                        timestamp=datetime.now(timezone.utc),
                        line=_strip_newline(raw),
                    )
                )
        except (OSError, ValueError) as exc:
            self.error = exc
            logger.warning("Reading %s stopped early: %s", self.console.value, exc)
        finally:
            self.stream.close()
