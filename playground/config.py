"""Environment-driven settings.

Values are read from the process environment after loading an optional
``.env`` file. Non-positive numeric values fall back to their defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_RUNTIME = "docker"
DEFAULT_PULL_TIMEOUT_MS = 60000
DEFAULT_KILL_TIMEOUT_MS = 10000
DEFAULT_MOUNT_PATH = "/playground"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PORT = 8000

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    runtime: str = DEFAULT_RUNTIME
    pull_timeout_ms: int = DEFAULT_PULL_TIMEOUT_MS
    kill_timeout_ms: int = DEFAULT_KILL_TIMEOUT_MS
    temp_root: str | None = None
    mount_path: str = DEFAULT_MOUNT_PATH
    merge_streams: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    port: int = DEFAULT_PORT


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        runtime=os.getenv("PLAYGROUND_RUNTIME", DEFAULT_RUNTIME).strip() or DEFAULT_RUNTIME,
        pull_timeout_ms=_positive_int("PLAYGROUND_PULL_TIMEOUT_MS", DEFAULT_PULL_TIMEOUT_MS),
        kill_timeout_ms=_positive_int("PLAYGROUND_KILL_TIMEOUT_MS", DEFAULT_KILL_TIMEOUT_MS),
        temp_root=os.getenv("PLAYGROUND_TEMP_ROOT") or None,
        mount_path=os.getenv("PLAYGROUND_MOUNT_PATH", DEFAULT_MOUNT_PATH) or DEFAULT_MOUNT_PATH,
        merge_streams=_flag("PLAYGROUND_MERGE_STREAMS"),
        log_level=os.getenv("PLAYGROUND_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        port=_positive_int("PORT", DEFAULT_PORT),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or get_settings().log_level), format=LOG_FORMAT)
