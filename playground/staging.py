from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, Sequence

from .errors import StagingFailure
from .models import FakeFile

logger = logging.getLogger(__name__)

STAGING_PREFIX = "playground"


def safe_relative_path(path_str: str) -> Path:
    """Normalize a submission file path, rejecting anything outside the staging root."""
    if "\\" in path_str:
        raise StagingFailure(f"backslashes are not allowed in file path: {path_str}")
    rel = PurePosixPath(path_str)
    if rel.is_absolute():
        raise StagingFailure(f"file path must be relative: {path_str}")
    normalized_parts = []
    for part in rel.parts:
        if part in {"", "."}:
            continue
        if part == "..":
            raise StagingFailure(f"path traversal not allowed in file path: {path_str}")
        normalized_parts.append(part)
    if not normalized_parts:
        raise StagingFailure(f"invalid empty file path: {path_str}")
    return Path(*normalized_parts)


def create_staging_dir(temp_root: str | Path | None = None) -> Path:
    try:
        if temp_root is None:
            return Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
        base = Path(temp_root)
        base.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=str(base)))
    except OSError as exc:
        raise StagingFailure(f"failed creating staging directory: {exc}") from exc


def write_files(directory: Path, filesystem: Sequence[FakeFile]) -> None:
    for fake_file in filesystem:
        dest = directory / safe_relative_path(fake_file.path)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(fake_file.contents.encode("utf-8"))
        except OSError as exc:
            raise StagingFailure(f"failed writing {fake_file.path}: {exc}") from exc


@contextmanager
def stage_filesystem(
    filesystem: Sequence[FakeFile],
    temp_root: str | Path | None = None,
) -> Iterator[Path]:
    """
    Materialize ``filesystem`` into a fresh directory and yield its path.

    The directory and everything under it is removed when the block exits,
    whether it exits normally or by exception, including a failure while the
    files themselves are being written.
    """
    directory = create_staging_dir(temp_root)
    logger.debug("Staging %d file(s) in %s", len(filesystem), directory)
    try:
        write_files(directory, filesystem)
        yield directory
    finally:
        shutil.rmtree(directory, ignore_errors=True)
        logger.debug("Removed staging directory %s", directory)
