"""
Submission execution engine.

Core contract:
- Stages the submission's files into a fresh directory bind-mounted into the container
- Pulls the image once per process lifetime (shared ``ImageCache``)
- Runs the container without networking under a freshly generated name
- Drains stdout and stderr on two threads while the main thread waits for exit
- On timeout, kills the container by name and then the local process, waiting on both
- Returns a ``Result`` with lines ordered by read time
- Removes the staging directory on every exit path
"""

from __future__ import annotations

import logging
import subprocess
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from .collector import StreamCollector
from .config import Settings, get_settings
from .errors import LaunchFailure
from .images import ImageCache
from .models import Console, OutputLine, Result, Submission
from .runtime import ContainerRuntime
from .staging import stage_filesystem

logger = logging.getLogger(__name__)


def sort_output_lines(lines: Iterable[OutputLine]) -> list[OutputLine]:
    """Order by read time; equal timestamps put STDOUT before STDERR, then keep read order."""
    return sorted(lines, key=lambda output_line: (output_line.timestamp, output_line.console.fd))


def assemble_result(
    started: datetime,
    ended: datetime,
    collectors: Iterable[StreamCollector],
    timed_out: bool,
    exit_value: int,
) -> Result:
    merged: list[OutputLine] = []
    for collector in collectors:
        merged.extend(collector.output_lines)
    return Result(
        started=started,
        ended=ended,
        output_lines=sort_output_lines(merged),
        timed_out=timed_out,
        exit_value=exit_value,
    )


class SubmissionRunner:
    """Runs submissions against one container runtime and one image cache."""

    def __init__(
        self,
        runtime: ContainerRuntime | None = None,
        images: ImageCache | None = None,
        settings: Settings | None = None,
        merge_streams: bool | None = None,
    ):
        self.settings = settings or get_settings()
        if runtime is None:
            runtime = images.runtime if images is not None else ContainerRuntime(
                executable=self.settings.runtime,
                mount_path=self.settings.mount_path,
                kill_timeout_ms=self.settings.kill_timeout_ms,
            )
        self.runtime = runtime
        self.images = images or ImageCache(runtime)
        self.merge_streams = self.settings.merge_streams if merge_streams is None else merge_streams

    def run(
        self,
        submission: Submission,
        temp_root: str | Path | None = None,
        pull_timeout_ms: int | None = None,
    ) -> Result:
        """
        Execute ``submission`` and report what it printed and how it ended.

        Raises:
            StagingFailure: the submission's files could not be written.
            PullTimeout, PullFailed: the image could not be pulled.
            LaunchFailure: the container process could not be started.
        """
        if temp_root is None:
            temp_root = self.settings.temp_root
        if pull_timeout_ms is None or pull_timeout_ms <= 0:
            pull_timeout_ms = self.settings.pull_timeout_ms

        with stage_filesystem(submission.filesystem, temp_root) as directory:
            self.images.ensure_loaded(submission.image, pull_timeout_ms)
            return self._supervise(submission, directory)

    def _launch(self, name: str, directory: Path, submission: Submission) -> subprocess.Popen:
        try:
            return self.runtime.launch(
                name,
                directory,
                submission.image,
                command=submission.command,
                merge_streams=self.merge_streams,
            )
        except (OSError, ValueError) as exc:
            raise LaunchFailure(f"failed to start container {name} for {submission.image}: {exc}") from exc

    def _supervise(self, submission: Submission, directory: Path) -> Result:
        name = str(uuid.uuid4())

        started = datetime.now(timezone.utc)
        process = self._launch(name, directory, submission)
        logger.info("Started container %s (image=%s, timeout=%d ms)", name, submission.image, submission.timeout)

        collectors = [StreamCollector(Console.STDOUT, process.stdout).start()]
        if process.stderr is not None:
            collectors.append(StreamCollector(Console.STDERR, process.stderr).start())

        timed_out = False
        try:
            try:
                process.wait(timeout=submission.timeout / 1000)
            except subprocess.TimeoutExpired:
                timed_out = True
                logger.info("Container %s exceeded %d ms, killing", name, submission.timeout)
                self._terminate(name, process)
        except BaseException:
            # Never leave a running container behind, whatever interrupted the wait.
            if process.poll() is None:
                self._terminate(name, process)
            raise
        finally:
            for collector in collectors:
                collector.join()

        ended = datetime.now(timezone.utc)
        exit_value = process.returncode
        logger.info("Container %s finished (exit=%s, timed_out=%s)", name, exit_value, timed_out)
        return assemble_result(started, ended, collectors, timed_out, exit_value)

    def _terminate(self, name: str, process: subprocess.Popen) -> None:
        self.runtime.kill(name)
        process.kill()
        process.wait()


_default_runner: SubmissionRunner | None = None
_default_runner_lock = threading.Lock()


def get_default_runner() -> SubmissionRunner:
    """Process-wide runner whose image cache lives as long as the process."""
    global _default_runner
    with _default_runner_lock:
        if _default_runner is None:
            _default_runner = SubmissionRunner()
        return _default_runner


def run_submission(
    submission: Submission,
    temp_root: str | Path | None = None,
    pull_timeout_ms: int | None = None,
) -> Result:
    return get_default_runner().run(submission, temp_root=temp_root, pull_timeout_ms=pull_timeout_ms)


def ensure_loaded(image: str, pull_timeout_ms: int | None = None) -> None:
    runner = get_default_runner()
    if pull_timeout_ms is None or pull_timeout_ms <= 0:
        pull_timeout_ms = runner.settings.pull_timeout_ms
    runner.images.ensure_loaded(image, pull_timeout_ms)
