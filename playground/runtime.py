"""
Command-line container runtime wrapper.

Every runtime interaction is a subprocess invoked with a structured argument
vector. Nothing is passed through a shell.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_KILL_TIMEOUT_MS, DEFAULT_MOUNT_PATH, DEFAULT_RUNTIME
from .errors import PullFailed, PullTimeout

logger = logging.getLogger(__name__)

MAX_DETAIL_CHARS = 2000


def _tail(text: str | None) -> str:
    detail = (text or "").strip()
    if len(detail) > MAX_DETAIL_CHARS:
        return "..." + detail[-MAX_DETAIL_CHARS:]
    return detail


class ContainerRuntime:
    """Pulls, runs and kills containers through the runtime's CLI."""

    def __init__(
        self,
        executable: str = DEFAULT_RUNTIME,
        mount_path: str = DEFAULT_MOUNT_PATH,
        kill_timeout_ms: int = DEFAULT_KILL_TIMEOUT_MS,
    ):
        self.executable = executable
        self.mount_path = mount_path
        self.kill_timeout_ms = kill_timeout_ms

    def pull_args(self, image: str) -> list[str]:
        return [self.executable, "pull", image]

    def run_args(
        self,
        name: str,
        directory: Path,
        image: str,
        command: Sequence[str] | None = None,
    ) -> list[str]:
        cmd = [
            self.executable,
            "run",
            "--init",
            "--rm",
            "--network=none",
            f"--name={name}",
            "-v",
            f"{directory.resolve()}:{self.mount_path}",
            image,
        ]
        if command:
            cmd.extend(command)
        return cmd

    def ps_args(self, name: str) -> list[str]:
        return [self.executable, "ps", "-q", "--filter", f"name={name}"]

    def kill_args(self, container_ids: list[str]) -> list[str]:
        return [self.executable, "kill", *container_ids]

    def pull(self, image: str, timeout_ms: int) -> None:
        """
        Pull ``image`` and wait up to ``timeout_ms`` for it to finish.

        Raises:
            PullTimeout: the pull did not finish in time (the pull process is killed).
            PullFailed: the pull exited non-zero or the runtime is not installed.
        """
        cmd = self.pull_args(image)
        logger.info("Pulling image %s", image)
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout_ms / 1000,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise PullTimeout(image, timeout_ms) from exc
        except FileNotFoundError as exc:
            raise PullFailed(image, f"container runtime not found: {self.executable}") from exc

        if completed.returncode != 0:
            raise PullFailed(image, _tail(completed.stderr or completed.stdout))
        logger.info("Pulled image %s", image)

    def launch(
        self,
        name: str,
        directory: Path,
        image: str,
        command: Sequence[str] | None = None,
        merge_streams: bool = False,
    ) -> subprocess.Popen:
        """Start the container process with both output streams piped."""
        return subprocess.Popen(
            self.run_args(name, directory, image, command),
            cwd=str(directory),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_streams else subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def kill(self, name: str) -> None:
        """
        Kill every container whose name matches ``name``.

        Idempotent: a container that already exited simply is not matched.
        Failures are logged; the caller still terminates the local process.
        """
        timeout = self.kill_timeout_ms / 1000
        try:
            listed = subprocess.run(
                self.ps_args(name),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
            container_ids = listed.stdout.split()
            if not container_ids:
                logger.info("No running container matched %s", name)
                return

            killed = subprocess.run(
                self.kill_args(container_ids),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("Container kill for %s failed: %s", name, exc)
            return

        if killed.returncode != 0:
            logger.warning("Container kill for %s exited %d: %s", name, killed.returncode, _tail(killed.stderr))
        else:
            logger.info("Killed container %s", name)

    def check_health(self, timeout_seconds: float = 2.5) -> tuple[bool, str]:
        """Return (healthy, detail) for runtime availability."""
        try:
            result = subprocess.run(
                [self.executable, "info", "--format", "{{.ServerVersion}}"],
                capture_output=True,
                text=True,
                timeout=timeout_seconds,
                check=False,
            )
        except FileNotFoundError:
            return False, f"{self.executable} CLI not found"
        except subprocess.TimeoutExpired:
            return False, f"{self.executable} check timed out"

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip() or f"{self.executable} daemon unavailable"
            return False, detail

        version = result.stdout.strip() or "unknown"
        return True, f"{self.executable} daemon ready (server {version})"
