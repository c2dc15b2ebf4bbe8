import sys
from pathlib import Path

import pytest

from playground.config import Settings
from playground.runner import SubmissionRunner
from playground.runtime import ContainerRuntime


class LocalRuntime(ContainerRuntime):
    """Runs a local Python program where the container would run.

    Pulls and container kills are recorded instead of reaching a real runtime.
    """

    def __init__(self, program: str = "print('hi')", pull_error: Exception | None = None):
        super().__init__(executable="docker-test")
        self.program = program
        self.pull_error = pull_error
        self.pulls: list[str] = []
        self.kills: list[str] = []
        self.launched: list[tuple[str, Path, str]] = []

    def run_args(self, name, directory, image, command=None):
        self.launched.append((name, directory, image))
        return [sys.executable, "-c", self.program]

    def pull(self, image: str, timeout_ms: int) -> None:
        self.pulls.append(image)
        if self.pull_error is not None:
            raise self.pull_error

    def kill(self, name: str) -> None:
        self.kills.append(name)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def local_runtime() -> LocalRuntime:
    return LocalRuntime()


@pytest.fixture
def runner(local_runtime, settings) -> SubmissionRunner:
    return SubmissionRunner(runtime=local_runtime, settings=settings)

