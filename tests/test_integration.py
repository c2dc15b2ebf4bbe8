import subprocess

import pytest

from playground.config import Settings
from playground.errors import PullFailed
from playground.models import FakeFile, Submission
from playground.runner import SubmissionRunner
from playground.runtime import ContainerRuntime

pytestmark = pytest.mark.integration


def _docker_available() -> bool:
    try:
        result = subprocess.run(
            ["docker", "version"],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
        return result.returncode == 0
    except (OSError, subprocess.TimeoutExpired):
        return False


class RecordingRuntime(ContainerRuntime):
    def __init__(self):
        super().__init__()
        self.names = []

    def run_args(self, name, directory, image, command=None):
        self.names.append(name)
        return super().run_args(name, directory, image, command)


@pytest.fixture
def docker_runner():
    if not _docker_available():
        pytest.skip("Docker is not available for real integration execution")
    runtime = RecordingRuntime()
    return runtime, SubmissionRunner(runtime=runtime, settings=Settings())


def test_prints_hi(docker_runner, tmp_path):
    _, runner = docker_runner
    submission = Submission(
        image="alpine",
        filesystem=[FakeFile(path="run.sh", contents="echo hi")],
        timeout=60000,
        command=["sh", "/playground/run.sh"],
    )

    result = runner.run(submission, temp_root=tmp_path)

    assert result.output == "hi"
    assert result.exit_value == 0
    assert result.timed_out is False
    assert list(tmp_path.iterdir()) == []


def test_infinite_loop_is_killed(docker_runner, tmp_path):
    runtime, runner = docker_runner
    runner.images.ensure_loaded("alpine", 120000)
    submission = Submission(
        image="alpine",
        timeout=500,
        command=["sh", "-c", "while true; do :; done"],
    )

    result = runner.run(submission, temp_root=tmp_path)

    assert result.timed_out is True
    remaining = subprocess.run(
        runtime.ps_args(runtime.names[-1]),
        capture_output=True,
        text=True,
        check=False,
    )
    assert remaining.stdout.strip() == ""
    assert list(tmp_path.iterdir()) == []


def test_file_round_trip_inside_container(docker_runner, tmp_path):
    _, runner = docker_runner
    contents = "line one\n  indented\ttab\nlast"
    submission = Submission(
        image="alpine",
        filesystem=[FakeFile(path="nested/data.txt", contents=contents)],
        timeout=60000,
        command=["cat", "/playground/nested/data.txt"],
    )

    result = runner.run(submission, temp_root=tmp_path)

    assert result.output == contents


def test_nonexistent_image_fails_pull(docker_runner, tmp_path):
    _, runner = docker_runner

    with pytest.raises(PullFailed):
        runner.run(
            Submission(image="playground-test/does-not-exist:never"),
            temp_root=tmp_path,
            pull_timeout_ms=60000,
        )

    assert list(tmp_path.iterdir()) == []
