"""
Run untrusted submissions inside ephemeral, network-isolated containers.
"""

from .errors import LaunchFailure, PlaygroundError, PullFailed, PullTimeout, StagingFailure
from .images import ImageCache
from .models import Console, FakeFile, OutputLine, Result, Submission
from .runner import SubmissionRunner, ensure_loaded, run_submission
from .runtime import ContainerRuntime

__all__ = [
    "Console",
    "ContainerRuntime",
    "FakeFile",
    "ImageCache",
    "LaunchFailure",
    "OutputLine",
    "PlaygroundError",
    "PullFailed",
    "PullTimeout",
    "Result",
    "StagingFailure",
    "Submission",
    "SubmissionRunner",
    "ensure_loaded",
    "run_submission",
]
