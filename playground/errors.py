"""Failures that abort a submission run.

A submission that exceeds its own timeout is not an error; it produces a
normal ``Result`` with ``timed_out`` set.
"""


class PlaygroundError(Exception):
    """Domain error for submission execution failures."""


class PullTimeout(PlaygroundError):
    """Raised when pulling a container image exceeds its time budget."""

    def __init__(self, image: str, timeout_ms: int) -> None:
        self.image = image
        self.timeout_ms = timeout_ms
        super().__init__(f"timed out pulling container: {image} (after {timeout_ms} ms)")


class PullFailed(PlaygroundError):
    """Raised when the runtime's pull command exits non-zero."""

    def __init__(self, image: str, detail: str = "") -> None:
        self.image = image
        self.detail = detail
        message = f"failed to pull container: {image}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class StagingFailure(PlaygroundError):
    """Raised when submission files cannot be materialized on disk."""


class LaunchFailure(PlaygroundError):
    """Raised when the container process cannot be started."""
