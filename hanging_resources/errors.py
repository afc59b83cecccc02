"""Exceptions for the hanging resources sweep."""


class SweepError(RuntimeError):
    """Base class for sweep failures."""


class EnvironmentCheckError(SweepError):
    """Raised when the client tooling or cluster login is not usable."""


class ClusterError(SweepError):
    """Raised when a single list or patch call against the cluster fails."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
