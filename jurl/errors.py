"""
Error taxonomy for a single render invocation.

Every failure of the pipeline surfaces as exactly one PipelineError subclass.
Each class owns a stable process exit code so scripts can branch on it.
"""

from typing import Optional, Tuple


class PipelineError(Exception):
    """Base rendering exception. Terminal for the current invocation."""
    exit_code = 1
    label = "PipelineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # Filled in by the coordinator before the error leaves the pipeline
        self.completed_stages: Tuple[str, ...] = ()

    def describe(self) -> str:
        return f"{self.label}: {self.message}"


class RequestValidationError(PipelineError):
    """Raised before any engine launch when the request itself is invalid."""
    exit_code = 2
    label = "InvalidRequest"


class EngineLaunchError(PipelineError):
    """Raised when the render engine process fails to start."""
    exit_code = 3
    label = "EngineLaunchError"


class NavigationError(PipelineError):
    """Raised when the engine fails to load the target."""
    exit_code = 4
    label = "NavigationError"

    def __init__(self, reason: str, url: Optional[str] = None):
        super().__init__(f"{reason} ({url})" if url else reason)
        self.reason = reason
        self.url = url


class HttpStatusError(NavigationError):
    """Raised for status >= 400 when the caller asked to fail on HTTP errors."""
    exit_code = 22
    label = "HttpStatusError"

    def __init__(self, status: int, url: Optional[str] = None):
        super().__init__(f"server returned HTTP {status}", url)
        self.status = status


class WaitTimeout(PipelineError):
    """Raised when the wait selector never appeared before the deadline."""
    exit_code = 5
    label = "WaitTimeout"

    def __init__(self, selector: str, timeout: float):
        super().__init__(f"selector {selector!r} did not appear within {timeout:g}s")
        self.selector = selector
        self.timeout = timeout


class DeadlineExceeded(PipelineError):
    """Raised when the overall timeout elapsed outside the selector wait."""
    exit_code = 6
    label = "DeadlineExceeded"

    def __init__(self, timeout: float, stage: str):
        super().__init__(f"{timeout:g}s timeout elapsed during {stage}")
        self.timeout = timeout
        self.stage = stage


class ExtractionError(PipelineError):
    """Raised when rendered state cannot be read from the engine."""
    exit_code = 7
    label = "ExtractionError"


class OutputError(PipelineError):
    """Raised when writing content or a screenshot fails."""
    exit_code = 8
    label = "IoError"

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot write {path}: {reason}")
        self.path = path
        self.reason = reason
