"""Exception hierarchy.

Engine errors (`ValidationError` .. `CleanupError`) are raised by
`xgify.buffer_exec.exec_buffer`; `InvalidFormatError` and `OperationError`
belong to the `XGify` pipeline.
"""

from __future__ import annotations


class XGifyError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(XGifyError, ValueError):
    """The invocation arguments are malformed; nothing was written or spawned."""


class WriteError(XGifyError):
    """An input buffer could not be written to its temporary path."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"failed to write input to {path}: {cause}")
        self.path = path
        self.cause = cause


class ExecutionError(XGifyError):
    """The external binary could not be spawned or exited non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class OutputReadError(XGifyError):
    """The binary exited cleanly but its output file is missing or unreadable."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"failed to read output {path}: {cause}")
        self.path = path
        self.cause = cause


class CleanupError(XGifyError):
    """One or more temporary files could not be removed."""

    def __init__(self, failures: list[tuple[str, OSError]]):
        paths = ", ".join(path for path, _ in failures)
        super().__init__(f"failed to remove {paths}")
        self.failures = failures


class InvalidFormatError(XGifyError, ValueError):
    """The buffer handed to the pipeline is not a GIF."""


class OperationError(XGifyError):
    """A pipeline operation failed; wraps the underlying engine error."""
