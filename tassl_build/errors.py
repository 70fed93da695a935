"""Error definitions for tassl_build.

Every error carries a stable ``code`` for programmatic handling. None of
them is retried; they abort the build where they are raised.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

UNSUPPORTED_TARGET = "unsupported_target"
BUILD_FAILED = "build_failed"
FILESYSTEM_ERROR = "filesystem_error"


class TasslBuildError(Exception):
    """Base error for build operations."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class UnsupportedTarget(TasslBuildError):
    """Raised when there is no Configure mapping for a platform."""

    def __init__(self, target: str, reason: str | None = None) -> None:
        message = reason or f"Don't know how to configure TASSL for {target}"
        super().__init__(message, code=UNSUPPORTED_TARGET)
        self.target = target


class BuildFailure(TasslBuildError):
    """Raised when an external build step fails.

    Attributes:
        step: Human-readable description of the step.
        command: The command line that was executed.
        exit_code: Process exit status, or None if it never started.
    """

    def __init__(
        self,
        step: str,
        command: Sequence[str],
        exit_code: int | None,
        detail: str | None = None,
    ) -> None:
        self.step = step
        self.command = list(command)
        self.exit_code = exit_code
        cmd_str = shlex.join(self.command)
        if exit_code is None:
            status = f"did not start ({detail})" if detail else "did not start"
        else:
            status = str(exit_code)
        super().__init__(
            f"Error {step}:\n    Command: {cmd_str}\n    Exit status: {status}",
            code=BUILD_FAILED,
        )


class FilesystemFailure(TasslBuildError):
    """Raised when copying, removing or creating build directories fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=FILESYSTEM_ERROR)


__all__ = [
    "BUILD_FAILED",
    "FILESYSTEM_ERROR",
    "UNSUPPORTED_TARGET",
    "BuildFailure",
    "FilesystemFailure",
    "TasslBuildError",
    "UnsupportedTarget",
]
