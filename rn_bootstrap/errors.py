"""Error taxonomy for the bootstrap pipeline.

Every failure is fatal to the run.  The orchestrator catches
``BootstrapError`` at the top level, prints a one-line message naming the
failing tool, path or command, and exits with status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rn_bootstrap.gate.checks import GateFailure


class BootstrapError(Exception):
    """Base class for every error raised by the bootstrap pipeline."""


class UsageError(BootstrapError):
    """Missing or invalid command-line input."""


class EnvironmentGateFailure(BootstrapError):
    """A required tool is missing or outside its supported version range."""

    def __init__(self, failure: GateFailure) -> None:
        self.failure = failure
        super().__init__(failure.describe())


class PreconditionFailure(BootstrapError):
    """The run cannot start because the filesystem is not in the expected state."""


class ProcessFailure(BootstrapError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int, stderr: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Command failed (exit {exit_code}): {command}"
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)


class FileIOFailure(BootstrapError):
    """A template or target file could not be read or written."""

    def __init__(self, path: str | Path, message: str = "") -> None:
        self.path = Path(path)
        super().__init__(message or f"Cannot read or write {self.path}")


class FileNotFound(FileIOFailure):
    """A file expected by the pipeline does not exist."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path, f"File not found: {path}")


class MalformedVersion(BootstrapError, ValueError):
    """A string could not be parsed as a dotted numeric version."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Malformed version: {text!r}")


class MalformedPattern(BootstrapError, ValueError):
    """A substitution rule's pattern or replacement is not a valid expression."""

    def __init__(self, pattern: str, reason: str = "") -> None:
        self.pattern = pattern
        detail = f": {reason}" if reason else ""
        super().__init__(f"Malformed pattern {pattern!r}{detail}")


class VersionResolutionError(BootstrapError):
    """The latest framework version could not be resolved."""
