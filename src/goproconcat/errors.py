"""Error taxonomy for the reassembly engine.

Every failure is terminal for the current invocation. Callers catch
``GoProConcatError`` at the top level and report it; nothing is retried.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class GoProConcatError(RuntimeError):
    """Base class for all classified merge failures."""


class RequirementUnmetError(GoProConcatError):
    """Raised when the host platform or a required tool is missing."""

    def __init__(self, requirement: str, hint: str | None = None) -> None:
        self.requirement = requirement
        self.hint = hint
        message = requirement if not hint else f"{requirement}\n\n{hint}"
        super().__init__(message)


class StatFailureError(GoProConcatError):
    """Raised when an input file's metadata cannot be read."""

    def __init__(self, path: Path | str, reason: object) -> None:
        self.path = Path(path)
        super().__init__(f"failed to stat input file {path}: {reason}")


class MissingCreationTimeError(GoProConcatError):
    """Raised when no input file reports a birth time."""

    def __init__(self) -> None:
        super().__init__("failed to get oldest creation time: no input file reports a birth time")


class InvalidFilenameFormatError(GoProConcatError):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"invalid file format: {path}")


class DuplicateInputError(GoProConcatError):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"duplicate file detected: {path}. Please remove duplicates and try again")


class ExternalToolFailureError(GoProConcatError):
    """Raised when ffmpeg exits unsuccessfully or cannot be launched.

    ``output`` carries whatever diagnostic text the tool produced so the
    caller can show it; a partially written output file may already exist.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        returncode: int | None = None,
        output: str = "",
        reason: object | None = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        tool = self.command[0] if self.command else "external tool"
        if reason is not None:
            detail = str(reason)
        else:
            detail = f"exit status {returncode}"
        message = f"{tool} command failed: {detail}"
        if output.strip():
            message = f"{message}\n{output.strip()}"
        super().__init__(message)


class TimestampApplyFailureError(GoProConcatError):
    def __init__(self, path: Path | str, operation: str, reason: object) -> None:
        self.path = Path(path)
        self.operation = operation
        super().__init__(f"failed to {operation} for {path}: {reason}")


__all__ = [
    "DuplicateInputError",
    "ExternalToolFailureError",
    "GoProConcatError",
    "InvalidFilenameFormatError",
    "MissingCreationTimeError",
    "RequirementUnmetError",
    "StatFailureError",
    "TimestampApplyFailureError",
]
