"""Exceptions raised by apngwriter."""

from __future__ import annotations


class APNGWriterError(Exception):
    """Base class for all apngwriter errors."""


class ToolUnavailable(APNGWriterError):
    """The APNG Assembler program could not be located or fetched."""


class UnsupportedPlatform(ToolUnavailable):
    """No APNG Assembler build exists for the running platform."""


class StorageError(APNGWriterError):
    """A temporary folder or frame file could not be created."""


class DimensionMismatch(APNGWriterError, ValueError):
    """A frame does not have the size established by the first frame."""


class ClosedSequenceError(APNGWriterError):
    """A frame was added after the output file was finished."""


class AlreadyFinishedError(APNGWriterError):
    """finish was called on a writer that has already finished."""


class EmptySequenceError(APNGWriterError):
    """finish was called before any frame was added."""


class AssemblerFailure(APNGWriterError):
    """The APNG Assembler exited with a non-zero status."""

    def __init__(self, message: str, returncode: int, command: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.command = command
