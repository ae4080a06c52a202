"""Error kinds raised inside the transcode pipeline.

Each pipeline step raises one of these; ``VideoProcessor`` is the only place
that turns them into failure envelopes. ``ValidationError`` is the exception:
it escapes the facade so the HTTP layer can answer 400 before any work starts.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    FILESYSTEM = "filesystem"
    PROCESS_LAUNCH = "process_launch"
    ENCODER_FAILURE = "encoder_failure"
    ENCODER_TIMEOUT = "encoder_timeout"
    UNEXPECTED = "unexpected"


class MediacastError(Exception):
    kind = ErrorKind.UNEXPECTED


class ValidationError(MediacastError):
    kind = ErrorKind.VALIDATION


class PathTraversalError(ValidationError):
    """Resolved output directory falls outside the configured root."""


class FilesystemError(MediacastError):
    kind = ErrorKind.FILESYSTEM


class ProcessLaunchError(MediacastError):
    kind = ErrorKind.PROCESS_LAUNCH


class EncoderFailure(MediacastError):
    kind = ErrorKind.ENCODER_FAILURE

    def __init__(self, exit_code: int, stderr: str = "") -> None:
        super().__init__(f"FFmpeg failed with exit code {exit_code}")
        self.exit_code = exit_code
        self.stderr = stderr


class EncoderTimeoutError(MediacastError):
    kind = ErrorKind.ENCODER_TIMEOUT

    def __init__(self, timeout: float) -> None:
        super().__init__(f"FFmpeg timed out after {timeout:g} seconds")
        self.timeout = timeout
