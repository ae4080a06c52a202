"""Value types passed between the pipeline stages."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .errors import ValidationError


class OutputMode(str, Enum):
    DIRECT_DOWNLOAD = "download"
    CONVERT_TO_STREAM = "convert"
    FETCH_AS_STREAM = "fetch"

    @property
    def is_stream(self) -> bool:
        return self is not OutputMode.DIRECT_DOWNLOAD


@dataclass(frozen=True)
class TranscodeRequest:
    source_url: str
    filename: Optional[str] = None
    output_dir: Optional[str] = None
    public_scheme: str = "http"
    public_host: str = "localhost"

    def validate(self) -> None:
        """Raise ValidationError when the source URL is missing or blank."""
        if not self.source_url or not self.source_url.strip():
            raise ValidationError("URL is required")

    @property
    def public_base(self) -> str:
        return f"{self.public_scheme}://{self.public_host}"


@dataclass(frozen=True)
class ResolvedOutput:
    """On-disk target for one encoder run and the URL path it is served under."""

    absolute_output_path: str
    public_relative_path: str
    output_folder: str
    filename: str
    segment_pattern: Optional[str] = None


@dataclass(frozen=True)
class EncoderInvocation:
    executable_path: str
    arguments: Tuple[str, ...]

    @property
    def argv(self) -> List[str]:
        return [self.executable_path, *self.arguments]


@dataclass(frozen=True)
class ProcessOutcome:
    exit_code: int
    captured_stderr: str = ""
    captured_stdout: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
