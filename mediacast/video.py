"""The three public video operations.

Each one runs ``resolve -> build -> run`` and returns a ``ResultEnvelope``.
Failures after validation never raise: they are logged and reported as a
failure envelope whose message starts with the operation's prefix. Output
already written by a failed encoder run is left on disk.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from .commands import build_invocation
from .config import VideoSettings
from .errors import EncoderFailure, ErrorKind, MediacastError, ValidationError
from .models import OutputMode, ResolvedOutput, TranscodeRequest
from .paths import PathResolver
from .process import ProcessSupervisor
from .results import ResultEnvelope

logger = logging.getLogger(__name__)

DataBuilder = Callable[[TranscodeRequest, ResolvedOutput], Dict[str, Any]]

FAILURE_PREFIX = {
    OutputMode.DIRECT_DOWNLOAD: "Download failed",
    OutputMode.CONVERT_TO_STREAM: "Conversion failed",
    OutputMode.FETCH_AS_STREAM: "Fetch failed",
}


class VideoProcessor:
    def __init__(
        self,
        settings: VideoSettings,
        supervisor: Optional[ProcessSupervisor] = None,
        resolver: Optional[PathResolver] = None,
    ) -> None:
        self.settings = settings
        self.supervisor = supervisor or ProcessSupervisor(
            timeout=settings.encoder_timeout,
            max_concurrent=settings.max_concurrent,
        )
        self.resolver = resolver or PathResolver(settings)

    async def download(self, url: str, filename: Optional[str] = None) -> ResultEnvelope:
        """Copy the source into ``<root>/<name>.mp4`` without re-encoding."""
        request = TranscodeRequest(source_url=url, filename=filename)
        return await self._execute(OutputMode.DIRECT_DOWNLOAD, request, self._download_data)

    async def convert_to_stream(self, request: TranscodeRequest) -> ResultEnvelope:
        """Re-encode to h264/aac and segment into an HLS playlist."""
        return await self._execute(OutputMode.CONVERT_TO_STREAM, request, self._convert_data)

    async def fetch_as_stream(self, request: TranscodeRequest) -> ResultEnvelope:
        """Segment the source into an HLS playlist without re-encoding."""
        return await self._execute(OutputMode.FETCH_AS_STREAM, request, self._fetch_data)

    def _download_data(self, request: TranscodeRequest, resolved: ResolvedOutput) -> Dict[str, Any]:
        prefix = self.settings.download_url_prefix.rstrip("/")
        return {"url": f"{prefix}/{resolved.filename}"}

    @staticmethod
    def _convert_data(request: TranscodeRequest, resolved: ResolvedOutput) -> Dict[str, Any]:
        return {
            "path": request.public_base + resolved.public_relative_path,
            "folder": resolved.output_folder,
        }

    @staticmethod
    def _fetch_data(request: TranscodeRequest, resolved: ResolvedOutput) -> Dict[str, Any]:
        return {
            "playlist": resolved.absolute_output_path,
            "folder": resolved.output_folder,
            "url": request.public_base + resolved.public_relative_path,
        }

    async def _execute(
        self,
        mode: OutputMode,
        request: TranscodeRequest,
        shape: DataBuilder,
    ) -> ResultEnvelope:
        request.validate()
        prefix = FAILURE_PREFIX[mode]
        try:
            resolved = self.resolver.resolve(request.filename, request.output_dir, mode)
            invocation = build_invocation(
                self.settings.ffmpeg_path,
                mode,
                request.source_url,
                resolved,
                self.settings.hls_segment_time,
            )
            outcome = await self.supervisor.run(invocation)
            if not outcome.succeeded:
                raise EncoderFailure(outcome.exit_code, outcome.captured_stderr)
            return ResultEnvelope.ok(shape(request, resolved))
        except ValidationError:
            raise
        except EncoderFailure as exc:
            logger.error(
                "%s for URL %s with exit code %s: %s",
                prefix,
                request.source_url,
                exc.exit_code,
                exc.stderr.strip(),
            )
            return ResultEnvelope.failure(f"{prefix}: {exc}", exc.kind)
        except MediacastError as exc:
            logger.error("%s for URL %s: %s", prefix, request.source_url, exc)
            return ResultEnvelope.failure(f"{prefix}: {exc}", exc.kind)
        except Exception as exc:
            logger.exception("%s for URL %s", prefix, request.source_url)
            return ResultEnvelope.failure(f"{prefix}: {exc}", ErrorKind.UNEXPECTED)
