"""Build ffmpeg argument vectors for each output mode."""
from __future__ import annotations

from typing import List

from .models import EncoderInvocation, OutputMode, ResolvedOutput


def _hls_args(segment_seconds: int, segment_pattern: str) -> List[str]:
    return [
        "-f",
        "hls",
        "-hls_time",
        str(segment_seconds),
        "-hls_playlist_type",
        "vod",
        "-hls_segment_filename",
        segment_pattern,
    ]


def build_invocation(
    executable: str,
    mode: OutputMode,
    source_url: str,
    resolved: ResolvedOutput,
    segment_seconds: int = 6,
) -> EncoderInvocation:
    """Return the encoder invocation for ``mode``; the output path is always last.

    The URL and paths are separate argv entries and are never passed through a
    shell.
    """
    args = ["-y", "-i", source_url]

    if mode is OutputMode.DIRECT_DOWNLOAD:
        args.extend(["-c", "copy"])
    else:
        if not resolved.segment_pattern:
            raise ValueError(f"{mode.value} output needs a segment pattern")
        if mode is OutputMode.CONVERT_TO_STREAM:
            args.extend(["-c:v", "h264", "-c:a", "aac", "-strict", "-2"])
        else:
            args.extend(["-c", "copy"])
        args.extend(_hls_args(segment_seconds, resolved.segment_pattern))

    args.append(resolved.absolute_output_path)
    return EncoderInvocation(executable_path=executable, arguments=tuple(args))
