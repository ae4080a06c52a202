"""Runtime settings read from the environment once at startup."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, floor: int = 0) -> int:
    try:
        return max(int(os.getenv(name, str(default)) or default), floor)
    except ValueError:
        return default


def _env_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class VideoSettings:
    """Encoder and output layout settings shared by every video operation."""

    ffmpeg_path: str = "ffmpeg"
    hls_segment_time: int = 6
    root_directory: str = "wwwroot"
    default_output_dir: str = ""
    download_url_prefix: str = "/videos"
    encoder_timeout: Optional[float] = None
    max_concurrent: int = 0  # 0 = no limit
    confine_to_root: bool = False

    @classmethod
    def from_env(cls) -> "VideoSettings":
        return cls(
            ffmpeg_path=os.getenv("VIDEO_FFMPEG_PATH") or cls.ffmpeg_path,
            hls_segment_time=_env_int("VIDEO_HLS_SEGMENT_TIME", cls.hls_segment_time, floor=1),
            root_directory=os.getenv("VIDEO_ROOT_DIRECTORY") or cls.root_directory,
            default_output_dir=os.getenv("VIDEO_DEFAULT_OUTPUT_DIR", cls.default_output_dir),
            download_url_prefix=os.getenv("VIDEO_DOWNLOAD_URL_PREFIX") or cls.download_url_prefix,
            encoder_timeout=_env_float("VIDEO_ENCODER_TIMEOUT"),
            max_concurrent=_env_int("VIDEO_MAX_CONCURRENT", cls.max_concurrent),
            confine_to_root=_env_flag("VIDEO_CONFINE_TO_ROOT"),
        )


@dataclass(frozen=True)
class ImageSettings:
    root_directory: str = "wwwroot"

    @classmethod
    def from_env(cls) -> "ImageSettings":
        return cls(root_directory=os.getenv("IMAGE_ROOT_DIRECTORY") or cls.root_directory)
