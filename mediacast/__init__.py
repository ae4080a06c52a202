"""Mediacast: ffmpeg-backed download and HLS packaging service."""

from .config import ImageSettings, VideoSettings
from .models import OutputMode, TranscodeRequest
from .results import ResultEnvelope
from .video import VideoProcessor

__all__ = [
    "ImageSettings",
    "OutputMode",
    "ResultEnvelope",
    "TranscodeRequest",
    "VideoProcessor",
    "VideoSettings",
]

__version__ = "1.0.0"
