"""FastAPI front end for Mediacast.

This service exposes:
- POST /video/download : copy a remote video into the web root as MP4
- POST /video/upload   : re-encode a remote video into an HLS playlist
- POST /video/fetch    : repackage a remote video into an HLS playlist
- POST /image/upload   : store an uploaded image under the web root
(the video routes are also reachable without the /video prefix)

Everything under the configured root directory is served as static files.

Run with:
    uvicorn server:app --host 0.0.0.0 --port 8000
"""
from __future__ import annotations

import logging
import mimetypes
import os
import subprocess
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mediacast import __version__
from mediacast.config import ImageSettings, VideoSettings
from mediacast.errors import ValidationError
from mediacast.images import ImageProcessor
from mediacast.models import TranscodeRequest
from mediacast.results import ResultEnvelope
from mediacast.video import VideoProcessor

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("mediacast")

# StaticFiles picks content types from mimetypes
mimetypes.add_type("application/vnd.apple.mpegurl", ".m3u8")
mimetypes.add_type("video/mp2t", ".ts")

ENDPOINTS = [
    "POST /image/upload?fileName=...&path=...",
    "POST /video/download?url=...&filename=...",
    "POST /video/upload?url=...&filename=...&outputDir=...",
    "POST /video/fetch?url=...&filename=...&outputDir=...",
]

router = APIRouter()


def get_video_processor(request: Request) -> VideoProcessor:
    return request.app.state.video_processor


def get_image_processor(request: Request) -> ImageProcessor:
    return request.app.state.image_processor


def require_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise HTTPException(status_code=400, detail="URL is required")
    return url


def respond(result: ResultEnvelope) -> Dict[str, Any]:
    """Return the envelope body, or raise a 500 carrying its message."""
    if not result.success:
        raise HTTPException(status_code=500, detail=result.message or "Operation failed")
    return result.to_dict()


def stream_request(request: Request, url: str, filename: Optional[str], output_dir: Optional[str]) -> TranscodeRequest:
    return TranscodeRequest(
        source_url=url,
        filename=filename,
        output_dir=output_dir,
        public_scheme=request.url.scheme,
        public_host=request.url.netloc,
    )


@router.get("/")
async def root() -> Dict[str, Any]:
    return {"status": "Video Processing API is running", "endpoints": ENDPOINTS}


@router.get("/api/health")
def healthcheck(request: Request) -> Dict[str, Any]:
    """Return service readiness and the encoder version."""
    settings: VideoSettings = request.app.state.video_settings
    ffmpeg_version = None
    try:
        proc = subprocess.run([settings.ffmpeg_path, "-version"], capture_output=True, text=True, timeout=2)
        if proc.returncode == 0 and proc.stdout:
            ffmpeg_version = proc.stdout.splitlines()[0]
    except FileNotFoundError:
        ffmpeg_version = None
    except (OSError, subprocess.SubprocessError):
        ffmpeg_version = "ffmpeg check failed"

    return {
        "status": "ok",
        "version": __version__,
        "ffmpeg": ffmpeg_version or "missing",
        "segment_seconds": settings.hls_segment_time,
        "max_concurrent": settings.max_concurrent,
    }


@router.post("/download")
@router.post("/video/download")
async def download(
    url: Optional[str] = Query(None, description="Source video URL"),
    filename: Optional[str] = Query(None, description="Output name; extension is replaced with .mp4"),
    processor: VideoProcessor = Depends(get_video_processor),
) -> Dict[str, Any]:
    url = require_url(url)
    try:
        result = await processor.download(url, filename)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return respond(result)


@router.post("/upload")
@router.post("/video/upload")
async def convert(
    request: Request,
    url: Optional[str] = Query(None, description="Source video URL"),
    filename: Optional[str] = Query(None, description="Playlist base name"),
    outputDir: Optional[str] = Query(None, description="Subdirectory under the web root"),
    processor: VideoProcessor = Depends(get_video_processor),
) -> Dict[str, Any]:
    url = require_url(url)
    try:
        result = await processor.convert_to_stream(stream_request(request, url, filename, outputDir))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return respond(result)


@router.post("/fetch")
@router.post("/video/fetch")
async def fetch(
    request: Request,
    url: Optional[str] = Query(None, description="Source video URL"),
    filename: Optional[str] = Query(None, description="Playlist base name"),
    outputDir: Optional[str] = Query(None, description="Subdirectory under the web root"),
    processor: VideoProcessor = Depends(get_video_processor),
) -> Dict[str, Any]:
    url = require_url(url)
    try:
        result = await processor.fetch_as_stream(stream_request(request, url, filename, outputDir))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return respond(result)


@router.post("/image/upload")
async def upload_image(
    request: Request,
    file: Optional[UploadFile] = File(None),
    fileName: Optional[str] = Query(None),
    path: Optional[str] = Query(None),
    processor: ImageProcessor = Depends(get_image_processor),
) -> Dict[str, Any]:
    if file is None:
        raise HTTPException(status_code=400, detail="file is required")
    host = f"{request.url.scheme}://{request.url.netloc}/"
    result = await processor.upload(file, host, file_name=fileName, form_path=path)
    return respond(result)


def create_app(
    video_settings: Optional[VideoSettings] = None,
    image_settings: Optional[ImageSettings] = None,
) -> FastAPI:
    video_settings = video_settings or VideoSettings.from_env()
    image_settings = image_settings or ImageSettings.from_env()

    app = FastAPI(title="Mediacast API", version=__version__)
    app.state.video_settings = video_settings
    app.state.video_processor = VideoProcessor(video_settings)
    app.state.image_processor = ImageProcessor(image_settings)

    # Allow the frontend to connect from any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    # Mounted last so the API routes above take precedence.
    os.makedirs(video_settings.root_directory, exist_ok=True)
    app.mount("/", StaticFiles(directory=video_settings.root_directory, check_dir=False), name="media")
    logger.info("Serving %s (encoder: %s)", os.path.abspath(video_settings.root_directory), video_settings.ffmpeg_path)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=False)
