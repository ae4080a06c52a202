"""Store uploaded images under the web root."""
from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from .config import ImageSettings
from .paths import join_under_root
from .results import ResultEnvelope

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 256


def save_upload(source, target: str) -> None:
    with open(target, "wb") as handle:
        shutil.copyfileobj(source, handle, CHUNK_SIZE)


def timestamp_name(now: Optional[datetime] = None) -> str:
    """yyMMddHHmmssfff, e.g. ``251016220301123``."""
    now = now or datetime.now()
    return now.strftime("%y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"


class ImageProcessor:
    def __init__(self, settings: ImageSettings) -> None:
        self.settings = settings

    async def upload(
        self,
        file: UploadFile,
        host: str,
        file_name: Optional[str] = None,
        form_path: Optional[str] = None,
    ) -> ResultEnvelope:
        """Write ``file`` to ``<root>/<form_path>/<file_name><ext>``.

        ``host`` is ``scheme://host/``; the returned data is the public URL.
        """
        try:
            base = (file_name or "").strip() or timestamp_name()
            ext = os.path.splitext(file.filename or "")[1]
            name = base + ext

            directory, rel = join_under_root(self.settings.root_directory, form_path)
            target = os.path.join(directory, name)
            await run_in_threadpool(save_upload, file.file, target)

            relative = "/".join(part for part in (rel, name) if part)
            logger.info("Stored image %s", target)
            return ResultEnvelope.ok(host + relative, message="File uploaded successfully")
        except Exception as exc:
            logger.exception("Image upload failed")
            return ResultEnvelope.failure(f"Upload failed: {exc}")
