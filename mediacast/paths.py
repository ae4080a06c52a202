"""Turn caller-supplied filename/output directory pairs into disk paths and URLs."""
from __future__ import annotations

import logging
import os
import uuid
from typing import Optional, Tuple

from .config import VideoSettings
from .errors import FilesystemError, PathTraversalError
from .models import OutputMode, ResolvedOutput

logger = logging.getLogger(__name__)

DOWNLOAD_EXTENSION = ".mp4"
PLAYLIST_EXTENSION = ".m3u8"
SEGMENT_SUFFIX = "_segment_%03d.ts"


def normalize_stem(filename: Optional[str]) -> str:
    """Return the base name to write under, generating one when none was given.

    Any directory part is dropped and exactly one trailing extension is removed,
    so ``"clip.tar.gz"`` becomes ``"clip.tar"``.
    """
    if not filename or not filename.strip():
        return str(uuid.uuid4())
    name = os.path.basename(filename.replace("\\", "/"))
    # ".mp4" is all extension
    stem = "" if name.startswith(".") and name.count(".") == 1 else os.path.splitext(name)[0]
    return stem if stem.strip() else str(uuid.uuid4())


def relative_dir(output_dir: Optional[str]) -> str:
    """Forward-slash form of ``output_dir`` without leading or trailing slashes."""
    return (output_dir or "").strip().replace("\\", "/").strip("/")


def join_under_root(root: str, sub_dir: Optional[str], confine: bool = False) -> Tuple[str, str]:
    """Join ``sub_dir`` onto ``root`` and create the directory.

    Returns ``(absolute_directory, relative_dir)``. With ``confine`` the
    canonical directory must stay inside the canonical root, and the relative
    part is recomputed from it.
    """
    rel = relative_dir(sub_dir)
    root_abs = os.path.abspath(root)
    directory = os.path.join(root_abs, *rel.split("/")) if rel else root_abs

    if confine:
        root_real = os.path.realpath(root_abs)
        dir_real = os.path.realpath(directory)
        if os.path.commonpath([root_real, dir_real]) != root_real:
            raise PathTraversalError(f"Output directory escapes the root: {sub_dir}")
        directory = dir_real
        rel = os.path.relpath(dir_real, root_real).replace(os.sep, "/")
        if rel == ".":
            rel = ""

    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Could not create directory {directory}: {exc}") from exc
    return directory, rel


class PathResolver:
    def __init__(self, settings: VideoSettings) -> None:
        self._settings = settings

    def resolve(
        self,
        filename: Optional[str],
        output_dir: Optional[str],
        mode: OutputMode,
    ) -> ResolvedOutput:
        stem = normalize_stem(filename)
        if not output_dir or not output_dir.strip():
            output_dir = self._settings.default_output_dir

        directory, rel = join_under_root(
            self._settings.root_directory,
            output_dir,
            confine=self._settings.confine_to_root,
        )

        segment_pattern = None
        if mode.is_stream:
            name = stem + PLAYLIST_EXTENSION
            segment_pattern = os.path.join(directory, stem + SEGMENT_SUFFIX)
        else:
            name = stem + DOWNLOAD_EXTENSION

        public = "/" + "/".join(part for part in (rel, name) if part)
        resolved = ResolvedOutput(
            absolute_output_path=os.path.join(directory, name),
            public_relative_path=public,
            output_folder=directory,
            filename=name,
            segment_pattern=segment_pattern,
        )
        logger.debug("Resolved %s output %s -> %s", mode.value, public, resolved.absolute_output_path)
        return resolved
