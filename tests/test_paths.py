import os
import uuid

import pytest

from mediacast.config import VideoSettings
from mediacast.errors import FilesystemError, PathTraversalError
from mediacast.models import OutputMode
from mediacast.paths import PathResolver, normalize_stem


@pytest.fixture
def resolver(media_root):
    return PathResolver(VideoSettings(root_directory=str(media_root)))


@pytest.mark.parametrize("blank", [None, "", "   ", "\t"])
def test_blank_filename_generates_unique_names(blank):
    first = normalize_stem(blank)
    second = normalize_stem(blank)
    assert first and second
    assert first != second


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("movie.mkv", "movie"),
        ("clip.tar.gz", "clip.tar"),
        ("clip", "clip"),
        ("some/dir/clip.mp4", "clip"),
    ],
)
def test_exactly_one_extension_is_stripped(filename, expected):
    assert normalize_stem(filename) == expected


@pytest.mark.parametrize("filename", [".mp4", "dir/.m3u8"])
def test_extension_only_filename_gets_generated_name(filename):
    stem = normalize_stem(filename)
    assert str(uuid.UUID(stem)) == stem


def test_extension_only_download_is_not_a_dotfile(resolver, media_root):
    resolved = resolver.resolve(".mp4", None, OutputMode.DIRECT_DOWNLOAD)
    assert resolved.filename != ".mp4.mp4"
    assert not resolved.filename.startswith(".")
    assert resolved.filename.endswith(".mp4")


def test_fetch_in_root_has_root_relative_playlist(resolver, media_root):
    resolved = resolver.resolve("clip", "", OutputMode.FETCH_AS_STREAM)
    assert resolved.public_relative_path == "/clip.m3u8"
    assert resolved.absolute_output_path == os.path.join(str(media_root), "clip.m3u8")
    assert resolved.segment_pattern == os.path.join(str(media_root), "clip_segment_%03d.ts")
    assert resolved.output_folder == str(media_root)


def test_download_uses_mp4_and_no_segments(resolver):
    resolved = resolver.resolve("holiday.webm", None, OutputMode.DIRECT_DOWNLOAD)
    assert resolved.filename == "holiday.mp4"
    assert resolved.public_relative_path == "/holiday.mp4"
    assert resolved.segment_pattern is None


@pytest.mark.parametrize("output_dir", ["sub", "/sub", "sub/", "/sub/"])
def test_output_dir_is_created_under_root(resolver, media_root, output_dir):
    resolved = resolver.resolve("clip.mp4", output_dir, OutputMode.CONVERT_TO_STREAM)
    assert resolved.output_folder == os.path.join(str(media_root), "sub")
    assert os.path.isdir(resolved.output_folder)
    assert resolved.public_relative_path == "/sub/clip.m3u8"


def test_nested_output_dir(resolver, media_root):
    resolved = resolver.resolve("clip", "a/b", OutputMode.FETCH_AS_STREAM)
    assert resolved.output_folder == os.path.join(str(media_root), "a", "b")
    assert resolved.public_relative_path == "/a/b/clip.m3u8"


def test_default_output_dir_applies_when_blank(media_root):
    resolver = PathResolver(VideoSettings(root_directory=str(media_root), default_output_dir="streams"))
    resolved = resolver.resolve("clip", "  ", OutputMode.FETCH_AS_STREAM)
    assert resolved.output_folder == os.path.join(str(media_root), "streams")
    assert resolved.public_relative_path == "/streams/clip.m3u8"


def test_parent_segments_are_joined_unchecked_by_default(resolver, media_root):
    resolved = resolver.resolve("clip", "../outside", OutputMode.FETCH_AS_STREAM)
    assert os.path.normpath(resolved.output_folder) == os.path.join(str(media_root.parent), "outside")


def test_confined_resolver_rejects_escape(media_root):
    resolver = PathResolver(VideoSettings(root_directory=str(media_root), confine_to_root=True))
    with pytest.raises(PathTraversalError):
        resolver.resolve("clip", "../outside", OutputMode.FETCH_AS_STREAM)
    assert not (media_root.parent / "outside").exists()


def test_confined_resolver_allows_inner_dirs(media_root):
    resolver = PathResolver(VideoSettings(root_directory=str(media_root), confine_to_root=True))
    resolved = resolver.resolve("clip", "a/../b", OutputMode.FETCH_AS_STREAM)
    assert resolved.output_folder == os.path.join(os.path.realpath(str(media_root)), "b")
    assert resolved.public_relative_path == "/b/clip.m3u8"


def test_confined_resolver_maps_root_itself_to_root_url(media_root):
    resolver = PathResolver(VideoSettings(root_directory=str(media_root), confine_to_root=True))
    resolved = resolver.resolve("clip", "a/..", OutputMode.FETCH_AS_STREAM)
    assert resolved.public_relative_path == "/clip.m3u8"


def test_directory_creation_failure_is_filesystem_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    resolver = PathResolver(VideoSettings(root_directory=str(blocker)))
    with pytest.raises(FilesystemError):
        resolver.resolve("clip", "sub", OutputMode.FETCH_AS_STREAM)
