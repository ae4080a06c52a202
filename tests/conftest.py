import json
import os
import stat
import sys

import pytest
from fastapi.testclient import TestClient

import server
from mediacast.config import ImageSettings, VideoSettings

FAKE_ENCODER = """#!{python}
import json
import os
import sys

args = sys.argv[1:]
if args == ["-version"]:
    print("ffmpeg version fake-1.0")
    sys.exit(0)

log_path = os.environ.get("FAKE_ENCODER_LOG")
if log_path:
    with open(log_path, "a") as handle:
        handle.write(json.dumps(args) + "\\n")

sys.stderr.write("fake encoder stderr\\n")
code = int(os.environ.get("FAKE_ENCODER_EXIT", "0"))
if code and not os.environ.get("FAKE_ENCODER_PARTIAL"):
    sys.exit(code)

out = args[-1]
if "-hls_segment_filename" in args:
    pattern = args[args.index("-hls_segment_filename") + 1]
    names = []
    for index in range(2):
        segment = pattern % index
        with open(segment, "wb") as handle:
            handle.write(b"\\x47" * 188)
        names.append(os.path.basename(segment))
    with open(out, "w") as handle:
        handle.write("#EXTM3U\\n")
        for name in names:
            handle.write("#EXTINF:6.0,\\n" + name + "\\n")
        handle.write("#EXT-X-ENDLIST\\n")
else:
    with open(out, "wb") as handle:
        handle.write(b"fake mp4")
sys.exit(code)
"""


@pytest.fixture
def encoder_log(tmp_path, monkeypatch):
    path = tmp_path / "encoder_calls.jsonl"
    monkeypatch.setenv("FAKE_ENCODER_LOG", str(path))
    monkeypatch.delenv("FAKE_ENCODER_EXIT", raising=False)
    monkeypatch.delenv("FAKE_ENCODER_PARTIAL", raising=False)
    return path


@pytest.fixture
def fake_ffmpeg(tmp_path, encoder_log):
    script = tmp_path / "bin" / "fake-ffmpeg"
    script.parent.mkdir()
    script.write_text(FAKE_ENCODER.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


@pytest.fixture
def media_root(tmp_path):
    root = tmp_path / "wwwroot"
    root.mkdir()
    return root


@pytest.fixture
def video_settings(fake_ffmpeg, media_root):
    return VideoSettings(ffmpeg_path=fake_ffmpeg, root_directory=str(media_root))


@pytest.fixture
def client(video_settings, media_root):
    app = server.create_app(video_settings, ImageSettings(root_directory=str(media_root)))
    return TestClient(app)


def read_calls(path):
    if not os.path.exists(path):
        return []
    with open(path) as handle:
        return [json.loads(line) for line in handle if line.strip()]
