import json

import httpx
import pytest

from media_info_api.api.probe import get_downloader, get_prober
from media_info_api.config.settings import config
from media_info_api.main import app
from media_info_api.services.downloader import MediaDownloader
from media_info_api.services.ffprobe import MediaProber

# ffprobe report for a 10 second H.264/AAC MP4
SAMPLE_REPORT = {
    "streams": [
        {
            "index": 0,
            "codec_name": "h264",
            "codec_long_name": "H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10",
            "profile": "High",
            "codec_type": "video",
            "width": 1280,
            "height": 720,
            "display_aspect_ratio": "16:9",
            "pix_fmt": "yuv420p",
            "r_frame_rate": "30/1",
            "avg_frame_rate": "30/1",
            "bit_rate": "1205959",
            "tags": {"language": "und", "handler_name": "VideoHandler"},
        },
        {
            "index": 1,
            "codec_name": "aac",
            "codec_long_name": "AAC (Advanced Audio Coding)",
            "profile": "LC",
            "codec_type": "audio",
            "sample_rate": "48000",
            "channels": 2,
            "channel_layout": "stereo",
            "bit_rate": "128000",
            "tags": {"language": "eng"},
        },
    ],
    "format": {
        "filename": "/tmp/media_info_files/media_1700000000_deadbeef.mp4",
        "nb_streams": 2,
        "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
        "format_long_name": "QuickTime / MOV",
        "duration": "10.000000",
        "size": "1674353",
        "bit_rate": "1339482",
    },
}

FAKE_MEDIA = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 1024


@pytest.fixture(autouse=True)
def temp_storage(tmp_path, monkeypatch):
    """Point the temp directory at a per-test location"""
    storage = tmp_path / "media"
    monkeypatch.setattr(config.storage, "temp_dir", storage)
    return storage


@pytest.fixture
def sample_report():
    return json.loads(json.dumps(SAMPLE_REPORT))


@pytest.fixture
def fake_ffprobe(tmp_path):
    """
    Build a shell script standing in for ffprobe.
    It answers `-version`, records the probed path and prints ``output``.
    """
    def factory(output="", exit_code=0, delay=0):
        script = tmp_path / "bin" / "ffprobe"
        script.parent.mkdir(exist_ok=True)
        record = tmp_path / "probed.txt"
        sleep = f"exec sleep {delay}\n" if delay else ""
        script.write_text(
            "#!/bin/sh\n"
            'if [ "$1" = "-version" ]; then\n'
            '  echo "ffprobe version 6.1.1 Copyright (c) 2007-2023 the FFmpeg developers"\n'
            "  exit 0\n"
            "fi\n"
            "for last; do :; done\n"
            f'echo "$last" > "{record}"\n'
            f"{sleep}"
            "cat <<'EOF_REPORT'\n"
            f"{output}\n"
            "EOF_REPORT\n"
            f"exit {exit_code}\n"
        )
        script.chmod(0o755)
        return script

    return factory


@pytest.fixture
def probed_path(tmp_path):
    """Path the fake ffprobe was last called with"""
    def read():
        return (tmp_path / "probed.txt").read_text().strip()

    return read


@pytest.fixture
def media_transport():
    """MockTransport serving FAKE_MEDIA, or ``status`` when given"""
    def factory(status=200, content=FAKE_MEDIA):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=content)

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def override_services():
    """Swap the downloader transport and ffprobe path used by the routes"""
    def install(transport=None, ffprobe_path=None):
        if transport is not None:
            app.dependency_overrides[get_downloader] = lambda: MediaDownloader(transport=transport)
        if ffprobe_path is not None:
            app.dependency_overrides[get_prober] = lambda: MediaProber(ffprobe_path=str(ffprobe_path))

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
