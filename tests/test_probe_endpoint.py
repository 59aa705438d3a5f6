import asyncio
import json
import socket

import httpx
import pytest

from media_info_api.config.settings import config


def media_files(storage):
    """Downloaded files left in the temp directory (log files excluded)"""
    if not storage.exists():
        return []
    return [p for p in storage.iterdir() if p.is_file()]


@pytest.mark.asyncio
async def test_probe_success(client, fake_ffprobe, media_transport, override_services, sample_report, probed_path, temp_storage):
    """10 second H.264/AAC MP4 is reported with both streams"""
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe(json.dumps(sample_report)))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 200
    body = response.json()
    assert body["duration_seconds"] == pytest.approx(10.0)
    assert body["size_bytes"] == 1674353
    assert body["bit_rate_bps"] == 1339482
    assert body["format_name"] == "mov,mp4,m4a,3gp,3g2,mj2"
    assert body["video_stream"]["codec_name"] == "h264"
    assert body["video_stream"]["frame_rate"] == "30/1"
    assert body["audio_stream"]["codec_name"] == "aac"
    assert body["audio_stream"]["sample_rate_hz"] == 48000

    # filename is the local temp file, which was probed and then removed
    assert body["filename"].startswith("media_")
    assert body["filename"].endswith(".mp4")
    assert probed_path().endswith(body["filename"])
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_probe_response_keeps_null_keys(client, fake_ffprobe, media_transport, override_services, temp_storage):
    """Unknown values are null, never dropped"""
    report = {"format": {"format_name": "wav"}, "streams": [{"codec_type": "audio"}]}
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe(json.dumps(report)))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/sound"})

    assert response.status_code == 200
    body = response.json()
    assert body["filename"].endswith(".tmp")
    assert body["size_bytes"] is None
    assert body["duration_seconds"] is None
    assert body["video_stream"] is None
    assert body["audio_stream"] == {
        "codec_name": None,
        "codec_long_name": None,
        "sample_rate_hz": None,
        "channels": None,
        "channel_layout": None,
        "bit_rate_bps": None,
        "tags": None,
    }
    assert "raw_ffprobe_output" not in body


@pytest.mark.asyncio
async def test_probe_includes_raw_output_when_enabled(client, fake_ffprobe, media_transport, override_services, sample_report, monkeypatch):
    monkeypatch.setattr(config.probe, "include_raw_output", True)
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe(json.dumps(sample_report)))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 200
    assert response.json()["raw_ffprobe_output"] == sample_report


@pytest.mark.asyncio
async def test_invalid_url_is_rejected(client):
    async with client as ac:
        response = await ac.post("/", json={"media_url": "not-a-url"})
    assert response.status_code == 400
    assert "media_url" in response.json()["error"]
    assert "URL" in response.json()["error"]


@pytest.mark.asyncio
async def test_missing_media_url_is_rejected(client):
    async with client as ac:
        response = await ac.post("/", json={"url": "https://example.com/clip.mp4"})
    assert response.status_code == 400
    assert set(response.json()) == {"error"}


@pytest.mark.asyncio
async def test_malformed_json_body_is_rejected(client):
    async with client as ac:
        response = await ac.post(
            "/",
            content=b'{"media_url": ',
            headers={"content-type": "application/json"},
        )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid JSON received")


@pytest.mark.asyncio
async def test_download_404(client, fake_ffprobe, media_transport, override_services, temp_storage, probed_path):
    override_services(transport=media_transport(status=404, content=b"missing"), ffprobe_path=fake_ffprobe("{}"))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/missing.mp4"})

    assert response.status_code == 500
    assert "download" in response.json()["error"].lower()
    assert "404" in response.json()["error"]
    assert media_files(temp_storage) == []
    with pytest.raises(FileNotFoundError):
        probed_path()


@pytest.mark.asyncio
async def test_unparseable_media_file(client, fake_ffprobe, media_transport, override_services, temp_storage):
    """ffprobe rejects the download -> 500 and the file is gone"""
    override_services(
        transport=media_transport(content=b"<html>not media</html>"),
        ffprobe_path=fake_ffprobe("", exit_code=1),
    )

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/page.mp4"})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error.startswith("FFprobe analysis failed")
    assert "exit code 1" in error
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_probe_failure_is_logged_per_request(client, fake_ffprobe, media_transport, override_services, temp_storage):
    override_services(
        transport=media_transport(),
        ffprobe_path=fake_ffprobe("moov atom not found\nInvalid data found when processing input", exit_code=1),
    )

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/broken.mp4"})

    assert response.status_code == 500
    assert "Potential cause: Invalid data found when processing input" in response.json()["error"]

    logs = list((temp_storage / "logs").glob("media_info_*.log"))
    assert len(logs) == 1
    log_text = logs[0].read_text()
    assert "Exit code: 1" in log_text
    assert "Invalid data found when processing input" in log_text
    assert "Cleaning up temp files" in log_text


@pytest.mark.asyncio
async def test_malformed_probe_output(client, fake_ffprobe, media_transport, override_services, temp_storage):
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe("this is not json"))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 500
    assert "parse" in response.json()["error"]
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_missing_ffprobe_binary(client, tmp_path, media_transport, override_services, temp_storage):
    override_services(transport=media_transport(), ffprobe_path=tmp_path / "missing" / "ffprobe")

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 500
    assert "Command not found" in response.json()["error"]
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_processing_budget_exceeded(client, fake_ffprobe, media_transport, override_services, sample_report, temp_storage, monkeypatch):
    monkeypatch.setattr(config.processing, "max_execution_seconds", 0.5)
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe(json.dumps(sample_report), delay=5))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 504
    assert "0.5 seconds" in response.json()["error"]
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_slow_download_hits_processing_budget(client, fake_ffprobe, override_services, temp_storage, monkeypatch):
    monkeypatch.setattr(config.processing, "max_execution_seconds", 0.3)

    async def slow_handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, content=b"late")

    override_services(transport=httpx.MockTransport(slow_handler), ffprobe_path=fake_ffprobe("{}"))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://example.com/clip.mp4"})

    assert response.status_code == 504
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_private_address_blocked_when_ssrf_protection_enabled(client, monkeypatch):
    monkeypatch.setattr(config.security, "enable_ssrf_protection", True)

    def fake_getaddrinfo(host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.5", 0))]

    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://intranet.example/clip.mp4"})

    assert response.status_code == 400
    assert "private" in response.json()["error"]


@pytest.mark.asyncio
async def test_long_presigned_url_is_accepted(client, fake_ffprobe, media_transport, override_services, sample_report, temp_storage):
    url = "https://cdn.example.com/clip.mp4?Policy=" + "A" * 2100 + "&Signature=xyz"
    assert len(url) > 2083
    override_services(transport=media_transport(), ffprobe_path=fake_ffprobe(json.dumps(sample_report)))

    async with client as ac:
        response = await ac.post("/", json={"media_url": url})

    assert response.status_code == 200
    assert response.json()["filename"].endswith(".mp4")
    assert media_files(temp_storage) == []


@pytest.mark.asyncio
async def test_redirect_into_loopback_blocked_when_ssrf_protection_enabled(client, fake_ffprobe, override_services, temp_storage, monkeypatch, probed_path):
    monkeypatch.setattr(config.security, "enable_ssrf_protection", True)
    addresses = {"public.example": "93.184.216.34", "127.0.0.1": "127.0.0.1"}

    def fake_getaddrinfo(host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (addresses[host], 0))]

    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.host == "public.example":
            return httpx.Response(302, headers={"location": "http://127.0.0.1/admin/secret.mp4"})
        return httpx.Response(200, content=b"secret")

    override_services(transport=httpx.MockTransport(handler), ffprobe_path=fake_ffprobe("{}"))

    async with client as ac:
        response = await ac.post("/", json={"media_url": "https://public.example/clip.mp4"})

    assert response.status_code == 400
    assert "private" in response.json()["error"]
    assert requested == ["https://public.example/clip.mp4"]
    assert media_files(temp_storage) == []
    with pytest.raises(FileNotFoundError):
        probed_path()
