import functools
import json
import os
import shlex
import traceback

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from media_info_api.config.settings import config
from media_info_api.core.context import RequestContext
from media_info_api.core.errors import MediaInfoError
from media_info_api.core.logging import log_error, log_info, log_warning
from media_info_api.core.security import SecurityValidator, UrlValidationResult
from media_info_api.i18n import i18n
from media_info_api.models.request import ProbeRequest
from media_info_api.models.response import ErrorResponse, MediaInfoResponse
from media_info_api.services.diagnostics import DiagnosticsService
from media_info_api.services.downloader import MediaDownloader
from media_info_api.services.ffprobe import MediaProber
from media_info_api.services.pipeline import MediaInfoPipeline
from media_info_api.utils.locale import get_locale, safe_url_for_log

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
EXAMPLE_MEDIA_URL = "https://www.w3schools.com/html/mov_bbb.mp4"

router = APIRouter()
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def get_downloader() -> MediaDownloader:
    return MediaDownloader()


def get_prober() -> MediaProber:
    return MediaProber()


def example_success_response() -> dict:
    return {
        "filename": "media_1715000000_a1b2c3d4.mp4",
        "size_bytes": 1234567,
        "duration_seconds": 120.53,
        "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
        "format_long_name": "QuickTime / MOV",
        "bit_rate_bps": 819200,
        "video_stream": {
            "codec_name": "h264",
            "codec_long_name": "H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10",
            "profile": "High",
            "width": 1920,
            "height": 1080,
            "display_aspect_ratio": "16:9",
            "frame_rate": "30000/1001",
            "bit_rate_bps": 750000,
            "pixel_format": "yuv420p",
            "tags": {"language": "und", "handler_name": "VideoHandler"},
        },
        "audio_stream": {
            "codec_name": "aac",
            "codec_long_name": "AAC (Advanced Audio Coding)",
            "sample_rate_hz": 48000,
            "channels": 2,
            "channel_layout": "stereo",
            "bit_rate_bps": 128000,
            "tags": {"language": "eng"},
        },
    }


def curl_example(endpoint: str) -> str:
    payload = json.dumps({"media_url": EXAMPLE_MEDIA_URL})
    return (
        f"curl -X POST {shlex.quote(endpoint)} \\\n"
        f"  -H \"Content-Type: application/json\" \\\n"
        f"  -d {shlex.quote(payload)}"
    )


@router.get("/", response_class=HTMLResponse)
async def documentation(request: Request, prober: MediaProber = Depends(get_prober)):
    """API documentation with a live server status report"""
    report = await DiagnosticsService.capability_report(prober)
    endpoint = str(request.base_url)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": config.api.title,
            "report": report,
            "endpoint": endpoint,
            "log_dir": config.storage.log_subdir,
            "request_example": json.dumps({"media_url": "https://example.com/path/to/media.mp4"}, indent=4),
            "success_example": json.dumps(example_success_response(), indent=4),
            "error_example": json.dumps({"error": "Concise error message."}, indent=4),
            "curl_command": curl_example(endpoint),
            "max_execution_seconds": config.processing.max_execution_seconds,
            "transfer_timeout": config.download.transfer_timeout,
        },
    )


@router.post(
    "/",
    response_model=MediaInfoResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def probe_media(
    request: Request,
    probe_request: ProbeRequest,
    downloader: MediaDownloader = Depends(get_downloader),
    prober: MediaProber = Depends(get_prober),
):
    """Download the media file and return its normalized ffprobe metadata"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    ctx = RequestContext.create(config.storage.log_dir)
    request.state.request_id = ctx.request_id
    media_url = str(probe_request.media_url)

    validation_result = await SecurityValidator.validate_url(media_url)
    if validation_result == UrlValidationResult.BLOCKED:
        await log_warning(ctx, f"Blocked URL: {safe_url_for_log(media_url)}")
        raise HTTPException(status_code=400, detail=_("error.blocked_url"))
    if validation_result == UrlValidationResult.INVALID:
        await log_warning(ctx, f"Invalid URL: {safe_url_for_log(media_url)}")
        raise HTTPException(status_code=400, detail=_("error.media_url_required"))

    await log_info(ctx, i18n.get("log.request_started", url=safe_url_for_log(media_url)))

    pipeline = MediaInfoPipeline(downloader, prober)
    try:
        info, raw = await pipeline.run_with_budget(
            media_url, ctx, config.processing.max_execution_seconds
        )
    except MediaInfoError as e:
        await log_error(ctx, f"Error (HTTP {e.status_code}): {e.detail}", context=e.diagnostic_context)
        raise HTTPException(status_code=e.status_code, detail=_(e.message_key, **e.message_params()))
    except Exception as e:
        await log_error(ctx, f"Media info processing failed: {e!r}", context=traceback.format_exc())
        raise HTTPException(status_code=500, detail=_("error.internal"))
    finally:
        removed = ctx.cleanup()
        if removed:
            await log_info(ctx, i18n.get("log.cleanup", files=", ".join(str(p) for p in removed)))

    if config.probe.include_raw_output:
        body = info.model_dump()
        body["raw_ffprobe_output"] = raw.document
        return JSONResponse(body)

    return info
