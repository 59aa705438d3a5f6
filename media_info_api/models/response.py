from typing import Any, Dict, Optional

from pydantic import BaseModel


class VideoStreamInfo(BaseModel):
    """First video stream of the file"""
    codec_name: Optional[str] = None
    codec_long_name: Optional[str] = None
    profile: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    display_aspect_ratio: Optional[str] = None
    frame_rate: Optional[str] = None
    bit_rate_bps: Optional[int] = None
    pixel_format: Optional[str] = None
    tags: Optional[Dict[str, Any]] = None


class AudioStreamInfo(BaseModel):
    """First audio stream of the file"""
    codec_name: Optional[str] = None
    codec_long_name: Optional[str] = None
    sample_rate_hz: Optional[int] = None
    channels: Optional[int] = None
    channel_layout: Optional[str] = None
    bit_rate_bps: Optional[int] = None
    tags: Optional[Dict[str, Any]] = None


class MediaInfoResponse(BaseModel):
    """Normalized media information response"""
    filename: str
    size_bytes: Optional[int] = None
    duration_seconds: Optional[float] = None
    format_name: Optional[str] = None
    format_long_name: Optional[str] = None
    bit_rate_bps: Optional[int] = None
    video_stream: Optional[VideoStreamInfo] = None
    audio_stream: Optional[AudioStreamInfo] = None


class ErrorResponse(BaseModel):
    error: str


class CapabilityReport(BaseModel):
    """Server prerequisites shown on the documentation page"""
    ffprobe_path: str
    ffprobe_status: str
    ffprobe_detail: str
    ffprobe_version: Optional[str] = None
    http_client: str
    http_client_version: Optional[str] = None
    temp_dir: str
    temp_dir_writable: bool
    ok: bool
