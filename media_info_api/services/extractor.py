"""
Flatten a decoded ffprobe report into :class:`MediaInfoResponse`.

Only the first video stream and the first audio stream are kept; later
streams of the same kind (extra audio tracks, alternate angles) are dropped.
Anything ffprobe did not report, or reported as "N/A", comes out as None.
"""
import math
from pathlib import Path
from typing import Any, Dict, Optional, Union

from media_info_api.models.probe import CodecKind, ProbeFormat, ProbeStream, RawProbeOutput
from media_info_api.models.response import AudioStreamInfo, MediaInfoResponse, VideoStreamInfo


def to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    number = to_float(value)
    return int(number) if number is not None else None


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def copy_tags(tags: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return dict(tags) if tags is not None else None


def extract_video_stream(stream: ProbeStream) -> VideoStreamInfo:
    return VideoStreamInfo(
        codec_name=stream.codec_name,
        codec_long_name=stream.codec_long_name,
        profile=stream.profile,
        width=to_int(stream.width),
        height=to_int(stream.height),
        display_aspect_ratio=stream.display_aspect_ratio,
        frame_rate=stream.r_frame_rate if stream.r_frame_rate is not None else stream.avg_frame_rate,
        bit_rate_bps=to_int(stream.bit_rate),
        pixel_format=stream.pix_fmt,
        tags=copy_tags(stream.tags),
    )


def extract_audio_stream(stream: ProbeStream) -> AudioStreamInfo:
    return AudioStreamInfo(
        codec_name=stream.codec_name,
        codec_long_name=stream.codec_long_name,
        sample_rate_hz=to_int(stream.sample_rate),
        channels=to_int(stream.channels),
        channel_layout=stream.channel_layout,
        bit_rate_bps=to_int(stream.bit_rate),
        tags=copy_tags(stream.tags),
    )


def extract_media_info(raw: RawProbeOutput, local_path: Union[str, Path]) -> MediaInfoResponse:
    fmt = raw.format or ProbeFormat()

    video_stream = None
    audio_stream = None
    for stream in raw.streams:
        if video_stream is None and stream.kind is CodecKind.VIDEO:
            video_stream = extract_video_stream(stream)
        elif audio_stream is None and stream.kind is CodecKind.AUDIO:
            audio_stream = extract_audio_stream(stream)

    return MediaInfoResponse(
        filename=Path(local_path).name,
        size_bytes=to_int(fmt.size),
        duration_seconds=to_float(fmt.duration),
        format_name=fmt.format_name,
        format_long_name=fmt.format_long_name,
        bit_rate_bps=to_int(fmt.bit_rate),
        video_stream=video_stream,
        audio_stream=audio_stream,
    )
