from .internal import DownloadedAsset
from .probe import CodecKind, ProbeFormat, ProbeStream, RawProbeOutput
from .request import ProbeRequest
from .response import AudioStreamInfo, CapabilityReport, ErrorResponse, MediaInfoResponse, VideoStreamInfo

__all__ = [
    "AudioStreamInfo",
    "CapabilityReport",
    "CodecKind",
    "DownloadedAsset",
    "ErrorResponse",
    "MediaInfoResponse",
    "ProbeFormat",
    "ProbeRequest",
    "ProbeStream",
    "RawProbeOutput",
    "VideoStreamInfo",
]
