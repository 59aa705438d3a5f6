from .context import RequestContext
from .errors import (
    BlockedUrlError,
    DownloadError,
    InvalidInputError,
    MalformedProbeOutputError,
    MediaInfoError,
    ProbeError,
    ProcessingTimeoutError,
)

__all__ = [
    "BlockedUrlError",
    "DownloadError",
    "InvalidInputError",
    "MalformedProbeOutputError",
    "MediaInfoError",
    "ProbeError",
    "ProcessingTimeoutError",
    "RequestContext",
]
