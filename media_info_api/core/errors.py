"""
Error types raised along the media info pipeline.

Every error carries the HTTP status it maps to and an i18n key for the
short client-facing message. The full diagnostic text stays in ``detail``
and is only written to the server-side logs.
"""
from typing import Any, Dict, Optional


class MediaInfoError(Exception):
    """Base exception for all pipeline failures."""

    status_code = 500
    message_key = "error.internal"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)

    def message_params(self) -> Dict[str, Any]:
        return {}

    @property
    def diagnostic_context(self) -> Optional[str]:
        """Extra detail for the server-side log"""
        return None


class InvalidInputError(MediaInfoError):
    """Malformed request body or missing/invalid media URL."""

    status_code = 400

    def __init__(self, detail: str, message_key: str = "error.media_url_required", **params: Any):
        super().__init__(detail)
        self.message_key = message_key
        self.params = params

    def message_params(self) -> Dict[str, Any]:
        return self.params


class DownloadError(MediaInfoError):
    """Network/TLS failure, HTTP error status or empty result file."""

    message_key = "error.download_failed"

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        reported_size: Optional[int] = None,
        actual_size: int = -1,
        transport_error: str = "",
    ):
        self.url = url
        self.http_status = status_code
        self.reported_size = reported_size
        self.actual_size = actual_size
        self.transport_error = transport_error
        super().__init__(
            f"Failed to download media file from: {url} "
            f"(HTTP: {status_code if status_code is not None else 0}, "
            f"Size: (Disk: {actual_size} / Header: {reported_size if reported_size is not None else 0}), "
            f"Error: {transport_error})"
        )
        if status_code is None and transport_error:
            self.message_key = "error.download_failed_transport"

    def message_params(self) -> Dict[str, Any]:
        return {"status": self.http_status or 0, "reason": self.transport_error}


class ProbeError(MediaInfoError):
    """ffprobe exited non-zero or could not be executed."""

    message_key = "error.probe_failed"

    def __init__(self, diagnosis, command: str, output: str):
        self.diagnosis = diagnosis
        self.command = command
        self.output = output
        super().__init__(diagnosis.message)

    @property
    def exit_code(self) -> int:
        return self.diagnosis.exit_code

    def message_params(self) -> Dict[str, Any]:
        return {"reason": self.diagnosis.message}

    @property
    def diagnostic_context(self) -> Optional[str]:
        return f"Command: {self.command}\nExit code: {self.exit_code}\nFull output:\n{self.output}"


class MalformedProbeOutputError(MediaInfoError):
    """ffprobe exited zero but its report is not the expected JSON document."""

    message_key = "error.parse_failed"

    def __init__(self, reason: str, raw_output: str):
        self.reason = reason
        self.raw_output = raw_output
        super().__init__(
            f"Failed to parse FFprobe JSON output: {reason}. Raw output: {raw_output[:500]}"
        )

    @property
    def diagnostic_context(self) -> Optional[str]:
        return self.raw_output


class ProcessingTimeoutError(MediaInfoError):
    """The overall processing budget elapsed."""

    status_code = 504
    message_key = "error.timeout"

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Processing exceeded {seconds} seconds")

    def message_params(self) -> Dict[str, Any]:
        return {"seconds": f"{self.seconds:g}"}


class BlockedUrlError(MediaInfoError):
    """A request hop, redirects included, targets a private or local address."""

    status_code = 400
    message_key = "error.blocked_url"

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Blocked request to private or local address: {url}")
