import os
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional, Tuple

from media_info_api.config.settings import config
from media_info_api.models.response import CapabilityReport
from media_info_api.services.ffprobe import COMMAND_NOT_FOUND, MediaProber

FFPROBE_INSTALLED = "installed"
FFPROBE_NOT_FOUND = "not_found"
FFPROBE_UNKNOWN = "unknown"

HTTP_CLIENT = "httpx"


def package_version(name: str) -> Optional[str]:
    try:
        return version(name)
    except PackageNotFoundError:
        return None


def check_temp_dir(temp_dir: Path) -> bool:
    """Create the directory if needed and report whether it is writable"""
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return temp_dir.is_dir() and os.access(temp_dir, os.W_OK | os.X_OK)


class DiagnosticsService:
    """Capability report for the documentation page and /health/full"""

    @staticmethod
    async def ffprobe_status(prober: MediaProber) -> Tuple[str, str, Optional[str]]:
        """Return (status, detail, version line) from ``ffprobe -version``"""
        result = await prober.version()
        output = result.text.strip()
        lowered = output.lower()

        if result.returncode == 0 and "ffprobe version" in lowered:
            version_line = output.splitlines()[0]
            return FFPROBE_INSTALLED, "Installed", version_line

        if result.returncode == COMMAND_NOT_FOUND or "no such file" in lowered or "not found" in lowered:
            return (
                FFPROBE_NOT_FOUND,
                f"Not Found (Path: `{prober.ffprobe_path}` incorrect, "
                "or FFprobe not installed/accessible to the server user).",
                None,
            )

        if result.returncode == -1 and not output:
            return FFPROBE_UNKNOWN, "Unknown Status (version check timed out).", None

        return (
            FFPROBE_UNKNOWN,
            f"Unknown Status (Command failed or output unexpected. RC: {result.returncode}, "
            f"Output: {output[:100]}...)",
            None,
        )

    @staticmethod
    async def capability_report(prober: MediaProber) -> CapabilityReport:
        status, detail, ffprobe_version = await DiagnosticsService.ffprobe_status(prober)
        http_client_version = package_version(HTTP_CLIENT)
        temp_dir = Path(config.storage.temp_dir)
        writable = check_temp_dir(temp_dir)

        return CapabilityReport(
            ffprobe_path=prober.ffprobe_path,
            ffprobe_status=status,
            ffprobe_detail=detail,
            ffprobe_version=ffprobe_version,
            http_client=HTTP_CLIENT,
            http_client_version=http_client_version,
            temp_dir=str(temp_dir),
            temp_dir_writable=writable,
            ok=status == FFPROBE_INSTALLED and writable and http_client_version is not None,
        )
