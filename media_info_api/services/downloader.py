import asyncio
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from media_info_api.config.settings import config
from media_info_api.core.context import RequestContext
from media_info_api.core.errors import BlockedUrlError, DownloadError, InvalidInputError
from media_info_api.core.logging import log_info
from media_info_api.core.security import SecurityValidator, UrlValidationResult, is_absolute_url
from media_info_api.i18n import i18n
from media_info_api.models.internal import DownloadedAsset
from media_info_api.utils.filename import temp_filename_for_url
from media_info_api.utils.locale import safe_url_for_log


@dataclass
class TransferResult:
    """What the transport reported, filled in as the transfer progresses"""
    status_code: Optional[int] = None
    reported_size: Optional[int] = None
    error: str = ""


class MediaDownloader:
    """Download a remote media file into the temp directory"""

    def __init__(
        self,
        temp_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.temp_dir = Path(temp_dir or config.storage.temp_dir)
        self.transport = transport

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=config.download.max_redirects,
            verify=config.download.verify_tls,
            timeout=httpx.Timeout(
                config.download.transfer_timeout,
                connect=config.download.connect_timeout
            ),
            headers={
                "User-Agent": config.download.user_agent,
                "Accept": "*/*",
                "Accept-Encoding": "identity",
            },
            event_hooks={"request": [self._check_hop]},
            transport=self.transport,
        )

    @staticmethod
    async def _check_hop(request: httpx.Request) -> None:
        """Runs before every request, redirect hops included"""
        url = str(request.url)
        if await SecurityValidator.validate_url(url) == UrlValidationResult.BLOCKED:
            raise BlockedUrlError(safe_url_for_log(url))

    async def fetch(self, url: str, ctx: RequestContext) -> DownloadedAsset:
        """
        Stream ``url`` to a uniquely named temp file.
        The path is registered on ``ctx`` before any byte is written so the
        request's cleanup pass removes it whatever happens next.
        """
        if not is_absolute_url(url):
            raise InvalidInputError(f"Invalid URL provided: {url}", "error.invalid_url", url=url)

        self.temp_dir.mkdir(parents=True, exist_ok=True)
        local_path = self.temp_dir / temp_filename_for_url(url)
        ctx.register_temp_file(local_path)

        await log_info(ctx, i18n.get("log.downloading", url=safe_url_for_log(url)))

        result = TransferResult()
        timeout = config.download.transfer_timeout
        try:
            await asyncio.wait_for(self._transfer(url, local_path, result), timeout=timeout)
        except asyncio.TimeoutError:
            result.error = f"Operation timed out after {timeout:g} seconds"
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            result.error = str(e) or e.__class__.__name__
        except OSError as e:
            result.error = f"Failed to write temporary file: {e}"

        actual_size = local_path.stat().st_size if local_path.exists() else -1
        failed_status = result.status_code is not None and result.status_code >= 400

        if result.error or failed_status or actual_size <= 0:
            if not result.error and not failed_status:
                result.error = "Downloaded file is empty or missing"
            with suppress(FileNotFoundError):
                local_path.unlink()
            raise DownloadError(
                url,
                status_code=result.status_code,
                reported_size=result.reported_size,
                actual_size=actual_size,
                transport_error=result.error,
            )

        await log_info(ctx, i18n.get("log.download_complete", path=local_path, size=actual_size))
        return DownloadedAsset(local_path=local_path, originating_url=url, size_bytes=actual_size)

    async def _transfer(self, url: str, local_path: Path, result: TransferResult) -> None:
        async with self._build_client() as client:
            async with client.stream("GET", url) as response:
                result.status_code = response.status_code
                if response.status_code >= 400:
                    result.error = f"The requested URL returned error: {response.status_code}"
                    return

                async with aiofiles.open(local_path, "wb") as f:
                    async for chunk in response.aiter_bytes(config.download.chunk_size):
                        await f.write(chunk)
                result.reported_size = response.num_bytes_downloaded
