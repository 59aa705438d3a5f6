import asyncio
from typing import Tuple

from media_info_api.core.context import RequestContext
from media_info_api.core.errors import ProcessingTimeoutError
from media_info_api.core.logging import log_debug, log_info
from media_info_api.i18n import i18n
from media_info_api.models.probe import RawProbeOutput
from media_info_api.models.response import MediaInfoResponse
from media_info_api.services.downloader import MediaDownloader
from media_info_api.services.extractor import extract_media_info
from media_info_api.services.ffprobe import MediaProber, parse_probe_output


class MediaInfoPipeline:
    """Download -> probe -> extract for a single request"""

    def __init__(self, downloader: MediaDownloader, prober: MediaProber):
        self.downloader = downloader
        self.prober = prober

    async def run(self, url: str, ctx: RequestContext) -> Tuple[MediaInfoResponse, RawProbeOutput]:
        """
        Run each step in order. Temp files are registered on ``ctx``;
        removing them is the caller's job.
        """
        asset = await self.downloader.fetch(url, ctx)
        report = await self.prober.probe(asset.local_path, ctx)
        await log_debug(ctx, f"ffprobe report: {len(report)} characters")
        raw = parse_probe_output(report)
        info = extract_media_info(raw, asset.local_path)
        await log_info(ctx, i18n.get("log.extracted"))
        return info, raw

    async def run_with_budget(
        self,
        url: str,
        ctx: RequestContext,
        timeout: float
    ) -> Tuple[MediaInfoResponse, RawProbeOutput]:
        """Same as run() but aborted once ``timeout`` seconds have elapsed"""
        try:
            return await asyncio.wait_for(self.run(url, ctx), timeout=timeout)
        except asyncio.TimeoutError:
            raise ProcessingTimeoutError(timeout)
