from fastapi import APIRouter, Depends

from media_info_api.api.probe import get_prober
from media_info_api.i18n import i18n
from media_info_api.models.response import CapabilityReport
from media_info_api.services.diagnostics import DiagnosticsService
from media_info_api.services.ffprobe import MediaProber

router = APIRouter()


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {"status": i18n.get("health.status")}


@router.get("/health/full", response_model=CapabilityReport)
async def health_check_full(prober: MediaProber = Depends(get_prober)):
    """Detailed health check: ffprobe, HTTP client and temp directory"""
    return await DiagnosticsService.capability_report(prober)
