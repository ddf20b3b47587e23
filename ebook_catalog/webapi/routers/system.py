"""Liveness and aggregate statistics routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...catalog import CatalogService
from ..auth import require_api_token
from ..dependencies import get_catalog_service
from ..metrics import record_library_snapshot
from ..schemas import StatsResponse

router = APIRouter(tags=["system"])


@router.get("/health")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/api/stats",
    response_model=StatsResponse,
    dependencies=[Depends(require_api_token)],
)
def catalog_stats(service: CatalogService = Depends(get_catalog_service)) -> StatsResponse:
    """Return totals over the whole library, ignoring any search filter."""

    stats = service.stats()
    record_library_snapshot(stats.count, stats.total_size_bytes)
    return StatsResponse.from_stats(stats)


__all__ = ["router"]
