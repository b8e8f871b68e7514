from __future__ import annotations

from fastapi import APIRouter

from infra_usage.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
def read_health() -> dict[str, str]:
    return {"status": "ok", "service": settings.project_name, "version": settings.version}
