from __future__ import annotations

from fastapi import APIRouter

from . import health, usage

router = APIRouter()
router.include_router(health.router)
router.include_router(usage.router)

__all__ = ["router", "health", "usage"]
