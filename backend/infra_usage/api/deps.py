from __future__ import annotations

import re
from typing import Annotated, AsyncIterator

from fastapi import HTTPException, Path, status

from infra_usage.core import telemetry
from infra_usage.services.monitoring import MonitoringClient
from infra_usage.services.subscriptions import SubscriptionClient

PROJECT_REF_PATTERN = re.compile(r"^[a-z0-9]{1,64}$")


def get_project_ref(project_ref: Annotated[str, Path()]) -> str:
    if not PROJECT_REF_PATTERN.fullmatch(project_ref):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project ref must be 1-64 lowercase letters or digits.",
        )
    telemetry.bind_project(project_ref)
    return project_ref


async def get_subscription_client() -> AsyncIterator[SubscriptionClient]:
    client = SubscriptionClient()
    try:
        yield client
    finally:
        await client.aclose()


async def get_monitoring_client() -> AsyncIterator[MonitoringClient]:
    client = MonitoringClient()
    try:
        yield client
    finally:
        await client.aclose()
