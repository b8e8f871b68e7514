from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from infra_usage.api.deps import get_monitoring_client, get_project_ref, get_subscription_client
from infra_usage.core.categories import USAGE_CATEGORIES
from infra_usage.schemas import InfrastructurePanelRead, IoBudgetStatusRead, UsageCategoryRead
from infra_usage.services import infrastructure as infrastructure_service
from infra_usage.services import thresholds as threshold_service
from infra_usage.services.infrastructure import MetricSeriesLookup, SubscriptionLookup
from infra_usage.services.platform import ProjectNotFoundError

router = APIRouter(tags=["usage"])


@router.get(
    "/projects/{project_ref}/usage/infrastructure",
    response_model=InfrastructurePanelRead,
    responses={status.HTTP_204_NO_CONTENT: {"description": "No infrastructure category to render."}},
)
async def read_infrastructure_usage(
    project_ref: str = Depends(get_project_ref),
    subscriptions: SubscriptionLookup = Depends(get_subscription_client),
    monitoring: MetricSeriesLookup = Depends(get_monitoring_client),
) -> InfrastructurePanelRead | Response:
    try:
        panel = await infrastructure_service.load_infrastructure_panel(
            project_ref,
            subscriptions=subscriptions,
            monitoring=monitoring,
        )
    except ProjectNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc.message)) from exc

    if panel is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return InfrastructurePanelRead.model_validate(panel)


@router.get("/usage/io-budget", response_model=IoBudgetStatusRead)
def read_io_budget_status(
    remaining: float = Query(
        default=threshold_service.FULL_IO_BUDGET_PERCENT,
        description="Remaining IO budget for today, in percent.",
    ),
    free_tier: bool = Query(default=False),
) -> IoBudgetStatusRead:
    result = threshold_service.evaluate_io_budget(remaining, is_free_tier=free_tier)
    return IoBudgetStatusRead.model_validate(result)


@router.get("/usage/categories", response_model=list[UsageCategoryRead])
def read_usage_categories() -> list[UsageCategoryRead]:
    return [UsageCategoryRead.model_validate(category) for category in USAGE_CATEGORIES]
