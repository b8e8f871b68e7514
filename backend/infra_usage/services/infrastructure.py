from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Final, Mapping, Protocol

from infra_usage.core import telemetry
from infra_usage.core.categories import (
    INFRA_CATEGORY_KEY,
    USAGE_CATEGORIES,
    UsageAttribute,
    UsageCategory,
    get_usage_category,
)
from infra_usage.core.config import settings
from infra_usage.core.instances import (
    DAILY_BURST_MINUTES,
    DEFAULT_INSTANCE_NAME,
    format_bandwidth,
    get_instance_spec,
)
from infra_usage.models.enums import InfraAttribute, MetricInterval
from infra_usage.services.annotations import last_known_value
from infra_usage.services.monitoring import DailyMetricPoint, MetricSeries
from infra_usage.services.platform import PlatformAPIError, ProjectNotFoundError
from infra_usage.services.subscriptions import ProjectSubscription
from infra_usage.services.thresholds import IoBudgetStatus, current_day_io_budget, evaluate_io_budget
from infra_usage.services.upgrade import get_upgrade_url

logger = logging.getLogger(__name__)

CHART_Y_LIMIT: Final[int] = 100
CHART_Y_SUFFIX: Final[str] = "%"
IO_BUDGET_HEADING: Final[str] = "IO Budget remaining each day"
IO_EXPLAINER_TITLE: Final[str] = "What is Disk IO Bandwidth?"
IO_EXPLAINER_BODY: Final[str] = (
    f"Smaller compute instances can burst up to the maximum disk IO bandwidth for {DAILY_BURST_MINUTES} "
    "minutes in a day. Beyond that, the performance reverts to the baseline disk IO bandwidth."
)


class SubscriptionLookup(Protocol):
    async def get_subscription(self, project_ref: str) -> ProjectSubscription: ...


class MetricSeriesLookup(Protocol):
    async def get_metric_series(
        self,
        project_ref: str,
        attribute: str,
        *,
        interval: MetricInterval = ...,
        start_date: str,
        end_date: str,
    ) -> MetricSeries: ...


@dataclass(slots=True, frozen=True)
class ChartSpec:
    name: str
    unit: str
    attribute: str
    data: tuple[DailyMetricPoint, ...]
    y_limit: int = CHART_Y_LIMIT
    y_suffix: str = CHART_Y_SUFFIX

    def format_value(self, value: float) -> str:
        number = int(value) if float(value).is_integer() else value
        return f"{number}{self.y_suffix}"


@dataclass(slots=True, frozen=True)
class OverviewRow:
    label: str
    value: str


@dataclass(slots=True, frozen=True)
class IoBudgetDetails:
    status: IoBudgetStatus
    remaining_percent: float
    explainer_title: str
    explainer_body: str
    overview: tuple[OverviewRow, ...]


@dataclass(slots=True, frozen=True)
class PanelSection:
    key: str
    anchor: str
    name: str
    description: str
    heading: str
    paragraphs: tuple[str, ...]
    last_known_value: str | None
    is_loading: bool
    chart: ChartSpec | None
    io_budget: IoBudgetDetails | None = None


@dataclass(slots=True, frozen=True)
class InfrastructurePanel:
    project_ref: str
    title: str
    description: str
    upgrade_url: str
    is_free_tier: bool
    sections: tuple[PanelSection, ...]


def _section_heading(attribute: UsageAttribute) -> str:
    if attribute.key == InfraAttribute.DISK_IO_BUDGET:
        return IO_BUDGET_HEADING
    name = attribute.name.lower() if attribute.key == InfraAttribute.RAM_USAGE else attribute.name
    return f"Max {name} usage each day"


def _io_budget_details(
    subscription: ProjectSubscription | None,
    points: tuple[DailyMetricPoint, ...],
    now: datetime,
    tz: tzinfo | None,
) -> IoBudgetDetails:
    remaining = current_day_io_budget(points, now, tz)
    is_free_tier = subscription.is_free_tier if subscription else False
    instance = subscription.compute_instance if subscription else None
    spec = get_instance_spec(instance.product_id if instance else None)
    overview = (
        OverviewRow("Current compute instance", instance.name if instance else DEFAULT_INSTANCE_NAME),
        OverviewRow("Maximum IO Bandwidth (burst limit)", format_bandwidth(spec.max_bandwidth)),
        OverviewRow("Baseline IO Bandwidth", format_bandwidth(spec.base_bandwidth)),
        OverviewRow("Daily burst time limit", f"{DAILY_BURST_MINUTES} mins"),
    )
    return IoBudgetDetails(
        status=evaluate_io_budget(remaining, is_free_tier=is_free_tier),
        remaining_percent=remaining,
        explainer_title=IO_EXPLAINER_TITLE,
        explainer_body=IO_EXPLAINER_BODY,
        overview=overview,
    )


def build_infrastructure_panel(
    project_ref: str,
    subscription: ProjectSubscription | None,
    series: Mapping[str, MetricSeries],
    *,
    now: datetime,
    tz: tzinfo | None = None,
    categories: tuple[UsageCategory, ...] = USAGE_CATEGORIES,
    base_url: str | None = None,
) -> InfrastructurePanel | None:
    category = get_usage_category(INFRA_CATEGORY_KEY, categories)
    if category is None:
        return None

    sections: list[PanelSection] = []
    for attribute in category.attributes:
        metric = series.get(attribute.key) or MetricSeries.empty(attribute.key)
        chart = None
        if not metric.is_loading:
            chart = ChartSpec(
                name=attribute.name,
                unit=attribute.unit,
                attribute=attribute.attribute,
                data=metric.data,
            )
        io_budget = None
        if attribute.key == InfraAttribute.DISK_IO_BUDGET:
            io_budget = _io_budget_details(subscription, metric.data, now, tz)

        sections.append(
            PanelSection(
                key=attribute.key,
                anchor=attribute.anchor,
                name=attribute.name,
                description=attribute.description,
                heading=_section_heading(attribute),
                paragraphs=tuple(attribute.chart_description.split("\n")),
                last_known_value=last_known_value(metric.data, attribute.attribute, tz),
                is_loading=metric.is_loading,
                chart=chart,
                io_budget=io_budget,
            )
        )

    return InfrastructurePanel(
        project_ref=project_ref,
        title=category.name,
        description=category.description,
        upgrade_url=get_upgrade_url(project_ref, subscription, base_url),
        is_free_tier=subscription.is_free_tier if subscription else False,
        sections=tuple(sections),
    )


async def _lookup_subscription(
    subscriptions: SubscriptionLookup, project_ref: str
) -> ProjectSubscription | None:
    try:
        return await subscriptions.get_subscription(project_ref)
    except ProjectNotFoundError:
        raise
    except PlatformAPIError as exc:
        logger.warning("Subscription lookup failed for %s: %s", project_ref, exc)
        telemetry.capture_exception(exc, {"project_ref": project_ref, "lookup": "subscription"})
        return None


async def fetch_infra_series(
    monitoring: MetricSeriesLookup,
    project_ref: str,
    subscription: ProjectSubscription | None,
    *,
    timeout: float | None = None,
) -> dict[str, MetricSeries]:
    """Fetch CPU, RAM and IO budget series concurrently.

    Lookups still running after ``timeout`` are cancelled and reported as
    loading. Failed lookups are reported as empty.
    """
    attributes = [attribute.value for attribute in InfraAttribute]
    period = subscription.billing_period() if subscription else None
    if period is None:
        return {attribute: MetricSeries.empty(attribute) for attribute in attributes}

    start_date, end_date = period
    tasks = {
        attribute: asyncio.create_task(
            monitoring.get_metric_series(
                project_ref,
                attribute,
                interval=MetricInterval.DAILY,
                start_date=start_date,
                end_date=end_date,
            )
        )
        for attribute in attributes
    }
    wait_for = settings.panel_fetch_timeout_seconds if timeout is None else timeout
    _, pending = await asyncio.wait(tasks.values(), timeout=wait_for)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    results: dict[str, MetricSeries] = {}
    for attribute, task in tasks.items():
        if task in pending:
            logger.info("%s lookup for %s still pending after %.1fs", attribute, project_ref, wait_for)
            results[attribute] = MetricSeries.loading(attribute)
            continue
        try:
            results[attribute] = task.result()
        except PlatformAPIError as exc:
            logger.warning("%s lookup failed for %s: %s", attribute, project_ref, exc)
            telemetry.capture_exception(exc, {"project_ref": project_ref, "attribute": attribute})
            results[attribute] = MetricSeries.empty(attribute)
        except Exception as exc:
            logger.exception("%s lookup crashed for %s", attribute, project_ref)
            telemetry.capture_exception(exc, {"project_ref": project_ref, "attribute": attribute})
            results[attribute] = MetricSeries.empty(attribute)
    return results


async def load_infrastructure_panel(
    project_ref: str,
    *,
    subscriptions: SubscriptionLookup,
    monitoring: MetricSeriesLookup,
    now: datetime | None = None,
    timeout: float | None = None,
) -> InfrastructurePanel | None:
    subscription = await _lookup_subscription(subscriptions, project_ref)
    series = await fetch_infra_series(monitoring, project_ref, subscription, timeout=timeout)
    return build_infrastructure_panel(
        project_ref,
        subscription,
        series,
        now=now or datetime.now(timezone.utc),
    )
