from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

import pytest
from fastapi.testclient import TestClient

from infra_usage.api.deps import get_monitoring_client, get_subscription_client
from infra_usage.main import app
from infra_usage.models.enums import MetricInterval
from infra_usage.services.monitoring import DailyMetricPoint, MetricSeries, format_day_label
from infra_usage.services.platform import PlatformAPIError, ProjectNotFoundError
from infra_usage.services.subscriptions import Addon, ProjectSubscription, Tier

PERIOD_START = datetime(2023, 3, 1, tzinfo=timezone.utc)
PERIOD_END = datetime(2023, 4, 1, tzinfo=timezone.utc)
PAID_TIER = "tier_pro"


def make_points(
    attribute: str, values, start: datetime = PERIOD_START, tz: tzinfo = timezone.utc
) -> tuple[DailyMetricPoint, ...]:
    points = []
    for idx, value in enumerate(values):
        period_start = start + timedelta(days=idx)
        points.append(
            DailyMetricPoint(
                period_start=period_start,
                period_start_formatted=format_day_label(period_start, tz),
                loop_id=idx,
                values={attribute: value},
            )
        )
    return tuple(points)


def make_subscription(
    tier: str = PAID_TIER,
    addons: tuple[Addon, ...] = (),
    with_period: bool = True,
) -> ProjectSubscription:
    return ProjectSubscription(
        tier=Tier(product_id=tier, name=tier.removeprefix("tier_").title()),
        current_period_start=int(PERIOD_START.timestamp()) if with_period else None,
        current_period_end=int(PERIOD_END.timestamp()) if with_period else None,
        addons=addons,
    )


@dataclass
class FakeSubscriptions:
    subscription: ProjectSubscription | None = None
    error: PlatformAPIError | None = None
    calls: list[str] = field(default_factory=list)

    async def get_subscription(self, project_ref: str) -> ProjectSubscription:
        self.calls.append(project_ref)
        if self.error is not None:
            raise self.error
        if self.subscription is None:
            raise ProjectNotFoundError(project_ref)
        return self.subscription


@dataclass
class FakeMonitoring:
    series: dict[str, tuple[DailyMetricPoint, ...]] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    slow: set[str] = field(default_factory=set)
    calls: list[dict] = field(default_factory=list)

    async def get_metric_series(
        self,
        project_ref: str,
        attribute: str,
        *,
        interval: MetricInterval = MetricInterval.DAILY,
        start_date: str,
        end_date: str,
    ) -> MetricSeries:
        self.calls.append(
            {
                "project_ref": project_ref,
                "attribute": attribute,
                "interval": interval,
                "start_date": start_date,
                "end_date": end_date,
            }
        )
        if attribute in self.slow:
            await asyncio.sleep(5)
        if attribute in self.errors:
            raise self.errors[attribute]
        return MetricSeries(attribute=attribute, data=self.series.get(attribute, ()))


@pytest.fixture
def subscriptions() -> FakeSubscriptions:
    return FakeSubscriptions(subscription=make_subscription())


@pytest.fixture
def monitoring() -> FakeMonitoring:
    return FakeMonitoring()


@pytest.fixture
def client(subscriptions, monitoring):
    app.dependency_overrides[get_subscription_client] = lambda: subscriptions
    app.dependency_overrides[get_monitoring_client] = lambda: monitoring
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
