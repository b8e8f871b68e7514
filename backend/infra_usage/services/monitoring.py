from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any, Iterable

from infra_usage.core.config import settings
from infra_usage.models.enums import MetricInterval
from infra_usage.services.platform import PlatformAPIError, PlatformClient

logger = logging.getLogger(__name__)

DAY_LABEL_FORMAT = "%d %b"


@dataclass(slots=True, frozen=True)
class DailyMetricPoint:
    period_start: datetime
    period_start_formatted: str
    loop_id: int
    values: dict[str, float | None] = field(default_factory=dict)

    def value(self, attribute: str) -> float | None:
        return self.values.get(attribute)


@dataclass(slots=True, frozen=True)
class MetricSeries:
    attribute: str
    is_loading: bool = False
    data: tuple[DailyMetricPoint, ...] = ()

    @classmethod
    def loading(cls, attribute: str) -> "MetricSeries":
        return cls(attribute=attribute, is_loading=True)

    @classmethod
    def empty(cls, attribute: str) -> "MetricSeries":
        return cls(attribute=attribute)


def format_day_label(moment: datetime, tz: tzinfo | None = None) -> str:
    return moment.astimezone(tz or settings.tz).strftime(DAY_LABEL_FORMAT)


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    moment = datetime.fromisoformat(str(raw))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_value(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def parse_metric_points(
    rows: Iterable[dict[str, Any]], attribute: str, tz: tzinfo | None = None
) -> tuple[DailyMetricPoint, ...]:
    points: list[DailyMetricPoint] = []
    for row in rows:
        try:
            period_start = _parse_timestamp(row["period_start"])
            label = format_day_label(period_start, tz)
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            logger.debug("Skipping %s sample without a usable period_start: %r", attribute, row)
            continue
        points.append(
            DailyMetricPoint(
                period_start=period_start,
                period_start_formatted=label,
                loop_id=len(points),
                values={attribute: _parse_value(row.get(attribute))},
            )
        )
    return tuple(points)


class MonitoringClient(PlatformClient):
    async def get_metric_series(
        self,
        project_ref: str,
        attribute: str,
        *,
        interval: MetricInterval = MetricInterval.DAILY,
        start_date: str,
        end_date: str,
    ) -> MetricSeries:
        payload = await self._get_json(
            f"/platform/projects/{project_ref}/infra-monitoring",
            params={
                "attribute": attribute,
                "interval": interval.value,
                "startDate": start_date,
                "endDate": end_date,
            },
        )
        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise PlatformAPIError(502, f"Unexpected infra monitoring payload for {attribute}")
        points = parse_metric_points((row for row in rows if isinstance(row, dict)), attribute)
        logger.debug("Fetched %d %s samples for %s", len(points), attribute, project_ref)
        return MetricSeries(attribute=attribute, data=points)


__all__ = [
    "DailyMetricPoint",
    "MetricSeries",
    "MonitoringClient",
    "format_day_label",
    "parse_metric_points",
]
