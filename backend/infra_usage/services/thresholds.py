from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Final, Iterable

from infra_usage.models.enums import InfraAttribute, UsageSeverity
from infra_usage.services.monitoring import DailyMetricPoint, format_day_label

IO_BUDGET_WARNING_PERCENT: Final[float] = 20
FULL_IO_BUDGET_PERCENT: Final[float] = 100

UPGRADE_PROJECT_LABEL: Final[str] = "Upgrade project"
CHANGE_COMPUTE_LABEL: Final[str] = "Change compute add-on"

_UPGRADE_HINT = "If you need consistent disk performance, consider upgrading to a larger compute add-on."
_ALERT_COPY: Final[dict[UsageSeverity, tuple[str, str]]] = {
    UsageSeverity.DEPLETED: (
        "IO Budget for today has been used up",
        "Your workload has used up all the burst IO throughput minutes during the day and is "
        f"running at the baseline performance. {_UPGRADE_HINT}",
    ),
    UsageSeverity.WARNING: (
        "IO Budget for today is running out",
        "Your workload is about to use up all the burst IO throughput minutes during the day. "
        "Once this is completely used up, your workload will run at the baseline performance. "
        f"{_UPGRADE_HINT}",
    ),
}


@dataclass(slots=True, frozen=True)
class IoBudgetStatus:
    severity: UsageSeverity
    title: str | None = None
    body: str | None = None
    cta_label: str | None = None


def classify_io_budget(remaining_percent: float) -> UsageSeverity:
    if remaining_percent <= 0:
        return UsageSeverity.DEPLETED
    if remaining_percent <= IO_BUDGET_WARNING_PERCENT:
        return UsageSeverity.WARNING
    return UsageSeverity.NORMAL


def upgrade_cta_label(is_free_tier: bool) -> str:
    return UPGRADE_PROJECT_LABEL if is_free_tier else CHANGE_COMPUTE_LABEL


def evaluate_io_budget(remaining_percent: float, *, is_free_tier: bool) -> IoBudgetStatus:
    """Classify today's remaining IO budget and pick the alert copy to show.

    Values outside 0-100 are classified as-is. ``normal`` carries no copy.
    """
    severity = classify_io_budget(remaining_percent)
    if severity is UsageSeverity.NORMAL:
        return IoBudgetStatus(severity=severity)

    title, body = _ALERT_COPY[severity]
    return IoBudgetStatus(
        severity=severity,
        title=title,
        body=body,
        cta_label=upgrade_cta_label(is_free_tier),
    )


def current_day_io_budget(
    points: Iterable[DailyMetricPoint],
    today: datetime,
    tz: tzinfo | None = None,
) -> float:
    """Remaining IO budget for ``today``, treating a missing sample as a full budget."""
    label = format_day_label(today, tz)
    attribute = InfraAttribute.DISK_IO_BUDGET.value
    match = next((point for point in points if point.period_start_formatted == label), None)
    if match is None:
        return FULL_IO_BUDGET_PERCENT
    value = match.value(attribute)
    return FULL_IO_BUDGET_PERCENT if value is None else value


__all__ = [
    "CHANGE_COMPUTE_LABEL",
    "FULL_IO_BUDGET_PERCENT",
    "IO_BUDGET_WARNING_PERCENT",
    "IoBudgetStatus",
    "UPGRADE_PROJECT_LABEL",
    "classify_io_budget",
    "current_day_io_budget",
    "evaluate_io_budget",
    "upgrade_cta_label",
]
