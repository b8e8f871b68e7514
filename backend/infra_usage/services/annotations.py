from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Iterable

from infra_usage.core.config import settings
from infra_usage.services.monitoring import DailyMetricPoint


def format_last_known(moment: datetime) -> str:
    # 24-hour clock with a lowercase meridiem, e.g. "14 Mar 2023, 00:00am (+0000)".
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{moment:%d %b %Y, %H:%M}{meridiem} ({moment:%z})"


def last_known_value(
    points: Iterable[DailyMetricPoint], attribute: str, tz: tzinfo | None = None
) -> str | None:
    """Approximate when a series stopped reporting.

    Takes the first sample after the initial period whose value is exactly zero
    and reports the day before it in the display timezone. This is a display
    hint only.
    """
    # TODO: switch to a last-reported timestamp once infra-monitoring returns one.
    first_zero = next(
        (point for point in points if point.loop_id > 0 and point.value(attribute) == 0),
        None,
    )
    if first_zero is None:
        return None
    try:
        moment = (first_zero.period_start - timedelta(days=1)).astimezone(tz or settings.tz)
    except OverflowError:
        return None
    return format_last_known(moment)


__all__ = ["format_last_known", "last_known_value"]
