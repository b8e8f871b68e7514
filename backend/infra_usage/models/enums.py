from __future__ import annotations

from enum import StrEnum


class UsageSeverity(StrEnum):
    NORMAL = "normal"
    WARNING = "warning"
    DEPLETED = "depleted"


class PricingTier(StrEnum):
    FREE = "tier_free"


class InfraAttribute(StrEnum):
    CPU_USAGE = "cpu_usage"
    RAM_USAGE = "ram_usage"
    DISK_IO_BUDGET = "disk_io_budget"


class MetricInterval(StrEnum):
    DAILY = "1d"
