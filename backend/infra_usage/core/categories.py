from __future__ import annotations

from dataclasses import dataclass
from typing import Final

INFRA_CATEGORY_KEY: Final[str] = "infra"
DAILY_REFRESH_NOTE: Final[str] = "The data refreshes every 24 hours."


@dataclass(frozen=True)
class UsageAttribute:
    key: str
    attribute: str
    anchor: str
    name: str
    unit: str
    description: str
    chart_description: str


@dataclass(frozen=True)
class UsageCategory:
    key: str
    name: str
    description: str
    attributes: tuple[UsageAttribute, ...]


USAGE_CATEGORIES: Final[tuple[UsageCategory, ...]] = (
    UsageCategory(
        key="bandwidth",
        name="Bandwidth",
        description="Amount of data transmitted over all network connections",
        attributes=(
            UsageAttribute(
                key="db_egress",
                attribute="total_db_egress_bytes",
                anchor="dbEgress",
                name="Database Egress",
                unit="bytes",
                description="Contains any outgoing traffic (egress) from your database.",
                chart_description="The data refreshes every hour.",
            ),
            UsageAttribute(
                key="storage_egress",
                attribute="total_storage_egress",
                anchor="storageEgress",
                name="Storage Egress",
                unit="bytes",
                description="All requests to download objects from your storage buckets are counted as egress.",
                chart_description="The data refreshes every hour.",
            ),
        ),
    ),
    UsageCategory(
        key="sizeCount",
        name="Size & Counts",
        description="Amount of resources your project is consuming",
        attributes=(
            UsageAttribute(
                key="db_size",
                attribute="total_db_size_bytes",
                anchor="dbSize",
                name="Database size",
                unit="bytes",
                description="Database size refers to the monthly average storage usage, as reported by Postgres.",
                chart_description="The data refreshes every hour.",
            ),
            UsageAttribute(
                key="storage_size",
                attribute="total_storage_size_bytes",
                anchor="storageSize",
                name="Storage size",
                unit="bytes",
                description="Sum of all objects in your storage buckets.",
                chart_description="The data refreshes every hour.",
            ),
        ),
    ),
    UsageCategory(
        key="activity",
        name="Activity",
        description="Aggregated data for user activity",
        attributes=(
            UsageAttribute(
                key="monthly_active_users",
                attribute="total_auth_billing_period_mau",
                anchor="mau",
                name="Monthly Active Users",
                unit="absolute",
                description="Users who log in or refresh their token count towards MAU.",
                chart_description="The data refreshes every 24 hours.",
            ),
            UsageAttribute(
                key="func_invocations",
                attribute="total_func_invocations",
                anchor="funcInvocations",
                name="Edge Function Invocations",
                unit="absolute",
                description="Every serverless function invocation independent of response status is counted.",
                chart_description="The data refreshes every hour.",
            ),
            UsageAttribute(
                key="realtime_message_count",
                attribute="total_realtime_message_count",
                anchor="realtimeMessageCount",
                name="Realtime Messages",
                unit="absolute",
                description="Count of messages going through Realtime.",
                chart_description="The data refreshes every hour.",
            ),
        ),
    ),
    UsageCategory(
        key=INFRA_CATEGORY_KEY,
        name="Infrastructure",
        description="Usage statistics related to your server instance",
        attributes=(
            UsageAttribute(
                key="cpu_usage",
                attribute="cpu_usage",
                anchor="cpu",
                name="CPU",
                unit="percentage",
                description="Max CPU usage of your server",
                chart_description=DAILY_REFRESH_NOTE,
            ),
            UsageAttribute(
                key="ram_usage",
                attribute="ram_usage",
                anchor="ram",
                name="Memory",
                unit="percentage",
                description=(
                    "Memory usage of your server. You might observe elevated memory usage even with "
                    "little load, as Postgres keeps frequently read data cached in memory."
                ),
                chart_description=DAILY_REFRESH_NOTE,
            ),
            UsageAttribute(
                key="disk_io_budget",
                attribute="disk_io_budget",
                anchor="disk_io",
                name="Disk IO bandwidth",
                unit="percentage",
                description="The disk performance of your workload is determined by the Disk IO bandwidth.",
                chart_description=(
                    f"{DAILY_REFRESH_NOTE}\n"
                    "A value of 0% means the burst budget for that day was fully consumed and the "
                    "workload ran at the baseline bandwidth."
                ),
            ),
        ),
    ),
)


def get_usage_category(
    key: str, categories: tuple[UsageCategory, ...] = USAGE_CATEGORIES
) -> UsageCategory | None:
    return next((category for category in categories if category.key == key), None)


__all__ = [
    "INFRA_CATEGORY_KEY",
    "USAGE_CATEGORIES",
    "UsageAttribute",
    "UsageCategory",
    "get_usage_category",
]
