from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from infra_usage.core.instances import find_compute_instance
from infra_usage.models.enums import PricingTier
from infra_usage.services.platform import PlatformAPIError, PlatformClient, ProjectNotFoundError


@dataclass(slots=True, frozen=True)
class Addon:
    product_id: str
    name: str


@dataclass(slots=True, frozen=True)
class Tier:
    product_id: str
    name: str


@dataclass(slots=True, frozen=True)
class ProjectSubscription:
    tier: Tier
    current_period_start: int | None = None
    current_period_end: int | None = None
    addons: tuple[Addon, ...] = field(default_factory=tuple)

    @property
    def is_free_tier(self) -> bool:
        return self.tier.product_id == PricingTier.FREE

    @property
    def compute_instance(self) -> Addon | None:
        return find_compute_instance(self.addons)

    def billing_period(self) -> tuple[str, str] | None:
        """ISO-8601 UTC bounds of the current billing period, if both are known."""
        if self.current_period_start is None or self.current_period_end is None:
            return None
        try:
            return _epoch_to_iso(self.current_period_start), _epoch_to_iso(self.current_period_end)
        except (OverflowError, OSError, ValueError):
            return None


def _epoch_to_iso(seconds: int) -> str:
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def parse_subscription(payload: dict[str, Any]) -> ProjectSubscription:
    billing = payload.get("billing") or {}
    tier = payload.get("tier") or {}
    addons = tuple(
        Addon(product_id=str(item.get("supabase_prod_id", "")), name=str(item.get("name", "")))
        for item in payload.get("addons") or []
        if isinstance(item, dict)
    )
    return ProjectSubscription(
        tier=Tier(product_id=str(tier.get("supabase_prod_id", "")), name=str(tier.get("name", ""))),
        current_period_start=_optional_int(billing.get("current_period_start")),
        current_period_end=_optional_int(billing.get("current_period_end")),
        addons=addons,
    )


class SubscriptionClient(PlatformClient):
    async def get_subscription(self, project_ref: str) -> ProjectSubscription:
        try:
            payload = await self._get_json(f"/platform/projects/{project_ref}/subscription")
        except PlatformAPIError as exc:
            if exc.status_code == 404:
                raise ProjectNotFoundError(project_ref) from exc
            raise
        if not isinstance(payload, dict):
            raise PlatformAPIError(502, "Unexpected subscription payload")
        return parse_subscription(payload)


__all__ = [
    "Addon",
    "ProjectSubscription",
    "SubscriptionClient",
    "Tier",
    "parse_subscription",
]
