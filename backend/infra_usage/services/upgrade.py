from __future__ import annotations

from infra_usage.core.config import settings
from infra_usage.services.subscriptions import ProjectSubscription


def get_upgrade_url(
    project_ref: str,
    subscription: ProjectSubscription | None,
    base_url: str | None = None,
) -> str:
    prefix = settings.dashboard_base_url if base_url is None else base_url.rstrip("/")
    if subscription is None:
        path = f"/project/{project_ref}/settings/billing/subscription"
    elif subscription.is_free_tier:
        path = f"/project/{project_ref}/settings/billing/subscription?panel=subscriptionPlan"
    else:
        path = f"/project/{project_ref}/settings/addons?panel=computeInstance"
    return f"{prefix}{path}"
