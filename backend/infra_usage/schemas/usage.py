from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from infra_usage.models.enums import UsageSeverity


class IoBudgetStatusRead(BaseModel):
    severity: UsageSeverity
    title: str | None = None
    body: str | None = None
    cta_label: str | None = None

    model_config = {"from_attributes": True}


class MetricPointRead(BaseModel):
    period_start: datetime
    period_start_formatted: str
    loop_id: int
    values: dict[str, float | None]

    model_config = {"from_attributes": True}


class ChartRead(BaseModel):
    name: str
    unit: str
    attribute: str
    data: list[MetricPointRead]
    y_limit: int
    y_suffix: str = Field(description="Appended to each y-axis value, e.g. 45 -> '45%'.")

    model_config = {"from_attributes": True}


class OverviewRowRead(BaseModel):
    label: str
    value: str

    model_config = {"from_attributes": True}


class IoBudgetDetailsRead(BaseModel):
    status: IoBudgetStatusRead
    remaining_percent: float
    explainer_title: str
    explainer_body: str
    overview: list[OverviewRowRead]

    model_config = {"from_attributes": True}


class PanelSectionRead(BaseModel):
    key: str
    anchor: str
    name: str
    description: str
    heading: str
    paragraphs: list[str]
    last_known_value: str | None = None
    is_loading: bool
    chart: ChartRead | None = None
    io_budget: IoBudgetDetailsRead | None = None

    model_config = {"from_attributes": True}


class InfrastructurePanelRead(BaseModel):
    project_ref: str
    title: str
    description: str
    upgrade_url: str
    is_free_tier: bool
    sections: list[PanelSectionRead]

    model_config = {"from_attributes": True}


class UsageAttributeRead(BaseModel):
    key: str
    attribute: str
    anchor: str
    name: str
    unit: str
    description: str
    chart_description: str

    model_config = {"from_attributes": True}


class UsageCategoryRead(BaseModel):
    key: str
    name: str
    description: str
    attributes: list[UsageAttributeRead]

    model_config = {"from_attributes": True}
