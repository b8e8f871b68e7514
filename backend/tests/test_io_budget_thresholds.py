from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_points
from infra_usage.models.enums import UsageSeverity
from infra_usage.services import thresholds as threshold_service


@pytest.mark.parametrize("remaining", [0, -0.5, -100, -1e9])
def test_depleted_at_or_below_zero(remaining):
    assert threshold_service.classify_io_budget(remaining) is UsageSeverity.DEPLETED


@pytest.mark.parametrize("remaining", [0.01, 1, 15, 19.99, 20])
def test_warning_up_to_twenty_percent(remaining):
    assert threshold_service.classify_io_budget(remaining) is UsageSeverity.WARNING


@pytest.mark.parametrize("remaining", [20.01, 45, 100, 250])
def test_normal_above_twenty_percent(remaining):
    assert threshold_service.classify_io_budget(remaining) is UsageSeverity.NORMAL


def test_nan_is_not_flagged():
    assert threshold_service.classify_io_budget(float("nan")) is UsageSeverity.NORMAL


def test_depleted_free_tier_prompts_project_upgrade():
    result = threshold_service.evaluate_io_budget(0, is_free_tier=True)
    assert result.severity is UsageSeverity.DEPLETED
    assert result.cta_label == "Upgrade project"
    assert result.title == "IO Budget for today has been used up"
    assert "running at the baseline performance" in result.body


def test_warning_paid_tier_prompts_compute_change():
    result = threshold_service.evaluate_io_budget(15, is_free_tier=False)
    assert result.severity is UsageSeverity.WARNING
    assert result.cta_label == "Change compute add-on"
    assert result.title == "IO Budget for today is running out"
    assert result.body.startswith("Your workload is about to use up")


@pytest.mark.parametrize("is_free_tier", [True, False])
def test_normal_has_no_alert_copy(is_free_tier):
    result = threshold_service.evaluate_io_budget(45, is_free_tier=is_free_tier)
    assert result.severity is UsageSeverity.NORMAL
    assert result.title is None
    assert result.body is None
    assert result.cta_label is None


@pytest.mark.parametrize("remaining", [-5, 0, 10, 20])
def test_cta_label_follows_tier_for_every_alert(remaining):
    free = threshold_service.evaluate_io_budget(remaining, is_free_tier=True)
    paid = threshold_service.evaluate_io_budget(remaining, is_free_tier=False)
    assert free.cta_label == "Upgrade project"
    assert paid.cta_label == "Change compute add-on"
    assert free.severity == paid.severity


def test_current_day_budget_reads_matching_sample():
    points = make_points("disk_io_budget", [100, 80, 12])
    today = datetime(2023, 3, 3, 18, 30, tzinfo=timezone.utc)
    assert threshold_service.current_day_io_budget(points, today, timezone.utc) == 12


def test_missing_current_day_sample_counts_as_full_budget():
    points = make_points("disk_io_budget", [0, 0, 0])
    today = datetime(2023, 3, 20, tzinfo=timezone.utc)
    remaining = threshold_service.current_day_io_budget(points, today, timezone.utc)
    assert remaining == 100
    assert threshold_service.classify_io_budget(remaining) is UsageSeverity.NORMAL


def test_current_day_sample_without_value_counts_as_full_budget():
    points = make_points("disk_io_budget", [50, None])
    today = datetime(2023, 3, 2, tzinfo=timezone.utc)
    assert threshold_service.current_day_io_budget(points, today, timezone.utc) == 100


def test_current_day_uses_display_timezone():
    points = make_points("disk_io_budget", [90, 5])
    tokyo = timezone(timedelta(hours=9))
    # 23:00 UTC on the 1st is already the 2nd in Tokyo.
    late_evening = datetime(2023, 3, 1, 23, 0, tzinfo=timezone.utc)
    assert threshold_service.current_day_io_budget(points, late_evening, timezone.utc) == 90
    assert threshold_service.current_day_io_budget(points, late_evening, tokyo) == 5
