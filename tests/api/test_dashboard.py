from __future__ import annotations

from datetime import date, datetime

import pytest

from estimate_dashboard import dashboard
from estimate_dashboard.errors import MissingFieldError
from estimate_dashboard.models import Estimate, EstimateStatus, EstimateType


def _done(estimate_id: int, returned: str, estimate_type=EstimateType.FINAL, amount="100", billed=False) -> Estimate:
    return Estimate(
        id=estimate_id,
        estimate_type=estimate_type,
        status=EstimateStatus.DONE,
        date_returned=returned,
        estimate_amount=amount,
        client_billed=billed,
    )


def test_new_estimate_builds_intake_record() -> None:
    moment = datetime(2026, 3, 4, 9, 30)

    estimate = dashboard.new_estimate(
        claim_number=" CLM-9 ",
        client_name="Acme",
        task_number="T-1",
        estimate_type="Final",
        time_received="2:15 pm",
        ai_predicted_days=4,
        now=moment,
    )

    assert estimate.id == int(moment.timestamp() * 1000)
    assert estimate.claim_number == "CLM-9"
    assert estimate.estimate_type is EstimateType.FINAL
    assert estimate.status is EstimateStatus.NOT_STARTED
    assert estimate.date_received == "2026-03-04"
    assert estimate.time_received == "14:15"
    assert estimate.date_returned == ""
    assert estimate.estimate_amount == ""
    assert estimate.ai_predicted_days == 4
    assert estimate.client_billed is False


def test_new_estimate_defaults_time_to_now() -> None:
    estimate = dashboard.new_estimate("CLM", "Acme", "T", now=datetime(2026, 3, 4, 17, 5))

    assert estimate.time_received == "17:05"


def test_new_estimate_requires_identifying_fields() -> None:
    with pytest.raises(MissingFieldError) as excinfo:
        dashboard.new_estimate(claim_number="", client_name="Acme", task_number="  ")

    assert excinfo.value.field_names == ["claimNumber", "taskNumber"]


def test_work_queue_excludes_done() -> None:
    estimates = [
        Estimate(id=1),
        Estimate(id=2, status=EstimateStatus.IN_PROGRESS),
        _done(3, "2026-03-04", estimate_type=EstimateType.INITIAL),
    ]

    assert [estimate.id for estimate in dashboard.work_queue(estimates)] == [1, 2]
    assert dashboard.open_workload(estimates) == 2


def test_billing_queue_and_total() -> None:
    estimates = [
        _done(1, "2026-03-04", amount="1200.50"),
        _done(2, "2026-03-04", amount=""),
        _done(3, "2026-03-04", amount="900", billed=True),
        _done(4, "2026-03-04", estimate_type=EstimateType.INITIAL, amount="50"),
        Estimate(id=5, estimate_type=EstimateType.FINAL, estimate_amount="75"),
    ]

    assert [estimate.id for estimate in dashboard.billing_queue(estimates)] == [1, 2]
    assert dashboard.billing_total(estimates) == 1200.5


def test_daily_summary_compares_against_thirty_day_average() -> None:
    estimates = [_done(estimate_id, "2026-03-01") for estimate_id in range(1, 28)]
    estimates += [
        _done(100, "2026-03-04", estimate_type=EstimateType.INITIAL),
        _done(101, "2026-03-04"),
        _done(102, "2026-03-04"),
    ]

    summary = dashboard.daily_summary(estimates, "2026-03-04")

    assert summary.initial_count == 1
    assert summary.final_count == 2
    assert summary.total_count == 3
    assert summary.average_daily == 1.0
    assert summary.vs_average == 2.0
    assert summary.efficiency_percent == 300
    assert summary.performance_message == "+2.0 above average"


def test_daily_summary_with_no_history() -> None:
    summary = dashboard.daily_summary([], "2026-03-04")

    assert summary.total_count == 0
    assert summary.efficiency_percent == 0
    assert summary.performance_message == "0.0 below average"


def test_weekly_productivity_breaks_down_monday_to_sunday() -> None:
    estimates = [
        _done(1, "2026-03-02", amount="100"),
        _done(2, "2026-03-02", amount="300"),
        _done(3, "2026-03-08", amount="200"),
        _done(4, "2026-03-09", amount="999"),
        Estimate(id=5, date_returned="2026-03-03"),
    ]

    report = dashboard.weekly_productivity(estimates, date(2026, 3, 5), pto_hours=8, ot_hours=0)

    assert report.week_start == "2026-03-02"
    assert report.week_end == "2026-03-08"
    assert [day.count for day in report.days] == [2, 0, 0, 0, 0, 0, 1]
    assert report.days[0].day == "Mon"
    assert report.total == 3
    assert report.available_hours == 32
    assert report.productivity_rate == 9.4
    assert report.revenue == 600
    assert report.average_value == 200
    assert report.analysis.trend == "decreasing"


def test_weekly_productivity_rate_is_zero_without_hours() -> None:
    report = dashboard.weekly_productivity([_done(1, "2026-03-02")], date(2026, 3, 2), pto_hours=40)

    assert report.available_hours == 0
    assert report.productivity_rate == 0.0


def test_summarize_counts_statuses_and_value() -> None:
    estimates = [
        Estimate(id=1, estimate_amount="10"),
        Estimate(id=2, status=EstimateStatus.IN_PROGRESS, estimate_amount=""),
        _done(3, "2026-03-04", amount="90"),
        _done(4, "2026-03-04", amount="100", billed=True),
    ]

    summary = dashboard.summarize(estimates)

    assert (summary.not_started, summary.in_progress, summary.done) == (1, 1, 2)
    assert summary.ready_to_bill == 1
    assert summary.total_value == 200
