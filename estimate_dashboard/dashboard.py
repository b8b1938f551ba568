from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Sequence

from estimate_dashboard.analytics import ProductivityAnalysis, analyze_productivity
from estimate_dashboard.errors import MissingFieldError
from estimate_dashboard.models import Estimate, EstimateStatus, EstimateType
from estimate_dashboard.utils import (
    convert_time_input,
    current_time_24h,
    epoch_millis,
    parse_date,
    today_iso,
    week_bounds,
)

HISTORY_WINDOW_DAYS = 30
STANDARD_WEEK_HOURS = 40


@dataclass
class DailySummary:
    date: str
    initial_count: int
    final_count: int
    total_count: int
    average_daily: float
    vs_average: float
    efficiency_percent: int

    @property
    def performance_message(self) -> str:
        if self.vs_average > 0:
            return f"+{self.vs_average:.1f} above average"
        return f"{self.vs_average:.1f} below average"


@dataclass
class DayCount:
    date: str
    day: str
    count: int


@dataclass
class WeeklyProductivity:
    week_start: str
    week_end: str
    days: list[DayCount]
    total: int
    available_hours: float
    productivity_rate: float
    revenue: float
    average_value: float
    analysis: ProductivityAnalysis


@dataclass
class DashboardSummary:
    not_started: int = 0
    in_progress: int = 0
    done: int = 0
    ready_to_bill: int = 0
    total_value: float = 0.0


def new_estimate(
    claim_number: str,
    client_name: str,
    task_number: str,
    estimate_type: EstimateType | str = EstimateType.INITIAL,
    date_received: str | None = None,
    time_received: str | None = None,
    ai_predicted_days: int | None = None,
    now: datetime | None = None,
) -> Estimate:
    """Build an intake record: fresh timestamp id, Not Started, nothing returned yet."""
    required = {
        "claimNumber": claim_number,
        "clientName": client_name,
        "taskNumber": task_number,
    }
    missing = [name for name, value in required.items() if not (value or "").strip()]
    if missing:
        raise MissingFieldError(missing)

    now = now or datetime.now()
    return Estimate(
        id=epoch_millis(now),
        estimate_type=EstimateType(estimate_type),
        claim_number=claim_number.strip(),
        client_name=client_name.strip(),
        task_number=task_number.strip(),
        date_received=date_received or today_iso(now),
        time_received=convert_time_input(time_received) if time_received else current_time_24h(now),
        status=EstimateStatus.NOT_STARTED,
        date_returned="",
        time_returned="",
        estimate_amount="",
        ai_predicted_days=ai_predicted_days,
    )


def open_workload(estimates: Sequence[Estimate]) -> int:
    return sum(1 for estimate in estimates if not estimate.is_done)


def work_queue(estimates: Sequence[Estimate]) -> list[Estimate]:
    return [estimate for estimate in estimates if not estimate.is_done]


def billing_queue(estimates: Sequence[Estimate]) -> list[Estimate]:
    return [estimate for estimate in estimates if estimate.is_billable]


def billing_total(estimates: Sequence[Estimate]) -> float:
    return sum(estimate.amount_value for estimate in billing_queue(estimates))


def completed_on(estimates: Sequence[Estimate], day: str) -> list[Estimate]:
    return [estimate for estimate in estimates if estimate.is_done and estimate.date_returned == day]


def daily_summary(estimates: Sequence[Estimate], day: str) -> DailySummary:
    completed = completed_on(estimates, day)
    initial_count = sum(1 for estimate in completed if estimate.estimate_type == EstimateType.INITIAL)
    final_count = sum(1 for estimate in completed if estimate.estimate_type == EstimateType.FINAL)
    total_count = len(completed)

    completed_ever = sum(1 for estimate in estimates if estimate.is_done and estimate.date_returned)
    average_daily = completed_ever / HISTORY_WINDOW_DAYS

    return DailySummary(
        date=day,
        initial_count=initial_count,
        final_count=final_count,
        total_count=total_count,
        average_daily=average_daily,
        vs_average=total_count - average_daily,
        efficiency_percent=round(total_count / max(average_daily, 1) * 100),
    )


def weekly_productivity(
    estimates: Sequence[Estimate],
    reference: date,
    pto_hours: float = 0,
    ot_hours: float = 0,
) -> WeeklyProductivity:
    start, end = week_bounds(reference)

    week_estimates: list[Estimate] = []
    for estimate in estimates:
        returned = parse_date(estimate.date_returned) if estimate.is_done else None
        if returned is not None and start <= returned <= end:
            week_estimates.append(estimate)

    days: list[DayCount] = []
    for offset in range(7):
        current = start + timedelta(days=offset)
        day = current.isoformat()
        days.append(
            DayCount(
                date=day,
                day=current.strftime("%a"),
                count=sum(1 for estimate in week_estimates if parse_date(estimate.date_returned) == current),
            )
        )

    total = len(week_estimates)
    available_hours = STANDARD_WEEK_HOURS - pto_hours + ot_hours
    productivity_rate = round(total / available_hours * 100, 1) if available_hours > 0 else 0.0
    revenue = sum(estimate.amount_value for estimate in week_estimates)

    return WeeklyProductivity(
        week_start=start.isoformat(),
        week_end=end.isoformat(),
        days=days,
        total=total,
        available_hours=available_hours,
        productivity_rate=productivity_rate,
        revenue=revenue,
        average_value=revenue / max(total, 1),
        analysis=analyze_productivity([day_count.count for day_count in days]),
    )


def summarize(estimates: Sequence[Estimate]) -> DashboardSummary:
    summary = DashboardSummary()
    for estimate in estimates:
        if estimate.status == EstimateStatus.NOT_STARTED:
            summary.not_started += 1
        elif estimate.status == EstimateStatus.IN_PROGRESS:
            summary.in_progress += 1
        elif estimate.status == EstimateStatus.DONE:
            summary.done += 1
        if estimate.is_billable:
            summary.ready_to_bill += 1
        summary.total_value += estimate.amount_value
    return summary
