"""Heuristic "AI" helpers shown beside the queues.

Nothing here learns or persists anything. Scores that the dashboard
randomizes take an optional ``random.Random`` so callers can pin them.
"""
import random
from dataclasses import dataclass
from typing import Sequence

from estimate_dashboard.models import Estimate, EstimateStatus, EstimateType

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
HIGH_AMOUNT_THRESHOLD = 10_000
DEFAULT_PRIORITY_AMOUNT = 1000.0


@dataclass
class CompletionPrediction:
    days: int
    confidence: int
    reasoning: str


@dataclass
class ProductivityAnalysis:
    avg_daily: float
    trend: str
    recommendation: str
    risk_level: str


@dataclass
class PrioritizedEstimate:
    estimate: Estimate
    priority: str
    reasoning: str
    score: float


@dataclass
class Anomaly:
    id: int | None
    type: str
    message: str
    severity: str


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def predict_completion_time(
    estimate_type: EstimateType | str, current_workload: int, rng: random.Random | None = None
) -> CompletionPrediction:
    rng = rng or random.Random()
    base_days = 2 if estimate_type == EstimateType.INITIAL else 4
    workload_factor = max(1.0, current_workload / 5)

    return CompletionPrediction(
        days=_round_half_up(base_days * workload_factor),
        confidence=_round_half_up(80 + rng.random() * 15),
        reasoning=(
            f"Considering current workload of {current_workload} items and historical "
            f"{str(estimate_type).lower()} estimate timelines"
        ),
    )


def analyze_productivity(daily_counts: Sequence[int]) -> ProductivityAnalysis:
    avg_daily = sum(daily_counts) / (len(daily_counts) or 1)
    increasing = bool(daily_counts) and daily_counts[-1] > daily_counts[0]
    trend = "increasing" if increasing else "decreasing"

    if avg_daily < 3:
        risk_level = "high"
    elif avg_daily < 5:
        risk_level = "medium"
    else:
        risk_level = "low"

    return ProductivityAnalysis(
        avg_daily=_round_half_up(avg_daily * 10) / 10,
        trend=trend,
        recommendation=(
            "Great momentum! Consider taking on additional projects."
            if increasing
            else "Productivity declining. Consider reviewing task prioritization."
        ),
        risk_level=risk_level,
    )


def prioritize_work_queue(
    estimates: Sequence[Estimate], rng: random.Random | None = None
) -> list[PrioritizedEstimate]:
    rng = rng or random.Random()
    prioritized: list[PrioritizedEstimate] = []
    for estimate in estimates:
        urgency_score = rng.random() * 100
        value_score = (estimate.amount_value or DEFAULT_PRIORITY_AMOUNT) / 100
        score = urgency_score + value_score

        if score > 70:
            priority = "high"
        elif score > 40:
            priority = "medium"
        else:
            priority = "low"

        prioritized.append(
            PrioritizedEstimate(
                estimate=estimate,
                priority=priority,
                reasoning="High value + Urgent deadline" if score > 70 else "Standard priority",
                score=score,
            )
        )

    # sorted() is stable, so equal priorities keep queue order.
    return sorted(prioritized, key=lambda item: PRIORITY_ORDER[item.priority], reverse=True)


def detect_anomalies(estimates: Sequence[Estimate], rng: random.Random | None = None) -> list[Anomaly]:
    rng = rng or random.Random()
    anomalies: list[Anomaly] = []
    for estimate in estimates:
        if estimate.amount_value > HIGH_AMOUNT_THRESHOLD:
            anomalies.append(
                Anomaly(
                    id=estimate.id,
                    type="high_amount",
                    message="Unusually high estimate amount detected",
                    severity="warning",
                )
            )

        if estimate.status == EstimateStatus.IN_PROGRESS:
            days_since_start = rng.randrange(10)
            if days_since_start > 5:
                anomalies.append(
                    Anomaly(
                        id=estimate.id,
                        type="delayed",
                        message=f"Estimate has been in progress for {days_since_start} days",
                        severity="high",
                    )
                )
    return anomalies
