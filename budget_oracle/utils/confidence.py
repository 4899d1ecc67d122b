"""
Confidence estimation.

Rates how much an insight can be trusted from data volume and span alone,
never from the computed values themselves.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict

from budget_oracle.utils.snapshot import DataAvailability

INSIGHT_TYPES = ("trend", "anomaly", "health", "goal", "summary")

REASONS = {
    "high": "Enough data is available",
    "medium": "Accuracy will improve with more data",
    "low": "Estimated from limited data",
    "insufficient": "Not enough data for analysis",
}


@dataclass(frozen=True)
class ConfidenceEstimate:
    level: str  # high | medium | low | insufficient
    score: int  # 0-100
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def level_for(score: int) -> str:
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    if score >= 15:
        return "low"
    return "insufficient"


def estimate_confidence(availability: DataAvailability, insight_type: str) -> ConfidenceEstimate:
    if insight_type not in INSIGHT_TYPES:
        raise ValueError(f"Unknown insight type: {insight_type!r}")

    score = min(100, availability.expense_count * 3 + availability.income_count * 10)

    if insight_type == "trend":
        # a month-over-month comparison needs two months of history
        if availability.data_span_days < 30:
            score = min(score, 20)
        elif availability.data_span_days < 60:
            score = min(score, 50)
    elif insight_type == "anomaly":
        if availability.expense_count < 10:
            score = min(score, 30)
    elif insight_type == "health":
        if availability.expense_count < 5:
            score = min(score, 40)
    elif insight_type == "goal":
        if not availability.has_goals:
            score = 0
    elif insight_type == "summary":
        score = max(score, 30)

    level = level_for(score)
    return ConfidenceEstimate(level=level, score=score, reason=REASONS[level])
