"""
Financial heuristics.

Pure, deterministic computations over a ``FinancialSnapshot``. Every figure
shown to the user comes from these functions, never from free text.
"""
from __future__ import annotations

import math
import statistics
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from budget_oracle.models.records import Category, Goal, TransactionRecord
from budget_oracle.utils.snapshot import (
    SECONDS_PER_DAY,
    FinancialSnapshot,
    filter_month,
    month_start,
    round_half_up,
)
from budget_oracle.utils.templates import render

UNKNOWN_CATEGORY_NAME = "Unknown"
NEUTRAL_COLOR = "#6B7280"
STABLE_TREND_PERCENT = 5
MIN_GOAL_HISTORY_DAYS = 7

SEVERITY_RANK = {"high": 2, "medium": 1, "low": 0}


def _total(records: Iterable[TransactionRecord]) -> float:
    return sum(r.amount for r in records)


def _clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(min(high, max(low, value)))


# ---------------------------------------------------------------------------
# Category analysis
# ---------------------------------------------------------------------------


@dataclass
class CategoryBreakdown:
    category_id: str
    category_name: str
    color: str
    total: float
    count: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_category_breakdown(
    expenses: Iterable[TransactionRecord],
    categories: Iterable[Category],
) -> List[CategoryBreakdown]:
    expenses = list(expenses)
    total_spend = _total(expenses)
    if total_spend <= 0:
        return []

    lookup = {c.id: c for c in categories}
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for exp in expenses:
        totals[exp.category_id] += exp.amount
        counts[exp.category_id] += 1

    breakdown = []
    for category_id, total in totals.items():
        category = lookup.get(category_id)
        breakdown.append(
            CategoryBreakdown(
                category_id=category_id,
                category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
                color=category.color if category else NEUTRAL_COLOR,
                total=total,
                count=counts[category_id],
                percentage=round_half_up(total / total_spend * 100),
            )
        )
    # sorted() is stable: equal totals keep first-seen order
    return sorted(breakdown, key=lambda b: b.total, reverse=True)


def get_dominant_category(
    expenses: Iterable[TransactionRecord],
    categories: Iterable[Category],
) -> Optional[CategoryBreakdown]:
    breakdown = get_category_breakdown(expenses, categories)
    return breakdown[0] if breakdown else None


# ---------------------------------------------------------------------------
# Spending trend
# ---------------------------------------------------------------------------


@dataclass
class SpendingTrend:
    current_total: float
    previous_total: float
    change_percent: int
    direction: str  # up | down | stable
    has_baseline: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_spending_trend(
    current_month_expenses: Iterable[TransactionRecord],
    previous_month_expenses: Iterable[TransactionRecord],
) -> SpendingTrend:
    current_total = _total(current_month_expenses)
    previous_total = _total(previous_month_expenses)

    if previous_total <= 0:
        return SpendingTrend(current_total, previous_total, 0, "stable", has_baseline=False)

    change_percent = round_half_up((current_total - previous_total) / previous_total * 100)
    if change_percent > STABLE_TREND_PERCENT:
        direction = "up"
    elif change_percent < -STABLE_TREND_PERCENT:
        direction = "down"
    else:
        direction = "stable"
    return SpendingTrend(current_total, previous_total, change_percent, direction)


# ---------------------------------------------------------------------------
# Anomaly detection
# ---------------------------------------------------------------------------


@dataclass
class Anomaly:
    kind: str  # large_transaction | category_share
    category_id: str
    category_name: str
    description: str
    amount: float
    severity: str  # low | medium | high

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _ratio_severity(ratio: float) -> str:
    if ratio >= 4:
        return "high"
    if ratio >= 3:
        return "medium"
    return "low"


def _share_severity(excess_points: int) -> str:
    if excess_points >= 30:
        return "high"
    if excess_points >= 20:
        return "medium"
    return "low"


def detect_anomalies(
    snapshot: FinancialSnapshot,
    ratio_threshold: float = 2.0,
    min_baseline: int = 2,
    baseline_days: int = 90,
    share_margin: int = 15,
    language: Optional[str] = None,
) -> List[Anomaly]:
    """
    Flag unusually large single expenses and categories whose share of this
    month's spending runs well above their usual share.

    A large transaction is a current-month expense at least ``ratio_threshold``
    times the mean of the other expenses of its category within
    ``baseline_days`` before the snapshot date (``min_baseline`` of them needed).
    A share anomaly is a category whose current share exceeds its share of all
    earlier spending by ``share_margin`` percentage points or more.
    """
    names = {c.id: c.name for c in snapshot.categories}
    anomalies: List[Anomaly] = []

    window_start = snapshot.as_of - timedelta(days=baseline_days)
    for exp in snapshot.current_month_expenses:
        baseline = [
            other.amount
            for other in snapshot.expenses
            if other is not exp
            and other.category_id == exp.category_id
            and window_start <= other.date <= snapshot.as_of
        ]
        if len(baseline) < min_baseline:
            continue
        average = statistics.fmean(baseline)
        if average <= 0:
            continue
        ratio = exp.amount / average
        if ratio < ratio_threshold:
            continue
        category_name = names.get(exp.category_id, UNKNOWN_CATEGORY_NAME)
        anomalies.append(
            Anomaly(
                kind="large_transaction",
                category_id=exp.category_id,
                category_name=category_name,
                description=render(
                    "anomaly", "large_transaction", language,
                    category=category_name, ratio=f"{ratio:.1f}",
                ),
                amount=exp.amount,
                severity=_ratio_severity(ratio),
            )
        )

    bucket_start = month_start(*snapshot.period)
    history = [e for e in snapshot.expenses if e.date < bucket_start]
    typical = {b.category_id: b for b in get_category_breakdown(history, snapshot.categories)}
    for current in get_category_breakdown(snapshot.current_month_expenses, snapshot.categories):
        usual = typical.get(current.category_id)
        if usual is None:
            continue
        excess = current.percentage - usual.percentage
        if excess < share_margin:
            continue
        anomalies.append(
            Anomaly(
                kind="category_share",
                category_id=current.category_id,
                category_name=current.category_name,
                description=render(
                    "anomaly", "category_share", language,
                    category=current.category_name,
                    current=current.percentage,
                    typical=usual.percentage,
                ),
                amount=current.total,
                severity=_share_severity(excess),
            )
        )

    return sorted(anomalies, key=lambda a: (-SEVERITY_RANK[a.severity], -a.amount))


# ---------------------------------------------------------------------------
# Goal analysis
# ---------------------------------------------------------------------------


@dataclass
class GoalInsight:
    goal: Goal
    progress_percent: int
    days_remaining: Optional[int]
    daily_savings_needed: Optional[float]
    on_track: Optional[bool]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal.id,
            "goal_name": self.goal.name,
            "progress_percent": self.progress_percent,
            "days_remaining": self.days_remaining,
            "daily_savings_needed": self.daily_savings_needed,
            "on_track": self.on_track,
        }


def _judge_pace(goal: Goal, remaining: float, days_remaining: int, daily_needed: float, now: datetime):
    if remaining <= 0:
        return True
    if days_remaining == 0:
        return False
    if goal.created_at is None:
        return None
    elapsed_days = (now - goal.created_at).total_seconds() / SECONDS_PER_DAY
    if elapsed_days < MIN_GOAL_HISTORY_DAYS:
        return None
    average_daily = goal.current_amount / elapsed_days
    return average_daily >= daily_needed


def analyze_goals(goals: Iterable[Goal], now: Optional[datetime] = None) -> List[GoalInsight]:
    now = now or datetime.now()
    results = []
    for goal in goals:
        if goal.status != "active":
            continue
        progress = 0
        if goal.target_amount > 0:
            progress = min(round_half_up(goal.current_amount / goal.target_amount * 100), 100)

        days_remaining = None
        daily_needed = None
        on_track = None
        if goal.target_date is not None:
            seconds_left = (goal.target_date - now).total_seconds()
            days_remaining = max(math.ceil(seconds_left / SECONDS_PER_DAY), 0)
            remaining = max(goal.target_amount - goal.current_amount, 0)
            daily_needed = math.ceil(remaining / days_remaining) if days_remaining > 0 else remaining
            on_track = _judge_pace(goal, remaining, days_remaining, daily_needed, now)

        results.append(GoalInsight(goal, progress, days_remaining, daily_needed, on_track))
    return results


# ---------------------------------------------------------------------------
# Budget health score
# ---------------------------------------------------------------------------


@dataclass
class HealthFactor:
    key: str
    name: str
    score: int
    weight: int
    detail: str


@dataclass
class HealthScore:
    score: int
    grade: str
    factors: List[HealthFactor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def grade_for(score: int) -> str:
    if score >= 85:
        return "A"
    if score >= 70:
        return "B"
    if score >= 50:
        return "C"
    if score >= 30:
        return "D"
    return "F"


def _monthly_totals(snapshot: FinancialSnapshot, months: int = 6) -> List[float]:
    year, month = snapshot.period
    totals = [_total(filter_month(snapshot.expenses, year, month, offset)) for offset in range(1 - months, 1)]
    return [t for t in totals if t > 0]


def calculate_health_score(snapshot: FinancialSnapshot, language: Optional[str] = None) -> HealthScore:
    """
    Weighted composite of five 0-100 factors:

    ====================  ======  =================================================
    factor                weight  scoring
    ====================  ======  =================================================
    savings rate          30      savings_rate * 5 (20% saves -> 100)
    spending vs income    25      spend ratio <= 0.5 -> 100, >= 1.0 -> 0, linear
    goal progress         20      mean capped progress, halved for goals behind pace
    spending diversity    15      top category share > 60 -> 30, > 40 -> 60, else 90
    spending stability    10      CV of monthly totals, <= 10% -> 100, -2 per point
    ====================  ======  =================================================
    """

    def text(name: str, /, **values) -> str:
        return render("health_factor", name, language, **values)

    factors: List[HealthFactor] = []

    rate = snapshot.savings_rate
    factors.append(HealthFactor(
        "savings_rate", text("savings_rate"), _clamp(rate * 5), 30,
        text("savings_rate_detail", rate=rate),
    ))

    if snapshot.total_income > 0:
        ratio = snapshot.total_expenses / snapshot.total_income
        ratio_score = _clamp(round_half_up((1.0 - ratio) / 0.5 * 100))
        ratio_detail = text("spending_ratio_detail", percent=round_half_up(ratio * 100))
    else:
        ratio_score = 0
        ratio_detail = text("spending_ratio_no_income")
    factors.append(HealthFactor("spending_ratio", text("spending_ratio"), ratio_score, 25, ratio_detail))

    goal_insights = analyze_goals(snapshot.active_goals, now=snapshot.as_of)
    if goal_insights:
        per_goal = [
            gi.progress_percent / 2 if gi.on_track is False else gi.progress_percent
            for gi in goal_insights
        ]
        goal_score = round_half_up(statistics.fmean(per_goal))
        behind = sum(1 for gi in goal_insights if gi.on_track is False)
        goal_detail = (
            text("goal_pace_behind", behind=behind, count=len(goal_insights))
            if behind
            else text("goal_pace_detail", count=len(goal_insights))
        )
    else:
        goal_score = 50
        goal_detail = text("goal_pace_none")
    factors.append(HealthFactor("goal_pace", text("goal_pace"), goal_score, 20, goal_detail))

    top = get_dominant_category(snapshot.current_month_expenses, snapshot.categories)
    if top is None:
        diversity_score = 90
        diversity_detail = text("diversification_none")
    else:
        diversity_score = 30 if top.percentage > 60 else 60 if top.percentage > 40 else 90
        diversity_detail = text("diversification_detail", name=top.category_name, percent=top.percentage)
    factors.append(HealthFactor(
        "diversification", text("diversification"), diversity_score, 15, diversity_detail,
    ))

    monthly = _monthly_totals(snapshot)
    if len(monthly) >= 2:
        variation = statistics.pstdev(monthly) / statistics.fmean(monthly)
        volatility_score = _clamp(round_half_up(100 - max(0.0, variation - 0.1) * 200))
        volatility_detail = text("volatility_detail", percent=round_half_up(variation * 100))
    else:
        volatility_score = 50
        volatility_detail = text("volatility_none")
    factors.append(HealthFactor("volatility", text("volatility"), volatility_score, 10, volatility_detail))

    total_weight = sum(f.weight for f in factors)
    score = round_half_up(sum(f.score * f.weight for f in factors) / total_weight)
    return HealthScore(score=score, grade=grade_for(score), factors=factors)
