"""
Insight synthesis.

Runs the heuristics that have enough data behind them, renders each result
through the template table and returns the insights ranked by priority.
"""
import logging
from datetime import datetime
from typing import List, Optional

from budget_oracle.models.insight import Insight
from budget_oracle.utils.confidence import estimate_confidence
from budget_oracle.utils.heuristics import (
    analyze_goals,
    calculate_health_score,
    detect_anomalies,
    get_category_breakdown,
    get_spending_trend,
)
from budget_oracle.utils.snapshot import FinancialSnapshot
from budget_oracle.utils.templates import format_currency, render, resolve_language

logger = logging.getLogger(__name__)

MIN_TREND_SPAN_DAYS = 7
MIN_DOMINANCE_EXPENSES = 3
DOMINANCE_SHARE = 30
MAX_ANOMALY_INSIGHTS = 3
LOW_SAVINGS_RATE = 10
WEAK_FACTOR_SCORE = 50
GOOD_HEALTH_SCORE = 70

ANOMALY_PRIORITY = {"high": 9, "medium": 7, "low": 5}


class _InsightBatch:
    """Collects one call's insights with sequential ids and a shared timestamp."""

    def __init__(self, created_at: str) -> None:
        self.created_at = created_at
        self.items: List[Insight] = []

    def add(self, type_: str, title: str, content: str, confidence: str, priority: int) -> None:
        self.items.append(
            Insight(
                id=f"insight_{len(self.items) + 1}",
                type=type_,
                title=title,
                content=content,
                confidence=confidence,
                priority=priority,
                created_at=self.created_at,
            )
        )

    def ranked(self) -> List[Insight]:
        # stable: equal priorities keep generation order
        return sorted(self.items, key=lambda i: i.priority, reverse=True)


def generate_insights(
    snapshot: FinancialSnapshot,
    language: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Insight]:
    """
    Build the ranked insight list for ``snapshot``.

    ``created_at`` defaults to the snapshot's own timestamp, so the same
    snapshot always yields the same insights.
    """
    language = resolve_language(language)
    batch = _InsightBatch((now or snapshot.as_of).isoformat())
    availability = snapshot.data_availability

    def text(kind: str, name: str, /, **values) -> str:
        return render(kind, name, language, **values)

    if not availability.has_expenses and not availability.has_incomes:
        batch.add("tip", text("tip", "onboarding_title"), text("tip", "onboarding"), "high", 6)
        return batch.ranked()

    # Summary
    content = text(
        "summary", "body",
        income=format_currency(snapshot.total_income),
        expenses=format_currency(snapshot.total_expenses),
        balance=format_currency(snapshot.balance),
    )
    if snapshot.savings_rate > 0:
        content += text("summary", "savings", rate=snapshot.savings_rate)
    else:
        content += text("summary", "no_savings")
    batch.add(
        "summary", text("summary", "title"), content,
        estimate_confidence(availability, "summary").level, 8,
    )

    # Spending trend
    if availability.has_expenses and availability.data_span_days > MIN_TREND_SPAN_DAYS:
        trend = get_spending_trend(snapshot.current_month_expenses, snapshot.previous_month_expenses)
        if trend.has_baseline:
            if trend.direction == "up":
                content = text(
                    "trend", "up",
                    percent=trend.change_percent,
                    current=format_currency(trend.current_total),
                    previous=format_currency(trend.previous_total),
                )
            elif trend.direction == "down":
                content = text("trend", "down", percent=abs(trend.change_percent))
            else:
                content = text("trend", "stable")
            batch.add(
                "trend", text("trend", "title"), content,
                estimate_confidence(availability, "trend").level,
                7 if trend.direction == "up" else 5,
            )

    # Category dominance
    if len(snapshot.current_month_expenses) >= MIN_DOMINANCE_EXPENSES:
        breakdown = get_category_breakdown(snapshot.current_month_expenses, snapshot.categories)
        if breakdown and breakdown[0].percentage > DOMINANCE_SHARE:
            top = breakdown[0]
            content = text(
                "dominance", "body",
                name=top.category_name, total=format_currency(top.total), percent=top.percentage,
            )
            if len(breakdown) > 1:
                content += text(
                    "dominance", "second",
                    name=breakdown[1].category_name, total=format_currency(breakdown[1].total),
                )
            batch.add(
                "trend", text("dominance", "title"), content.strip(),
                estimate_confidence(availability, "summary").level, 6,
            )

    # Anomalies
    anomaly_confidence = estimate_confidence(availability, "anomaly").level
    for anomaly in detect_anomalies(snapshot, language=language)[:MAX_ANOMALY_INSIGHTS]:
        amount = format_currency(anomaly.amount)
        batch.add(
            "anomaly",
            text("anomaly", f"title_{anomaly.kind}", category=anomaly.category_name, amount=amount),
            text("anomaly", "content", description=anomaly.description, amount=amount),
            anomaly_confidence,
            ANOMALY_PRIORITY[anomaly.severity],
        )

    # Budget health
    if availability.has_expenses:
        health = calculate_health_score(snapshot, language=language)
        content = text("health", "body", score=health.score, grade=health.grade)
        weak = [f.detail for f in health.factors if f.score < WEAK_FACTOR_SCORE]
        if weak:
            content += " " + ". ".join(weak) + "."
        if health.score >= GOOD_HEALTH_SCORE:
            content += text("health", "good")
        batch.add(
            "health", text("health", "title"), content,
            estimate_confidence(availability, "health").level, 8,
        )

    # Goals
    goal_confidence = estimate_confidence(availability, "goal").level
    for gi in analyze_goals(snapshot.goals, now=snapshot.as_of):
        content = text("goal", "progress", name=gi.goal.name, percent=gi.progress_percent)
        if gi.days_remaining is not None:
            if gi.days_remaining > 0:
                content += text("goal", "days", days=gi.days_remaining)
                if gi.daily_savings_needed:
                    content += text("goal", "daily", amount=format_currency(gi.daily_savings_needed))
            else:
                content += text("goal", "deadline_passed")
            if gi.on_track is False:
                content += text("goal", "behind")
        batch.add(
            "goal", text("goal", "title", name=gi.goal.name), content,
            goal_confidence, 7 if gi.on_track is False else 5,
        )

    # Tips
    if not availability.has_expenses:
        batch.add("tip", text("tip", "track_title"), text("tip", "track"), "high", 6)
    if snapshot.total_income > 0 and snapshot.savings_rate < LOW_SAVINGS_RATE:
        batch.add("tip", text("tip", "savings_title"), text("tip", "savings"), "high", 6)

    insights = batch.ranked()
    logger.debug(f"Generated {len(insights)} insights for {snapshot.period[0]}-{snapshot.period[1]:02d}")
    return insights
