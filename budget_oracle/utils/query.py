"""
Free-text query responder.

Classifies a question by keywords (English and Turkish) and answers from the
heuristics only. Questions the data cannot answer get a fixed reply instead
of an invented figure.
"""
import logging
from typing import Optional

from budget_oracle.utils.heuristics import (
    analyze_goals,
    calculate_health_score,
    get_category_breakdown,
)
from budget_oracle.utils.insights import generate_insights
from budget_oracle.utils.narrator import InsightNarrator, TemplateNarrator
from budget_oracle.utils.snapshot import FinancialSnapshot
from budget_oracle.utils.templates import format_currency, render, resolve_language

logger = logging.getLogger(__name__)

TARGET_SAVINGS_RATE = 20
TOP_CATEGORIES = 3
GENERAL_INSIGHTS = 3

# Checked in order; the first topic with a matching keyword wins.
TOPIC_KEYWORDS = (
    ("spending", ("spend", "spent", "expense", "category", "categories", "harcad", "harcama", "gider", "kategori")),
    ("health", ("health", "score", "grade", "saglik", "saglig", "puan", "skor")),
    ("goals", ("goal", "progress", "target", "hedef", "yakin", "ilerleme")),
    ("savings", ("save", "saving", "cut back", "tasarruf", "biriktir")),
)

_TURKISH_FOLD = str.maketrans({
    "ı": "i", "ş": "s", "ğ": "g", "ü": "u", "ö": "o", "ç": "c", "\u0307": None,
})


def normalize_query(text: str) -> str:
    return (text or "").casefold().translate(_TURKISH_FOLD)


def classify_query(text: str) -> str:
    normalized = normalize_query(text)
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return topic
    return "general"


def _answer_spending(snapshot: FinancialSnapshot, language: str) -> str:
    total = sum(e.amount for e in snapshot.current_month_expenses)
    if total <= 0:
        return render("query", "spending_empty", language)

    breakdown = get_category_breakdown(snapshot.current_month_expenses, snapshot.categories)
    response = render("query", "spending_total", language, total=format_currency(total))
    for item in breakdown[:TOP_CATEGORIES]:
        response += render(
            "query", "spending_line", language,
            name=item.category_name, total=format_currency(item.total), percent=item.percentage,
        )
    return response.rstrip("\n")


def _answer_health(snapshot: FinancialSnapshot, language: str) -> str:
    if not snapshot.data_availability.has_expenses:
        return render("query", "health_empty", language)

    health = calculate_health_score(snapshot, language=language)
    response = render("query", "health_header", language, score=health.score, grade=health.grade)
    for factor in health.factors:
        response += render(
            "query", "health_line", language, name=factor.name, score=factor.score, detail=factor.detail,
        )
    return response.rstrip("\n")


def _answer_goals(snapshot: FinancialSnapshot, language: str) -> str:
    goal_insights = analyze_goals(snapshot.goals, now=snapshot.as_of)
    if not goal_insights:
        return render("query", "goals_none", language)

    lines = []
    for gi in goal_insights:
        line = render("query", "goal_line", language, name=gi.goal.name, percent=gi.progress_percent)
        if gi.days_remaining is not None:
            line += render("query", "goal_days", language, days=gi.days_remaining)
        lines.append(line)
    return render("query", "goals_header", language, count=len(goal_insights)) + "\n".join(lines)


def _answer_savings(snapshot: FinancialSnapshot, language: str) -> str:
    if snapshot.total_income <= 0:
        return render("query", "savings_no_income", language)

    rate = snapshot.savings_rate
    response = render("query", "savings_rate", language, rate=rate)
    if rate >= TARGET_SAVINGS_RATE:
        response += render("query", "savings_great", language)
    elif rate > 0:
        saved = snapshot.total_income - snapshot.total_expenses
        gap = snapshot.total_income * TARGET_SAVINGS_RATE / 100 - saved
        response += render("query", "savings_gap", language, amount=format_currency(gap))
    else:
        response += render("query", "savings_none", language)
    return response


def answer_query(
    text: str,
    snapshot: FinancialSnapshot,
    language: Optional[str] = None,
    narrator: Optional[InsightNarrator] = None,
) -> str:
    language = resolve_language(language)
    topic = classify_query(text)
    logger.debug(f"Query classified as {topic!r}")

    if topic == "spending":
        return _answer_spending(snapshot, language)
    if topic == "health":
        return _answer_health(snapshot, language)
    if topic == "goals":
        return _answer_goals(snapshot, language)
    if topic == "savings":
        return _answer_savings(snapshot, language)

    availability = snapshot.data_availability
    if not availability.has_expenses and not availability.has_incomes:
        return render("query", "general_empty", language)
    insights = generate_insights(snapshot, language=language)
    return (narrator or TemplateNarrator()).narrate(insights[:GENERAL_INSIGHTS], language)
