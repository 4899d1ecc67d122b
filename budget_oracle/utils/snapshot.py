"""
Snapshot builder.

Turns raw record collections into an immutable ``FinancialSnapshot``, the
only input the heuristics, the insight synthesizer and the query responder
ever look at.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from budget_oracle.db.records import RecordStore
from budget_oracle.models.records import Category, Goal, MonthSelector, TransactionRecord

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (12.5 -> 13), unlike round()."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class DataAvailability:
    has_incomes: bool = False
    has_expenses: bool = False
    has_goals: bool = False
    income_count: int = 0
    expense_count: int = 0
    goal_count: int = 0
    oldest_expense_date: Optional[datetime] = None
    data_span_days: int = 0


@dataclass(frozen=True)
class FinancialSnapshot:
    incomes: Tuple[TransactionRecord, ...]
    expenses: Tuple[TransactionRecord, ...]
    goals: Tuple[Goal, ...]
    categories: Tuple[Category, ...]
    total_income: float
    total_expenses: float
    balance: float
    savings_rate: int
    current_month_expenses: Tuple[TransactionRecord, ...]
    previous_month_expenses: Tuple[TransactionRecord, ...]
    active_goals: Tuple[Goal, ...]
    data_availability: DataAvailability
    as_of: datetime
    period: Tuple[int, int]

    def to_summary(self) -> dict:
        """JSON-friendly aggregate view, without the raw records."""
        availability = self.data_availability
        return {
            "period": {"year": self.period[0], "month": self.period[1]},
            "as_of": self.as_of.isoformat(),
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "balance": self.balance,
            "savings_rate": self.savings_rate,
            "current_month_expense_count": len(self.current_month_expenses),
            "previous_month_expense_count": len(self.previous_month_expenses),
            "active_goal_count": len(self.active_goals),
            "data_availability": {
                "has_incomes": availability.has_incomes,
                "has_expenses": availability.has_expenses,
                "has_goals": availability.has_goals,
                "income_count": availability.income_count,
                "expense_count": availability.expense_count,
                "goal_count": availability.goal_count,
                "oldest_expense_date": (
                    availability.oldest_expense_date.isoformat()
                    if availability.oldest_expense_date
                    else None
                ),
                "data_span_days": availability.data_span_days,
            },
        }


def month_start(year: int, month: int, offset: int = 0) -> datetime:
    """First instant of the calendar month ``offset`` months away from year/month."""
    index = year * 12 + (month - 1) + offset
    return datetime(index // 12, index % 12 + 1, 1)


def filter_month(records: Iterable[TransactionRecord], year: int, month: int, offset: int = 0):
    start = month_start(year, month, offset)
    end = month_start(year, month, offset + 1)
    return tuple(r for r in records if start <= r.date < end)


def calculate_savings_rate(income: float, expenses: float) -> int:
    if income <= 0:
        return 0
    return round_half_up((income - expenses) / income * 100)


def _completed(records: Iterable[TransactionRecord]) -> Tuple[TransactionRecord, ...]:
    return tuple(r for r in records if r.status == "completed")


def build_snapshot(
    incomes: Iterable[TransactionRecord],
    expenses: Iterable[TransactionRecord],
    goals: Iterable[Goal],
    categories: Iterable[Category],
    month: Optional[MonthSelector] = None,
    now: Optional[datetime] = None,
    all_time_income: Optional[float] = None,
    all_time_expenses: Optional[float] = None,
) -> FinancialSnapshot:
    """
    Build a snapshot for ``month`` (or for the calendar month containing ``now``).

    With an explicit month the totals cover that month only; without one they
    cover all time. ``all_time_income``/``all_time_expenses`` let a record store
    supply those all-time aggregates itself.
    """
    now = now or datetime.now()
    incomes = _completed(incomes or ())
    expenses = _completed(expenses or ())
    goals = tuple(goals or ())
    categories = tuple(categories or ())

    year, month_number = (month.year, month.month) if month else (now.year, now.month)
    current_month_expenses = filter_month(expenses, year, month_number)
    previous_month_expenses = filter_month(expenses, year, month_number, offset=-1)

    if month:
        total_income = sum(i.amount for i in filter_month(incomes, year, month_number))
        total_expenses = sum(e.amount for e in current_month_expenses)
    else:
        total_income = all_time_income if all_time_income is not None else sum(i.amount for i in incomes)
        total_expenses = (
            all_time_expenses if all_time_expenses is not None else sum(e.amount for e in expenses)
        )

    oldest_date = min((e.date for e in expenses), default=None)
    data_span_days = 0
    if oldest_date is not None:
        data_span_days = max(0, math.ceil((now - oldest_date).total_seconds() / SECONDS_PER_DAY))

    snapshot = FinancialSnapshot(
        incomes=incomes,
        expenses=expenses,
        goals=goals,
        categories=categories,
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        savings_rate=calculate_savings_rate(total_income, total_expenses),
        current_month_expenses=current_month_expenses,
        previous_month_expenses=previous_month_expenses,
        active_goals=tuple(g for g in goals if g.status == "active"),
        data_availability=DataAvailability(
            has_incomes=len(incomes) > 0,
            has_expenses=len(expenses) > 0,
            has_goals=len(goals) > 0,
            income_count=len(incomes),
            expense_count=len(expenses),
            goal_count=len(goals),
            oldest_expense_date=oldest_date,
            data_span_days=data_span_days,
        ),
        as_of=now,
        period=(year, month_number),
    )
    logger.debug(
        f"Built snapshot for {year}-{month_number:02d}: "
        f"{len(expenses)} expenses, {len(incomes)} incomes, {len(goals)} goals"
    )
    return snapshot


def get_financial_snapshot(
    store: RecordStore,
    month: Optional[MonthSelector] = None,
    now: Optional[datetime] = None,
) -> FinancialSnapshot:
    """Read the record store and build a snapshot from it."""
    return build_snapshot(
        store.incomes,
        store.expenses,
        store.goals,
        store.categories,
        month=month,
        now=now,
        all_time_income=None if month else store.total_income(),
        all_time_expenses=None if month else store.total_expenses(),
    )
