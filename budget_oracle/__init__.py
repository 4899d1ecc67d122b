"""
budget_oracle
~~~~~~~~~~~~~

Deterministic financial-insight engine. A snapshot of a user's incomes,
expenses and goals goes in; ranked, templated insights with a confidence
rating come out. Figures are always computed by the heuristics, never taken
from free text, and the same snapshot always produces the same insights.
"""

from .db.records import RecordStore
from .db.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
    StorageQuotaExceeded,
)
from .models.insight import Insight, OracleMemory, StoredInsight
from .models.records import Category, Goal, MonthSelector, RecordBundle, TransactionRecord
from .utils.confidence import ConfidenceEstimate, estimate_confidence
from .utils.heuristics import (
    Anomaly,
    CategoryBreakdown,
    GoalInsight,
    HealthScore,
    SpendingTrend,
    analyze_goals,
    calculate_health_score,
    detect_anomalies,
    get_category_breakdown,
    get_spending_trend,
)
from .utils.insights import generate_insights
from .utils.memory import InsightMemory
from .utils.narrator import InsightNarrator, TemplateNarrator
from .utils.query import answer_query
from .utils.snapshot import DataAvailability, FinancialSnapshot, build_snapshot, get_financial_snapshot

__all__ = [
    "Anomaly",
    "Category",
    "CategoryBreakdown",
    "ConfidenceEstimate",
    "DataAvailability",
    "FinancialSnapshot",
    "Goal",
    "GoalInsight",
    "HealthScore",
    "InMemoryKeyValueStore",
    "Insight",
    "InsightMemory",
    "InsightNarrator",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MonthSelector",
    "OracleMemory",
    "RecordBundle",
    "RecordStore",
    "SpendingTrend",
    "StorageError",
    "StorageQuotaExceeded",
    "StoredInsight",
    "TemplateNarrator",
    "TransactionRecord",
    "analyze_goals",
    "answer_query",
    "build_snapshot",
    "calculate_health_score",
    "detect_anomalies",
    "estimate_confidence",
    "generate_insights",
    "get_category_breakdown",
    "get_financial_snapshot",
    "get_spending_trend",
]
