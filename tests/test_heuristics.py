from datetime import datetime, timedelta

from budget_oracle.models.records import Category, Goal, TransactionRecord
from budget_oracle.utils.heuristics import (
    analyze_goals,
    calculate_health_score,
    detect_anomalies,
    get_category_breakdown,
    get_dominant_category,
    get_spending_trend,
    grade_for,
)
from budget_oracle.utils.snapshot import build_snapshot

NOW = datetime(2026, 10, 15, 12, 0, 0)

categories = [
    Category(id="food", name="food", color="#F59E0B"),
    Category(id="transport", name="transport", color="#3B82F6"),
    Category(id="fun", name="fun", color="#EC4899"),
]


def _exp(rec_id, amount, category_id="food", date=NOW):
    return TransactionRecord(id=rec_id, amount=amount, category_id=category_id, date=date)


def _inc(rec_id, amount, date=NOW):
    return TransactionRecord(id=rec_id, amount=amount, category_id="salary", date=date)


# ---------------------------------------------------------------------------
# Category breakdown
# ---------------------------------------------------------------------------


def test_category_breakdown():
    expenses = [
        _exp("a", 100.0, "food"),
        _exp("b", 200.0, "food"),
        _exp("c", 50.0, "transport"),
    ]
    result = [(b.category_name, b.total, b.percentage) for b in get_category_breakdown(expenses, categories)]
    assert result == [("food", 300.0, 86), ("transport", 50.0, 14)]


def test_category_breakdown_unknown_category():
    result = get_category_breakdown([_exp("a", 10.0, "ghost")], categories)
    assert result[0].category_name == "Unknown"
    assert result[0].color == "#6B7280"
    assert result[0].percentage == 100


def test_category_breakdown_empty():
    assert get_category_breakdown([], categories) == []
    assert get_category_breakdown([_exp("z", 0.0)], categories) == []
    assert get_dominant_category([], categories) is None


def test_category_breakdown_percentages_sum_near_100():
    samples = [
        [_exp("a", 1.0, "food"), _exp("b", 1.0, "transport"), _exp("c", 1.0, "fun")],
        [_exp("a", 10.0, "food"), _exp("b", 20.0, "transport"), _exp("c", 30.0, "fun")],
        [_exp("a", 0.5, "food"), _exp("b", 0.5, "transport"), _exp("c", 99.0, "fun")],
    ]
    for expenses in samples:
        total = sum(b.percentage for b in get_category_breakdown(expenses, categories))
        assert 99 <= total <= 101


def test_category_breakdown_ties_keep_first_seen_order():
    expenses = [_exp("a", 50.0, "transport"), _exp("b", 50.0, "food")]
    assert [b.category_id for b in get_category_breakdown(expenses, categories)] == ["transport", "food"]


# ---------------------------------------------------------------------------
# Spending trend
# ---------------------------------------------------------------------------


def test_spending_trend_up():
    trend = get_spending_trend([_exp("a", 1200.0)], [_exp("b", 1000.0)])
    assert trend.change_percent == 20
    assert trend.direction == "up"
    assert trend.has_baseline


def test_spending_trend_stable_band():
    cases = [(1050.0, 5, "stable"), (1060.0, 6, "up"), (950.0, -5, "stable"), (940.0, -6, "down")]
    for current, change, direction in cases:
        trend = get_spending_trend([_exp("a", current)], [_exp("b", 1000.0)])
        assert (trend.change_percent, trend.direction) == (change, direction)


def test_spending_trend_without_baseline():
    trend = get_spending_trend([_exp("a", 500.0)], [])
    assert not trend.has_baseline
    assert trend.change_percent == 0
    assert trend.direction == "stable"


# ---------------------------------------------------------------------------
# Anomalies
# ---------------------------------------------------------------------------

anomaly_expenses = [
    _exp("h1", 50.0, "food", datetime(2026, 9, 10)),
    _exp("h2", 110.0, "transport", datetime(2026, 9, 15)),
    _exp("h3", 60.0, "food", datetime(2026, 9, 20)),
    _exp("c1", 55.0, "food", datetime(2026, 10, 5)),
    _exp("c2", 300.0, "food", datetime(2026, 10, 10)),
]


def test_detect_anomalies():
    snapshot = build_snapshot([], anomaly_expenses, [], categories, now=NOW)
    anomalies = detect_anomalies(snapshot)

    assert [(a.kind, a.severity, a.amount) for a in anomalies] == [
        ("category_share", "high", 355.0),
        ("large_transaction", "high", 300.0),
    ]
    assert "100%" in anomalies[0].description
    assert "50%" in anomalies[0].description
    assert "5.5x" in anomalies[1].description


def test_no_anomalies_for_steady_spending():
    expenses = [
        _exp("a", 50.0, "food", datetime(2026, 9, 5)),
        _exp("b", 50.0, "transport", datetime(2026, 9, 6)),
        _exp("c", 55.0, "food", datetime(2026, 10, 5)),
        _exp("d", 45.0, "transport", datetime(2026, 10, 6)),
    ]
    snapshot = build_snapshot([], expenses, [], categories, now=NOW)
    assert detect_anomalies(snapshot) == []
    assert detect_anomalies(build_snapshot([], [], [], categories, now=NOW)) == []


def test_large_transaction_needs_baseline():
    expenses = [_exp("a", 10.0, "food", datetime(2026, 10, 2)), _exp("b", 500.0, "food", datetime(2026, 10, 3))]
    snapshot = build_snapshot([], expenses, [], categories, now=NOW)
    assert [a.kind for a in detect_anomalies(snapshot)] == []


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def test_goal_without_history():
    goal = Goal(id="g", name="Vacation", target_amount=10000, current_amount=0,
                target_date=NOW + timedelta(days=100))
    [result] = analyze_goals([goal], now=NOW)
    assert result.progress_percent == 0
    assert result.days_remaining == 100
    assert result.daily_savings_needed == 100
    assert result.on_track is None


def test_goal_progress_is_capped():
    goal = Goal(id="g", name="Laptop", target_amount=10000, current_amount=12000)
    [result] = analyze_goals([goal], now=NOW)
    assert result.progress_percent == 100
    assert result.days_remaining is None
    assert result.daily_savings_needed is None


def test_goal_past_deadline():
    goal = Goal(id="g", name="Phone", target_amount=1000, current_amount=500,
                target_date=NOW - timedelta(days=5))
    [result] = analyze_goals([goal], now=NOW)
    assert result.days_remaining == 0
    assert result.daily_savings_needed == 500
    assert result.on_track is False


def test_goal_pace_from_history():
    created = NOW - timedelta(days=100)
    behind = Goal(id="g1", name="House", target_amount=10000, current_amount=5000,
                  target_date=NOW + timedelta(days=50), created_at=created)
    ahead = Goal(id="g2", name="Bike", target_amount=6000, current_amount=5000,
                 target_date=NOW + timedelta(days=50), created_at=created)
    results = analyze_goals([behind, ahead], now=NOW)
    assert [r.daily_savings_needed for r in results] == [100, 20]
    assert [r.on_track for r in results] == [False, True]


def test_inactive_goals_skipped():
    goal = Goal(id="g", name="Old", target_amount=100, status="cancelled")
    assert analyze_goals([goal], now=NOW) == []


# ---------------------------------------------------------------------------
# Health score
# ---------------------------------------------------------------------------


def test_grade_bands():
    assert [grade_for(s) for s in (100, 85, 84, 70, 69, 50, 49, 30, 29, 0)] == [
        "A", "A", "B", "B", "C", "C", "D", "D", "F", "F",
    ]


def test_health_score_empty_snapshot():
    health = calculate_health_score(build_snapshot([], [], [], [], now=NOW))
    assert [f.key for f in health.factors] == [
        "savings_rate", "spending_ratio", "goal_pace", "diversification", "volatility",
    ]
    assert sum(f.weight for f in health.factors) == 100
    assert health.score == 29
    assert health.grade == "F"


def test_health_score_healthy_budget():
    incomes = [_inc(f"i{m}", 5000.0, datetime(2026, m, 1)) for m in (8, 9, 10)]
    expenses = []
    for m in (8, 9, 10):
        expenses += [
            _exp(f"f{m}", 800.0, "food", datetime(2026, m, 2)),
            _exp(f"t{m}", 600.0, "transport", datetime(2026, m, 3)),
            _exp(f"u{m}", 600.0, "fun", datetime(2026, m, 4)),
        ]
    health = calculate_health_score(build_snapshot(incomes, expenses, [], categories, now=NOW))
    scores = {f.key: f.score for f in health.factors}
    assert scores == {
        "savings_rate": 100,
        "spending_ratio": 100,
        "goal_pace": 50,
        "diversification": 90,
        "volatility": 100,
    }
    assert health.score == 89
    assert health.grade == "A"


def test_health_goal_factor_halves_goals_behind_pace():
    created = NOW - timedelta(days=100)
    goal = Goal(id="g", name="House", target_amount=10000, current_amount=5000,
                target_date=NOW + timedelta(days=50), created_at=created)
    health = calculate_health_score(build_snapshot([], [], [goal], [], now=NOW))
    factor = next(f for f in health.factors if f.key == "goal_pace")
    assert factor.score == 25
    assert "1 of 1" in factor.detail
