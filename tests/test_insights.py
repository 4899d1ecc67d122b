from datetime import datetime, timedelta

from budget_oracle.models.records import Category, Goal, TransactionRecord
from budget_oracle.utils.insights import generate_insights
from budget_oracle.utils.snapshot import build_snapshot

NOW = datetime(2026, 10, 15, 12, 0, 0)

categories = [
    Category(id="food", name="food"),
    Category(id="transport", name="transport"),
]


def _exp(rec_id, amount, category_id, date):
    return TransactionRecord(id=rec_id, amount=amount, category_id=category_id, date=date)


def _inc(rec_id, amount, date):
    return TransactionRecord(id=rec_id, amount=amount, category_id="salary", date=date)


sample_incomes = [_inc("i1", 1000.0, datetime(2026, 9, 1)), _inc("i2", 1000.0, datetime(2026, 10, 1))]

sample_expenses = [
    _exp("h1", 50.0, "food", datetime(2026, 9, 10)),
    _exp("h2", 110.0, "transport", datetime(2026, 9, 15)),
    _exp("h3", 60.0, "food", datetime(2026, 9, 20)),
    _exp("c1", 55.0, "food", datetime(2026, 10, 5)),
    _exp("c2", 300.0, "food", datetime(2026, 10, 10)),
    _exp("c3", 45.0, "food", datetime(2026, 10, 12)),
]

sample_goals = [
    Goal(id="g1", name="House", target_amount=10000, current_amount=5000,
         target_date=NOW + timedelta(days=50), created_at=NOW - timedelta(days=100)),
]


def _snapshot():
    return build_snapshot(sample_incomes, sample_expenses, sample_goals, categories, now=NOW)


def test_onboarding_when_no_data():
    insights = generate_insights(build_snapshot([], [], [], [], now=NOW))
    assert len(insights) == 1
    assert insights[0].type == "tip"
    assert insights[0].confidence == "high"
    assert insights[0].priority == 6


def test_generation_is_deterministic():
    assert generate_insights(_snapshot()) == generate_insights(_snapshot())


def test_insights_ranked_by_priority():
    insights = generate_insights(_snapshot())
    priorities = [i.priority for i in insights]
    assert priorities == sorted(priorities, reverse=True)
    assert len({i.id for i in insights}) == len(insights)
    assert {i.created_at for i in insights} == {"2026-10-15T12:00:00"}


def test_equal_priorities_keep_generation_order():
    insights = generate_insights(_snapshot())
    for first, second in zip(insights, insights[1:]):
        if first.priority == second.priority:
            assert int(first.id.split("_")[1]) < int(second.id.split("_")[1])


def test_expected_insight_kinds():
    insights = generate_insights(_snapshot())
    titles = {i.title: i for i in insights}

    assert titles["Monthly Summary"].priority == 8
    assert "Your savings rate is 69%." in titles["Monthly Summary"].content

    # 400 this month against 220 last month
    trend = titles["Spending Trend"]
    assert trend.priority == 7
    assert "82%" in trend.content
    assert trend.confidence == "low"

    dominance = titles["Top Spending Category"]
    assert dominance.type == "trend"
    assert "food" in dominance.content
    assert "100%" in dominance.content

    for title in ("Category Share: food", "Large Expense: food (₺300.00)"):
        assert titles[title].type == "anomaly"
        assert titles[title].priority == 9
        assert titles[title].confidence == "low"

    goal = titles["Goal: House"]
    assert goal.priority == 7
    assert "50% complete" in goal.content
    assert "falling behind" in goal.content

    assert "Budget Health" in titles


def test_anomaly_insights_capped_at_three():
    expenses = []
    for cat in ("a", "b", "c", "d"):
        expenses += [
            _exp(f"{cat}1", 10.0, cat, datetime(2026, 9, 10)),
            _exp(f"{cat}2", 10.0, cat, datetime(2026, 9, 11)),
            _exp(f"{cat}3", 100.0, cat, datetime(2026, 10, 2)),
        ]
    insights = generate_insights(build_snapshot([], expenses, [], [], now=NOW))
    assert len([i for i in insights if i.type == "anomaly"]) == 3


def test_trend_skipped_without_previous_month():
    expenses = [_exp("a", 10.0, "food", datetime(2026, 8, 1)), _exp("b", 20.0, "food", datetime(2026, 10, 2))]
    insights = generate_insights(build_snapshot([], expenses, [], categories, now=NOW))
    assert "Spending Trend" not in {i.title for i in insights}


def test_income_only_suggests_tracking():
    insights = generate_insights(build_snapshot(sample_incomes, [], [], [], now=NOW))
    titles = [i.title for i in insights]
    assert "Monthly Summary" in titles
    assert "Track Your Spending" in titles
    assert "Budget Health" not in titles
    assert "Savings Tip" not in titles


def test_savings_tip_when_rate_is_low():
    incomes = [_inc("i", 1000.0, datetime(2026, 10, 1))]
    expenses = [_exp("e", 950.0, "food", datetime(2026, 10, 2))]
    insights = generate_insights(build_snapshot(incomes, expenses, [], categories, now=NOW))
    assert "Savings Tip" in {i.title for i in insights}


def test_weak_health_factors_listed():
    expenses = [_exp("e", 950.0, "food", datetime(2026, 10, 2))]
    insights = generate_insights(build_snapshot([], expenses, [], categories, now=NOW))
    health = next(i for i in insights if i.type == "health")
    assert "No income recorded" in health.content
    assert "Largest category: food (100%)" in health.content


def test_turkish_templates():
    insights = generate_insights(_snapshot(), language="tr")
    titles = {i.title for i in insights}
    assert "Aylik Ozet" in titles
    assert "Hedef: House" in titles


def test_explicit_timestamp():
    insights = generate_insights(_snapshot(), now=datetime(2026, 10, 16, 8, 30))
    assert insights[0].created_at == "2026-10-16T08:30:00"


def test_anomaly_insights_survive_memory_dedup(memory):
    insights = generate_insights(_snapshot())
    anomalies = [i for i in insights if i.type == "anomaly"]
    assert len(anomalies) == 2

    memory.store_insights(insights)
    stored = [i for i in memory.get_recent_insights(100) if i.type == "anomaly"]
    assert [i.title for i in stored] == [i.title for i in anomalies]


def test_goal_past_deadline():
    goal = Goal(id="g2", name="Phone", target_amount=1000, current_amount=500,
                target_date=NOW - timedelta(days=5))
    insights = generate_insights(build_snapshot(sample_incomes, sample_expenses, [goal], categories, now=NOW))
    insight = next(i for i in insights if i.title == "Goal: Phone")
    assert insight.priority == 7
    assert "The target date has passed." in insight.content
    assert "falling behind" in insight.content
    assert "days left" not in insight.content
