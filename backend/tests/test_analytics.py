"""Test time series, velocity and health scoring analytics."""

from datetime import date

import pytest

from app.schemas.budget import BudgetFlexibility
from app.services.analytics_service import (
    budget_pulse,
    build_analytics_report,
    calendar_period_buckets,
    calendar_periods,
    category_health,
    category_risk_level,
    daily_spending,
    spending_habits,
    spending_momentum,
    spending_trend,
    spending_velocity,
    top_insights,
    weekday_buckets,
)


class TestDailySpending:
    def test_window_ends_on_reference_date(self, make_txn):
        transactions = [
            make_txn(10, "a", date(2024, 10, 13)),
            make_txn(5, "a", date(2024, 10, 13)),
            make_txn(20, "a", date(2024, 10, 15)),
            make_txn(99, "a", date(2024, 10, 1)),  # outside the window
        ]
        series = daily_spending(transactions, 3, date(2024, 10, 15))

        assert series.date_keys == ["2024-10-13", "2024-10-14", "2024-10-15"]
        assert series.labels == ["Oct 13", "Oct 14", "Oct 15"]
        assert series.daily == [15, 0, 20]
        assert series.cumulative == [15, 15, 35]

    def test_window_crosses_month_boundary(self, make_txn):
        series = daily_spending([make_txn(7, "a", date(2024, 9, 30))], 2, date(2024, 10, 1))
        assert series.date_keys == ["2024-09-30", "2024-10-01"]
        assert series.daily == [7, 0]

    def test_cumulative_is_non_decreasing(self, make_txn):
        transactions = [make_txn(i * 1.5, "a", date(2024, 10, i)) for i in range(1, 15)]
        cumulative = daily_spending(transactions, 14, date(2024, 10, 14)).cumulative

        assert all(later >= earlier for earlier, later in zip(cumulative, cumulative[1:]))
        assert cumulative[-1] == pytest.approx(sum(txn.amount for txn in transactions))

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError):
            daily_spending([], 0, date(2024, 10, 15))


class TestSpendingVelocity:
    def test_ahead_of_pace(self):
        velocity = spending_velocity(2000, 3000, 15, 30)

        assert velocity.expected_spent_by_now == 1500
        assert velocity.is_ahead_of_pace is True
        assert velocity.velocity_ratio == pytest.approx(2000 / 1500)
        assert velocity.projected_month_end == pytest.approx(4000)
        assert velocity.days_remaining == 15

    def test_day_zero_has_neutral_ratio(self):
        velocity = spending_velocity(100, 3000, 0, 30)

        assert velocity.expected_spent_by_now == 0
        assert velocity.velocity_ratio == 1.0
        assert velocity.projected_month_end == 100

    def test_zero_income_has_neutral_ratio(self):
        assert spending_velocity(50, 0, 10, 30).velocity_ratio == 1.0


class TestMomentum:
    def test_week_over_week_change(self, make_txn):
        today = date(2024, 10, 15)
        transactions = [
            make_txn(150, "a", date(2024, 10, 12)),  # last 7 days
            make_txn(100, "a", date(2024, 10, 5)),  # 7 days before that
        ]
        momentum = spending_momentum(transactions, today)

        assert momentum.recent_spending == 150
        assert momentum.previous_spending == 100
        assert momentum.percent_change == 50

    def test_no_previous_spending(self, make_txn):
        momentum = spending_momentum([make_txn(40, "a", date(2024, 10, 14))], date(2024, 10, 15))
        assert momentum.percent_change == 0


class TestPatterns:
    def test_weekday_buckets_start_on_sunday(self, make_txn):
        # 2024-10-13 is a Sunday, 2024-10-19 a Saturday
        transactions = [
            make_txn(30, "a", date(2024, 10, 13)),
            make_txn(10, "a", date(2024, 10, 13)),
            make_txn(5, "a", date(2024, 10, 19)),
        ]
        buckets = weekday_buckets(transactions)

        assert [bucket.day for bucket in buckets] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert buckets[0].total == 40
        assert buckets[0].count == 2
        assert buckets[0].average == 20
        assert buckets[6].total == 5
        assert buckets[1].average == 0

    @pytest.mark.parametrize(
        "year, month, last_end",
        [(2023, 2, 28), (2024, 2, 29), (2024, 9, 30), (2024, 10, 31)],
    )
    def test_periods_cover_whole_month(self, year, month, last_end):
        assert calendar_periods(year, month) == [(1, 10), (11, 20), (21, last_end)]

    def test_period_buckets_flag_current_period(self, make_txn):
        transactions = [
            make_txn(10, "a", date(2024, 10, 10)),
            make_txn(20, "a", date(2024, 10, 11)),
            make_txn(30, "a", date(2024, 10, 31)),
            make_txn(99, "a", date(2024, 9, 30)),  # other month
        ]
        buckets = calendar_period_buckets(transactions, "2024-10", date(2024, 10, 15))

        assert [bucket.period for bucket in buckets] == ["1-10", "11-20", "21-31"]
        assert [bucket.total for bucket in buckets] == [10, 20, 30]
        assert [bucket.is_current_period for bucket in buckets] == [False, True, False]

    def test_period_buckets_for_other_month_have_no_current(self):
        buckets = calendar_period_buckets([], "2024-09", date(2024, 10, 15))
        assert not any(bucket.is_current_period for bucket in buckets)

    def test_spending_habits(self, make_txn):
        transactions = [
            make_txn(100, "fun", date(2024, 10, 12)),  # Saturday
            make_txn(10, "food", date(2024, 10, 14)),
            make_txn(10, "food", date(2024, 10, 15)),
            make_txn(20, "food", date(2024, 10, 15)),
        ]
        habits = spending_habits(transactions)

        assert habits.weekend_total == 100
        assert habits.weekday_total == 40
        assert habits.average_transaction_size == 35
        assert habits.large_transactions == 1
        assert habits.frequent_categories[0] == ("food", 3)
        assert habits.most_expensive_day.date == "2024-10-12"

    def test_spending_habits_empty(self):
        habits = spending_habits([])
        assert habits.average_transaction_size == 0
        assert habits.most_expensive_day is None


class TestCategoryHealth:
    def test_fully_spent_mid_month_is_warning(self):
        """Exactly at the allocation is not over budget, but it is far ahead of pace."""
        health = category_health(300, 300, 15, 30)
        assert health.status == "warning"
        assert health.score == 20

    def test_over_budget_is_danger(self):
        health = category_health(100, 110, 15, 30)
        assert health.status == "danger"
        assert health.score == pytest.approx(80)

    def test_far_over_budget_floors_at_zero(self):
        assert category_health(100, 200, 15, 30).score == 0

    def test_well_under_pace_late_in_month(self):
        # expected 200, pace 0.25
        health = category_health(300, 50, 20, 30)
        assert health.status == "good"
        assert health.score == pytest.approx(80)

    def test_on_track(self):
        health = category_health(300, 150, 15, 30)
        assert health.status == "excellent"
        assert health.score == 100

    def test_unbudgeted_category(self):
        assert category_health(0, 10, 15, 30).status == "danger"
        assert category_health(0, 0, 15, 30).status == "excellent"

    def test_day_zero_spending_stays_finite(self):
        health = category_health(300, 50, 0, 30)
        assert health.status == "warning"
        assert health.score == 20

    @pytest.mark.parametrize("percentage, level", [(101, "high"), (100, "medium"), (81, "medium"), (80, "low")])
    def test_risk_level(self, percentage, level):
        assert category_risk_level(percentage) == level


class TestPulseTrendAndInsights:
    def test_pulse_bands(self):
        assert budget_pulse(1.2, 0, 0).type == "irregular"
        assert budget_pulse(1.0, 30, 0).type == "irregular"
        assert budget_pulse(1.0, 0, 3).type == "irregular"
        assert budget_pulse(1.1, 0, 0).type == "elevated"
        assert budget_pulse(1.0, 0, 1).type == "elevated"
        assert budget_pulse(0.7, -10, 0).type == "calm"
        assert budget_pulse(0.7, 0, 0).type == "steady"

    def test_trend(self):
        assert spending_trend(1.2).type == "above_plan"
        assert spending_trend(0.5).type == "below_plan"
        assert spending_trend(1.0).type == "on_track"

    def test_insights_capped_at_four(self, make_txn):
        from app.schemas.analytics import CategoryHealth, CategoryHealthEntry

        habits = spending_habits([make_txn(500, "fun", date(2024, 10, 12)), make_txn(10, "a", date(2024, 10, 14))])
        entries = [
            CategoryHealthEntry(
                category_id="fun",
                category_name="Fun",
                percentage_used=250,
                risk_level="high",
                health=CategoryHealth(score=0, status="danger", message="Over budget"),
            )
        ]
        flexibility = BudgetFlexibility(
            total_allocated=1000,
            unallocated_amount=500,
            flexibility_percentage=33,
            has_unallocated_funds=True,
        )

        insights = top_insights(1.5, habits, entries, flexibility)

        assert len(insights) == 4
        assert insights[0].title == "High Spending Rate"
        assert insights[0].description == "You're spending 50% faster than planned"
        assert insights[-1].description == "$500.00 unallocated"


class TestAnalyticsReport:
    def test_report_for_current_month(self, make_budget, make_txn):
        budget = make_budget(3000, [("food", "Food", 300), ("fun", "Fun", 100), ("gifts", "Gifts", 0)])
        transactions = [
            make_txn(300, "food", date(2024, 10, 10)),
            make_txn(150, "fun", date(2024, 10, 14)),
        ]
        report = build_analytics_report(budget, transactions, "2024-10", date(2024, 10, 15), 7)

        assert report.reference_date == "2024-10-15"
        assert len(report.daily_spending.daily) == 7
        assert report.velocity.actual_spending == 450
        # Categories without an allocation are not scored
        assert [entry.category_id for entry in report.category_health] == ["food", "fun"]
        assert report.category_health[1].risk_level == "high"
        assert report.budget_utilization == pytest.approx(15)
        assert len(report.insights) <= 4

    def test_past_month_uses_full_length(self, make_budget, make_txn):
        budget = make_budget(3100, [("food", "Food", 3100)], month="2024-08")
        report = build_analytics_report(
            budget, [make_txn(3100, "food", date(2024, 8, 5))], "2024-08", date(2024, 10, 15), 7
        )

        assert report.velocity.expected_spent_by_now == pytest.approx(3100)
        assert report.velocity.days_remaining == 0
        assert report.trend.type == "on_track"
