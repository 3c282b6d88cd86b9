"""Spending analytics: time series, pace, patterns and health scoring.

All functions are pure and take the reference date as an argument so that
results are reproducible regardless of when they run.
"""

from collections import Counter, defaultdict
from datetime import date, timedelta

from app.schemas.analytics import (
    AnalyticsResponse,
    BudgetPulse,
    CalendarPeriodBucket,
    CategoryHealth,
    CategoryHealthEntry,
    DailySpending,
    Insight,
    MostExpensiveDay,
    SpendingHabits,
    SpendingMomentum,
    SpendingTrend,
    SpendingVelocity,
    WeekdayBucket,
)
from app.schemas.budget import Budget, BudgetFlexibility, CategorySpending
from app.schemas.transaction import Transaction
from app.services.budget_calculations import (
    compute_category_spending,
    compute_flexibility,
)
from app.utils.currency import format_currency
from app.utils.dates import (
    MONTH_NAMES,
    days_elapsed,
    days_in_month,
    format_local_date,
    parse_month_key,
    weekday_index,
)

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Month thirds: the last period runs to the end of the month
PERIOD_STARTS = (1, 11, 21)

MOMENTUM_WINDOW_DAYS = 7
MAX_INSIGHTS = 4


# ============================================================================
# Time series
# ============================================================================


def daily_spending(
    transactions: list[Transaction],
    window_days: int,
    reference_date: date,
) -> DailySpending:
    """Daily and cumulative spend for the ``window_days`` ending on ``reference_date``."""
    if window_days < 1:
        raise ValueError(f"window_days must be at least 1, got {window_days}")

    start = reference_date - timedelta(days=window_days - 1)
    days = [start + timedelta(days=offset) for offset in range(window_days)]
    totals = {format_local_date(day): 0.0 for day in days}

    for txn in transactions:
        key = format_local_date(txn.date)
        if key in totals:
            totals[key] += txn.amount

    daily = list(totals.values())
    cumulative = []
    running = 0.0
    for amount in daily:
        running += amount
        cumulative.append(running)

    return DailySpending(
        labels=[f"{MONTH_NAMES[day.month - 1][:3].title()} {day.day}" for day in days],
        date_keys=list(totals.keys()),
        daily=daily,
        cumulative=cumulative,
    )


def spending_velocity(
    total_spent: float,
    monthly_income: float,
    day_of_month: int,
    days_in_month: int,
) -> SpendingVelocity:
    """Month-to-date spend against an even spread of income over the month.

    With nothing expected yet (day 0 or no income) the velocity is 1.0; with
    no days elapsed the projection is simply what has been spent.
    """
    expected = monthly_income * day_of_month / days_in_month if days_in_month > 0 else 0.0
    velocity_ratio = total_spent / expected if expected > 0 else 1.0
    projected = total_spent / day_of_month * days_in_month if day_of_month > 0 else total_spent

    return SpendingVelocity(
        expected_spent_by_now=expected,
        actual_spending=total_spent,
        is_ahead_of_pace=total_spent > expected,
        projected_month_end=projected,
        velocity_ratio=velocity_ratio,
        days_remaining=max(0, days_in_month - day_of_month),
    )


def spending_momentum(
    transactions: list[Transaction],
    reference_date: date,
) -> SpendingMomentum:
    """Spend in the last 7 days against the 7 days before that."""
    recent_start = reference_date - timedelta(days=MOMENTUM_WINDOW_DAYS)
    previous_start = reference_date - timedelta(days=2 * MOMENTUM_WINDOW_DAYS)

    recent = sum(
        txn.amount for txn in transactions
        if recent_start <= txn.date <= reference_date
    )
    previous = sum(
        txn.amount for txn in transactions
        if previous_start <= txn.date < recent_start
    )
    change = (recent - previous) / previous * 100 if previous > 0 else 0.0

    return SpendingMomentum(
        recent_spending=recent,
        previous_spending=previous,
        percent_change=change,
    )


# ============================================================================
# Patterns
# ============================================================================


def weekday_buckets(transactions: list[Transaction]) -> list[WeekdayBucket]:
    """Totals per day of week, Sunday first."""
    totals = [0.0] * 7
    counts = [0] * 7
    for txn in transactions:
        index = weekday_index(txn.date)
        totals[index] += txn.amount
        counts[index] += 1

    return [
        WeekdayBucket(
            day=label,
            total=totals[i],
            count=counts[i],
            average=totals[i] / counts[i] if counts[i] else 0.0,
        )
        for i, label in enumerate(WEEKDAY_LABELS)
    ]


def calendar_periods(year: int, month: int) -> list[tuple[int, int]]:
    """(start, end) day ranges splitting a month into thirds."""
    last_day = days_in_month(year, month)
    ends = [PERIOD_STARTS[1] - 1, PERIOD_STARTS[2] - 1, last_day]
    return list(zip(PERIOD_STARTS, ends))


def calendar_period_buckets(
    transactions: list[Transaction],
    reference_month: str,
    today: date,
) -> list[CalendarPeriodBucket]:
    """Spend per third of ``reference_month``, flagging the third containing today."""
    year, month = parse_month_key(reference_month)
    in_month = [
        txn for txn in transactions
        if txn.date.year == year and txn.date.month == month
    ]
    is_current_month = today.year == year and today.month == month

    buckets = []
    for start, end in calendar_periods(year, month):
        period_txns = [txn for txn in in_month if start <= txn.date.day <= end]
        buckets.append(
            CalendarPeriodBucket(
                period=f"{start}-{end}",
                start=start,
                end=end,
                total=sum(txn.amount for txn in period_txns),
                count=len(period_txns),
                is_current_period=is_current_month and start <= today.day <= end,
            )
        )
    return buckets


def spending_habits(transactions: list[Transaction]) -> SpendingHabits:
    """Weekday/weekend split, transaction sizes and the busiest categories."""
    total = sum(txn.amount for txn in transactions)
    average = total / len(transactions) if transactions else 0.0

    weekday_total = 0.0
    weekend_total = 0.0
    by_day: dict[str, float] = defaultdict(float)
    for txn in transactions:
        if weekday_index(txn.date) in (0, 6):
            weekend_total += txn.amount
        else:
            weekday_total += txn.amount
        by_day[format_local_date(txn.date)] += txn.amount

    most_expensive = None
    for day_key, amount in by_day.items():
        if amount > (most_expensive.amount if most_expensive else 0):
            most_expensive = MostExpensiveDay(date=day_key, amount=amount)

    category_counts = Counter(txn.category_id for txn in transactions)

    return SpendingHabits(
        weekday_total=weekday_total,
        weekend_total=weekend_total,
        average_transaction_size=average,
        large_transactions=sum(1 for txn in transactions if txn.amount > average * 2),
        frequent_categories=category_counts.most_common(3),
        most_expensive_day=most_expensive,
    )


# ============================================================================
# Health scoring
# ============================================================================


def category_health(
    allocated: float,
    spent: float,
    day_of_month: int,
    days_in_month: int,
) -> CategoryHealth:
    """Score a category's spending pace against how far into the month we are.

    Rubric:
    - over the allocation: danger, losing 2 points per 1% over
    - more than 20% ahead of the prorated pace: warning, floored at 20
    - under half the prorated pace past mid-month: good, floored at 60
    - otherwise: excellent
    """
    if allocated == 0:
        if spent > 0:
            return CategoryHealth(score=0, status="danger", message="Spending without budget")
        return CategoryHealth(score=100, status="excellent", message="No activity")

    expected = allocated * day_of_month / days_in_month if days_in_month > 0 else 0.0
    utilization_rate = spent / allocated
    time_progress = day_of_month / days_in_month if days_in_month > 0 else 0.0
    pace_ratio = spent / expected if expected != 0 else float("inf")

    if utilization_rate > 1:
        return CategoryHealth(
            score=max(0, 100 - (utilization_rate - 1) * 200),
            status="danger",
            message="Over budget",
        )
    if spent > expected * 1.2:
        return CategoryHealth(
            score=max(20, 100 - (pace_ratio - 1) * 100),
            status="warning",
            message="Spending ahead of pace",
        )
    if spent < expected * 0.5 and time_progress > 0.5:
        return CategoryHealth(
            score=max(60, 100 - (0.5 - pace_ratio) * 80),
            status="good",
            message="Under budget",
        )
    return CategoryHealth(score=100, status="excellent", message="On track")


def category_risk_level(percentage_used: int) -> str:
    if percentage_used > 100:
        return "high"
    if percentage_used > 80:
        return "medium"
    return "low"


def budget_pulse(
    velocity_ratio: float,
    momentum_change: float,
    high_risk_count: int,
) -> BudgetPulse:
    """Overall spending rhythm from pace, week-over-week change and overruns."""
    if velocity_ratio > 1.15 or momentum_change > 25 or high_risk_count > 2:
        return BudgetPulse(
            type="irregular",
            status="Irregular Pulse",
            description="Erratic spending patterns detected",
            intensity="High",
        )
    if velocity_ratio > 1.05 or momentum_change > 10 or high_risk_count > 0:
        return BudgetPulse(
            type="elevated",
            status="Elevated Pulse",
            description="Spending slightly above normal rhythm",
            intensity="Medium",
        )
    if velocity_ratio < 0.8 and momentum_change < -5:
        return BudgetPulse(
            type="calm",
            status="Calm Pulse",
            description="Very controlled spending rhythm",
            intensity="Low",
        )
    return BudgetPulse(
        type="steady",
        status="Steady Pulse",
        description="Healthy spending rhythm maintained",
        intensity="Normal",
    )


def spending_trend(velocity_ratio: float) -> SpendingTrend:
    if velocity_ratio > 1.1:
        return SpendingTrend(type="above_plan", text="Spending Above Plan")
    if velocity_ratio < 0.8:
        return SpendingTrend(type="below_plan", text="Spending Below Plan")
    return SpendingTrend(type="on_track", text="Spending On Track")


def top_insights(
    velocity_ratio: float,
    habits: SpendingHabits,
    health_entries: list[CategoryHealthEntry],
    flexibility: BudgetFlexibility,
) -> list[Insight]:
    """The most actionable observations, at most four."""
    insights = []

    if velocity_ratio > 1.1:
        insights.append(
            Insight(
                title="High Spending Rate",
                description=f"You're spending {(velocity_ratio - 1) * 100:.0f}% faster than planned",
                action="Consider slowing down discretionary spending",
                priority="high",
            )
        )
    elif velocity_ratio < 0.8:
        insights.append(
            Insight(
                title="Great Budget Control",
                description=f"You're {(1 - velocity_ratio) * 100:.0f}% under budget",
                action="Consider investing surplus or increasing savings",
                priority="positive",
            )
        )

    if habits.weekend_total > habits.weekday_total * 1.5:
        insights.append(
            Insight(
                title="Weekend Spending Spike",
                description="You spend significantly more on weekends",
                action="Set weekend budgets or plan free activities",
                priority="medium",
            )
        )

    high_risk = [entry for entry in health_entries if entry.risk_level == "high"]
    if high_risk:
        names = ", ".join(entry.category_name for entry in high_risk[:2])
        insights.append(
            Insight(
                title="Budget Overruns",
                description=f"{len(high_risk)} categories are over budget",
                action=f"Review {names}",
                priority="high",
            )
        )

    if flexibility.has_unallocated_funds and flexibility.unallocated_amount > 100:
        insights.append(
            Insight(
                title="Optimization Opportunity",
                description=f"{format_currency(flexibility.unallocated_amount)} unallocated",
                action="Assign to savings or emergency fund",
                priority="medium",
            )
        )

    return insights[:MAX_INSIGHTS]


def _health_entries(
    category_spending: list[CategorySpending],
    day_of_month: int,
    total_days: int,
) -> list[CategoryHealthEntry]:
    return [
        CategoryHealthEntry(
            category_id=cat.category_id,
            category_name=cat.category_name,
            percentage_used=cat.percentage_used,
            risk_level=category_risk_level(cat.percentage_used),
            health=category_health(cat.allocated, cat.spent, day_of_month, total_days),
        )
        for cat in category_spending
        if cat.allocated > 0
    ]


def build_analytics_report(
    budget: Budget,
    transactions: list[Transaction],
    month_key: str,
    reference_date: date,
    window_days: int,
) -> AnalyticsResponse:
    """Assemble every analytics figure for one month's budget and transactions."""
    year, month = parse_month_key(month_key)
    total_days = days_in_month(year, month)
    day_of_month = days_elapsed(month_key, reference_date)
    total_spent = sum(txn.amount for txn in transactions)

    category_spending = compute_category_spending(budget, transactions)
    flexibility = compute_flexibility(budget)
    velocity = spending_velocity(total_spent, budget.monthly_income, day_of_month, total_days)
    momentum = spending_momentum(transactions, reference_date)
    habits = spending_habits(transactions)
    health_entries = _health_entries(category_spending, day_of_month, total_days)
    high_risk_count = sum(1 for entry in health_entries if entry.risk_level == "high")

    return AnalyticsResponse(
        month=month_key,
        reference_date=format_local_date(reference_date),
        window_days=window_days,
        category_spending=category_spending,
        flexibility=flexibility,
        daily_spending=daily_spending(transactions, window_days, reference_date),
        velocity=velocity,
        momentum=momentum,
        weekday_buckets=weekday_buckets(transactions),
        period_buckets=calendar_period_buckets(transactions, month_key, reference_date),
        habits=habits,
        category_health=health_entries,
        pulse=budget_pulse(velocity.velocity_ratio, momentum.percent_change, high_risk_count),
        trend=spending_trend(velocity.velocity_ratio),
        insights=top_insights(velocity.velocity_ratio, habits, health_entries, flexibility),
        budget_utilization=(
            total_spent / budget.monthly_income * 100 if budget.monthly_income > 0 else 0.0
        ),
    )
