"""Spending analytics schemas."""

from typing import Literal
from pydantic import BaseModel

from app.schemas.budget import BudgetFlexibility, CategorySpending


HealthStatus = Literal["excellent", "good", "warning", "danger"]
RiskLevel = Literal["high", "medium", "low"]


class DailySpending(BaseModel):
    """Per-day and running totals over a trailing window."""

    labels: list[str]  # "Oct 7"
    date_keys: list[str]  # "YYYY-MM-DD"
    daily: list[float]
    cumulative: list[float]


class SpendingVelocity(BaseModel):
    """Actual month-to-date spend against a time-prorated expectation."""

    expected_spent_by_now: float
    actual_spending: float
    is_ahead_of_pace: bool
    projected_month_end: float
    velocity_ratio: float
    days_remaining: int


class SpendingMomentum(BaseModel):
    """Last 7 days against the 7 days before."""

    recent_spending: float
    previous_spending: float
    percent_change: float


class WeekdayBucket(BaseModel):
    day: str  # "Sun" .. "Sat"
    total: float
    count: int
    average: float


class CalendarPeriodBucket(BaseModel):
    period: str  # "1-10"
    start: int
    end: int
    total: float
    count: int
    is_current_period: bool


class MostExpensiveDay(BaseModel):
    date: str
    amount: float


class SpendingHabits(BaseModel):
    weekday_total: float
    weekend_total: float
    average_transaction_size: float
    large_transactions: int
    frequent_categories: list[tuple[str, int]]
    most_expensive_day: MostExpensiveDay | None = None


class CategoryHealth(BaseModel):
    """Pace-aware health score for one category."""

    score: float  # 0-100
    status: HealthStatus
    message: str


class CategoryHealthEntry(BaseModel):
    category_id: str
    category_name: str
    percentage_used: int
    risk_level: RiskLevel
    health: CategoryHealth


class BudgetPulse(BaseModel):
    type: Literal["irregular", "elevated", "calm", "steady"]
    status: str
    description: str
    intensity: Literal["High", "Medium", "Low", "Normal"]


class SpendingTrend(BaseModel):
    type: Literal["above_plan", "below_plan", "on_track"]
    text: str


class Insight(BaseModel):
    title: str
    description: str
    action: str
    priority: Literal["high", "medium", "positive"]


class AnalyticsResponse(BaseModel):
    """Everything the analytics view renders for one month."""

    month: str
    reference_date: str
    window_days: int
    category_spending: list[CategorySpending]
    flexibility: BudgetFlexibility
    daily_spending: DailySpending
    velocity: SpendingVelocity
    momentum: SpendingMomentum
    weekday_buckets: list[WeekdayBucket]
    period_buckets: list[CalendarPeriodBucket]
    habits: SpendingHabits
    category_health: list[CategoryHealthEntry]
    pulse: BudgetPulse
    trend: SpendingTrend
    insights: list[Insight]
    budget_utilization: float
