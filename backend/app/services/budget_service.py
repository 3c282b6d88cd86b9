"""Budget loading and summary computation service."""

from datetime import date, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from app.database import Database
from app.logging_config import get_logger
from app.schemas.analytics import AnalyticsResponse
from app.schemas.budget import Budget, BudgetSummaryResponse, BudgetUpsert
from app.schemas.transaction import Transaction
from app.services.analytics_service import build_analytics_report
from app.services.budget_calculations import (
    compute_category_spending,
    compute_dashboard_stats,
    compute_enhanced_category_spending,
    compute_flexibility,
    compute_over_budget_insights,
    daily_allocated_budget_remaining,
    daily_budget_remaining,
    find_orphaned_transactions,
    get_top_categories,
    validate_budget_allocation,
)
from app.utils.dates import (
    days_elapsed,
    days_in_month,
    format_local_date,
    get_month_key,
    month_bounds,
    month_progress,
    parse_month_key,
    to_local_date,
)

logger = get_logger("budget_service")


class OverAllocationError(ValueError):
    """Category allocations add up to more than the monthly income."""

    def __init__(self, total_allocated: float, income: float):
        self.total_allocated = total_allocated
        self.income = income
        super().__init__(
            f"Total allocated ({total_allocated:.2f}) exceeds monthly income ({income:.2f})"
        )


def budget_from_row(row: dict) -> Budget:
    return Budget(
        id=row["id"],
        user_id=row["user_id"],
        month=row["month"],
        monthly_income=float(row.get("monthly_income") or 0),
        categories=row.get("categories") or [],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def transaction_from_row(row: dict, tz: ZoneInfo | None = None) -> Transaction:
    """Build a Transaction, reading ``date`` as a local calendar day."""
    return Transaction(
        id=row["id"],
        user_id=row["user_id"],
        amount=float(row.get("amount") or 0),
        description=row.get("description") or "",
        category_id=row.get("category_id") or "",
        category_name=row.get("category_name"),
        date=to_local_date(row["date"], tz),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        is_ai_categorized=row.get("is_ai_categorized"),
    )


def build_summary_analysis(
    budget: Budget,
    transactions: list[Transaction],
    month_key: str,
    today: date,
) -> dict[str, Any]:
    """Statistics block for the monthly AI summary report.

    Progress figures use ``today`` for the current month, the whole month for
    past months and nothing for future months.
    """
    year, month = parse_month_key(month_key)
    total_days = days_in_month(year, month)
    days_passed = days_elapsed(month_key, today)

    stats = compute_dashboard_stats(budget, transactions)
    category_spending = compute_category_spending(budget, transactions)
    over_budget = compute_over_budget_insights(budget, transactions)
    total_allocated = compute_flexibility(budget).total_allocated

    if today.year == year and today.month == month:
        progress = month_progress(today)
        days_remaining = total_days - today.day + 1
        daily_remaining = daily_budget_remaining(stats.remaining_budget, today)
    else:
        progress = 100 if days_passed else 0
        days_remaining = total_days - days_passed
        daily_remaining = (
            stats.remaining_budget / days_remaining if days_remaining > 0 else 0.0
        )

    income = budget.monthly_income
    savings_rate = stats.remaining_budget / income * 100 if income > 0 else 0.0
    spending_rate = stats.total_spent / income * 100 if income > 0 else 0.0

    return {
        "month": month_key,
        "monthProgress": f"{progress}%",
        "daysRemaining": days_remaining,
        "income": income,
        "totalSpent": stats.total_spent,
        "remainingBudget": stats.remaining_budget,
        "savingsRate": f"{savings_rate:.1f}%",
        "spendingRate": f"{spending_rate:.1f}%",
        "transactionCount": stats.transaction_count,
        "categoriesOverBudget": stats.categories_over_budget,
        "totalAllocated": total_allocated,
        "unallocatedFunds": income - total_allocated,
        "dailyBudgetRemaining": daily_remaining,
        "dailySpendingAverage": stats.total_spent / days_passed if days_passed > 0 else 0.0,
        "topCategories": [
            {
                "name": cat.category_name,
                "spent": cat.spent,
                "allocated": cat.allocated,
                "percentageUsed": cat.percentage_used,
            }
            for cat in get_top_categories(category_spending, 5)
        ],
        "overBudgetCategories": [
            {
                "name": cat.category_name,
                "overage": abs(cat.remaining),
                "allocated": cat.allocated,
                "spent": cat.spent,
            }
            for cat in over_budget.over_budget_categories
        ],
        "totalOverage": over_budget.total_overage,
        "canCoverWithUnallocated": over_budget.can_cover_with_unallocated,
        "coveragePercentage": over_budget.coverage_percentage,
    }


class BudgetService:
    """Service for loading budget snapshots and computing derived figures."""

    def __init__(self, db: Database, tz: ZoneInfo | None = None):
        self.db = db
        self.tz = tz

    def get_budget(self, user_id: str, month: str) -> Budget | None:
        parse_month_key(month)
        row = self.db.get_budget(user_id, month)
        return budget_from_row(row) if row else None

    def save_budget(self, user_id: str, month: str, request: BudgetUpsert) -> Budget:
        """Create or replace the budget for a month.

        Raises:
            ValueError: If the month key is malformed
            OverAllocationError: If allocations exceed income
        """
        parse_month_key(month)
        validation = validate_budget_allocation(
            request.monthly_income,
            [category.allocated_amount for category in request.categories],
        )
        if validation.is_over_allocated:
            raise OverAllocationError(validation.total_allocated, request.monthly_income)

        row = self.db.upsert_budget(
            {
                "user_id": user_id,
                "month": month,
                "monthly_income": request.monthly_income,
                "categories": [category.model_dump() for category in request.categories],
            }
        )
        logger.info(
            f"Saved budget for {month}: income={request.monthly_income}, "
            f"categories={len(request.categories)}"
        )
        return budget_from_row(row)

    def delete_budget(self, user_id: str, month: str) -> bool:
        parse_month_key(month)
        return self.db.delete_budget(user_id, month)

    def get_month_transactions(self, user_id: str, month: str) -> list[Transaction]:
        """Transactions dated within ``month``, newest first."""
        first_day, last_day = month_bounds(month)
        # Stored timestamps can sit a day either side of the local month
        rows = self.db.get_transactions(
            user_id=user_id,
            date_from=format_local_date(first_day - timedelta(days=1)),
            date_before=format_local_date(last_day + timedelta(days=2)),
        )
        transactions = [transaction_from_row(row, self.tz) for row in rows]
        return [txn for txn in transactions if first_day <= txn.date <= last_day]

    def get_budget_summary(
        self, user_id: str, month: str, today: date
    ) -> BudgetSummaryResponse:
        """Category spending, flexibility and dashboard stats for a month.

        A month without a budget still gets a (zeroed) dashboard. Daily
        figures are only filled in while ``today`` falls inside the month.
        """
        budget = self.get_budget(user_id, month)
        transactions = self.get_month_transactions(user_id, month)

        if budget is None:
            return BudgetSummaryResponse(
                month=month,
                budget=None,
                category_spending=[],
                flexibility=None,
                dashboard=compute_dashboard_stats(None, transactions),
                over_budget=None,
                orphaned_transaction_count=0,
            )

        orphaned = find_orphaned_transactions(budget, transactions)
        if orphaned:
            logger.warning(
                f"{len(orphaned)} transaction(s) in {month} reference deleted categories"
            )

        dashboard = compute_dashboard_stats(budget, transactions)
        is_current_month = get_month_key(today) == month

        return BudgetSummaryResponse(
            month=month,
            budget=budget,
            category_spending=compute_enhanced_category_spending(budget, transactions),
            flexibility=compute_flexibility(budget),
            dashboard=dashboard,
            over_budget=compute_over_budget_insights(budget, transactions),
            orphaned_transaction_count=len(orphaned),
            daily_budget_remaining=(
                daily_budget_remaining(dashboard.remaining_budget, today)
                if is_current_month
                else 0.0
            ),
            daily_allocated_budget_remaining=(
                daily_allocated_budget_remaining(budget, transactions, today)
                if is_current_month
                else 0.0
            ),
        )

    def get_analytics(
        self,
        user_id: str,
        month: str,
        reference_date: date,
        window_days: int,
    ) -> AnalyticsResponse:
        """Analytics for a month.

        A month without a budget is analysed against an empty one, so every
        allocation-based figure comes out as zero.
        """
        budget = self._budget_or_empty(user_id, month)
        transactions = self.get_month_transactions(user_id, month)
        return build_analytics_report(budget, transactions, month, reference_date, window_days)

    def get_summary_analysis(self, user_id: str, month: str, today: date) -> dict[str, Any]:
        budget = self._budget_or_empty(user_id, month)
        transactions = self.get_month_transactions(user_id, month)
        return build_summary_analysis(budget, transactions, month, today)

    def _budget_or_empty(self, user_id: str, month: str) -> Budget:
        budget = self.get_budget(user_id, month)
        if budget is None:
            return Budget(id="", user_id=user_id, month=month)
        return budget
