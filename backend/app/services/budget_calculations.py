"""Budget, category and dashboard calculations.

Every function here is a pure function of its arguments: budgets and
transactions are never mutated, and "today" is always passed in.
"""

from datetime import date

from app.logging_config import get_logger
from app.schemas.budget import (
    OVER_BUDGET_NO_ALLOCATION_SENTINEL,
    UNALLOCATED_CATEGORY_ID,
    UNALLOCATED_CATEGORY_NAME,
    UNALLOCATED_COLOR,
    AllocationValidation,
    Budget,
    BudgetFlexibility,
    CategorySpending,
    DashboardStats,
    OverBudgetInsights,
)
from app.schemas.transaction import Transaction
from app.utils.currency import round_half_up
from app.utils.dates import remaining_days_in_month

logger = get_logger("budget_calculations")

# Allocations within a cent of income count as balanced
ALLOCATION_TOLERANCE = 0.01


def _require_transactions(transactions: list[Transaction] | None) -> list[Transaction]:
    if transactions is None:
        raise TypeError("transactions must be a list, got None")
    return transactions


def percentage_used(spent: float, allocated: float) -> int:
    """Share of an allocation that has been spent, as a rounded percentage.

    Spending against a zero allocation reports the over-budget sentinel
    instead of dividing by zero.
    """
    if allocated > 0:
        return round_half_up(spent / allocated * 100)
    if spent > 0:
        return OVER_BUDGET_NO_ALLOCATION_SENTINEL
    return 0


def compute_category_spending(
    budget: Budget,
    transactions: list[Transaction],
) -> list[CategorySpending]:
    """Per-category spending breakdown, in the budget's category order.

    Transactions pointing at a category that is no longer in the budget are
    left out of the per-category figures and logged. They still count toward
    the dashboard total.
    """
    transactions = _require_transactions(transactions)
    spent_by_category = {category.id: 0.0 for category in budget.categories}

    for txn in transactions:
        if txn.category_id in spent_by_category:
            spent_by_category[txn.category_id] += txn.amount
        else:
            logger.warning(
                f"Transaction {txn.id} found for unknown category: "
                f"{txn.category_id} ({txn.category_name})"
            )

    results = []
    for category in budget.categories:
        spent = spent_by_category[category.id]
        results.append(
            CategorySpending(
                category_id=category.id,
                category_name=category.name,
                allocated=category.allocated_amount,
                spent=spent,
                remaining=category.allocated_amount - spent,
                percentage_used=percentage_used(spent, category.allocated_amount),
                color=category.color,
                is_unallocated=False,
            )
        )
    return results


def find_orphaned_transactions(
    budget: Budget,
    transactions: list[Transaction],
) -> list[Transaction]:
    """Transactions whose category has been removed from the budget."""
    category_ids = {category.id for category in budget.categories}
    return [
        txn for txn in _require_transactions(transactions)
        if txn.category_id not in category_ids
    ]


def compute_flexibility(budget: Budget) -> BudgetFlexibility:
    """Allocated vs. unallocated income. Unallocated never goes negative."""
    total_allocated = sum(category.allocated_amount for category in budget.categories)
    unallocated_amount = max(0.0, budget.monthly_income - total_allocated)
    flexibility_percentage = (
        round_half_up(unallocated_amount / budget.monthly_income * 100)
        if budget.monthly_income > 0
        else 0
    )

    return BudgetFlexibility(
        total_allocated=total_allocated,
        unallocated_amount=unallocated_amount,
        flexibility_percentage=flexibility_percentage,
        has_unallocated_funds=unallocated_amount > 0,
    )


def compute_enhanced_category_spending(
    budget: Budget,
    transactions: list[Transaction],
) -> list[CategorySpending]:
    """Category spending plus an "Unallocated" pseudo-category for spare income."""
    spending = compute_category_spending(budget, transactions)
    flexibility = compute_flexibility(budget)

    if flexibility.has_unallocated_funds:
        spending.append(
            CategorySpending(
                category_id=UNALLOCATED_CATEGORY_ID,
                category_name=UNALLOCATED_CATEGORY_NAME,
                allocated=flexibility.unallocated_amount,
                spent=0.0,
                remaining=flexibility.unallocated_amount,
                percentage_used=0,
                color=UNALLOCATED_COLOR,
                is_unallocated=True,
            )
        )
    return spending


def validate_budget_allocation(
    income: float,
    allocations: list[float],
) -> AllocationValidation:
    """Check category allocations against income before a budget is saved.

    Leaving income unallocated is allowed. Allocating more than the income
    is not.
    """
    total_allocated = sum(allocations)
    difference = income - total_allocated
    is_over_allocated = difference < -ALLOCATION_TOLERANCE

    return AllocationValidation(
        is_valid=not is_over_allocated,
        is_over_allocated=is_over_allocated,
        total_allocated=total_allocated,
        difference=difference,
    )


def compute_dashboard_stats(
    budget: Budget | None,
    transactions: list[Transaction],
) -> DashboardStats:
    """Aggregate dashboard figures.

    Total spend sums every transaction, including ones whose category was
    deleted, so it always reconciles with what was actually spent.
    """
    transactions = _require_transactions(transactions)

    if budget is None:
        return DashboardStats(transaction_count=len(transactions))

    total_budget = budget.monthly_income
    total_spent = sum(txn.amount for txn in transactions)
    percentage = round_half_up(total_spent / total_budget * 100) if total_budget > 0 else 0

    category_spending = compute_category_spending(budget, transactions)
    categories_over_budget = sum(
        1 for cat in category_spending
        if not cat.is_unallocated and cat.percentage_used > 100
    )

    return DashboardStats(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining_budget=total_budget - total_spent,
        percentage_used=percentage,
        categories_over_budget=categories_over_budget,
        transaction_count=len(transactions),
    )


def get_top_categories(
    category_spending: list[CategorySpending],
    limit: int = 5,
) -> list[CategorySpending]:
    """Highest-spend real categories, largest first."""
    ranked = sorted(
        (cat for cat in category_spending if not cat.is_unallocated),
        key=lambda cat: cat.spent,
        reverse=True,
    )
    return ranked[:limit]


def compute_over_budget_insights(
    budget: Budget,
    transactions: list[Transaction],
) -> OverBudgetInsights:
    """Over-budget categories and how much of the overage spare income covers."""
    category_spending = compute_category_spending(budget, transactions)
    unallocated_amount = compute_flexibility(budget).unallocated_amount

    over_budget = [cat for cat in category_spending if cat.remaining < 0]
    total_overage = sum(abs(cat.remaining) for cat in over_budget)
    coverage_percentage = (
        min(100, round_half_up(unallocated_amount / total_overage * 100))
        if total_overage > 0
        else 100
    )

    return OverBudgetInsights(
        over_budget_categories=over_budget,
        total_overage=total_overage,
        can_cover_with_unallocated=unallocated_amount >= total_overage,
        coverage_percentage=coverage_percentage,
    )


def daily_budget_remaining(remaining_budget: float, today: date) -> float:
    """Remaining budget spread over the days left in the month (today included)."""
    days_left = remaining_days_in_month(today)
    return remaining_budget / days_left if days_left > 0 else 0.0


def daily_allocated_budget_remaining(
    budget: Budget,
    transactions: list[Transaction],
    today: date,
) -> float:
    """Unspent category allocations spread over the days left in the month."""
    category_spending = compute_category_spending(budget, transactions)
    total_remaining = sum(max(0.0, cat.remaining) for cat in category_spending)
    days_left = remaining_days_in_month(today)
    return total_remaining / days_left if days_left > 0 else 0.0
