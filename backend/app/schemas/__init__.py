"""Pydantic schemas for request/response validation."""

from app.schemas.common import (
    SuccessResponse,
    ErrorResponse,
)
from app.schemas.budget import (
    Budget,
    BudgetCategory,
    BudgetUpsert,
    CategorySpending,
    BudgetFlexibility,
    DashboardStats,
    OverBudgetInsights,
    BudgetSummaryResponse,
)
from app.schemas.transaction import (
    Transaction,
    TransactionCreate,
    TransactionUpdate,
    TransactionListResponse,
)
from app.schemas.analytics import (
    AnalyticsResponse,
    CategoryHealth,
    DailySpending,
    SpendingMomentum,
    SpendingVelocity,
)
from app.schemas.ai import (
    CategorizeRequest,
    CategorizationResult,
    SummaryReport,
)

__all__ = [
    # Common
    "SuccessResponse",
    "ErrorResponse",
    # Budgets
    "Budget",
    "BudgetCategory",
    "BudgetUpsert",
    "CategorySpending",
    "BudgetFlexibility",
    "DashboardStats",
    "OverBudgetInsights",
    "BudgetSummaryResponse",
    # Transactions
    "Transaction",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionListResponse",
    # Analytics
    "AnalyticsResponse",
    "CategoryHealth",
    "DailySpending",
    "SpendingMomentum",
    "SpendingVelocity",
    # AI
    "CategorizeRequest",
    "CategorizationResult",
    "SummaryReport",
]
