"""Budget schemas."""

from datetime import datetime
from pydantic import BaseModel, Field, model_validator

# Percentage reported for a category that has spending but no allocation.
# A UI convention meaning "over budget", not a real percentage.
OVER_BUDGET_NO_ALLOCATION_SENTINEL = 999

UNALLOCATED_CATEGORY_ID = "unallocated"
UNALLOCATED_CATEGORY_NAME = "Unallocated"
UNALLOCATED_COLOR = "#6b7280"


# ============================================================================
# Budget Schemas
# ============================================================================


class BudgetCategory(BaseModel):
    """A spending category owned by a budget."""

    id: str
    name: str
    allocated_amount: float = 0.0
    color: str = "#6B7280"
    icon: str | None = None
    is_custom: bool | None = None


class Budget(BaseModel):
    """A user's budget for one calendar month."""

    id: str
    user_id: str
    month: str  # "YYYY-MM"
    monthly_income: float = 0.0
    categories: list[BudgetCategory] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BudgetCategoryInput(BaseModel):
    """Category as submitted when saving a budget."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    allocated_amount: float = Field(..., ge=0)
    color: str = Field(default="#6B7280", max_length=20)
    icon: str | None = Field(default=None, max_length=50)
    is_custom: bool | None = None


class BudgetUpsert(BaseModel):
    """Create or replace the budget for a month."""

    monthly_income: float = Field(..., ge=0)
    categories: list[BudgetCategoryInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def category_ids_are_unique(self) -> "BudgetUpsert":
        seen: set[str] = set()
        for category in self.categories:
            if category.id in seen:
                raise ValueError(f"Duplicate category id: {category.id}")
            seen.add(category.id)
        return self


class DefaultCategory(BaseModel):
    """Preset category offered when setting up a budget."""

    name: str
    color: str
    icon: str


# ============================================================================
# Derived Schemas
# ============================================================================


class CategorySpending(BaseModel):
    """Spending breakdown for a single category."""

    category_id: str
    category_name: str
    allocated: float
    spent: float
    remaining: float
    percentage_used: int
    color: str
    is_unallocated: bool = False


class BudgetFlexibility(BaseModel):
    """Allocated vs. unallocated income."""

    total_allocated: float
    unallocated_amount: float
    flexibility_percentage: int
    has_unallocated_funds: bool


class DashboardStats(BaseModel):
    """Aggregate figures shown on the dashboard."""

    total_budget: float = 0.0
    total_spent: float = 0.0
    remaining_budget: float = 0.0
    percentage_used: int = 0
    categories_over_budget: int = 0
    transaction_count: int = 0


class OverBudgetInsights(BaseModel):
    """Categories over their allocation and whether spare income covers them."""

    over_budget_categories: list[CategorySpending]
    total_overage: float
    can_cover_with_unallocated: bool
    coverage_percentage: int


class AllocationValidation(BaseModel):
    """Result of checking category allocations against income."""

    is_valid: bool
    is_over_allocated: bool
    total_allocated: float
    difference: float  # income - total allocated


class BudgetSummaryResponse(BaseModel):
    """Everything the dashboard needs for one month."""

    month: str
    budget: Budget | None
    category_spending: list[CategorySpending]
    flexibility: BudgetFlexibility | None
    dashboard: DashboardStats
    over_budget: OverBudgetInsights | None
    orphaned_transaction_count: int = 0
    daily_budget_remaining: float = 0.0
    daily_allocated_budget_remaining: float = 0.0


DEFAULT_CATEGORIES: list[DefaultCategory] = [
    DefaultCategory(name=name, color=color, icon=icon)
    for name, color, icon in [
        ("Housing", "#3B82F6", "Home"),
        ("Transportation", "#10B981", "Car"),
        ("Food & Dining", "#F59E0B", "UtensilsCrossed"),
        ("Utilities", "#6366F1", "Zap"),
        ("Healthcare", "#EF4444", "Heart"),
        ("Insurance", "#8B5CF6", "Shield"),
        ("Personal", "#EC4899", "User"),
        ("Entertainment", "#14B8A6", "Gamepad2"),
        ("Savings", "#84CC16", "PiggyBank"),
        ("Debt Payments", "#F97316", "CreditCard"),
        ("Education", "#06B6D4", "GraduationCap"),
        ("Groceries", "#22C55E", "ShoppingCart"),
        ("Shopping", "#A855F7", "ShoppingBag"),
        ("Travel", "#0EA5E9", "Plane"),
        ("Clothing", "#E11D48", "Shirt"),
        ("Gifts & Donations", "#DB2777", "Gift"),
        ("Pets", "#7C3AED", "Cat"),
        ("Home Improvement", "#059669", "Hammer"),
        ("Investments", "#0891B2", "TrendingUp"),
        ("Phone & Internet", "#7C2D12", "Smartphone"),
        ("Subscriptions", "#BE123C", "Tv"),
        ("Gym & Fitness", "#15803D", "Dumbbell"),
        ("Beauty & Personal Care", "#E11D48", "Sparkles"),
        ("Childcare", "#1E40AF", "Baby"),
        ("Gas & Fuel", "#EA580C", "Fuel"),
        ("Parking & Tolls", "#B91C1C", "ParkingCircle"),
        ("Public Transit", "#166534", "Train"),
        ("Ride Sharing", "#9333EA", "Car"),
        ("Office Supplies", "#0F766E", "Briefcase"),
        ("Taxes", "#991B1B", "Receipt"),
        ("Legal", "#1F2937", "Scale"),
        ("Other", "#6B7280", "MoreHorizontal"),
    ]
]
