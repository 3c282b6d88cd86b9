"""Business logic services."""

from app.services import analytics_service
from app.services import budget_calculations
from app.services.ai_service import BaseAIService, get_ai_service
from app.services.budget_service import BudgetService

__all__ = [
    "analytics_service",
    "budget_calculations",
    "BaseAIService",
    "get_ai_service",
    "BudgetService",
]
