"""API routers."""

from app.routers.analytics import router as analytics_router
from app.routers.budgets import router as budgets_router
from app.routers.categorize import router as categorize_router
from app.routers.reports import router as reports_router
from app.routers.transactions import router as transactions_router

__all__ = [
    "analytics_router",
    "budgets_router",
    "categorize_router",
    "reports_router",
    "transactions_router",
]
