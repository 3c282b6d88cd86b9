"""Analytics router."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from app.config import get_settings
from app.dependencies import get_budget_service, get_current_user, get_today
from app.logging_config import get_logger
from app.schemas.analytics import AnalyticsResponse
from app.services.budget_service import BudgetService


router = APIRouter(prefix="/analytics", tags=["Analytics"])
logger = get_logger("analytics")


@router.get("/{month}", response_model=AnalyticsResponse)
async def get_month_analytics(
    month: str,
    days: int | None = Query(None, ge=1, le=90, description="Daily series window"),
    today: date | None = Query(None, description="Reference date (YYYY-MM-DD)"),
    server_today: date = Depends(get_today),
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """Daily series, pace, patterns and category health for a month.

    ``today`` defaults to the server's local date; pass it to view a month as
    it looked on a given day.
    """
    window_days = days or get_settings().default_analytics_window_days
    reference_date = today or server_today
    logger.info(
        f"[GET /analytics/{month}] User: {user['id']}, "
        f"today: {reference_date}, days: {window_days}"
    )

    try:
        return budget_service.get_analytics(user["id"], month, reference_date, window_days)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
