"""Budgets router."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_budget_service, get_current_user, get_today
from app.logging_config import get_logger
from app.schemas.budget import (
    DEFAULT_CATEGORIES,
    Budget,
    BudgetSummaryResponse,
    BudgetUpsert,
    DefaultCategory,
)
from app.schemas.common import SuccessResponse
from app.services.budget_service import BudgetService, OverAllocationError


router = APIRouter(prefix="/budgets", tags=["Budgets"])
logger = get_logger("budgets")


# ============================================================================
# Presets (must be before /{month} to avoid route conflict)
# ============================================================================


@router.get("/default-categories", response_model=list[DefaultCategory])
async def list_default_categories():
    """Preset categories offered when setting up a new budget."""
    return DEFAULT_CATEGORIES


# ============================================================================
# Monthly budgets
# ============================================================================


@router.get("/{month}", response_model=Budget)
async def get_budget(
    month: str,
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """Get the budget for a month (YYYY-MM)."""
    try:
        budget = budget_service.get_budget(user["id"], month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if budget is None:
        raise HTTPException(status_code=404, detail="No budget found for this month")

    return budget


@router.put("/{month}", response_model=Budget)
async def save_budget(
    month: str,
    request: BudgetUpsert,
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """Create or replace the budget for a month.

    Allocations may not add up to more than the monthly income.
    """
    logger.info(f"[PUT /budgets/{month}] User: {user['id']}")

    try:
        return budget_service.save_budget(user["id"], month, request)
    except OverAllocationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{month}", response_model=SuccessResponse)
async def delete_budget(
    month: str,
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """Delete the budget for a month. Transactions are kept."""
    try:
        deleted = budget_service.delete_budget(user["id"], month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="No budget found for this month")

    return SuccessResponse(message="Budget deleted successfully")


@router.get("/{month}/summary", response_model=BudgetSummaryResponse)
async def get_budget_summary(
    month: str,
    today: date = Depends(get_today),
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """Category spending, flexibility and dashboard stats for a month.

    A month with no budget still returns a dashboard built from its
    transactions, with every budget-derived figure at zero.
    """
    logger.info(f"[GET /budgets/{month}/summary] User: {user['id']}")

    try:
        return budget_service.get_budget_summary(user["id"], month, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
