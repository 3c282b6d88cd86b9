"""Monthly summary report router."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_ai, get_budget_service, get_current_user, get_today
from app.logging_config import get_logger
from app.schemas.ai import SummaryReport
from app.services.ai_service import AIServiceError, BaseAIService
from app.services.budget_service import BudgetService


router = APIRouter(prefix="/reports", tags=["Reports"])
logger = get_logger("reports")


@router.post("/summary", response_model=SummaryReport)
async def generate_summary_report(
    month: str = Query(..., description="Month (YYYY-MM)"),
    today: date = Depends(get_today),
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
    ai_service: BaseAIService = Depends(get_ai),
):
    """Write an end-of-month summary with a handful of insights."""
    logger.info(f"[POST /reports/summary] User: {user['id']}, month: {month}")

    try:
        analysis = budget_service.get_summary_analysis(user["id"], month, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return ai_service.generate_summary_report(analysis)
    except AIServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
