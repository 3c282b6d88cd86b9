"""Expense categorization router."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_ai, get_current_user, get_today
from app.logging_config import get_logger
from app.schemas.ai import CategorizationResult, CategorizeRequest
from app.services.ai_service import AIServiceError, BaseAIService


router = APIRouter(prefix="/categorize", tags=["Categorization"])
logger = get_logger("categorize")


@router.post("", response_model=CategorizationResult)
async def categorize_expense(
    request: CategorizeRequest,
    today: date = Depends(get_today),
    user: dict = Depends(get_current_user),
    ai_service: BaseAIService = Depends(get_ai),
):
    """Turn a sentence like "spent $45 at Costco yesterday" into an expense."""
    logger.info(f"[POST /categorize] User: {user['id']}")

    try:
        return ai_service.categorize_expense(request.input, request.categories, today)
    except AIServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
