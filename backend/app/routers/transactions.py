"""Transactions router."""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.config import get_settings
from app.database import Database
from app.dependencies import get_budget_service, get_current_user, get_database
from app.logging_config import get_logger
from app.schemas.common import SuccessResponse
from app.schemas.transaction import (
    Transaction,
    TransactionCreate,
    TransactionListResponse,
    TransactionUpdate,
)
from app.services.budget_service import BudgetService, transaction_from_row


router = APIRouter(prefix="/transactions", tags=["Transactions"])
logger = get_logger("transactions")


def _get_owned_transaction(db: Database, transaction_id: str, user: dict, action: str) -> dict:
    transaction = db.get_transaction_by_id(transaction_id)

    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    # Verify ownership (RLS should handle this, but double-check)
    if transaction["user_id"] != user["id"]:
        raise HTTPException(
            status_code=403,
            detail=f"Not authorized to {action} this transaction",
        )

    return transaction


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    month: str = Query(..., description="Month (YYYY-MM)"),
    user: dict = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
):
    """List a month's transactions, newest first."""
    try:
        transactions = budget_service.get_month_transactions(user["id"], month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TransactionListResponse(items=transactions, total=len(transactions), month=month)


@router.post("", response_model=Transaction, status_code=201)
async def create_transaction(
    request: TransactionCreate,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Record an expense."""
    logger.info(
        f"[POST /transactions] User: {user['id']}, category: {request.category_id}, "
        f"amount: {request.amount}"
    )

    transaction = db.create_transaction(
        {"user_id": user["id"], **request.model_dump(mode="json")}
    )
    return transaction_from_row(transaction, get_settings().tzinfo)


@router.patch("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    update: TransactionUpdate,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Edit amount, description, category or date of an expense."""
    transaction = _get_owned_transaction(db, transaction_id, user, "update")
    tz = get_settings().tzinfo

    update_data = update.model_dump(mode="json", exclude_none=True)
    if not update_data:
        # No updates provided, return as-is
        return transaction_from_row(transaction, tz)

    updated_transaction = db.update_transaction(
        transaction_id=transaction_id,
        updates=update_data,
    )
    if not updated_transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return transaction_from_row(updated_transaction, tz)


@router.delete("/{transaction_id}", response_model=SuccessResponse)
async def delete_transaction(
    transaction_id: str,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Delete an expense."""
    _get_owned_transaction(db, transaction_id, user, "delete")
    db.delete_transaction(transaction_id)
    logger.info(f"[DELETE /transactions/{transaction_id}] User: {user['id']}")
    return SuccessResponse(message="Transaction deleted successfully")
