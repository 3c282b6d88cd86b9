"""Transaction schemas."""

import datetime as dt
from pydantic import BaseModel, Field


class Transaction(BaseModel):
    """A single expense. ``date`` is a local calendar day."""

    id: str
    user_id: str
    amount: float
    description: str = ""
    category_id: str
    category_name: str | None = None
    date: dt.date
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    is_ai_categorized: bool | None = None


class TransactionCreate(BaseModel):
    """Record a new expense."""

    amount: float = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=200)
    category_id: str = Field(..., min_length=1)
    category_name: str | None = None
    date: dt.date
    is_ai_categorized: bool = False


class TransactionUpdate(BaseModel):
    """Edit an existing expense."""

    amount: float | None = Field(None, gt=0)
    description: str | None = Field(None, min_length=1, max_length=200)
    category_id: str | None = None
    category_name: str | None = None
    date: dt.date | None = None


class TransactionListResponse(BaseModel):
    """Transactions for a month, newest first."""

    items: list[Transaction]
    total: int
    month: str
