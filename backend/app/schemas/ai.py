"""AI categorization and summary report schemas."""

from typing import Any
from pydantic import BaseModel, Field


class CategorizeRequest(BaseModel):
    """Natural-language expense to extract and categorize."""

    input: str = Field(..., max_length=500)
    categories: list[str]


class CategorizationResult(BaseModel):
    """Expense fields extracted by the model."""

    amount: float
    description: str
    suggested_category: str
    confidence: float = Field(..., ge=0, le=1)
    date: str | None = None  # "YYYY-MM-DD"


class ReportInsight(BaseModel):
    title: str
    text: str


class SummaryReport(BaseModel):
    """Monthly AI summary with the statistics it was based on."""

    summary: str
    insights: list[ReportInsight]
    stats: dict[str, Any]
