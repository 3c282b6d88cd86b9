"""AI-assisted expense extraction and monthly summary reports."""

import json
import math
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Any

from anthropic import Anthropic

from app.config import get_settings
from app.logging_config import get_logger
from app.schemas.ai import CategorizationResult, ReportInsight, SummaryReport
from app.utils.currency import parse_currency_input
from app.utils.dates import format_local_date, parse_date_from_text, parse_local_date

logger = get_logger("ai")

DEFAULT_CONFIDENCE = 0.9
DEFAULT_DESCRIPTION = "Expense"
FALLBACK_SUMMARY = (
    "Great job managing your finances this month! Here are some key insights "
    "to help you continue your financial success."
)

CATEGORIZATION_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts and categorizes expense information "
    "from natural language input. Always include a date field in your JSON response. "
    'Parse relative dates like "tomorrow", "yesterday", "next week" into specific '
    "dates. Always respond with valid JSON."
)
REPORT_SYSTEM_PROMPT = (
    "You are a professional financial advisor who creates personalized, encouraging "
    "budget summary reports. You analyze financial data and provide insights in a "
    "warm, motivational tone that helps users understand their financial situation "
    "and make better decisions at the end of the month."
)


class AIServiceError(Exception):
    """The AI provider failed or returned something unusable."""


def _strip_code_fence(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _coerce_amount(value: Any) -> float:
    if isinstance(value, str):
        return parse_currency_input(value)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def _coerce_confidence(value: Any) -> float:
    try:
        confidence = float(value) if value else DEFAULT_CONFIDENCE
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(confidence):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, confidence))


def _coerce_date(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return format_local_date(parse_local_date(value))
    except (ValueError, IndexError):
        return None


class BaseAIService(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    def _call_ai_model(self, system: str, prompt: str) -> str:
        """Call the AI model with the given prompt and return response text."""
        pass

    def _build_categorization_prompt(
        self, text: str, categories: list[str], today: date
    ) -> str:
        """Build the expense extraction prompt."""
        today_key = format_local_date(today)
        tomorrow_key = format_local_date(today + timedelta(days=1))
        yesterday_key = format_local_date(today - timedelta(days=1))

        return f"""Extract expense information from the following text and categorize it.

Today's date is: {today_key}

Text: "{text}"

Available categories: {", ".join(categories)}

Instructions:
1. Extract the amount (number only, no currency symbol)
2. Create a brief, clear description
3. Select the most appropriate category from the available list
4. Parse any date references (tomorrow, next week, yesterday, specific dates, etc.)
   - If a date is mentioned, convert it to YYYY-MM-DD format
   - "tomorrow" means {tomorrow_key}
   - "yesterday" means {yesterday_key}
   - If no date is mentioned, use today's date: {today_key}

Respond in JSON format:
{{
  "amount": number,
  "description": "string",
  "suggestedCategory": "string",
  "confidence": number between 0 and 1,
  "date": "YYYY-MM-DD string"
}}"""

    def categorize_expense(
        self, text: str, categories: list[str], today: date
    ) -> CategorizationResult:
        """Extract amount, description, category and date from free text.

        Missing fields are filled with safe defaults. When the model gives no
        usable date, the text itself is scanned for one before falling back
        to today.

        Raises:
            ValueError: If the text or category list is empty
            AIServiceError: If the model call fails or returns invalid JSON
        """
        if not text.strip() or not categories:
            raise ValueError("Missing input or categories")

        prompt = self._build_categorization_prompt(text, categories, today)
        try:
            response_text = self._call_ai_model(CATEGORIZATION_SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.error(f"[Categorization] AI error: {e}")
            raise AIServiceError(f"AI categorization failed: {e}") from e

        try:
            result = json.loads(_strip_code_fence(response_text))
        except json.JSONDecodeError as e:
            logger.error(f"[Categorization] JSON parsing error: {e}")
            raise AIServiceError(
                "AI categorization failed: Invalid JSON response from model"
            ) from e
        if not isinstance(result, dict):
            raise AIServiceError("AI categorization failed: Expected a JSON object")

        expense_date = (
            _coerce_date(result.get("date"))
            or parse_date_from_text(text, today)
            or format_local_date(today)
        )

        categorization = CategorizationResult(
            amount=_coerce_amount(result.get("amount")),
            description=str(result.get("description") or DEFAULT_DESCRIPTION),
            suggested_category=str(
                result.get("suggestedCategory") or categories[0]
            ),
            confidence=_coerce_confidence(result.get("confidence")),
            date=expense_date,
        )
        logger.info(
            f"[Categorization] {categorization.suggested_category} "
            f"amount={categorization.amount} confidence={categorization.confidence}"
        )
        return categorization

    def _build_report_prompt(self, analysis: dict[str, Any]) -> str:
        """Build the monthly summary prompt."""
        return f"""You are a financial advisor analyzing monthly financial data to provide key insights. Based on the following financial data, identify 4-5 most important insights that would be valuable for the user to know.

Financial Data:
{json.dumps(analysis, indent=2)}

Instructions:
1. Start with a positive acknowledgment of their financial progress
2. Identify 4-5 most important insights from the data that would be worth highlighting
3. Each insight should be actionable, specific, and based on the actual data
4. Include specific numbers, percentages, and amounts from the data
5. Mix positive achievements with constructive suggestions for improvement
6. Focus on patterns, trends, and opportunities for better financial management
7. Keep the tone encouraging and motivational

Return ONLY a valid JSON object with this exact structure:
{{
  "summary": "A 2-3 sentence positive summary of their overall financial performance",
  "insights": [
    {{
      "title": "Short, catchy title for the insight",
      "text": "Detailed explanation of the insight with specific numbers and actionable advice"
    }}
  ]
}}"""

    def generate_summary_report(self, analysis: dict[str, Any]) -> SummaryReport:
        """Ask the model for a monthly summary of ``analysis``.

        A reply that is not the expected JSON is still returned, wrapped as a
        single insight under a generic summary.

        Raises:
            AIServiceError: If the model call fails or returns nothing
        """
        prompt = self._build_report_prompt(analysis)
        try:
            response_text = self._call_ai_model(REPORT_SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.error(f"[Report] AI error: {e}")
            raise AIServiceError(f"AI report generation failed: {e}") from e

        if not response_text or not response_text.strip():
            raise AIServiceError("AI report generation failed: Empty response from model")

        try:
            parsed = json.loads(_strip_code_fence(response_text))
        except json.JSONDecodeError as e:
            logger.warning(f"[Report] Failed to parse AI response as JSON: {e}")
            return SummaryReport(
                summary=FALLBACK_SUMMARY,
                insights=[ReportInsight(title="Financial Analysis", text=response_text)],
                stats=analysis,
            )

        if (
            isinstance(parsed, dict)
            and parsed.get("summary")
            and isinstance(parsed.get("insights"), list)
        ):
            insights = [
                ReportInsight(title=str(item.get("title", "")), text=str(item.get("text", "")))
                for item in parsed["insights"]
                if isinstance(item, dict)
            ]
            return SummaryReport(summary=str(parsed["summary"]), insights=insights, stats=analysis)

        return SummaryReport(
            summary=FALLBACK_SUMMARY,
            insights=[ReportInsight(title="Financial Overview", text=response_text)],
            stats=analysis,
        )


class ClaudeAIService(BaseAIService):
    """AI service using Claude (Anthropic)."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 2000,
    ):
        self.client = Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    def _call_ai_model(self, system: str, prompt: str) -> str:
        """Call Claude API and return response text."""
        logger.debug(f"[Claude] Calling model {self.model}")
        message = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        response = message.content[0].text
        logger.debug(f"[Claude] Response received: {len(response)} characters")
        return response


def get_ai_service() -> BaseAIService:
    """Get AI service instance based on configuration.

    Raises:
        ValueError: If no API key is configured
    """
    settings = get_settings()

    if not settings.anthropic_api_key:
        raise ValueError("ANTHROPIC_API_KEY not configured in settings")
    return ClaudeAIService(
        api_key=settings.anthropic_api_key,
        model=settings.claude_model,
        max_tokens=settings.ai_max_tokens,
    )
