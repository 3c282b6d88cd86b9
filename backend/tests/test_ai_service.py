"""Test AI categorization and summary report post-processing."""

import json
from datetime import date

import pytest

from app.services.ai_service import (
    FALLBACK_SUMMARY,
    AIServiceError,
    BaseAIService,
    ClaudeAIService,
    get_ai_service,
)

TODAY = date(2024, 10, 15)
CATEGORIES = ["Groceries", "Dining", "Transportation"]


class StubAIService(BaseAIService):
    """Returns a canned reply and records the prompts it was given."""

    def __init__(self, reply: str | Exception):
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def _call_ai_model(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class TestCategorizeExpense:
    def test_full_reply(self):
        service = StubAIService(
            json.dumps(
                {
                    "amount": 45.5,
                    "description": "Costco run",
                    "suggestedCategory": "Groceries",
                    "confidence": 0.95,
                    "date": "2024-10-14",
                }
            )
        )
        result = service.categorize_expense("spent $45.50 at Costco yesterday", CATEGORIES, TODAY)

        assert result.amount == 45.5
        assert result.description == "Costco run"
        assert result.suggested_category == "Groceries"
        assert result.confidence == 0.95
        assert result.date == "2024-10-14"

        _system, prompt = service.calls[0]
        assert "Today's date is: 2024-10-15" in prompt
        assert '"yesterday" means 2024-10-14' in prompt
        assert "Groceries, Dining, Transportation" in prompt

    def test_missing_fields_get_defaults(self):
        service = StubAIService("{}")
        result = service.categorize_expense("something", CATEGORIES, TODAY)

        assert result.amount == 0
        assert result.description == "Expense"
        assert result.suggested_category == "Groceries"
        assert result.confidence == 0.9
        assert result.date == "2024-10-15"

    def test_date_falls_back_to_text(self):
        service = StubAIService('{"amount": "$12.00", "date": "not a date"}')
        result = service.categorize_expense("taxi last friday", CATEGORIES, TODAY)

        assert result.amount == 12
        assert result.date == "2024-10-11"

    def test_code_fenced_reply(self):
        service = StubAIService('```json\n{"amount": 8, "suggestedCategory": "Dining"}\n```')
        result = service.categorize_expense("lunch 8", CATEGORIES, TODAY)
        assert result.amount == 8
        assert result.suggested_category == "Dining"

    def test_confidence_is_clamped(self):
        service = StubAIService('{"confidence": 7}')
        assert service.categorize_expense("x", CATEGORIES, TODAY).confidence == 1.0

    @pytest.mark.parametrize("text, categories", [("", CATEGORIES), ("   ", CATEGORIES), ("lunch", [])])
    def test_empty_input_rejected(self, text, categories):
        service = StubAIService("{}")
        with pytest.raises(ValueError):
            service.categorize_expense(text, categories, TODAY)
        assert service.calls == []

    def test_invalid_json_is_an_error(self):
        with pytest.raises(AIServiceError):
            StubAIService("I think it's groceries").categorize_expense("milk", CATEGORIES, TODAY)

    def test_provider_failure_is_an_error(self):
        with pytest.raises(AIServiceError):
            StubAIService(RuntimeError("timeout")).categorize_expense("milk", CATEGORIES, TODAY)


class TestSummaryReport:
    ANALYSIS = {"month": "2024-10", "totalSpent": 1200}

    def test_structured_reply(self):
        reply = json.dumps(
            {
                "summary": "Solid month.",
                "insights": [{"title": "Groceries", "text": "You spent $400 on groceries."}],
            }
        )
        report = StubAIService(reply).generate_summary_report(self.ANALYSIS)

        assert report.summary == "Solid month."
        assert report.insights[0].title == "Groceries"
        assert report.stats == self.ANALYSIS

    def test_plain_text_reply_is_wrapped(self):
        report = StubAIService("You did great this month.").generate_summary_report(self.ANALYSIS)

        assert report.summary == FALLBACK_SUMMARY
        assert len(report.insights) == 1
        assert report.insights[0].text == "You did great this month."

    def test_json_without_expected_fields_is_wrapped(self):
        report = StubAIService('{"note": "hi"}').generate_summary_report(self.ANALYSIS)
        assert report.summary == FALLBACK_SUMMARY
        assert report.insights[0].title == "Financial Overview"

    def test_empty_reply_is_an_error(self):
        with pytest.raises(AIServiceError):
            StubAIService("  ").generate_summary_report(self.ANALYSIS)


class TestGetAIService:
    def test_requires_api_key(self, monkeypatch):
        from app.config import get_settings

        monkeypatch.setattr(get_settings(), "anthropic_api_key", None)
        with pytest.raises(ValueError):
            get_ai_service()

    def test_builds_claude_service(self, monkeypatch):
        from app.config import get_settings

        monkeypatch.setattr(get_settings(), "anthropic_api_key", "sk-ant-test")
        assert isinstance(get_ai_service(), ClaudeAIService)
