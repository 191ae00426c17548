"""Tests for requirement extraction and analysis.

All tests are deterministic and do not make real network calls.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from backend.app.config import Settings
from backend.app.errors import ValidationError
from backend.app.llm.client import (
    OpenAIRequirementsExtractor,
    RuleBasedExtractor,
    get_requirements_extractor,
)
from backend.app.models.trip import RequirementsDraft
from backend.app.orchestration.analyzer import analyze_requirements, finalize_requirements

TODAY = date(2026, 3, 2)


class TestRuleBasedExtractor:
    @pytest.mark.asyncio
    async def test_extracts_all_fields(self) -> None:
        draft = await RuleBasedExtractor().extract(
            "Plan a 3-day offsite in Las Vegas for 25 people, budget $40k, starting 2026-05-12"
        )

        assert draft.destination == "Las Vegas"
        assert draft.headcount == 25
        assert draft.budget == Decimal("40000")
        assert draft.start_date == date(2026, 5, 12)
        assert draft.duration_days == 3

    def test_two_iso_dates_give_start_and_end(self) -> None:
        draft = RuleBasedExtractor().extract_sync(
            "Retreat to Denver 2026-07-01 through 2026-07-04 for 8 attendees with $12,500"
        )

        assert draft.destination == "Denver"
        assert draft.start_date == date(2026, 7, 1)
        assert draft.end_date == date(2026, 7, 4)
        assert draft.headcount == 8
        assert draft.budget == Decimal("12500")

    def test_nights_become_days(self) -> None:
        draft = RuleBasedExtractor().extract_sync("2 nights at Napa for 6 guests")
        assert draft.duration_days == 3

    def test_nothing_found(self) -> None:
        assert RuleBasedExtractor().extract_sync("hello there") == RequirementsDraft()


class TestOpenAIExtractor:
    def _extractor_with_content(self, content: str) -> OpenAIRequirementsExtractor:
        extractor = OpenAIRequirementsExtractor(api_key="sk-test")
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content=content))]
        extractor.client = MagicMock()
        extractor.client.chat.completions.create = AsyncMock(return_value=response)
        return extractor

    @pytest.mark.asyncio
    async def test_json_response_parsed_and_gaps_filled_from_rules(self) -> None:
        extractor = self._extractor_with_content(
            '{"destination": "Lisbon", "headcount": 30, "budget": null}'
        )

        draft = await extractor.extract("Offsite in Lisbon for 30 people with $50k")

        assert draft.destination == "Lisbon"
        assert draft.headcount == 30
        assert draft.budget == Decimal("50000")

    @pytest.mark.asyncio
    async def test_empty_response_falls_back(self) -> None:
        extractor = self._extractor_with_content("")

        draft = await extractor.extract("Trip to Boston for 4 people")

        assert draft.destination == "Boston"
        assert draft.headcount == 4

    @pytest.mark.asyncio
    async def test_api_error_falls_back(self) -> None:
        extractor = OpenAIRequirementsExtractor(api_key="sk-test")
        extractor.client = MagicMock()
        extractor.client.chat.completions.create = AsyncMock(side_effect=RuntimeError("down"))

        draft = await extractor.extract("Trip to Boston for 4 people")

        assert draft.destination == "Boston"

    def test_factory_picks_extractor_by_key(self) -> None:
        no_key = Settings(_env_file=None, openai_api_key=None)
        with_key = Settings(_env_file=None, openai_api_key=SecretStr("sk-test"))

        assert isinstance(get_requirements_extractor(no_key), RuleBasedExtractor)
        assert isinstance(get_requirements_extractor(with_key), OpenAIRequirementsExtractor)


class TestAnalyzer:
    def test_defaults_fill_dates(self) -> None:
        req = finalize_requirements(
            RequirementsDraft(destination="Austin", headcount=5, budget=Decimal("100")),
            today=TODAY,
        )

        assert req.start_date == date(2026, 3, 16)
        assert req.end_date == date(2026, 3, 17)
        assert req.currency == "USD"

    def test_duration_sets_end_date(self) -> None:
        req = finalize_requirements(
            RequirementsDraft(
                destination="Austin",
                headcount=5,
                budget=Decimal("100"),
                start_date=date(2026, 5, 1),
                duration_days=4,
            ),
            today=TODAY,
        )
        assert req.end_date == date(2026, 5, 4)

    def test_missing_fields_reported(self) -> None:
        with pytest.raises(ValidationError, match="headcount, budget"):
            finalize_requirements(RequirementsDraft(destination="Austin"), today=TODAY)

    def test_pydantic_errors_become_domain_errors(self) -> None:
        with pytest.raises(ValidationError, match="headcount"):
            finalize_requirements(
                RequirementsDraft(destination="Austin", headcount=0, budget=Decimal("1")),
                today=TODAY,
            )

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError, match="end_date"):
            finalize_requirements(
                RequirementsDraft(
                    destination="Austin",
                    headcount=3,
                    budget=Decimal("1"),
                    start_date=date(2026, 5, 5),
                    end_date=date(2026, 5, 1),
                ),
                today=TODAY,
            )

    @pytest.mark.asyncio
    async def test_structured_fields_override_text(self) -> None:
        req = await analyze_requirements(
            user_input="Offsite in Miami for 10 people, budget $9000",
            overrides=RequirementsDraft(headcount=12),
            extractor=RuleBasedExtractor(),
            today=TODAY,
        )

        assert req.destination == "Miami"
        assert req.headcount == 12
        assert req.budget == Decimal("9000")
