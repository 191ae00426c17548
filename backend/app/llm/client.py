"""Requirement extraction from free text, with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic rule-based extractor when no key is present.
"""

import json
import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Protocol

from openai import AsyncOpenAI

from backend.app.config import Settings
from backend.app.models.trip import RequirementsDraft

logger = logging.getLogger(__name__)

_DESTINATION_RE = re.compile(r"\b(?:in|to|at)\s+([A-Z][\w'.-]*(?:\s+[A-Z][\w'.-]*)*)")
_HEADCOUNT_RE = re.compile(
    r"\b(\d+)\s+(?:people|persons|person|attendees|guests|employees|travelers|travellers|pax)\b",
    re.IGNORECASE,
)
_BUDGET_RE = re.compile(
    r"(?:\$\s?|\bbudget(?:\s+of|\s+is)?\s+\$?)(\d[\d,]*(?:\.\d+)?)\s*(k)?\b",
    re.IGNORECASE,
)
_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_DURATION_RE = re.compile(r"\b(\d+)[-\s]?(day|days|night|nights)\b", re.IGNORECASE)


class RequirementsExtractor(Protocol):
    """Protocol for free-text requirement extractors."""

    async def extract(self, text: str) -> RequirementsDraft:
        """Extract whatever trip fields the text mentions.

        Args:
            text: User's free-text trip description

        Returns:
            Draft with unknown fields left as None
        """
        ...


class RuleBasedExtractor:
    """Deterministic regex extractor (no API key required)."""

    async def extract(self, text: str) -> RequirementsDraft:
        return self.extract_sync(text)

    def extract_sync(self, text: str) -> RequirementsDraft:
        """Synchronous extraction, shared with the OpenAI fallback path."""
        draft = RequirementsDraft()

        match = _DESTINATION_RE.search(text)
        if match:
            draft.destination = match.group(1).strip(" .,")

        match = _HEADCOUNT_RE.search(text)
        if match:
            draft.headcount = int(match.group(1))

        match = _BUDGET_RE.search(text)
        if match:
            try:
                amount = Decimal(match.group(1).replace(",", ""))
            except InvalidOperation:
                amount = None
            if amount is not None:
                draft.budget = amount * 1000 if match.group(2) else amount

        iso_dates = []
        for raw in _ISO_DATE_RE.findall(text):
            try:
                iso_dates.append(date.fromisoformat(raw))
            except ValueError:
                logger.debug(f"Ignoring invalid date in request text: {raw}")
        if iso_dates:
            draft.start_date = iso_dates[0]
        if len(iso_dates) > 1:
            draft.end_date = iso_dates[1]

        match = _DURATION_RE.search(text)
        if match:
            count = int(match.group(1))
            # N nights spans N+1 calendar days
            draft.duration_days = count + 1 if match.group(2).lower().startswith("night") else count

        return draft


class OpenAIRequirementsExtractor:
    """OpenAI-backed extractor using JSON mode."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self._fallback = RuleBasedExtractor()

    async def extract(self, text: str) -> RequirementsDraft:
        """Extract requirements using OpenAI API, falling back to rules."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt()},
                    {"role": "user", "content": text},
                ],
                response_format={"type": "json_object"},
                temperature=0,
                max_tokens=300,
            )
            content = response.choices[0].message.content or ""

            if not content.strip():
                logger.warning("OpenAI returned empty response, using rule-based fallback")
                return self._fallback.extract_sync(text)

            data = json.loads(content)
            draft = RequirementsDraft.model_validate(
                {k: v for k, v in data.items() if v not in (None, "")}
            )

        except Exception as e:
            logger.error(f"OpenAI extraction failed: {e}")
            logger.warning("Falling back to rule-based requirement extraction")
            return self._fallback.extract_sync(text)

        # Fill whatever the model missed from the deterministic pass
        return self._fallback.extract_sync(text).merged_with(draft)

    def _build_system_prompt(self) -> str:
        """Build system prompt for extraction."""
        return """You extract group trip requirements from a planner's message.
Reply with a single JSON object with these keys:

- destination: city or region name (string)
- start_date: ISO date YYYY-MM-DD
- end_date: ISO date YYYY-MM-DD
- headcount: number of travelers (integer)
- budget: total budget as a number, no currency symbol
- currency: ISO 4217 code
- duration_days: trip length in calendar days (integer)

Use null for anything the message does not state. Do NOT guess dates or
numbers that are not present."""


def get_requirements_extractor(settings: Settings) -> RequirementsExtractor:
    """Factory function to get the extractor based on config.

    Returns:
        OpenAIRequirementsExtractor if API key is configured, RuleBasedExtractor otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI extractor for requirement analysis")
        return OpenAIRequirementsExtractor(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
        )
    logger.info("No OpenAI API key configured, using rule-based extractor")
    return RuleBasedExtractor()
