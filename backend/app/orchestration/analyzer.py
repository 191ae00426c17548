"""Requirement analyzer - free text and structured fields to TripRequirements."""

import logging
from datetime import date, timedelta

from pydantic import ValidationError as PydanticValidationError

from backend.app.errors import ValidationError
from backend.app.llm.client import RequirementsExtractor
from backend.app.models.trip import RequirementsDraft, TripRequirements

logger = logging.getLogger(__name__)


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "requirements"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def finalize_requirements(
    draft: RequirementsDraft,
    *,
    today: date,
    default_lead_days: int = 14,
    default_trip_days: int = 2,
    default_currency: str = "USD",
) -> TripRequirements:
    """Fill date defaults and validate a draft.

    Missing start date -> today + default_lead_days. Missing end date ->
    start + duration_days - 1 (default_trip_days when no duration is known).

    Raises:
        ValidationError: If any field is missing or out of range
    """
    start = draft.start_date or today + timedelta(days=default_lead_days)
    end = draft.end_date
    if end is None:
        days = draft.duration_days or default_trip_days
        end = start + timedelta(days=max(1, days) - 1)

    missing = [name for name in ("destination", "headcount", "budget") if getattr(draft, name) is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    try:
        return TripRequirements(
            destination=draft.destination,
            start_date=start,
            end_date=end,
            headcount=draft.headcount,
            budget=draft.budget,
            currency=draft.currency or default_currency,
        )
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e)) from e


async def analyze_requirements(
    *,
    user_input: str | None,
    overrides: RequirementsDraft,
    extractor: RequirementsExtractor,
    today: date,
    default_lead_days: int = 14,
    default_trip_days: int = 2,
    default_currency: str = "USD",
) -> TripRequirements:
    """Turn free text plus structured fields into validated requirements.

    Structured fields always override values extracted from the text.

    Args:
        user_input: Optional free-text description
        overrides: Structured fields supplied by the caller
        extractor: Free-text extractor
        today: Reference date for default trip dates

    Returns:
        Validated TripRequirements

    Raises:
        ValidationError: If the merged requirements are incomplete or invalid
    """
    draft = RequirementsDraft()
    if user_input and user_input.strip():
        draft = await extractor.extract(user_input)
        logger.info(
            "Extracted requirements from text",
            extra={"structured": draft.model_dump(mode="json", exclude_none=True)},
        )

    return finalize_requirements(
        draft.merged_with(overrides),
        today=today,
        default_lead_days=default_lead_days,
        default_trip_days=default_trip_days,
        default_currency=default_currency,
    )
