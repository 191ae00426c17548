"""Trip requirement models - normalized user input."""

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class TripRequirements(BaseModel):
    """Normalized trip requirements attached to a session."""

    model_config = ConfigDict(frozen=True)

    destination: Annotated[str, Field(min_length=1)]
    start_date: date
    end_date: date
    headcount: Annotated[int, Field(gt=0)]
    budget: Annotated[Decimal, Field(ge=0)]
    currency: str = "USD"

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Strip whitespace and reject blank destinations."""
        v = v.strip()
        if not v:
            raise ValueError("destination must not be blank")
        return v

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end_date >= start_date."""
        if "start_date" in info.data and v < info.data["start_date"]:
            raise ValueError("end_date must be >= start_date")
        return v

    @property
    def nights(self) -> int:
        """Hotel nights; a same-day trip still books one night."""
        return max(1, (self.end_date - self.start_date).days)

    @property
    def days(self) -> int:
        """Calendar days spanned, inclusive."""
        return (self.end_date - self.start_date).days + 1


class RequirementsDraft(BaseModel):
    """Partially known requirements, as extracted from text or supplied by a caller.

    Nothing is enforced here; the analyzer merges drafts, fills date defaults
    and validates the result as ``TripRequirements``.
    """

    destination: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    headcount: int | None = None
    budget: Decimal | None = None
    currency: str | None = None
    duration_days: int | None = None

    def merged_with(self, overrides: "RequirementsDraft") -> "RequirementsDraft":
        """Return a draft where every field set on ``overrides`` wins."""
        return self.model_copy(update=overrides.model_dump(exclude_none=True))
