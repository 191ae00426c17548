"""Package models - ranked bundles of one option per category."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import Category
from backend.app.models.options import CategoryOption


class Package(BaseModel):
    """One candidate bundle: at most one option per category."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    rank: int = 0
    items: dict[Category, CategoryOption]
    total_cost: Decimal
    score: float
    provider_score: float | None = None
    category_scores: dict[Category, float] = Field(default_factory=dict)
    explanation: str = ""

    @property
    def categories(self) -> list[Category]:
        """Categories included, in canonical order."""
        return [c for c in Category if c in self.items]
