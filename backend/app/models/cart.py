"""Cart models - priced, mutable selection derived from a package."""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.app.models.common import Category
from backend.app.models.options import CategoryOption


class CartLineItem(BaseModel):
    """A single category line in the cart."""

    model_config = ConfigDict(frozen=True)

    option: CategoryOption
    quantity: Annotated[int, Field(gt=0)]
    unit_price: Decimal
    subtotal: Decimal

    @property
    def vendor(self) -> str:
        return self.option.vendor


class Cart(BaseModel):
    """Cart owned by one session.

    Aggregates are always derived from the full line set:
    ``total == subtotal + taxes + fees``.
    """

    model_config = ConfigDict(frozen=True)

    cart_id: str
    session_id: str
    package_id: str | None = None
    currency: str = "USD"
    items: dict[Category, CartLineItem] = Field(default_factory=dict)
    tax_rate: Decimal
    fee_rate: Decimal
    subtotal: Decimal
    taxes: Decimal
    fees: Decimal
    total: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.items


class CartAction(BaseModel):
    """Cart modification request; ``update`` requires a quantity."""

    category: Category
    action: str = Field(..., pattern="^(update|remove)$")
    quantity: int | None = None

    @model_validator(mode="after")
    def validate_quantity(self) -> "CartAction":
        if self.action == "update" and self.quantity is None:
            raise ValueError("quantity is required for an update action")
        return self
