"""Cart builder and mutator.

All functions are pure: they return a new Cart and never modify the input.
Aggregates are always recomputed from the full line set, so
``total == subtotal + taxes + fees`` holds after every operation.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from backend.app.errors import UnknownCategoryError
from backend.app.models.cart import Cart, CartLineItem
from backend.app.models.common import CATEGORY_ORDER, Category, QuantityBasis, quantize_money
from backend.app.models.options import OptionBase
from backend.app.models.package import Package
from backend.app.models.trip import TripRequirements

ZERO = Decimal("0.00")

QUANTITY_RULES: dict[Category, QuantityBasis] = {
    Category.flights: QuantityBasis.per_person,
    Category.catering: QuantityBasis.per_person,
    Category.hotels: QuantityBasis.per_night,
    Category.meeting_rooms: QuantityBasis.per_day,
    Category.transport: QuantityBasis.per_booking,
}


@dataclass(frozen=True)
class CartRates:
    """Tax and fee rates applied to a cart subtotal."""

    tax_rate: Decimal = Decimal("0.0875")
    fee_rate: Decimal = Decimal("0.025")


def initial_quantity(
    category: Category,
    requirements: TripRequirements,
    rules: Mapping[Category, QuantityBasis] = QUANTITY_RULES,
) -> int:
    """Default line quantity for a category on this trip."""
    basis = rules[category]
    if basis == QuantityBasis.per_person:
        return requirements.headcount
    if basis == QuantityBasis.per_night:
        return requirements.nights
    if basis == QuantityBasis.per_day:
        return requirements.days
    return 1


def line_item(option: OptionBase, quantity: int) -> CartLineItem:
    return CartLineItem(
        option=option,
        quantity=quantity,
        unit_price=option.unit_price,
        subtotal=quantize_money(option.unit_price * quantity),
    )


def price_cart(
    *,
    cart_id: str,
    session_id: str,
    package_id: str | None,
    currency: str,
    items: Mapping[Category, CartLineItem],
    tax_rate: Decimal,
    fee_rate: Decimal,
) -> Cart:
    """Compute aggregates from the line set and return the priced Cart."""
    ordered = {c: items[c] for c in CATEGORY_ORDER if c in items}
    subtotal = quantize_money(sum((line.subtotal for line in ordered.values()), ZERO))
    taxes = quantize_money(subtotal * tax_rate)
    fees = quantize_money(subtotal * fee_rate)

    return Cart(
        cart_id=cart_id,
        session_id=session_id,
        package_id=package_id,
        currency=currency,
        items=ordered,
        tax_rate=tax_rate,
        fee_rate=fee_rate,
        subtotal=subtotal,
        taxes=taxes,
        fees=fees,
        total=subtotal + taxes + fees,
    )


def build_cart(
    session_id: str,
    package: Package,
    requirements: TripRequirements,
    *,
    rates: CartRates | None = None,
    rules: Mapping[Category, QuantityBasis] = QUANTITY_RULES,
    cart_id: str | None = None,
) -> Cart:
    """Turn a ranked package into a priced cart.

    Args:
        session_id: Owning session
        package: Selected package
        requirements: Trip requirements (headcount and dates drive quantities)
        rates: Tax/fee rates (defaults when omitted)
        rules: Quantity basis per category
        cart_id: Explicit cart id (generated when omitted)

    Returns:
        New Cart with one line per package category
    """
    rates = rates or CartRates()
    items = {
        category: line_item(option, initial_quantity(category, requirements, rules))
        for category, option in package.items.items()
    }
    return price_cart(
        cart_id=cart_id or f"cart_{uuid.uuid4().hex}",
        session_id=session_id,
        package_id=package.package_id,
        currency=requirements.currency,
        items=items,
        tax_rate=rates.tax_rate,
        fee_rate=rates.fee_rate,
    )


def _reprice(cart: Cart, items: Mapping[Category, CartLineItem]) -> Cart:
    return price_cart(
        cart_id=cart.cart_id,
        session_id=cart.session_id,
        package_id=cart.package_id,
        currency=cart.currency,
        items=items,
        tax_rate=cart.tax_rate,
        fee_rate=cart.fee_rate,
    )


def remove_category(cart: Cart, category: Category) -> Cart:
    """Delete a category line.

    Raises:
        UnknownCategoryError: If the category is not in the cart
    """
    if category not in cart.items:
        raise UnknownCategoryError(category.value)
    items = {c: line for c, line in cart.items.items() if c != category}
    return _reprice(cart, items)


def update_quantity(cart: Cart, category: Category, quantity: int) -> Cart:
    """Set a line's quantity; zero or less removes the line.

    Raises:
        UnknownCategoryError: If the category is not in the cart
    """
    if category not in cart.items:
        raise UnknownCategoryError(category.value)
    if quantity <= 0:
        return remove_category(cart, category)

    items = dict(cart.items)
    items[category] = line_item(cart.items[category].option, quantity)
    return _reprice(cart, items)
