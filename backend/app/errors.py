"""Domain error types for the planning pipeline."""


class PlannerError(Exception):
    """Base class for all planning pipeline errors."""

    pass


class ValidationError(PlannerError):
    """Trip requirements failed validation."""

    pass


class NotReadyError(PlannerError):
    """Ranking or cart work requested before discovery completed."""

    pass


class UnknownCategoryError(PlannerError):
    """Cart mutation targeted a category that is not in the cart."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Category '{category}' is not in the cart")
        self.category = category


class ProviderError(PlannerError):
    """A single vendor provider call failed.

    Raised by the provider executor and caught inside discovery, where the
    category is degraded to empty.
    """

    def __init__(self, category: str, reason: str) -> None:
        super().__init__(f"Provider for {category} failed: {reason}")
        self.category = category
        self.reason = reason


class EmptyCartError(PlannerError):
    """Checkout attempted without any cart line items."""

    pass


class SessionNotFoundError(PlannerError):
    """Unknown or discarded session id."""

    pass


class PackageNotFoundError(PlannerError):
    """Package id is not part of the session's latest ranking."""

    pass


class BookingNotFoundError(PlannerError):
    """Unknown booking id."""

    pass
