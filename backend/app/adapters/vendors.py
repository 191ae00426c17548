"""Vendor option providers.

A provider returns raw offerings for one category; normalization into typed
options happens in ``backend.app.adapters.normalize``.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import httpx

from backend.app.models.common import Category
from backend.app.models.trip import TripRequirements

# Category -> (search path, result key) on the vendor integration API
VENDOR_ENDPOINTS: dict[Category, tuple[str, str]] = {
    Category.flights: ("/api/v1/crew/flights/search", "flights"),
    Category.hotels: ("/api/v1/crew/hotels/search", "hotels"),
    Category.meeting_rooms: ("/api/v1/crew/venues/search", "venues"),
    Category.catering: ("/api/v1/crew/catering/search", "catering"),
    Category.transport: ("/api/v1/crew/transport/search", "transport"),
}


class VendorProvider(Protocol):
    """Protocol for per-category vendor providers."""

    name: str
    category: Category

    async def fetch(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        """Fetch raw offerings for the trip.

        Args:
            requirements: Normalized trip requirements
            session_id: Owning session (forwarded for vendor-side tracing)

        Returns:
            Raw vendor records in vendor order
        """
        ...


def search_payload(requirements: TripRequirements, session_id: str) -> dict[str, Any]:
    """Build the JSON body sent to every vendor search endpoint."""
    return {
        "session_id": session_id,
        "destination": requirements.destination,
        "start_date": requirements.start_date.isoformat(),
        "end_date": requirements.end_date.isoformat(),
        "headcount": requirements.headcount,
        "budget": str(requirements.budget),
        "currency": requirements.currency,
    }


class HttpVendorProvider:
    """Provider backed by an external vendor integration over HTTP."""

    def __init__(
        self,
        category: Category,
        base_url: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 4.0,
    ) -> None:
        """Initialize provider.

        Args:
            category: Category served by this provider
            base_url: Integration base URL (no trailing path)
            api_key: Optional bearer token
            client: Optional httpx client (for testing with mocks)
            timeout_s: Client timeout when no client is supplied
        """
        self.category = category
        self.name = f"http.{category.value}"
        self.path, self.result_key = VENDOR_ENDPOINTS[category]
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = client
        self._timeout_s = timeout_s

    async def fetch(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        """POST the search and return the raw records under the result key.

        Raises:
            httpx.HTTPError: On network or HTTP errors
            ValueError: If the response body is not the expected shape
        """
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        try:
            response = await client.post(
                f"{self._base_url}{self.path}",
                json=search_payload(requirements, session_id),
                headers=headers,
            )
            response.raise_for_status()
            data = response.json()
        finally:
            if close_client:
                await client.aclose()

        # Integrations answer either {"<key>": [...]} or a bare list
        records = data.get(self.result_key, []) if isinstance(data, Mapping) else data
        if not isinstance(records, list):
            raise ValueError(f"{self.name}: expected a list under '{self.result_key}'")
        return [dict(r) for r in records if isinstance(r, Mapping)]


class StaticVendorProvider:
    """Provider returning a fixed list of raw offerings."""

    def __init__(
        self,
        category: Category,
        records: Sequence[Mapping[str, Any]],
        name: str | None = None,
    ) -> None:
        self.category = category
        self.name = name or f"static.{category.value}"
        self._records = [dict(r) for r in records]

    async def fetch(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records]


class PackageProvider(Protocol):
    """Protocol for external ranking providers returning pre-scored packages."""

    name: str

    async def fetch_packages(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        """Return raw packages: ``{"package_id", "items": {category: option_id}, "score"}``."""
        ...


class StaticPackageProvider:
    """Package provider returning a fixed list of raw packages."""

    def __init__(self, packages: Sequence[Mapping[str, Any]], name: str = "static.packages") -> None:
        self.name = name
        self._packages = [dict(p) for p in packages]

    async def fetch_packages(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        return [dict(p) for p in self._packages]
