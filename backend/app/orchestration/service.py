"""Planner service - owns sessions and runs the planning pipeline.

Concurrency model (single event loop):
- Discovery marks the session running under the session lock, releases it
  for the provider fan-out, and stores the result under the lock again.
- Ranking never waits; it raises NotReadyError unless discovery completed.
- Cart build/modify and checkout are serialized per session by the lock.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from backend.app.adapters.vendors import PackageProvider, VendorProvider
from backend.app.config import Settings
from backend.app.db.repositories import BookingRepository
from backend.app.errors import (
    BookingNotFoundError,
    NotReadyError,
    PackageNotFoundError,
    SessionNotFoundError,
)
from backend.app.llm.client import RequirementsExtractor
from backend.app.models.booking import BookingRecord, ContactInfo, PaymentInfo
from backend.app.models.cart import Cart, CartAction
from backend.app.models.common import CATEGORY_ORDER, Category, DiscoveryState
from backend.app.models.options import DiscoveryResult
from backend.app.models.package import Package
from backend.app.models.trip import RequirementsDraft, TripRequirements
from backend.app.models.weights import Weights
from backend.app.orchestration import cart as cart_ops
from backend.app.orchestration.analyzer import analyze_requirements
from backend.app.orchestration.checkout import PaymentGateway, checkout_cart
from backend.app.orchestration.discovery import discover_options
from backend.app.orchestration.ranker import rank_packages
from backend.app.tools.executor import ProviderExecutor
from backend.app.utils.metrics import cart_mutations_total, checkouts_total, packages_ranked

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Mutable per-session state; only the planner service touches it."""

    session_id: str
    requirements: TripRequirements
    state: DiscoveryState = DiscoveryState.pending
    discovery: DiscoveryResult | None = None
    ranking: dict[str, Package] = field(default_factory=dict)
    cart: Cart | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


def new_session_id() -> str:
    return f"sess_{uuid.uuid4().hex}"


class TripPlannerService:
    """Session owner implementing analyze/discover/rank/cart/checkout."""

    def __init__(
        self,
        *,
        settings: Settings,
        providers: Mapping[Category, VendorProvider],
        executor: ProviderExecutor,
        extractor: RequirementsExtractor,
        repository: BookingRepository,
        gateway: PaymentGateway,
        package_provider: PackageProvider | None = None,
        rates: cart_ops.CartRates | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize service.

        Args:
            settings: Application settings (ranking and requirement defaults)
            providers: Vendor provider per category
            executor: Provider executor shared by all discoveries
            extractor: Free-text requirement extractor
            repository: Booking persistence port
            gateway: Payment boundary
            package_provider: Optional external ranking provider
            rates: Cart tax/fee rates (defaults to settings)
            today: Injectable clock for default trip dates
        """
        self._settings = settings
        self._providers = dict(providers)
        self._executor = executor
        self._extractor = extractor
        self._repository = repository
        self._gateway = gateway
        self._package_provider = package_provider
        self._rates = rates or cart_ops.CartRates(
            tax_rate=settings.cart_tax_rate, fee_rate=settings.cart_fee_rate
        )
        self._today = today
        self._sessions: dict[str, Session] = {}

    def _session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    async def analyze(
        self,
        *,
        user_input: str | None = None,
        overrides: RequirementsDraft | None = None,
        session_id: str | None = None,
    ) -> str:
        """Create a session from free text and/or structured fields.

        When ``session_id`` names an existing session, identical requirements
        return it unchanged; different requirements discard it and a new
        session is created.

        Raises:
            ValidationError: If requirements are incomplete or invalid
        """
        requirements = await analyze_requirements(
            user_input=user_input,
            overrides=overrides or RequirementsDraft(),
            extractor=self._extractor,
            today=self._today(),
            default_lead_days=self._settings.default_lead_days,
            default_trip_days=self._settings.default_trip_days,
            default_currency=self._settings.default_currency,
        )

        if session_id is not None and session_id in self._sessions:
            prior = self._sessions[session_id]
            if prior.requirements == requirements:
                return prior.session_id
            async with prior.lock:
                self._sessions.pop(session_id, None)
            logger.info(f"Requirements changed, discarded session {session_id}")

        session = Session(session_id=new_session_id(), requirements=requirements)
        self._sessions[session.session_id] = session
        logger.info(
            f"Session created: {session.session_id}",
            extra={"structured": requirements.model_dump(mode="json")},
        )
        return session.session_id

    async def discover(self, session_id: str) -> DiscoveryResult:
        """Run (or re-run) option discovery for a session.

        Re-running drops the previous ranking and any cart built from it.

        Raises:
            SessionNotFoundError: Unknown session
            NotReadyError: Discovery already running for the session
        """
        session = self._session(session_id)
        async with session.lock:
            if session.state == DiscoveryState.running:
                raise NotReadyError(f"Discovery already running for {session_id}")
            session.state = DiscoveryState.running
            session.discovery = None
            session.ranking = {}
            session.cart = None

        try:
            result = await discover_options(
                session_id,
                session.requirements,
                self._providers,
                self._executor,
                package_provider=self._package_provider,
            )
        except BaseException:
            async with session.lock:
                session.state = DiscoveryState.pending
            raise

        async with session.lock:
            session.discovery = result
            session.state = DiscoveryState.complete
        return result

    def rank(
        self,
        session_id: str,
        weights: Weights | None = None,
        *,
        limit: int | None = None,
    ) -> list[Package]:
        """Rank packages and replace the session's latest ranking.

        Raises:
            SessionNotFoundError: Unknown session
            NotReadyError: Discovery not complete
        """
        session = self._session(session_id)
        if session.state != DiscoveryState.complete or session.discovery is None:
            raise NotReadyError(f"Discovery has not completed for {session_id}")

        packages = rank_packages(
            session.discovery,
            weights or Weights(),
            top_n=self._settings.rank_top_n,
            limit=limit if limit is not None else self._settings.rank_max_packages,
        )
        session.ranking = {p.package_id: p for p in packages}
        packages_ranked.observe(len(packages))
        return packages

    async def build_cart(self, session_id: str, package_id: str) -> Cart:
        """Build (or rebuild) the session's cart from a ranked package.

        Raises:
            SessionNotFoundError: Unknown session
            NotReadyError: Discovery not complete
            PackageNotFoundError: Package not in the latest ranking
        """
        session = self._session(session_id)
        async with session.lock:
            if session.state != DiscoveryState.complete:
                raise NotReadyError(f"Discovery has not completed for {session_id}")
            package = session.ranking.get(package_id)
            if package is None:
                raise PackageNotFoundError(f"Package {package_id} not found")

            session.cart = cart_ops.build_cart(
                session_id, package, session.requirements, rates=self._rates
            )
            cart_mutations_total.labels(action="build").inc()
            return session.cart

    async def modify_cart(self, session_id: str, action: CartAction) -> Cart:
        """Apply an update/remove action to the session's cart.

        Raises:
            SessionNotFoundError: Unknown session
            NotReadyError: No active cart
            UnknownCategoryError: Category not in the cart
        """
        session = self._session(session_id)
        async with session.lock:
            if session.cart is None:
                raise NotReadyError(f"No cart built for {session_id}")

            if action.action == "remove":
                updated = cart_ops.remove_category(session.cart, action.category)
            else:
                updated = cart_ops.update_quantity(
                    session.cart, action.category, action.quantity or 0
                )

            session.cart = updated
            cart_mutations_total.labels(action=action.action).inc()
            return updated

    def get_cart(self, session_id: str) -> Cart:
        """Current cart for a session.

        Raises:
            NotReadyError: No cart built yet
        """
        session = self._session(session_id)
        if session.cart is None:
            raise NotReadyError(f"No cart built for {session_id}")
        return session.cart

    async def checkout(
        self, session_id: str, contact: ContactInfo, payment: PaymentInfo
    ) -> BookingRecord:
        """Check out the session's cart and discard the session.

        Raises:
            SessionNotFoundError: Unknown session
            EmptyCartError: No cart or an empty cart
        """
        session = self._session(session_id)
        async with session.lock:
            try:
                record = await checkout_cart(
                    session.cart,
                    contact=contact,
                    payment=payment,
                    gateway=self._gateway,
                    repository=self._repository,
                )
            except Exception:
                checkouts_total.labels(outcome="failed").inc()
                raise

            checkouts_total.labels(outcome="confirmed").inc()
            session.cart = None
            self._sessions.pop(session_id, None)
            return record

    async def get_booking(self, booking_id: str) -> BookingRecord:
        """Read a booking snapshot back.

        Raises:
            BookingNotFoundError: Unknown booking
        """
        record = await self._repository.get(booking_id)
        if record is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return record

    def get_status(self, session_id: str) -> dict[str, Any]:
        """Summarize where a session is in the pipeline."""
        session = self._session(session_id)

        if session.cart is not None:
            status = "cart_ready"
        elif session.ranking:
            status = "ranked"
        elif session.state == DiscoveryState.complete:
            status = "discovered"
        elif session.state == DiscoveryState.running:
            status = "discovering"
        else:
            status = "analyzed"

        discovery: dict[str, Any] | None = None
        if session.discovery is not None:
            discovery = {
                "counts": {
                    c.value: len(session.discovery.options_for(c)) for c in CATEGORY_ORDER
                },
                "failures": {c.value: r for c, r in session.discovery.failures.items()},
                "provider_packages": len(session.discovery.provider_packages),
                "discovered_at": session.discovery.discovered_at.isoformat(),
            }

        return {
            "session_id": session.session_id,
            "status": status,
            "requirements": session.requirements.model_dump(mode="json"),
            "discovery": discovery,
            "packages_ranked": len(session.ranking),
            "has_cart": session.cart is not None,
        }
