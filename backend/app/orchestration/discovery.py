"""Option discovery - parallel fan-out to vendor providers.

One task per registered category provider runs concurrently; the result is
only assembled after every task finished, so callers never see a partial
DiscoveryResult. A provider that times out, errors or sits behind an open
circuit breaker degrades its category to an empty list with the reason
recorded under ``failures``.
"""

import asyncio
import logging
from collections.abc import Mapping

from pydantic import ValidationError as PydanticValidationError

from backend.app.adapters.normalize import normalize_options
from backend.app.adapters.vendors import PackageProvider, VendorProvider
from backend.app.errors import ProviderError
from backend.app.models.common import CATEGORY_ORDER, Category
from backend.app.models.options import DiscoveryResult, OptionBase, ProviderPackage
from backend.app.models.trip import TripRequirements
from backend.app.tools.executor import ProviderCallContext, ProviderExecutor
from backend.app.utils.metrics import discoveries_degraded_total

logger = logging.getLogger(__name__)


async def _discover_category(
    provider: VendorProvider,
    requirements: TripRequirements,
    session_id: str,
    executor: ProviderExecutor,
) -> list[OptionBase]:
    ctx = ProviderCallContext(
        session_id=session_id,
        category=provider.category.value,
        provider=provider.name,
    )
    raw = await executor.execute(ctx, lambda: provider.fetch(requirements, session_id))
    return normalize_options(provider.category, raw, currency=requirements.currency)


async def _fetch_provider_packages(
    package_provider: PackageProvider,
    requirements: TripRequirements,
    session_id: str,
    executor: ProviderExecutor,
) -> list[ProviderPackage]:
    """Fetch pre-scored packages; any failure falls back to computed ranking."""
    ctx = ProviderCallContext(
        session_id=session_id,
        category="packages",
        provider=package_provider.name,
    )
    try:
        raw = await executor.execute(
            ctx, lambda: package_provider.fetch_packages(requirements, session_id)
        )
    except ProviderError as e:
        logger.warning(f"Package provider unavailable, ranking locally: {e.reason}")
        return []

    packages = []
    for item in raw:
        try:
            packages.append(ProviderPackage.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(f"Dropping malformed provider package: {e.error_count()} error(s)")
    return packages


async def discover_options(
    session_id: str,
    requirements: TripRequirements,
    providers: Mapping[Category, VendorProvider],
    executor: ProviderExecutor,
    package_provider: PackageProvider | None = None,
) -> DiscoveryResult:
    """Query every registered provider in parallel and fan in.

    Args:
        session_id: Owning session
        requirements: Trip requirements forwarded to providers
        providers: Provider per category (unregistered categories stay empty)
        executor: Provider executor (timeout, retry, circuit breaker)
        package_provider: Optional external ranking provider for pre-scored packages

    Returns:
        DiscoveryResult with every category key present
    """
    categories = [c for c in CATEGORY_ORDER if c in providers]
    results = await asyncio.gather(
        *(
            _discover_category(providers[c], requirements, session_id, executor)
            for c in categories
        ),
        return_exceptions=True,
    )

    options: dict[Category, list[OptionBase]] = {c: [] for c in CATEGORY_ORDER}
    failures: dict[Category, str] = {}
    for category, result in zip(categories, results):
        if isinstance(result, ProviderError):
            failures[category] = result.reason
        elif isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            failures[category] = f"{type(result).__name__}: {result}"
        else:
            options[category] = result
            continue

        discoveries_degraded_total.labels(category=category.value).inc()
        logger.warning(
            f"Discovery degraded {category.value} to empty",
            extra={"structured": {"session_id": session_id, "reason": failures[category]}},
        )

    provider_packages: list[ProviderPackage] = []
    if package_provider is not None:
        provider_packages = await _fetch_provider_packages(
            package_provider, requirements, session_id, executor
        )

    logger.info(
        "Discovery complete",
        extra={
            "structured": {
                "session_id": session_id,
                "counts": {c.value: len(o) for c, o in options.items()},
                "failed": sorted(c.value for c in failures),
            }
        },
    )

    return DiscoveryResult(
        session_id=session_id,
        headcount=requirements.headcount,
        options=options,
        failures=failures,
        provider_packages=provider_packages,
    )
