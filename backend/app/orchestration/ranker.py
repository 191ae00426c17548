"""Package ranker - assemble, score and order candidate packages.

``rank_packages`` is pure: the same DiscoveryResult and Weights always give
the same list, and neither input is modified.

Ordering (first difference wins):
1. Provider score, descending; packages with one sort before those without
2. Computed score, descending (compared at 9 decimal places)
3. total_cost, toward cheaper when the dominant category's price_weight is
   above 50 and toward pricier below 50; ignored at exactly 50
4. Discovery enumeration order
"""

import hashlib
import itertools
import logging
from collections.abc import Mapping
from decimal import Decimal

from backend.app.models.common import CATEGORY_ORDER, Category
from backend.app.models.options import DiscoveryResult, OptionBase, ProviderPackage
from backend.app.models.package import Package
from backend.app.models.weights import DEFAULT_SUB_WEIGHT, Weights
from backend.app.orchestration.scoring import CategoryStats, category_score, observe, package_score

logger = logging.getLogger(__name__)

SCORE_PRECISION = 9


def package_digest(items: Mapping[Category, OptionBase]) -> str:
    """Deterministic package id from the included option ids."""
    parts = sorted(f"{category.value}:{option.option_id}" for category, option in items.items())
    return "pkg_" + hashlib.sha256("|".join(parts).encode()).hexdigest()[:16]


def dominant_category(discovery: DiscoveryResult, weights: Weights) -> Category | None:
    """Highest-importance category among those with discovered options.

    Ties resolve to the earlier category in canonical order.
    """
    best: Category | None = None
    for category in CATEGORY_ORDER:
        if not discovery.options_for(category):
            continue
        if best is None or weights.importance(category) > weights.importance(best):
            best = category
    return best


def _top_options(
    category: Category,
    options: list[OptionBase],
    stats: CategoryStats,
    weights: Weights,
    headcount: int,
    top_n: int,
) -> list[OptionBase]:
    """Best options for a category.

    Equal computed scores fall back to the vendor's own option score (options
    without one last), then discovery order.
    """
    scored = [
        (
            -round(category_score(category, option, stats, weights, headcount), SCORE_PRECISION),
            0 if option.provider_score is not None else 1,
            -(option.provider_score or 0.0),
            i,
        )
        for i, option in enumerate(options)
    ]
    scored.sort()
    return [options[key[-1]] for key in scored[:top_n]]


def _resolve_provider_package(
    provider_package: ProviderPackage, discovery: DiscoveryResult
) -> dict[Category, OptionBase] | None:
    items: dict[Category, OptionBase] = {}
    for category in CATEGORY_ORDER:
        option_id = provider_package.items.get(category)
        if option_id is None:
            continue
        option = discovery.find_option(category, option_id)
        if option is None:
            return None
        items[category] = option
    return items or None


def _candidates(
    discovery: DiscoveryResult,
    weights: Weights,
    stats: Mapping[Category, CategoryStats],
    top_n: int,
) -> list[tuple[dict[Category, OptionBase], float | None]]:
    """Candidate item sets in discovery enumeration order."""
    if discovery.provider_packages:
        candidates = []
        for provider_package in discovery.provider_packages:
            items = _resolve_provider_package(provider_package, discovery)
            if items is None:
                logger.warning(
                    f"Dropping provider package {provider_package.package_id}: "
                    "references options that were not discovered"
                )
                continue
            candidates.append((items, provider_package.score))
        if candidates:
            return candidates
        logger.warning(
            f"No provider package for {discovery.session_id} resolved, "
            "ranking discovered options instead"
        )

    present = [c for c in CATEGORY_ORDER if discovery.options_for(c)]
    per_category = [
        _top_options(
            c, discovery.options_for(c), stats[c], weights, discovery.headcount, top_n
        )
        for c in present
    ]
    return [
        (dict(zip(present, combo)), None) for combo in itertools.product(*per_category)
    ]


def _explain(items: Mapping[Category, OptionBase], category_scores: Mapping[Category, float]) -> str:
    parts = []
    for category in CATEGORY_ORDER:
        if category in items:
            option = items[category]
            label = option.name or option.vendor
            parts.append(f"{category.value}: {label} ({category_scores[category]:.2f})")
    return "; ".join(parts)


def rank_packages(
    discovery: DiscoveryResult,
    weights: Weights,
    *,
    top_n: int = 3,
    limit: int | None = None,
) -> list[Package]:
    """Rank candidate packages for a discovery result.

    Args:
        discovery: Completed discovery result
        weights: Category importance and criterion sub-weights
        top_n: Options kept per category before the cartesian product
        limit: Optional maximum number of packages returned

    Returns:
        Packages with ranks 1..n in order; empty if every category is empty
    """
    if discovery.is_empty:
        return []

    stats = {c: observe(discovery.options_for(c)) for c in CATEGORY_ORDER}

    dominant = dominant_category(discovery, weights)
    price_weight = weights.price_weight(dominant) if dominant else DEFAULT_SUB_WEIGHT

    scored: list[tuple[tuple, dict]] = []
    seen: set[str] = set()
    for index, (items, provider_score) in enumerate(_candidates(discovery, weights, stats, top_n)):
        package_id = package_digest(items)
        if package_id in seen:
            continue
        seen.add(package_id)

        score, category_scores = package_score(items, stats, weights, discovery.headcount)
        total_cost = sum((o.unit_price for o in items.values()), Decimal("0"))

        if price_weight > DEFAULT_SUB_WEIGHT:
            cost_key = total_cost
        elif price_weight < DEFAULT_SUB_WEIGHT:
            cost_key = -total_cost
        else:
            cost_key = Decimal("0")

        sort_key = (
            0 if provider_score is not None else 1,
            -(provider_score or 0.0),
            -round(score, SCORE_PRECISION),
            cost_key,
            index,
        )
        scored.append(
            (
                sort_key,
                {
                    "package_id": package_id,
                    "items": {c: items[c] for c in CATEGORY_ORDER if c in items},
                    "total_cost": total_cost,
                    "score": score,
                    "provider_score": provider_score,
                    "category_scores": category_scores,
                    "explanation": _explain(items, category_scores),
                },
            )
        )

    scored.sort(key=lambda pair: pair[0])
    if limit is not None:
        scored = scored[:limit]

    return [Package(rank=rank, **fields) for rank, (_, fields) in enumerate(scored, start=1)]
