"""Planning endpoints - analyze requirements, discover options, rank packages."""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from backend.app.api.deps import get_planner_service, to_http_exception
from backend.app.errors import PlannerError
from backend.app.models.options import DiscoveryResult
from backend.app.models.package import Package
from backend.app.models.trip import RequirementsDraft
from backend.app.models.weights import Weights
from backend.app.orchestration.service import TripPlannerService

router = APIRouter(prefix="/api/v1", tags=["planner"])

Service = Annotated[TripPlannerService, Depends(get_planner_service)]


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze-requirements."""

    user_input: str | None = Field(None, description="Free-text trip description")
    destination: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    headcount: int | None = None
    budget: Decimal | None = None
    currency: str | None = None
    session_id: str | None = Field(None, description="Prior session to re-analyze")


class AnalyzeResponse(BaseModel):
    """Response for POST /analyze-requirements."""

    session_id: str
    requirements: dict[str, Any]


class RankRequest(BaseModel):
    """Request body for POST /rank-packages."""

    weights: Weights | None = None
    limit: int | None = Field(None, gt=0)


class RankResponse(BaseModel):
    """Response for POST /rank-packages."""

    session_id: str
    packages: list[Package]


@router.post("/analyze-requirements", response_model=AnalyzeResponse)
async def analyze_requirements(request: AnalyzeRequest, service: Service) -> AnalyzeResponse:
    """Create a session from free text and/or structured requirement fields."""
    overrides = RequirementsDraft(
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        headcount=request.headcount,
        budget=request.budget,
        currency=request.currency,
    )
    try:
        session_id = await service.analyze(
            user_input=request.user_input,
            overrides=overrides,
            session_id=request.session_id,
        )
    except PlannerError as e:
        raise to_http_exception(e) from e

    status_body = service.get_status(session_id)
    return AnalyzeResponse(session_id=session_id, requirements=status_body["requirements"])


@router.post("/discover-options", response_model=DiscoveryResult)
async def discover(
    session_id: Annotated[str, Query(min_length=1)], service: Service
) -> DiscoveryResult:
    """Fan out to vendor providers for the session's trip."""
    try:
        return await service.discover(session_id)
    except PlannerError as e:
        raise to_http_exception(e) from e


@router.post("/rank-packages", response_model=RankResponse)
async def rank(
    session_id: Annotated[str, Query(min_length=1)],
    service: Service,
    request: RankRequest | None = None,
) -> RankResponse:
    """Rank packages for the session using the supplied (or default) weights."""
    request = request or RankRequest()
    try:
        packages = service.rank(session_id, request.weights, limit=request.limit)
    except PlannerError as e:
        raise to_http_exception(e) from e
    return RankResponse(session_id=session_id, packages=packages)


@router.get("/session/{session_id}/status")
async def session_status(session_id: str, service: Service) -> dict[str, Any]:
    """Where the session is in the planning pipeline."""
    try:
        return service.get_status(session_id)
    except PlannerError as e:
        raise to_http_exception(e) from e
