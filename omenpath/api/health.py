"""
Health check endpoints.

Provides liveness and readiness probes with a Scryfall connectivity check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from omenpath.api.convert import get_context
from omenpath.services.converter import ConversionContext

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    scryfall: str | None = None
    sets: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    context: Annotated[ConversionContext, Depends(get_context)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns ready if Scryfall answers. Returns 503 otherwise.
    """
    if await context.client.is_available():
        return HealthResponse(status="ready", scryfall="connected", sets=len(context.catalog))
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", scryfall="unreachable", sets=len(context.catalog))
