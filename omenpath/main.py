import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from omenpath.api import convert_router, health_router
from omenpath.config import settings
from omenpath.models.failure import ApiResponse, KnownError
from omenpath.services.converter import ConversionContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    context = await ConversionContext.create()
    app.state.context = context
    try:
        yield
    finally:
        await context.aclose()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("omenpath"),
    lifespan=lifespan,
)

app.include_router(convert_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", extra={"error_type": type(exc).__name__})
    return JSONResponse(
        status_code=500,
        content=ApiResponse.unknown_failure(exc).model_dump(mode="json"),
    )
