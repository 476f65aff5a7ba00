"""
ColorMatch service entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from colormatch import __version__
from colormatch.api import v1
from colormatch.schemas import HealthResponse
from colormatch.utils.logging import get_logger

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let in-flight analyses finish before the worker threads go away
    v1.orchestrator.shutdown()
    logger.info("ColorMatch service stopped", extra={'version': __version__})


app = FastAPI(
    title="ColorMatch Analysis Service",
    description="Outfit color classification and harmony matching",
    version=__version__,
    lifespan=lifespan
)

app.include_router(v1.router)


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Service health check."""
    return HealthResponse(ok=True, version=__version__)


logger.info("ColorMatch service initialized", extra={'version': __version__})
