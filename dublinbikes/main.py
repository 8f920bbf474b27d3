"""FastAPI application setup for the Dublin Bikes station service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .config import settings
from .factory import build_services
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build services on startup, run the feed while serving, stop it on shutdown."""
    setup_logging(level=settings.log_level, service_name="dublinbikes")
    services = build_services(settings)
    app.state.services = services
    if services.feed is not None:
        services.feed.start()
    try:
        yield
    finally:
        services.shutdown()
        logger.info("Station services shut down")


app = FastAPI(title="Dublin Bikes API", lifespan=lifespan)

app.include_router(api_router)
