"""Acts FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.acts import router as acts_router
from src.api.errors import register_error_handlers
from src.models import Base
from src.services import engine
from src.services.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.api_title,
        description="Acts of completed works for snow removal and disposal",
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.include_router(acts_router)
    register_error_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


__all__ = ["app", "create_app"]
