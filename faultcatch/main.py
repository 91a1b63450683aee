"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from faultcatch import __version__
from faultcatch.config import settings
from faultcatch.middleware.fault_capture import FaultCaptureMiddleware
from faultcatch.services.dispatcher import FaultDispatcher
from faultcatch.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)


def create_app(dispatcher: Optional[FaultDispatcher] = None) -> FastAPI:
    """
    Create the FastAPI application with fault capture wired in.

    The dispatcher's process-wide hooks are installed on startup and
    removed on shutdown.

    Args:
        dispatcher: Fault dispatcher to use; built from settings if None

    Returns:
        FastAPI application
    """
    dispatcher = dispatcher or FaultDispatcher(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting faultcatch API")
        if not dispatcher.installed:
            dispatcher.initialize()
        yield
        logger.info("Shutting down faultcatch API")
        dispatcher.uninstall()

    app = FastAPI(
        title="faultcatch",
        description="Process-wide fault capture for web applications",
        version=__version__,
        lifespan=lifespan
    )
    app.state.dispatcher = dispatcher

    app.add_middleware(FaultCaptureMiddleware, dispatcher=dispatcher)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {
            "status": "healthy",
            "version": __version__,
            "fault_hooks_installed": dispatcher.installed,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "faultcatch API",
            "version": __version__,
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
