"""
FastAPI application entry point.

Sets up the application with:
- Lifespan management (startup/shutdown)
- Route registration
- Middleware configuration
- Error handling
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import set_odds_service
from api.routes import health_router, odds_router
from core.config import settings
from core.database import dispose_engines
from core.logging import configure_logging, get_logger
from manager.odds_service import OddsService


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Startup: configure logging, create the odds service.
    Shutdown: drop the service, close SQLite connections.
    """
    configure_logging()

    logger.info(
        "Starting blackjack odds service...",
        storage_backend=settings.storage_backend,
        stand_cache_path=settings.stand_cache_path,
    )

    set_odds_service(OddsService(settings))

    logger.info(
        "Blackjack odds service started",
        host=settings.server_host,
        port=settings.server_port,
        rules=settings.default_rules.model_dump(),
    )

    yield

    logger.info("Shutting down blackjack odds service...")
    set_odds_service(None)
    dispose_engines()
    logger.info("Blackjack odds service stopped")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title="Blackjack Odds",
        description=(
            "Exact expected returns of blackjack actions.\n\n"
            "Stand, hit and double are composition dependent; split is approximated."
        ),
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(odds_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
