from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.context import ServiceContext
from app.logging_config import configure_logging
from app.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from app.middleware.request_id import RequestIDMiddleware
from app.routers import users, streaks, gamification, stats, journal, public_profile
from app.utils.logger import get_logger

# Configure logging first
configure_logging()
logger = get_logger(__name__)


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Without ``context`` the lifespan builds one from settings (database,
    Firebase, LLM client) and closes it at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service_context = context or ServiceContext.create(settings)
        service_context.database.create_all()
        app.state.context = service_context
        if settings.DEBUG:
            logger.info("Streaker API started in DEBUG mode - Docs available at /docs")
        else:
            logger.info("Streaker API started in PRODUCTION mode - Docs disabled")
        try:
            yield
        finally:
            service_context.close()
            logger.info("Streaker API shut down")

    # Conditional docs configuration
    if settings.DEBUG:
        docs_config = {
            "docs_url": "/docs",
            "redoc_url": "/redoc",
            "openapi_url": "/openapi.json"
        }
    else:
        docs_config = {
            "docs_url": None,
            "redoc_url": None,
            "openapi_url": None
        }

    app = FastAPI(
        title="Streaker API",
        description="Streak tracking with an XP ledger, levels and badges",
        version="1.0.0",
        lifespan=lifespan,
        **docs_config
    )

    # Set up rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    logger.info(f"CORS_ORIGINS: {settings.CORS_ORIGINS}")

    # Add Request ID middleware first for proper request tracing
    app.add_middleware(RequestIDMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(users.router)
    app.include_router(streaks.router)
    app.include_router(gamification.router)
    app.include_router(stats.router)
    app.include_router(journal.router)
    app.include_router(public_profile.router)

    @app.get("/")
    async def root():
        return {"message": "Streaker API", "version": "1.0.0"}

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        response = {"status": "healthy", "service": "streaker-api"}
        service_context = getattr(app.state, "context", None)
        if service_context is not None:
            response["database_pool"] = service_context.database.get_pool_status()
        return response

    return app


app = create_app()
