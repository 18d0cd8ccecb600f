"""Main FastAPI application entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.dependencies.services import get_auth_service
from api.exception_handlers import setup_exception_handlers
from api.graphql import create_graphql_router
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.rest import router as rest_router
from api.routes.health import router as health_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import dispose_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()

REVOKED_TOKEN_PURGE_INTERVAL = 6 * 60 * 60


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Purge stale token revocations in the background; release the pool on exit."""

    async def revoked_token_purge_loop() -> None:
        while True:
            await asyncio.sleep(REVOKED_TOKEN_PURGE_INTERVAL)
            try:
                await get_auth_service().purge_revoked_tokens()
            except Exception:
                logger.exception("revoked_token_purge_failed")

    purge_task = asyncio.create_task(revoked_token_purge_loop())
    logger.info("app_started", environment=settings.app_env)
    yield
    purge_task.cancel()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Accounts and Viewing Profiles\n\n"
            "Reelhouse handles sign-up, sign-in and the per-account list of "
            "viewing profiles used by the browsing front end.\n\n"
            "### Authentication\n"
            "Signup and login return a bearer token. Send it on every other "
            "call in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### GraphQL\n"
            "The same account and profile operations are available on `/graphql`.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PATCH/DELETE: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Signup, login, logout and current user",
            },
            {
                "name": "profiles",
                "description": "Viewing profile management",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(rest_router, prefix="/api")
    app.include_router(create_graphql_router(), prefix="/graphql", tags=["graphql"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
