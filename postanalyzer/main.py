"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from postanalyzer.api.v1.router import api_router
from postanalyzer.config import settings
from postanalyzer.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging(logging.DEBUG if settings.debug else logging.INFO)

    logger.info(
        "Starting PostAnalyzer",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "wordpress_url": settings.wordpress_url,
            "wordpress_authenticated": bool(
                settings.wordpress_username and settings.wordpress_app_password
            ),
        },
    )

    yield

    logger.info("Shutting down PostAnalyzer")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "QA/SEO report for WordPress posts: metadata completeness, SEO field "
            "checks, image inventory and slug suggestions"
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
