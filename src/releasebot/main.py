"""FastAPI application entry point."""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
import uvicorn
from fastapi import FastAPI

from releasebot.config import Settings, get_settings
from releasebot.github.client import GitHubClient
from releasebot.github.webhooks import router as webhook_router

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Sequence

logger = structlog.get_logger()

VERSION = "0.1.0"


def configure_logging(settings: Settings) -> None:
    """Set the stdlib and structlog log levels from settings."""
    logging.basicConfig(level=settings.log_level)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level),
    )
    if settings.release_bot_debug:
        logger.debug("releasebot.debug_enabled")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application startup and shutdown."""
    # Settings passed to create_app win; otherwise read the environment once
    settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings
    configure_logging(settings)

    if not settings.release_bot_webhook_secret:
        logger.warning("releasebot.webhook_secret_missing")
    if not settings.release_bot_github_token:
        logger.warning("releasebot.github_token_missing")

    app.state.github = GitHubClient(settings)
    logger.info("releasebot.starting", api_url=settings.release_bot_github_api_url)

    yield

    app.state.github.close()
    logger.info("releasebot.shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; settings and the GitHub client are fixed at startup."""
    app = FastAPI(
        title="release-bot",
        description="Keeps release labels and project boards in sync",
        version=VERSION,
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.include_router(webhook_router)

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()


def run(argv: Sequence[str] | None = None) -> None:
    """Console entry point: ``release-bot [--debug] [--port PORT]``."""
    parser = argparse.ArgumentParser(prog="release-bot", description="GitHub release tracking bot")
    parser.add_argument("--debug", action="store_true", help="Toggle debug mode")
    parser.add_argument("--port", type=int, default=None, help="Port to bind release-bot to")
    args = parser.parse_args(argv)

    # Flags win over the environment
    overrides: dict = {}
    if args.debug:
        overrides["release_bot_debug"] = True
    if args.port is not None:
        overrides["release_bot_port"] = args.port
    settings = Settings(**overrides)

    configure_logging(settings)
    logger.info("releasebot.listening", port=settings.release_bot_port)
    uvicorn.run(
        create_app(settings),
        host=settings.release_bot_host,
        port=settings.release_bot_port,
        log_level=logging.getLevelName(settings.log_level).lower(),
    )


if __name__ == "__main__":
    run()
