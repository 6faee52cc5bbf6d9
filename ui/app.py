"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config import load_config
from core.health import HealthChecker, check_event_loop, check_machine_tag, create_codec_check
from core.stats import IssueStats
from identifier.codec import Codec
from internal.logging import get_logger, parse_level, StructuredLogger
from utils.crash import create_async_handler
from ui.routes import api, health, ids


def create_app(config=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    StructuredLogger.configure(min_level=parse_level(config.logging.level))
    logger_instance = get_logger()

    codec = Codec.from_config(config.codec)
    stats = IssueStats()
    health_checker = HealthChecker()
    health_checker.register("event_loop", check_event_loop, critical=True)
    health_checker.register("codec", create_codec_check(codec), critical=True)
    health_checker.register("machine_tag", check_machine_tag, critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger_instance.info("Application starting", version="1.0.0", layout=codec.layout.name)
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))

        logger_instance.info("Application started successfully")

        yield

        # Shutdown
        logger_instance.info("Application shutdown complete", ids=stats.get_stats())

    app = FastAPI(
        title="Sortable IDs",
        version="1.0.0",
        description="time-ordered unique identifier service",
        lifespan=lifespan,
    )

    # Initialize route modules with dependencies
    ids.init(codec, stats)
    api.init(codec, stats)
    health.init(codec, health_checker)

    # Include routers
    app.include_router(ids.router)
    app.include_router(api.router)
    app.include_router(health.router)

    return app
