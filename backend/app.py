import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from typing import Any

from litestar import Litestar, MediaType, Request, Response
from litestar.datastructures import State
from litestar.middleware import DefineMiddleware

import core.db as db
from core.config import AppConfig
from core.errors import (
    GENERIC_DATABASE_MESSAGE,
    GENERIC_ORIGIN_MESSAGE,
    DatabaseError,
    OriginRejected,
)
from core.logging import configure_logging
from core.middleware import OriginGuardMiddleware
from core.origins import OriginPolicy
from api.customers import CustomersController
from api.health import HealthController, PingController
from api.home import HomeController


logger = logging.getLogger(__name__)


def database_error_handler(request: Request, exc: DatabaseError) -> Response:
    logger.error("SQL Error on %s: %s", request.url.path, exc, exc_info=exc)
    return Response(
        content=GENERIC_DATABASE_MESSAGE,
        status_code=500,
        media_type=MediaType.TEXT,
    )


def origin_rejected_handler(request: Request, exc: OriginRejected) -> Response:
    return Response(
        content=GENERIC_ORIGIN_MESSAGE,
        status_code=exc.status_code,
        media_type=MediaType.TEXT,
    )


def create_app(config: AppConfig | None = None, pool: Any = None) -> Litestar:
    """Build the application.

    Args:
        config: Process configuration; loaded from the environment when None
        pool: Pre-built connection pool. When None the lifespan opens one
            (if a database host is configured) and closes it on shutdown.
    """
    if config is None:
        config = AppConfig.load()
        configure_logging(config.server.log_level)

    policy = OriginPolicy.from_config(config.cors)

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:
        owns_pool = app.state.get("pool") is None and config.database.configured
        if owns_pool:
            app.state.pool = await db.init_pool(config.database)
            logger.info(
                "Database pool opened: %s:%s/%s",
                config.database.host,
                config.database.port,
                config.database.name,
            )
        elif app.state.get("pool") is None:
            logger.warning("No database configured, /api/customers will return errors")

        if policy.allow_all:
            logger.warning("ALLOW_ALL_ORIGINS is set, origin checking is disabled")
        else:
            logger.info("Allowed origins: %s", ", ".join(policy.allowed_origins) or "<none>")

        try:
            yield
        finally:
            if owns_pool:
                await db.close_pool(app.state.pool)
                app.state.pool = None
                logger.info("Database pool closed")

    return Litestar(
        route_handlers=[
            HomeController,
            CustomersController,
            HealthController,
            PingController,
        ],
        middleware=[DefineMiddleware(OriginGuardMiddleware, policy=policy)],
        exception_handlers={
            DatabaseError: database_error_handler,
            OriginRejected: origin_rejected_handler,
        },
        state=State({"config": config, "pool": pool}),
        lifespan=[lifespan],
        # logging is configured by configure_logging, not by Litestar
        logging_config=None,
    )
