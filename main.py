import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rate_rules.config import get_settings
from rate_rules.infrastructure.database import engine, initialize_database
from rate_rules.interfaces.api.routes import register_routes


def configure_logging() -> None:
    """Configure the root logger from ``LOG_LEVEL``."""

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the rule tables on startup and release the pool on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the rate rules admin API."""

    configure_logging()
    app = FastAPI(title="Rate rules admin", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
