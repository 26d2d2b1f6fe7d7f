import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from license_verifier.domain.errors import CodeStoreMisconfigured
from license_verifier.infrastructure.db.pool import close_pool, get_pool
from license_verifier.infrastructure.http.client import (
    close_http_client,
    open_http_client,
)
from license_verifier.logging import setup_logging
from license_verifier.presentation.api import api
from license_verifier.presentation.errors import register_exception_handlers
from license_verifier.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings

    # startup
    await open_http_client()

    if settings.code_store == "postgres":
        try:
            pool = get_pool()
            if pool.closed:
                await pool.open()
        except CodeStoreMisconfigured:
            # requests will answer 500 until DATABASE_URL is provided
            logger.error("DATABASE_URL is not set; code store unavailable")
    elif not settings.code_store_url or not settings.code_store_key:
        logger.error("CODE_STORE_URL or CODE_STORE_KEY is not set")

    logger.info(
        "license verifier started",
        extra={
            "code_store": settings.code_store,
            "binding_policy": settings.binding_policy,
        },
    )

    try:
        yield
    finally:
        # shutdown
        await close_http_client()
        await close_pool()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="License Verifier", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    register_exception_handlers(app)
    app.include_router(api)
    return app


app = create_app()
