import logging
from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import providers
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware

from eduwallet import containers
from eduwallet.config import Settings
from eduwallet.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from eduwallet.core.exceptions import BaseAPIException
from eduwallet.core.logging_middleware import LoggingMiddleware
from eduwallet.logging_config import setup_logging
from eduwallet.routers import health_router, session_router, wallet_router

load_dotenv("eduwallet/.env")
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    container = containers.Container()
    if settings is not None:
        container.config.config.override(providers.Object(settings))
    settings = container.config.config()

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.WALLET_PURGE_LEGACY_ON_STARTUP:
            repository = container.repositories.wallet_repository()
            removed = repository.purge_legacy(settings.LEGACY_WALLET_KEY_PREFIX)
            logger.info(f"Legacy wallet cleanup removed {removed} snapshot(s)")
        yield
        storage = container.repositories.storage()
        if hasattr(storage, "close"):
            storage.close()

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.container = container  # type: ignore

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router)
    app.include_router(session_router.router, prefix=settings.API_V1_STR)
    app.include_router(wallet_router.router, prefix=settings.API_V1_STR)

    @app.get("/")
    def hello() -> dict:
        return {"message": settings.APP_NAME}

    return app


app = create_app()

handler = Mangum(app)
