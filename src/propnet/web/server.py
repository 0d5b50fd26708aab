from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from propnet.app import App
from propnet.config import Config
from propnet.errors import UserError
from propnet.web.error_handlers import (
    general_exception_handler,
    request_validation_error_handler,
    storage_error_handler,
    user_error_handler,
)
from propnet.web.openapi import set_custom_openapi
from propnet.web.routers import (
    admin_router,
    auth_router,
    consent_router,
    places_router,
    profile_router,
    properties_router,
    tasks_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="PropNet API",
        lifespan=lifespan,
        openapi_tags=[],
    )
    app.state.app = app_instance
    app.state.config = config

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(profile_router, prefix="/api")
    app.include_router(properties_router, prefix="/api")
    app.include_router(consent_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")
    app.include_router(places_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(PyMongoError, storage_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
