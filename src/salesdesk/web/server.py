from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from salesdesk.app import App
from salesdesk.config import Config
from salesdesk.errors import PersistenceError, UserError
from salesdesk.web.error_handlers import (
    general_exception_handler,
    persistence_error_handler,
    request_validation_error_handler,
    user_error_handler,
)
from salesdesk.web.openapi import set_custom_openapi
from salesdesk.web.routers import auth_router, health_router, profile_router, sessions_router, users_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="SalesDesk API",
        lifespan=lifespan,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(health_router, prefix="/api")
    app.include_router(auth_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")
    app.include_router(profile_router, prefix="/api")
    app.include_router(users_router, prefix="/api")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(PyMongoError, persistence_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
