from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, get_settings
from app.core.constants import PUBLIC_PATH_PREFIXES, PUBLIC_ROUTES
from app.core.database import Database
from app.core.logger import setup_logging
from app.core.security import TokenIssuer
from app.middleware.cors import configure_cors
from app.middleware.logging import RequestLoggerMiddleware
from app.middleware.auth import JWTMiddleware
from app.middleware.error_handler import register_exception_handlers
from app.services.storage_service import ImageStorage

# Routers
from app.routers import auth as auth_router
from app.routers import health as health_router


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    storage: Optional[ImageStorage] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    This is the composition root: configuration is read once here and every
    collaborator is built from it and kept on ``app.state``.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    description = (
        "Pizza ordering API.\n\n"
        "This service provides registration, login, token refresh and profile endpoints."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Register, login, refresh, logout and profile."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title="Pizza Backend API",
        version="1.0.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    app.state.settings = settings
    app.state.database = database or Database(settings)
    app.state.token_issuer = TokenIssuer(settings)
    app.state.storage = storage or ImageStorage(settings)

    # Middleware (last added runs first)
    app.add_middleware(
        JWTMiddleware,
        public_routes=PUBLIC_ROUTES,
        public_prefixes=PUBLIC_PATH_PREFIXES,
    )
    app.add_middleware(RequestLoggerMiddleware)
    configure_cors(app, settings)

    # Exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)

    if settings.STORAGE_BACKEND == "local":
        upload_dir = Path(settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/static", StaticFiles(directory=upload_dir), name="static")

    return app
