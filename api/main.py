"""
FastAPI Main Application
========================

Application factory: middleware, routes and lifespan management.

Run with:
    uvicorn api.main:create_app --factory

``create_app`` builds every component from the given Settings and puts it
on ``app.state``:
- password_hasher, token_authority
- credential_store, task_store
- redis_client (None with the in-memory backend)
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware.error_handler import create_error_handler_middleware
from api.middleware.rate_limiter import setup_rate_limiting
from api.routes import auth, health, tasks
from config import Settings, configure_logging, get_settings
from core.credential_store import create_credential_store
from core.redis_client import create_redis_client
from core.security import PasswordHasher, TokenAuthority
from core.task_store import create_task_store

# Set up module logger
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for startup and shutdown.

    Components are already built by create_app; shutdown closes the
    Redis connection pool if there is one.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting TaskTrack API ({settings.storage_backend} storage)")

    yield  # Application runs here

    redis_client = app.state.redis_client
    if redis_client is not None:
        await redis_client.aclose()
    logger.info("TaskTrack API stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a configured FastAPI application.

    Args:
        settings: Application settings. Loaded from the environment if None.

    Returns:
        FastAPI: The application, ready to serve
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="TaskTrack API",
        description="""
        Personal task tracking.

        ## Authentication
        Register, then log in to obtain a bearer token. Every /tasks
        endpoint requires `Authorization: Bearer <token>` and only ever
        sees the caller's own tasks.
        """,
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )

    # =========================================================================
    # Components
    # =========================================================================

    redis_client = None
    if settings.storage_backend == "redis":
        redis_client = create_redis_client(settings)

    password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    app.state.settings = settings
    app.state.redis_client = redis_client
    app.state.password_hasher = password_hasher
    app.state.token_authority = TokenAuthority.from_settings(settings)
    app.state.credential_store = create_credential_store(
        password_hasher,
        client=redis_client,
        key_prefix=settings.redis_key_prefix
    )
    app.state.task_store = create_task_store(
        client=redis_client,
        key_prefix=settings.redis_key_prefix
    )

    # =========================================================================
    # Middleware Setup (order matters - last added = outermost)
    # =========================================================================

    # Global error handling middleware
    app.middleware("http")(create_error_handler_middleware(settings))

    # CORS middleware - allow cross-origin requests from the web client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting setup
    setup_rate_limiting(app)

    # =========================================================================
    # Router Registration
    # =========================================================================

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, tags=["auth"])
    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

    @app.get("/", tags=["root"])
    async def root():
        """API information and links."""
        return {
            "message": "TaskTrack API",
            "version": API_VERSION,
            "docs": "/api/docs",
            "health": "/health"
        }

    return app
