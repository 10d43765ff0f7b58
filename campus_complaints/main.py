from __future__ import annotations

from typing import Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from campus_complaints.api.v1.router import router as api_v1_router
from campus_complaints.core.config import settings
from campus_complaints.core.exceptions import BaseAppException
from campus_complaints.core.logging import get_logger, setup_logging
from campus_complaints.core.middleware import register_middlewares
from campus_complaints.core.security import TokenManager
from campus_complaints.db.session import create_engine, create_session_factory, init_db
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.repositories.memory_gateway import InMemoryGateway
from campus_complaints.repositories.seed import seed_demo_users
from campus_complaints.repositories.sql_gateway import SqlAlchemyGateway
from campus_complaints.services.access_policy import AccessPolicy
from campus_complaints.services.lifecycle import ComplaintLifecycleService

logger = get_logger(__name__)


def build_gateway() -> Tuple[PersistenceGateway, Optional[AsyncEngine]]:
    """Gateway selected by ``STORAGE_BACKEND``, plus its engine for SQL storage."""
    if settings.STORAGE_BACKEND == "sql":
        engine = create_engine()
        return SqlAlchemyGateway(create_session_factory(engine)), engine
    return InMemoryGateway(), None


def create_app(gateway: Optional[PersistenceGateway] = None) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and the application error handler.
    - Includes the versioned API router under /api/v1.

    Passing a gateway skips schema creation and demo seeding; the caller owns
    its storage.
    """
    setup_logging()

    app = FastAPI(
        title=settings.api.API_TITLE,
        description=settings.api.API_DESCRIPTION,
        debug=settings.DEBUG,
        version=settings.api.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register shared core middlewares (request ID, timing, etc.)
    register_middlewares(app)

    owns_storage = gateway is None
    engine: Optional[AsyncEngine] = None
    if gateway is None:
        gateway, engine = build_gateway()
    policy = AccessPolicy()
    app.state.gateway = gateway
    app.state.policy = policy
    app.state.lifecycle = ComplaintLifecycleService(gateway, policy=policy)
    app.state.tokens = TokenManager()

    @app.exception_handler(BaseAppException)
    async def handle_app_exception(request: Request, exc: BaseAppException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Mount API v1 under /api/v1
    app.include_router(api_v1_router, prefix=settings.api.API_V1_PREFIX)

    @app.on_event("startup")
    async def on_startup() -> None:
        if not owns_storage:
            return
        if engine is not None and not settings.is_production:
            # For dev/demo only; production schemas are managed outside the app
            await init_db(engine)
        if settings.SEED_DEMO_USERS:
            await seed_demo_users(gateway)
        logger.info(f"Storage ready ({settings.STORAGE_BACKEND})")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if engine is not None:
            await engine.dispose()

    return app


app = create_app()
