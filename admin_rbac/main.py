"""
FastAPI application factory.

Assembles the app, registers all routers and the RBAC error mapping,
and wires up lifecycle events.  The database engine is built here and
injected through `app.state` — request handlers reach it via `get_db`.
Database schema is managed by Alembic — NOT create_all.
"""

import logging

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from admin_rbac.controllers.permission_controller import router as permission_router
from admin_rbac.controllers.profile_controller import router as profile_router
from admin_rbac.controllers.role_controller import router as role_router
from admin_rbac.controllers.user_controller import router as user_router
from admin_rbac.core.config import settings
from admin_rbac.core.database import build_engine, build_session_factory
from admin_rbac.models import Base  # noqa: F401  registers every table on Base.metadata
from admin_rbac.rbac.guard import register_exception_handlers

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    seed_on_startup: bool = True,
) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = None
    if session_factory is None:
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        session_factory = build_session_factory(engine)
    app.state.session_factory = session_factory

    # ── Error mapping ────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(permission_router)
    app.include_router(role_router)
    app.include_router(user_router)
    app.include_router(profile_router)

    # ── Startup / Shutdown ───────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        """Seed the permission catalog & default roles on startup.

        NOTE: Database schema is managed by Alembic migrations.
        Run `alembic upgrade head` before starting the app.
        """
        if not seed_on_startup:
            return
        from admin_rbac.rbac.permission_seed import seed

        async with app.state.session_factory() as session:
            await seed(session)
        logger.info("Permission seed complete.")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if engine is not None:
            await engine.dispose()
            logger.info("Database engine disposed.")

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
