"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity, build the AppContext (shared
    httpx client, appliance catalog, weather + AI adapters), purge
    expired store rows.
  • On shutdown: close the HTTP client, dispose the engine cleanly.

Routers:
  • /readings, /analysis — meter readings and statistics
  • /profile             — onboarding profile
  • /insights            — insight generation pipeline
  • /health              — shallow liveness probe
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI
from sqlalchemy import text

from powerpulse.core.config import settings
from powerpulse.core.context import build_app_context
from powerpulse.core.database import async_session_factory, engine
from powerpulse.routers.insights import router as insights_router
from powerpulse.routers.profile import router as profile_router
from powerpulse.routers.readings import router as readings_router
from powerpulse.services.housekeeping import purge_expired
from powerpulse.services.sql_store import SqlAlchemyInsightStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup — verify DB is reachable
    db_available = False
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
        db_available = True
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    # Startup — shared clients and reference data
    http_client = httpx.AsyncClient()
    try:
        app.state.context = build_app_context(settings, http_client)
    except Exception:
        await http_client.aclose()
        raise
    logger.info(
        "Context ready ✓ (AI %s, model=%s, weather %s)",
        "enabled" if settings.USE_AI else "disabled",
        settings.AI_MODEL,
        "configured" if settings.OPENWEATHER_API_KEY else "not configured",
    )

    # Startup — drop expired cache / history / idle rate-limit rows
    if db_available:
        try:
            async with async_session_factory() as session:
                await purge_expired(SqlAlchemyInsightStore(session), app.state.context.clock())
        except Exception:
            logger.exception("Startup housekeeping failed (non-fatal)")

    yield  # ← application runs here

    # Shutdown — clean up HTTP and DB connection pools
    await http_client.aclose()
    await engine.dispose()
    logger.info("HTTP client closed, database engine disposed ✓")


# ── App ─────────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        "Personal electricity usage tracker — readings, analysis, and "
        "rule-based + AI-enhanced energy insights."
    ),
    lifespan=lifespan,
)

# Mount routers
app.include_router(readings_router)
app.include_router(profile_router)
app.include_router(insights_router)


# ── Health check ────────────────────────────────────────────
@app.get(
    "/health",
    tags=["System"],
    summary="Liveness probe",
)
async def health_check() -> dict[str, str]:
    """Shallow health check — confirms the process is alive."""
    return {"status": "healthy"}
