"""
FastAPI dependencies shared by the routers.

  • get_app_context   — the AppContext built in the lifespan
  • get_insight_store — a request-scoped SqlAlchemyInsightStore

Tests swap either one out through app.dependency_overrides.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from powerpulse.core.context import AppContext
from powerpulse.core.database import get_db_session
from powerpulse.services.sql_store import SqlAlchemyInsightStore
from powerpulse.services.store import InsightStore


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_insight_store(
    session: AsyncSession = Depends(get_db_session),
) -> InsightStore:
    return SqlAlchemyInsightStore(session)


# Type aliases for cleaner signatures
Context = Annotated[AppContext, Depends(get_app_context)]
Store = Annotated[InsightStore, Depends(get_insight_store)]
