"""
Process-lifetime application context.

Built once in the FastAPI lifespan and handed to the pipeline explicitly,
so services never reach for module-level clients or the settings
singleton. Tests build their own context with fakes and a fixed clock.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from powerpulse.core.config import Settings
from powerpulse.services.appliances import ApplianceCatalog, load_appliance_catalog
from powerpulse.services.llm_client import HuggingFaceInsightGenerator
from powerpulse.services.weather import OpenWeatherClient


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared, read-only collaborators for request handling.

    Attributes:
        settings:   Validated configuration.
        catalog:    Appliance efficiency table.
        weather:    Weather lookup client.
        ai:         AI insight generator.
        started_at: When the process built this context.
        clock:      Returns the current UTC time; injectable for tests.
    """

    settings: Settings
    catalog: ApplianceCatalog
    weather: OpenWeatherClient
    ai: HuggingFaceInsightGenerator
    started_at: datetime.datetime = field(default_factory=utc_now)
    clock: Callable[[], datetime.datetime] = utc_now


def build_app_context(settings: Settings, http_client: httpx.AsyncClient) -> AppContext:
    """Wire the production collaborators around a shared HTTP client."""
    return AppContext(
        settings=settings,
        catalog=load_appliance_catalog(settings.APPLIANCE_PROFILES_PATH),
        weather=OpenWeatherClient(
            api_key=settings.OPENWEATHER_API_KEY,
            http_client=http_client,
            timeout=settings.WEATHER_TIMEOUT_SECONDS,
        ),
        ai=HuggingFaceInsightGenerator(
            api_key=settings.HUGGINGFACE_API_KEY,
            model=settings.AI_MODEL,
            http_client=http_client,
            timeout=settings.AI_TIMEOUT_SECONDS,
        ),
    )
