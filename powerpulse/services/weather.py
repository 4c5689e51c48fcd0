"""
OpenWeather current-conditions lookup.

Weather is an optional enrichment: every failure mode (no key configured,
network error, non-200, malformed body) collapses to None and is logged
at WARNING. Callers never see an exception.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from powerpulse.schemas.insights import WeatherSnapshot

logger = logging.getLogger(__name__)

_OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class OpenWeatherClient:
    """
    Thin async wrapper around the OpenWeather /weather endpoint.

    The httpx.AsyncClient is owned by the application lifespan and shared
    with the AI generator.
    """

    def __init__(self, api_key: str, http_client: httpx.AsyncClient, timeout: float = 5.0) -> None:
        self._api_key = api_key
        self._http = http_client
        self._timeout = timeout

    async def fetch(self, location: str) -> WeatherSnapshot | None:
        """Current conditions for a free-text location, in metric units."""
        if not self._api_key:
            logger.warning("OpenWeather API key not configured, skipping weather")
            return None

        params = {"q": location, "appid": self._api_key, "units": "metric"}
        try:
            response = await self._http.get(_OPENWEATHER_URL, params=params, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.warning("Weather lookup for %r failed: %s", location, exc)
            return None

        if response.status_code != 200:
            logger.warning(
                "OpenWeather error: status=%d body=%s",
                response.status_code,
                response.text[:200],
            )
            return None

        # ── Parse ───────────────────────────────────────────
        try:
            data = response.json()
            main = data["main"]
            conditions = data.get("weather") or [{}]
            return WeatherSnapshot(
                temperature=main["temp"],
                feels_like=main.get("feels_like"),
                humidity=main.get("humidity"),
                description=conditions[0].get("description", ""),
                location=data.get("name") or location,
            )
        except (ValueError, KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
            logger.warning("Could not parse OpenWeather response: %s", exc)
            return None
