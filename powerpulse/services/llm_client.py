"""
Hugging Face client for AI-generated usage insights.

Uses the Hugging Face router's OpenAI-compatible /chat/completions API via
httpx. The model only narrates — every figure it is shown (readings,
appliance estimates, weather) was computed or fetched beforehand.

Configuration:
  HUGGINGFACE_API_KEY — server-side only (never exposed to clients)
  AI_MODEL            — defaults to google/gemma-2-9b-it
  AI_TIMEOUT_SECONDS  — hard cap, kept below the request budget

Safety:
  • Bounded max_tokens (800)
  • Output is plain numbered text, parsed defensively
  • Never raises — any failure is logged and returned as None
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence

import httpx

from powerpulse.schemas.insights import ApplianceEstimates, InsightRecord, WeatherSnapshot
from powerpulse.schemas.profile import UserProfileOut
from powerpulse.schemas.readings import ReadingOut

logger = logging.getLogger(__name__)

_HF_CHAT_URL = "https://router.huggingface.co/v1/chat/completions"

MAX_AI_INSIGHTS = 5
MIN_MESSAGE_LENGTH = 20
PROMPT_READINGS = 7

# ── Line clean-up ───────────────────────────────────────────
_NUMBERING = re.compile(r"^\d+\.\s*")
_LEADING_BOLD = re.compile(r"^\*\*")
_TRAILING_BOLD = re.compile(r"\*\*$")
_INSIGHT_PREFIX = re.compile(r"^Insight \d+:\s*", re.IGNORECASE)


def build_prompt(
    readings: Sequence[ReadingOut],
    profile: UserProfileOut,
    estimates: ApplianceEstimates,
    weather: WeatherSnapshot | None,
) -> str:
    """Render the facts the model is allowed to use."""
    appliances = ", ".join(
        f"{key} ({rating.star_rating}★)" for key, rating in profile.appliances.items()
    )
    consumption = "\n".join(
        f"{e.full_name}: {e.daily_kwh} kWh/day" for e in estimates.estimates.values()
    )
    recent = sorted(readings, key=lambda r: r.date)[-PROMPT_READINGS:]
    usage = "\n".join(f"{r.date}: {r.usage} kWh" for r in recent)
    weather_line = (
        f"WEATHER: {weather.temperature}°C, {weather.description}, {weather.humidity}% humidity"
        if weather is not None
        else ""
    )

    return f"""\
You are an energy efficiency expert. Analyze this electricity usage data and provide 3-5 specific, actionable insights.

USER PROFILE:
Location: {profile.location}
Home: {profile.home_type}
Appliances: {appliances}

APPLIANCE CONSUMPTION:
{consumption}

RECENT USAGE:
{usage}

{weather_line}

Provide 3-5 numbered insights focusing on:
- Cost savings (estimate ₹ saved at ₹6/kWh)
- Appliance efficiency tips
- Weather-based recommendations
- Behavioral changes

Keep each insight under 100 words. Be specific with numbers. Format as numbered list."""


def parse_ai_insights(text: str) -> list[InsightRecord] | None:
    """
    Turn a numbered-list completion into InsightRecords.

    Lines shorter than MIN_MESSAGE_LENGTH after clean-up are dropped
    (headings, blank bullets). Titles are numbered after filtering.
    Returns None when nothing usable remains.
    """
    messages: list[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        message = line.strip()
        message = _NUMBERING.sub("", message)
        message = _LEADING_BOLD.sub("", message)
        message = _TRAILING_BOLD.sub("", message)
        message = _INSIGHT_PREFIX.sub("", message).strip()
        if len(message) > MIN_MESSAGE_LENGTH:
            messages.append(message)

    messages = messages[:MAX_AI_INSIGHTS]
    if not messages:
        return None

    return [
        InsightRecord(type="ai", icon="🤖", title=f"AI Insight {i}", message=m)
        for i, m in enumerate(messages, start=1)
    ]


class HuggingFaceInsightGenerator:
    """AI insight generator backed by the Hugging Face router."""

    def __init__(
        self,
        api_key: str,
        model: str,
        http_client: httpx.AsyncClient,
        timeout: float = 23.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._http = http_client
        self._timeout = timeout

    async def generate_insights(
        self,
        readings: Sequence[ReadingOut],
        profile: UserProfileOut,
        estimates: ApplianceEstimates,
        weather: WeatherSnapshot | None,
    ) -> list[InsightRecord] | None:
        """
        Ask the model for 3-5 insights.

        Returns:
            1-5 records of type "ai", or None on any failure.
        """
        if not self._api_key:
            logger.warning("Hugging Face API key not configured, skipping AI insights")
            return None

        try:
            # wait_for bounds the whole exchange, not just each socket read
            return await asyncio.wait_for(
                self._request(readings, profile, estimates, weather),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("AI insight generation timed out after %.1fs", self._timeout)
        except httpx.HTTPError as exc:
            logger.warning("Hugging Face request failed: %s", exc)
        except Exception:
            logger.exception("AI insight generation failed (non-fatal)")
        return None

    async def _request(
        self,
        readings: Sequence[ReadingOut],
        profile: UserProfileOut,
        estimates: ApplianceEstimates,
        weather: WeatherSnapshot | None,
    ) -> list[InsightRecord] | None:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "user", "content": build_prompt(readings, profile, estimates, weather)},
            ],
            "max_tokens": 800,
            "temperature": 0.7,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        response = await self._http.post(
            _HF_CHAT_URL,
            json=payload,
            headers=headers,
            timeout=self._timeout,
        )

        if response.status_code != 200:
            logger.warning(
                "Hugging Face API error: status=%d model=%s body=%s",
                response.status_code,
                self._model,
                response.text[:500],
            )
            return None

        # ── Extract completion text ─────────────────────────
        try:
            content = response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Could not parse Hugging Face response: %s", exc)
            return None

        if not content.strip():
            logger.warning("Empty response from Hugging Face API")
            return None

        insights = parse_ai_insights(content)
        logger.info("Generated %d AI insights", len(insights) if insights else 0)
        return insights
