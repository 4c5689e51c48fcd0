"""Settings defaults."""

from powerpulse.core.config import Settings

REQUEST_BUDGET_SECONDS = 29


def test_outbound_timeouts_fit_request_budget():
    settings = Settings(_env_file=None)

    assert settings.WEATHER_TIMEOUT_SECONDS + settings.AI_TIMEOUT_SECONDS < REQUEST_BUDGET_SECONDS
