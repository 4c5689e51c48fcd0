"""
Appliance efficiency table and daily consumption estimates.

The table maps an appliance key (as declared in a user profile) to the
estimated daily kWh at each BEE star rating. It is static reference data,
loaded once per process and passed around inside AppContext.

Estimation is a pure function — no I/O, no rounding. Presentation rounding
happens in the rule engine.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from powerpulse.schemas.insights import ApplianceEstimate, ApplianceEstimates
from powerpulse.schemas.profile import ApplianceRating

logger = logging.getLogger(__name__)

_DEFAULT_TABLE = Path(__file__).resolve().parent.parent / "data" / "appliance_profiles.json"


class ApplianceProfile(BaseModel):
    name: str
    category: str
    daily_kwh_by_star_rating: dict[int, float]


class ApplianceCatalog(BaseModel):
    """Appliance key → efficiency profile."""

    appliances: dict[str, ApplianceProfile]

    def daily_kwh(self, appliance_key: str, star_rating: int) -> float | None:
        """Daily kWh for an appliance at a rating, or None if unknown."""
        profile = self.appliances.get(appliance_key)
        if profile is None:
            return None
        return profile.daily_kwh_by_star_rating.get(star_rating)


class ApplianceCatalogError(RuntimeError):
    """Raised when the appliance table cannot be read or parsed."""


def load_appliance_catalog(path: str | Path | None = None) -> ApplianceCatalog:
    """
    Load the appliance table from JSON.

    Args:
        path: Table location. None or "" uses the packaged default.

    Raises:
        ApplianceCatalogError: If the file is missing or malformed.
    """
    table_path = Path(path) if path else _DEFAULT_TABLE
    try:
        catalog = ApplianceCatalog.model_validate_json(table_path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise ApplianceCatalogError(f"Could not load appliance table {table_path}") from exc

    logger.info("Loaded %d appliance profiles from %s", len(catalog.appliances), table_path)
    return catalog


def estimate_appliance_consumption(
    appliances: dict[str, ApplianceRating],
    catalog: ApplianceCatalog,
) -> ApplianceEstimates:
    """
    Estimate daily draw for each declared appliance.

    Appliances missing from the table, or declared with a rating the table
    has no figure for, are skipped.
    """
    estimates: dict[str, ApplianceEstimate] = {}
    total = 0.0

    for key, rating in appliances.items():
        profile = catalog.appliances.get(key)
        daily_kwh = catalog.daily_kwh(key, rating.star_rating)
        if profile is None or daily_kwh is None:
            continue

        estimates[key] = ApplianceEstimate(
            daily_kwh=daily_kwh,
            star_rating=rating.star_rating,
            full_name=profile.name,
            category=profile.category,
            five_star_daily_kwh=catalog.daily_kwh(key, 5),
        )
        total += daily_kwh

    return ApplianceEstimates(estimates=estimates, total_estimated=total)
