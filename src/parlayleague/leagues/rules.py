"""League scoring settings and their validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

LEAGUE_TYPES = ("classic", "points")

DEFAULT_SETTINGS: dict[str, Any] = {
    "leagueType": "classic",
    "startingBucs": 5000,
    "minTotalOdds": 500,
    "minLegOdds": -150,
    "numLegs": 3,
    "submissionDeadline": "Sunday 12:00 PM",
}

CLASSIC_FIELDS = ("startingBucs",)
POINTS_FIELDS = ("pointsPerWin", "bonusWeek", "bonusSeason")
COMMON_FIELDS = ("minTotalOdds", "minLegOdds", "numLegs", "submissionDeadline")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_settings(settings: Mapping[str, Any]) -> list[str]:
    """Return human-readable problems with ``settings``; empty means valid."""

    errors: list[str] = []
    league_type = settings.get("leagueType")
    if league_type not in LEAGUE_TYPES:
        errors.append("Invalid league type")

    if league_type == "classic" and not _is_number(settings.get("startingBucs")):
        errors.append("Classic leagues must include startingBucs (number)")
    if league_type == "points":
        for field in POINTS_FIELDS:
            if not _is_number(settings.get(field)):
                errors.append(f"Points leagues must include {field}")

    if not _is_number(settings.get("minTotalOdds")):
        errors.append("Missing or invalid minTotalOdds")
    if not _is_number(settings.get("minLegOdds")):
        errors.append("Missing or invalid minLegOdds")
    num_legs = settings.get("numLegs")
    if not _is_number(num_legs) or not float(num_legs).is_integer():
        errors.append("Missing or invalid numLegs")
    deadline = settings.get("submissionDeadline")
    if not isinstance(deadline, str) or not deadline.strip():
        errors.append("Missing or invalid submissionDeadline")
    return errors


def settings_for_type(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the fields that apply to the payload's league type."""

    league_type = payload.get("leagueType")
    keep = list(COMMON_FIELDS)
    if league_type == "classic":
        keep += CLASSIC_FIELDS
    elif league_type == "points":
        keep += POINTS_FIELDS
    settings = {"leagueType": league_type}
    settings.update({field: payload.get(field) for field in keep if payload.get(field) is not None})
    return settings
