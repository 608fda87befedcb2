"""Species-specific re-weighting of a base FishCast result.

Each profile lists modifiers that turn one condition into a multiplier
(1.0 = neutral). The adjuster folds every modifier whose input is available
into a single multiplier, applies the water temperature bonus/penalty and
clamps the product back into [0, 100].

Species lookup is an explicit enum; free-text names are resolved with
`resolve_species` (exact match, then substring overlap in either direction
in table order).
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .const import (
    TIDE_MID_PROGRESS,
    TIDE_STATE_FALLING,
    TIDE_STATE_RISING,
)
from .data_schema import FishCastResult, SpeciesProfile
from .scoring import get_score_label
from .unit_helpers import clamp, coerce_datetime, round_half_up, to_float

_LOGGER = logging.getLogger(__name__)

WATER_TEMP_BONUS = 1.1
WATER_TEMP_PENALTY = 0.9
WATER_TEMP_TOLERANCE = 5.0


class Species(str, Enum):
    LARGEMOUTH_BASS = "largemouth bass"
    SMALLMOUTH_BASS = "smallmouth bass"
    TROUT = "trout"
    RAINBOW_TROUT = "rainbow trout"
    SALMON = "salmon"
    PIKE = "pike"
    WALLEYE = "walleye"
    CATFISH = "catfish"
    REDFISH = "redfish"
    TARPON = "tarpon"
    SNOOK = "snook"
    TUNA = "tuna"
    MAHI_MAHI = "mahi mahi"


def _between(value: float, low: float, high: float) -> bool:
    return low <= value <= high


def _in_hours(hour: float, *ranges: Tuple[int, int]) -> bool:
    return any(low <= hour <= high for low, high in ranges)


def _tide_state(tide: Any) -> Optional[str]:
    if isinstance(tide, Mapping):
        return tide.get("state")
    return None


def _tide_progress(tide: Any) -> Optional[float]:
    if isinstance(tide, Mapping):
        return to_float(tide.get("progress"))
    return None


SPECIES_PROFILES: Dict[Species, SpeciesProfile] = {
    # warm water, low pressure, overcast
    Species.LARGEMOUTH_BASS: {
        "display_name": "Largemouth Bass",
        "pressure": lambda p: 1.2 if p < 1010 else 0.8 if p > 1020 else 1.0,
        "wind": lambda w: 1.1 if w <= 10 else 0.7 if w > 25 else 1.0,
        "timeOfDay": lambda h: 1.2 if _in_hours(h, (5, 9), (17, 21)) else 0.9,
        "cloudCover": lambda c: 1.15 if c >= 60 else 0.8 if c < 20 else 1.0,
        "ideal_water_temp": (18.0, 27.0),
    },
    Species.SMALLMOUTH_BASS: {
        "display_name": "Smallmouth Bass",
        "pressure": lambda p: 1.15 if p < 1010 else 1.0,
        "wind": lambda w: 1.1 if _between(w, 5, 15) else 1.0,
        "timeOfDay": lambda h: 1.15 if _in_hours(h, (5, 10), (16, 20)) else 0.9,
        "ideal_water_temp": (15.0, 22.0),
    },
    Species.TROUT: {
        "display_name": "Trout",
        "pressure": lambda p: 1.1 if _between(p, 1010, 1020) else 1.0,
        "wind": lambda w: 1.15 if w <= 8 else 0.7 if w > 20 else 1.0,
        "timeOfDay": lambda h: 1.2 if _in_hours(h, (5, 9), (16, 19)) else 0.85,
        "cloudCover": lambda c: 1.15 if c >= 50 else 1.0,
        "ideal_water_temp": (7.0, 16.0),
    },
    Species.RAINBOW_TROUT: {
        "display_name": "Rainbow Trout",
        "pressure": lambda p: 1.1 if _between(p, 1010, 1020) else 1.0,
        "wind": lambda w: 1.15 if w <= 8 else 1.0,
        "timeOfDay": lambda h: 1.2 if _in_hours(h, (5, 9)) else 0.9,
        "ideal_water_temp": (7.0, 16.0),
    },
    Species.SALMON: {
        "display_name": "Salmon",
        "pressure": lambda p: 1.15 if _between(p, 1005, 1015) else 1.0,
        "tideState": lambda t: (
            1.2 if _tide_state(t) == TIDE_STATE_RISING
            else 0.9 if _tide_state(t) == TIDE_STATE_FALLING
            else 1.0
        ),
        "timeOfDay": lambda h: 1.15 if _in_hours(h, (4, 8), (16, 20)) else 0.85,
        "ideal_water_temp": (8.0, 15.0),
    },
    Species.PIKE: {
        "display_name": "Pike",
        "pressure": lambda p: 1.2 if p < 1010 else 1.0,
        "wind": lambda w: 1.1 if _between(w, 5, 18) else 1.0,
        "cloudCover": lambda c: 1.15 if c >= 60 else 0.75 if c < 20 else 1.0,
        "timeOfDay": lambda h: 1.15 if _in_hours(h, (6, 10), (15, 19)) else 0.9,
        "ideal_water_temp": (10.0, 21.0),
    },
    Species.WALLEYE: {
        "display_name": "Walleye",
        "timeOfDay": lambda h: 1.25 if _in_hours(h, (17, 23), (0, 6)) else 0.85,
        "cloudCover": lambda c: 1.2 if c >= 70 else 0.7 if c < 30 else 1.0,
        "wind": lambda w: 1.15 if _between(w, 5, 15) else 1.0,
        "ideal_water_temp": (10.0, 18.0),
    },
    # nocturnal, likes light rain
    Species.CATFISH: {
        "display_name": "Catfish",
        "timeOfDay": lambda h: 1.3 if h >= 19 or h <= 5 else 0.8,
        "pressure": lambda p: 1.15 if p < 1010 else 1.0,
        "precipitation": lambda r: 1.2 if 0 < r <= 5 else 1.0,
        "ideal_water_temp": (21.0, 29.0),
    },
    Species.REDFISH: {
        "display_name": "Redfish",
        "tideState": lambda t: (
            1.2 if _tide_state(t) == TIDE_STATE_FALLING
            else 1.1 if _tide_state(t) == TIDE_STATE_RISING
            else 0.9
        ),
        "timeOfDay": lambda h: 1.15 if _in_hours(h, (5, 9), (16, 20)) else 0.9,
        "cloudCover": lambda c: 1.1 if c >= 40 else 1.0,
        "ideal_water_temp": (18.0, 28.0),
    },
    Species.TARPON: {
        "display_name": "Tarpon",
        "tideState": lambda t: 1.25 if _tide_state(t) == TIDE_STATE_RISING else 0.9,
        "timeOfDay": lambda h: 1.2 if _in_hours(h, (5, 9)) else 0.9,
        "pressure": lambda p: 1.1 if _between(p, 1010, 1020) else 1.0,
        "ideal_water_temp": (24.0, 32.0),
    },
    Species.SNOOK: {
        "display_name": "Snook",
        "tideState": lambda t: (
            1.2
            if _tide_progress(t) is not None and _between(_tide_progress(t), *TIDE_MID_PROGRESS)
            else 0.9
        ),
        "timeOfDay": lambda h: 1.2 if _in_hours(h, (17, 22), (4, 7)) else 0.85,
        "ideal_water_temp": (22.0, 30.0),
    },
    Species.TUNA: {
        "display_name": "Tuna",
        "tideState": lambda t: 1.15 if _tide_state(t) == TIDE_STATE_RISING else 1.0,
        "wind": lambda w: 1.1 if _between(w, 5, 20) else 0.6 if w > 30 else 1.0,
        "timeOfDay": lambda h: 1.15 if _in_hours(h, (5, 10)) else 0.9,
        "ideal_water_temp": (18.0, 28.0),
    },
    # prefers clear skies
    Species.MAHI_MAHI: {
        "display_name": "Mahi-Mahi",
        "cloudCover": lambda c: 1.15 if c < 40 else 1.0,
        "wind": lambda w: 1.1 if _between(w, 8, 20) else 1.0,
        "ideal_water_temp": (21.0, 30.0),
    },
}


def normalize_species_name(name: Any) -> str:
    if isinstance(name, Enum):
        name = name.value
    return " ".join(str(name or "").lower().replace("_", " ").replace("-", " ").split())


def resolve_species(name: Any, profiles: Optional[Mapping[str, SpeciesProfile]] = None) -> Optional[str]:
    """Map a free-text species name to a profile key, or None when unknown."""
    profiles = SPECIES_PROFILES if profiles is None else profiles
    key = normalize_species_name(name)
    if not key:
        return None
    for candidate in profiles:
        if normalize_species_name(candidate) == key:
            return candidate
    for candidate in profiles:
        normalized = normalize_species_name(candidate)
        if normalized in key or key in normalized:
            return candidate
    return None


def available_species() -> List[Dict[str, str]]:
    """Species keys and display names, in table order."""
    return [
        {"key": species.value, "name": profile.get("display_name", species.value.title())}
        for species, profile in SPECIES_PROFILES.items()
    ]


def _result_hour(result: Mapping[str, Any]) -> Optional[int]:
    """Wall-clock hour of the scored instant, in the offset it was scored with."""
    dt = coerce_datetime(result.get("forecast_time")) or coerce_datetime(result.get("calculated_at"))
    return dt.hour if dt is not None else None


class SpeciesAdjuster:
    """Applies species preferences to a base result without mutating it."""

    def __init__(self, profiles: Optional[Mapping[str, SpeciesProfile]] = None) -> None:
        self._profiles = SPECIES_PROFILES if profiles is None else profiles

    def _apply(self, profile: SpeciesProfile, base: Mapping[str, Any], water_temp: Optional[float]) -> Tuple[float, List[str]]:
        multiplier = 1.0
        insights: List[str] = []
        weather = base.get("weather") or {}
        factors = base.get("factors") or {}

        pressure = to_float(weather.get("pressure"))
        if "pressure" in profile and pressure:
            m = profile["pressure"](pressure)
            multiplier *= m
            if m > 1.05:
                insights.append("Pressure favors this species")
            elif m < 1.0:
                insights.append("Pressure is unfavorable for this species")

        wind = to_float(weather.get("wind"))
        if "wind" in profile and wind is not None:
            m = profile["wind"](wind)
            multiplier *= m
            if m < 1.0:
                insights.append("Wind is unfavorable for this species")

        hour = _result_hour(base)
        if "timeOfDay" in profile and hour is not None:
            m = profile["timeOfDay"](hour)
            multiplier *= m
            if m > 1.1:
                insights.append("Prime time for this species")

        cloud_factor = to_float(factors.get("cloudCover"))
        if "cloudCover" in profile and cloud_factor is not None:
            # only the sub-score survives in the result; map it back to a rough cover
            m = profile["cloudCover"](65 if cloud_factor > 70 else 30)
            multiplier *= m

        tide = base.get("tide")
        if "tideState" in profile and tide:
            m = profile["tideState"](tide)
            multiplier *= m
            if m > 1.1:
                insights.append("Tide is ideal for this species")
            elif m < 1.0:
                insights.append("Tide is unfavorable for this species")

        precip_factor = to_float(factors.get("precipitation"))
        if "precipitation" in profile and precip_factor is not None:
            m = profile["precipitation"](2 if precip_factor > 70 else 0)
            multiplier *= m

        temp = to_float(water_temp)
        ideal = profile.get("ideal_water_temp")
        if ideal and temp is not None:
            low, high = ideal
            if low <= temp <= high:
                multiplier *= WATER_TEMP_BONUS
                insights.append(f"Water temp {temp:g}°C is in the ideal range")
            elif temp < low - WATER_TEMP_TOLERANCE or temp > high + WATER_TEMP_TOLERANCE:
                multiplier *= WATER_TEMP_PENALTY
                insights.append(f"Water temp {temp:g}°C is outside preferred range")

        return multiplier, insights

    def adjust(self, base: FishCastResult, species: Any, water_temp: Optional[float] = None) -> FishCastResult:
        """Return a species-adjusted copy of `base`.

        Unknown or empty species, and degraded base results, are returned
        unchanged.
        """
        if not base or base.get("error") or to_float(base.get("score")) is None:
            return base
        key = resolve_species(species, self._profiles)
        if key is None:
            _LOGGER.debug("No species profile for %r; leaving score unchanged", species)
            return base

        multiplier, insights = self._apply(self._profiles[key], base, water_temp)
        original = base["score"]
        score = round_half_up(clamp(float(original) * multiplier, 0.0, 100.0))
        _LOGGER.debug("Species %s: multiplier=%.3f score %s -> %s", key, multiplier, original, score)

        adjusted = dict(base)
        adjusted.update(
            {
                "score": score,
                "label": get_score_label(score),
                "species_adjusted": True,
                "species_name": normalize_species_name(species) if isinstance(species, Enum) else str(species),
                "species_insights": insights,
                "original_score": original,
            }
        )
        return adjusted
