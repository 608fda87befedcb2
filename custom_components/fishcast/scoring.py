"""FishCast scoring: eight factor sub-scores combined under fixed weights.

Every band function returns an integer in [0, 100] and substitutes the
neutral NEUTRAL_SCORE when its input is missing. The band functions are
public because the outlook reuses them on daily aggregates.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from .const import (
    CLOUD_CLEAR_SCORE,
    CLOUD_HEAVY_SCORE,
    CLOUD_OVERCAST,
    CLOUD_PARTLY,
    NEUTRAL_SCORE,
    PRECIP_BANDS,
    PRECIP_DOWNPOUR_SCORE,
    PRECIP_DRY_SCORE,
    PRESSURE_FALLING,
    PRESSURE_HIGH,
    PRESSURE_IDEAL,
    PRESSURE_LOW_SCORE,
    PRESSURE_VERY_HIGH_SCORE,
    SCORE_LABELS,
    SOLUNAR_MAJOR_SCORE,
    SOLUNAR_MINOR_SCORE,
    SOLUNAR_OUTSIDE_SCORE,
    TIDE_FALLING_SCORE,
    TIDE_MID_PROGRESS,
    TIDE_OTHER_SCORE,
    TIDE_RISING_SCORE,
    TIDE_SLACK_PROGRESS,
    TIDE_SLACK_SCORE,
    TIDE_STATE_FALLING,
    TIDE_STATE_RISING,
    TIME_OF_DAY_BANDS,
    TIME_OF_DAY_MIDDAY_SCORE,
    TIME_OF_DAY_NIGHT_SCORE,
    WEIGHTS,
    WIND_BANDS,
    WIND_STORM_SCORE,
)
from .data_schema import (
    Coordinate,
    FishCastResult,
    ScoreFactors,
    SolunarDay,
    SolunarPeriod,
    SolunarSummary,
    TideState,
    WeatherSnapshot,
    WeatherSummary,
)
from .errors import MissingDataError
from .solunar import SolunarPeriodEstimator
from .unit_helpers import (
    as_utc,
    clamp,
    clamp_coordinate,
    coerce_datetime,
    iso_z,
    round_half_up,
    to_float,
)

_LOGGER = logging.getLogger(__name__)


# ---- Factor bands ----

def score_pressure(pressure_hpa: Any) -> int:
    p = to_float(pressure_hpa)
    # zero is what a broken sensor reports; treat it like a missing value
    if not p:
        return NEUTRAL_SCORE
    if PRESSURE_IDEAL[0] <= p <= PRESSURE_IDEAL[1]:
        return PRESSURE_IDEAL[2]
    if PRESSURE_FALLING[0] <= p < PRESSURE_FALLING[1]:
        return PRESSURE_FALLING[2]
    if PRESSURE_HIGH[0] < p <= PRESSURE_HIGH[1]:
        return PRESSURE_HIGH[2]
    if p < PRESSURE_FALLING[0]:
        return PRESSURE_LOW_SCORE
    return PRESSURE_VERY_HIGH_SCORE


def score_moon(fishing_rating: Any) -> int:
    rating = to_float(fishing_rating)
    if rating is None:
        return NEUTRAL_SCORE
    return int(round_half_up(clamp(rating, 1, 5) * 20))


def _in_window(now: datetime, period: SolunarPeriod) -> bool:
    start = coerce_datetime(period.get("start"))
    end = coerce_datetime(period.get("end"))
    if start is None or end is None:
        return False
    return as_utc(start) <= as_utc(now) <= as_utc(end)


def score_solunar(now: Any, major: Iterable[SolunarPeriod], minor: Iterable[SolunarPeriod]) -> int:
    """Inside a major window (bounds inclusive) beats inside a minor one."""
    dt = coerce_datetime(now)
    if dt is None:
        return NEUTRAL_SCORE
    if any(_in_window(dt, p) for p in major or ()):
        return SOLUNAR_MAJOR_SCORE
    if any(_in_window(dt, p) for p in minor or ()):
        return SOLUNAR_MINOR_SCORE
    return SOLUNAR_OUTSIDE_SCORE


def score_wind(wind_speed: Any) -> int:
    w = to_float(wind_speed)
    if w is None:
        return NEUTRAL_SCORE
    w = max(0.0, w)
    for max_wind, score in WIND_BANDS:
        if w <= max_wind:
            return score
    return WIND_STORM_SCORE


def score_time_of_day(hour: Any) -> int:
    h = to_float(hour)
    if h is None:
        return NEUTRAL_SCORE
    h = clamp(h, 0, 23)
    for first, last, score in TIME_OF_DAY_BANDS:
        if first <= h <= last:
            return score
    if h >= 21 or h <= 4:
        return TIME_OF_DAY_NIGHT_SCORE
    return TIME_OF_DAY_MIDDAY_SCORE


def score_cloud_cover(cloud_cover: Any) -> int:
    c = to_float(cloud_cover)
    if c is None:
        return NEUTRAL_SCORE
    c = clamp(c, 0, 100)
    if CLOUD_OVERCAST[0] <= c <= CLOUD_OVERCAST[1]:
        return CLOUD_OVERCAST[2]
    if CLOUD_PARTLY[0] <= c < CLOUD_PARTLY[1]:
        return CLOUD_PARTLY[2]
    if c > CLOUD_OVERCAST[1]:
        return CLOUD_HEAVY_SCORE
    return CLOUD_CLEAR_SCORE


def score_precipitation(precipitation_mm: Any) -> int:
    mm = to_float(precipitation_mm)
    if not mm or mm <= 0:
        return PRECIP_DRY_SCORE
    for max_mm, score in PRECIP_BANDS:
        if mm <= max_mm:
            return score
    return PRECIP_DOWNPOUR_SCORE


def score_tide(tide: Optional[Mapping[str, Any]]) -> int:
    if not tide:
        return NEUTRAL_SCORE
    state = tide.get("state")
    if state not in (TIDE_STATE_RISING, TIDE_STATE_FALLING):
        return NEUTRAL_SCORE
    progress = to_float(tide.get("progress"))
    if progress is None:
        return TIDE_OTHER_SCORE
    progress = clamp(progress, 0, 100)
    mid = TIDE_MID_PROGRESS[0] <= progress <= TIDE_MID_PROGRESS[1]
    if state == TIDE_STATE_RISING and mid:
        return TIDE_RISING_SCORE
    if state == TIDE_STATE_FALLING and mid:
        return TIDE_FALLING_SCORE
    if progress < TIDE_SLACK_PROGRESS[0] or progress > TIDE_SLACK_PROGRESS[1]:
        return TIDE_SLACK_SCORE
    return TIDE_OTHER_SCORE


# ---- Aggregation ----

def aggregate(factors: Mapping[str, float], weights: Optional[Mapping[str, float]] = None) -> int:
    """Weighted sum of the factor sub-scores, clamped to [0, 100] and rounded."""
    weights = weights or WEIGHTS
    missing = [name for name in weights if name not in factors]
    if missing:
        raise MissingDataError(f"Missing factor scores: {', '.join(missing)}")
    total = sum(float(factors[name]) * float(w) for name, w in weights.items())
    return round_half_up(clamp(total, 0.0, 100.0))


def get_score_label(score: Any) -> str:
    s = to_float(score)
    if s is None:
        s = 0.0
    for minimum, label in SCORE_LABELS:
        if s >= minimum:
            return label
    return SCORE_LABELS[-1][1]


def degraded_result(message: str) -> FishCastResult:
    """Neutral result returned when scoring could not be completed."""
    return {
        "score": NEUTRAL_SCORE,
        "label": get_score_label(NEUTRAL_SCORE),
        "error": str(message),
        "calculated_at": iso_z(datetime.now(timezone.utc)),
    }


def _weather_summary(weather: Mapping[str, Any]) -> WeatherSummary:
    return {
        "temp": to_float(weather.get("temperature")),
        "wind": to_float(weather.get("wind_speed")),
        "pressure": to_float(weather.get("pressure_msl")),
        "cloud_cover": to_float(weather.get("cloud_cover")),
        "precipitation": to_float(weather.get("precipitation")),
        "description": weather.get("description"),
    }


def _solunar_summary(solunar: Mapping[str, Any]) -> SolunarSummary:
    moon = solunar.get("moon_phase") or {}
    return {
        "moon_phase": moon.get("name"),
        "illumination": moon.get("illumination"),
        "major_periods": list(solunar.get("major") or []),
        "minor_periods": list(solunar.get("minor") or []),
        "overall_rating": solunar.get("overall_rating"),
    }


class ScoringEngine:
    """Combines weather, tide and solunar inputs into a FishCastResult."""

    def __init__(self, solunar: Optional[SolunarPeriodEstimator] = None) -> None:
        self._solunar = solunar or SolunarPeriodEstimator()

    def factors(
        self,
        when: datetime,
        weather: Mapping[str, Any],
        tide: Optional[Mapping[str, Any]],
        solunar: Mapping[str, Any],
    ) -> ScoreFactors:
        moon = solunar.get("moon_phase") or {}
        return {
            "pressure": score_pressure(weather.get("pressure_msl")),
            "moonPhase": score_moon(moon.get("fishing_rating")),
            "solunarPeriod": score_solunar(when, solunar.get("major"), solunar.get("minor")),
            "wind": score_wind(weather.get("wind_speed")),
            "timeOfDay": score_time_of_day(when.hour),
            "cloudCover": score_cloud_cover(weather.get("cloud_cover")),
            "precipitation": score_precipitation(weather.get("precipitation")),
            "tideState": score_tide(tide),
        }

    def score(
        self,
        coordinate: Coordinate,
        date: Any,
        weather: Optional[WeatherSnapshot],
        tide: Optional[TideState] = None,
        solunar: Optional[SolunarDay] = None,
    ) -> FishCastResult:
        """Score one instant at one coordinate.

        `date` is read on its own wall clock for the time-of-day factor, so
        pass a local time. `solunar` may be supplied to bypass the estimator.
        """
        when = coerce_datetime(date)
        if when is None:
            raise MissingDataError(f"Invalid forecast time: {date!r}")
        lat, lon = clamp_coordinate(coordinate.get("latitude"), coordinate.get("longitude"))
        weather = weather or {}

        if solunar is None:
            solunar = self._solunar.get_solunar_periods(lat, lon, when)

        factors = self.factors(when, weather, tide, solunar)
        score = aggregate(factors)
        label = get_score_label(score)
        _LOGGER.debug("FishCast %.2f,%.2f at %s: %s (%s) factors=%s", lat, lon, when, score, label, factors)

        return {
            "score": score,
            "label": label,
            "factors": factors,
            "weather": _weather_summary(weather),
            "solunar": _solunar_summary(solunar),
            "tide": dict(tide) if tide else None,
            # keeps the caller's offset so the wall-clock hour survives
            "forecast_time": when.isoformat(),
            "calculated_at": iso_z(datetime.now(timezone.utc)),
        }
