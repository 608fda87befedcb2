"""Multi-day outlook projected from a daily forecast series.

Daily aggregates cannot resolve solunar windows, the hour of day or the
tide, so those factors use fixed mid-range values; weather factors reuse the
point-score bands on daily figures.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .astronomy import AstronomyCalculator
from .const import (
    DAY_NAMES,
    NEUTRAL_SCORE,
    OUTLOOK_DEFAULT_CLOUD,
    OUTLOOK_DEFAULT_PRESSURE,
    OUTLOOK_DEFAULT_WIND,
    OUTLOOK_SOLUNAR_SCORE,
    OUTLOOK_TIDE_SCORE,
    OUTLOOK_TIME_OF_DAY_SCORE,
)
from .data_schema import Coordinate, DailyForecast, DailyOutlookEntry
from .errors import MissingDataError
from .scoring import (
    aggregate,
    get_score_label,
    score_cloud_cover,
    score_moon,
    score_precipitation,
    score_pressure,
    score_wind,
)
from .unit_helpers import round_half_up, to_float

_LOGGER = logging.getLogger(__name__)

# (highest WMO code, icon)
_WEATHER_ICONS = (
    (0, "☀️"),
    (3, "⛅"),
    (48, "🌫️"),
    (55, "🌦️"),
    (65, "🌧️"),
    (77, "🌨️"),
    (82, "🌧️"),
)
_STORM_ICON = "⛈️"


def weather_icon(code: Any) -> str:
    c = to_float(code)
    if c is None:
        c = 0
    for max_code, icon in _WEATHER_ICONS:
        if c <= max_code:
            return icon
    return _STORM_ICON


def day_name(day: date) -> str:
    """Short weekday name, Sunday first."""
    return DAY_NAMES[(day.weekday() + 1) % 7]


def _parse_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise MissingDataError(f"Invalid forecast date: {value!r}") from exc


def _or_default(value: Any, default: float) -> float:
    # zero counts as missing for these daily aggregates
    f = to_float(value)
    return f if f else default


class OutlookProjector:
    """Reduced scoring for each day of a daily forecast."""

    def __init__(self, astronomy: Optional[AstronomyCalculator] = None) -> None:
        self._astronomy = astronomy or AstronomyCalculator()

    def _moon_score(self, day: date) -> int:
        try:
            return score_moon(self._astronomy.moon_phase(day)["fishing_rating"])
        except Exception:
            _LOGGER.exception("Moon phase failed for %s; using neutral moon score", day)
            return NEUTRAL_SCORE

    def _factors(self, forecast: Mapping[str, Any], moon_score: int) -> Dict[str, int]:
        pressure = (
            _or_default(forecast.get("pressure_msl_max"), OUTLOOK_DEFAULT_PRESSURE)
            + _or_default(forecast.get("pressure_msl_min"), OUTLOOK_DEFAULT_PRESSURE)
        ) / 2.0
        wind = _or_default(forecast.get("wind_speed_max"), OUTLOOK_DEFAULT_WIND)
        cloud = _or_default(forecast.get("cloud_cover_mean"), OUTLOOK_DEFAULT_CLOUD)
        precip = to_float(forecast.get("precipitation_sum")) or 0.0

        return {
            "pressure": score_pressure(pressure),
            "moonPhase": moon_score,
            "solunarPeriod": OUTLOOK_SOLUNAR_SCORE,
            "wind": score_wind(wind),
            "timeOfDay": OUTLOOK_TIME_OF_DAY_SCORE,
            "cloudCover": score_cloud_cover(cloud),
            "precipitation": score_precipitation(precip),
            "tideState": OUTLOOK_TIDE_SCORE,
        }

    def project_day(self, forecast: Mapping[str, Any]) -> DailyOutlookEntry:
        day = _parse_day(forecast.get("date"))
        score = aggregate(self._factors(forecast, self._moon_score(day)))
        code = to_float(forecast.get("weather_code"))
        code = int(code) if code is not None else 0
        high = to_float(forecast.get("temperature_max"))
        low = to_float(forecast.get("temperature_min"))

        return {
            "date": day.isoformat(),
            "day_name": day_name(day),
            "score": score,
            "label": get_score_label(score),
            "high_temp": round_half_up(high) if high is not None else 0,
            "low_temp": round_half_up(low) if low is not None else 0,
            "weather_code": code,
            "icon": weather_icon(code),
        }

    def neutral_day(self, raw_date: Any) -> DailyOutlookEntry:
        """Placeholder for a day that could not be projected: default aggregates, neutral moon."""
        score = aggregate(self._factors({}, NEUTRAL_SCORE))
        return {
            "date": str(raw_date) if raw_date is not None else "",
            "day_name": "",
            "score": score,
            "label": get_score_label(score),
            "high_temp": 0,
            "low_temp": 0,
            "weather_code": 0,
            "icon": weather_icon(0),
        }

    def project(self, coordinate: Optional[Coordinate], daily: Iterable[DailyForecast]) -> List[DailyOutlookEntry]:
        """One entry per input day, in input order; a bad day never drops the others."""
        entries: List[DailyOutlookEntry] = []
        for forecast in daily or ():
            try:
                entries.append(self.project_day(forecast))
            except Exception:
                raw_date = forecast.get("date") if isinstance(forecast, Mapping) else None
                _LOGGER.exception("Outlook projection failed for day %r; using a neutral entry", raw_date)
                entries.append(self.neutral_day(raw_date))
        if coordinate:
            _LOGGER.debug(
                "Projected %d-day outlook for %s,%s",
                len(entries), coordinate.get("latitude"), coordinate.get("longitude"),
            )
        return entries
