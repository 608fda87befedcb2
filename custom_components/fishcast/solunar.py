"""Solunar feeding windows (pure, no I/O).

Two major windows (moon overhead/underfoot, two hours each) and two minor
windows (moonrise/moonset, one hour each) per day. By default the lunar
transit is approximated from the day of month, which drifts roughly 49
minutes per day like the real transit but is not tied to the observer's
longitude. Pass a `transit_source` to plug in a precise calculation.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .astronomy import AstronomyCalculator, DateLike, _as_datetime
from .const import (
    DAWN_DUSK_HOURS,
    MIDDAY_HOURS,
    SOLUNAR_DAY_OFFSET_MINUTES,
    SOLUNAR_MAJOR_HALF_WIDTH,
    SOLUNAR_MAJOR_SPACING,
    SOLUNAR_MINOR_HALF_WIDTH,
    SOLUNAR_MINOR_OFFSET,
)
from .data_schema import MoonPhase, SolunarDay, SolunarPeriod
from .unit_helpers import iso_z

_LOGGER = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# (latitude, longitude, local midnight) -> minutes after midnight of the first transit
TransitSource = Callable[[float, float, datetime], float]


def day_of_month_transit(latitude: float, longitude: float, midnight: datetime) -> float:
    return (midnight.day * SOLUNAR_DAY_OFFSET_MINUTES) % MINUTES_PER_DAY


def _window(midnight: datetime, centre: float, half_width: int, kind: str) -> SolunarPeriod:
    start = midnight + timedelta(minutes=centre - half_width)
    end = midnight + timedelta(minutes=centre + half_width)
    return {"start": iso_z(start), "end": iso_z(end), "kind": kind}


def overall_rating(moon: MoonPhase, hour: int) -> int:
    """Moon rating nudged up at dawn/dusk and down around midday, kept in 1..5."""
    rating = int(moon.get("fishing_rating", 1))
    if any(first <= hour <= last for first, last in DAWN_DUSK_HOURS):
        rating = min(5, rating + 1)
    elif MIDDAY_HOURS[0] <= hour <= MIDDAY_HOURS[1]:
        rating = max(1, rating - 1)
    return max(1, min(5, rating))


class SolunarPeriodEstimator:
    """Builds the solunar table for a coordinate and day."""

    def __init__(
        self,
        astronomy: Optional[AstronomyCalculator] = None,
        transit_source: Optional[TransitSource] = None,
    ) -> None:
        self._astronomy = astronomy or AstronomyCalculator()
        self._transit_source = transit_source or day_of_month_transit

    def windows(self, latitude: float, longitude: float, value: DateLike) -> tuple:
        """Return (major, minor) period lists for the calendar day of `value`.

        Windows are anchored on midnight in the timezone of `value` (naive
        values stay naive); windows near midnight spill into the next or
        previous day rather than wrapping, so every window has end > start.
        """
        dt = _as_datetime(value)
        midnight = dt.replace(hour=0, minute=0, second=0, microsecond=0)

        first = float(self._transit_source(latitude, longitude, midnight)) % MINUTES_PER_DAY
        second = (first + SOLUNAR_MAJOR_SPACING) % MINUTES_PER_DAY
        major_centres = sorted((first, second))

        major: List[SolunarPeriod] = [
            _window(midnight, c, SOLUNAR_MAJOR_HALF_WIDTH, "major") for c in major_centres
        ]
        minor_centres = sorted((c + SOLUNAR_MINOR_OFFSET) % MINUTES_PER_DAY for c in major_centres)
        minor: List[SolunarPeriod] = [
            _window(midnight, c, SOLUNAR_MINOR_HALF_WIDTH, "minor") for c in minor_centres
        ]
        return major, minor

    def get_solunar_periods(self, latitude: float, longitude: float, value: DateLike) -> SolunarDay:
        dt = _as_datetime(value)
        major, minor = self.windows(latitude, longitude, dt)
        moon = self._astronomy.moon_phase(dt)
        sun = self._astronomy.sun_times(latitude, longitude, dt)
        rating = overall_rating(moon, dt.hour)
        _LOGGER.debug(
            "Solunar for %.2f,%.2f on %s: moon=%s rating=%s",
            latitude, longitude, dt.date().isoformat(), moon.get("name"), rating,
        )
        return {
            "major": major,
            "minor": minor,
            "moon_phase": moon,
            "sun_times": sun,
            "overall_rating": rating,
        }


def get_solunar_periods(latitude: float, longitude: float, value: DateLike) -> SolunarDay:
    """Module-level convenience using the default day-of-month transit."""
    return SolunarPeriodEstimator().get_solunar_periods(latitude, longitude, value)
