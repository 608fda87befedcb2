"""Sun and moon calculations for FishCast (pure, no I/O).

Both models are deliberately simplified approximations rather than
ephemeris-grade algorithms:

- sun times use a day-of-year solar declination plus a three-term equation
  of time; accuracy is in the order of minutes at mid latitudes.
- the moon phase uses Conway's integer recurrence seeded by the calendar
  date, which can be off by a day against the true lunation.

Callers that need precise values should substitute a real ephemeris; the
returned shapes stay the same.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Union

from .const import (
    MOON_PHASE_BOUNDS,
    MOON_PHASE_NAMES,
    MOON_RATING_BANDS,
    SYNODIC_MONTH_DAYS,
)
from .data_schema import MoonPhase, SunTimes
from .unit_helpers import coerce_datetime, iso_z, round_half_up

_LOGGER = logging.getLogger(__name__)

DateLike = Union[datetime, date, str]

# Zenith used for sunrise/sunset (refraction + solar radius)
_SUN_ZENITH_DEG = 90.833


def _as_datetime(value: DateLike) -> datetime:
    dt = coerce_datetime(value)
    if dt is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return dt


def day_of_year(value: DateLike) -> int:
    """1 for January 1st."""
    return _as_datetime(value).timetuple().tm_yday


def _minutes_to_utc(minutes: float, day: datetime) -> datetime:
    """Minutes after UTC midnight of `day`'s calendar date (may spill over)."""
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return midnight + timedelta(minutes=math.floor(minutes))


def get_sun_times(latitude: float, longitude: float, value: DateLike) -> SunTimes:
    """Sunrise, sunset, solar noon and golden hours for a calendar day (UTC).

    Returns {"polar_night": True} or {"midnight_sun": True} when the sun does
    not cross the horizon that day.
    """
    dt = _as_datetime(value)
    doy = day_of_year(dt)
    b = (2 * math.pi / 365) * (doy - 81)

    # Equation of time (minutes)
    eot = 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)

    declination = 23.45 * math.sin(b)
    dec_rad = math.radians(declination)
    lat_rad = math.radians(float(latitude))

    denominator = math.cos(lat_rad) * math.cos(dec_rad)
    if abs(denominator) < 1e-12:
        # exactly at a pole: the sun circles the horizon, decide by declination sign
        north = latitude > 0
        if (declination > 0) == north:
            return {"midnight_sun": True}
        return {"polar_night": True}

    cos_h = (math.cos(math.radians(_SUN_ZENITH_DEG)) - math.sin(lat_rad) * math.sin(dec_rad)) / denominator

    if cos_h > 1:
        return {"polar_night": True}
    if cos_h < -1:
        return {"midnight_sun": True}

    hour_angle = math.degrees(math.acos(cos_h))

    solar_noon = 720 - 4 * float(longitude) - eot
    sunrise = solar_noon - hour_angle * 4
    sunset = solar_noon + hour_angle * 4

    return {
        "sunrise": iso_z(_minutes_to_utc(sunrise, dt)),
        "sunset": iso_z(_minutes_to_utc(sunset, dt)),
        "solar_noon": iso_z(_minutes_to_utc(solar_noon, dt)),
        "golden_hour_morning": iso_z(_minutes_to_utc(sunrise + 60, dt)),
        "golden_hour_evening": iso_z(_minutes_to_utc(sunset - 60, dt)),
        "day_length_hours": round((sunset - sunrise) / 60.0, 1),
    }


def _conway_age(year: int, month: int, day: int) -> int:
    """Approximate moon age in days (0..29) via Conway's recurrence.

    The remainders truncate toward zero (math.fmod), which the published
    recurrence assumes for the negative intermediate values.
    """
    r = float(year % 100)
    r = math.fmod(r, 19)
    if r > 9:
        r -= 19
    r = math.fmod(r * 11, 30) + month + day
    if month < 3:
        r += 2
    r -= 4 if year < 2000 else 8.3
    r = math.fmod(math.floor(r + 0.5), 30)
    if r < 0:
        r += 30
    return int(r)


def moon_phase_name(phase: float) -> str:
    if phase < MOON_PHASE_BOUNDS[0] or phase > MOON_PHASE_BOUNDS[-1]:
        return MOON_PHASE_NAMES[0]
    for name, upper in zip(MOON_PHASE_NAMES[1:], MOON_PHASE_BOUNDS[1:]):
        if phase < upper:
            return name
    return MOON_PHASE_NAMES[-1]


def moon_fishing_rating(phase: float) -> int:
    """5 near new/full moon, falling to 1 at the quarters."""
    distance = min(phase, abs(phase - 0.5), 1 - phase)
    for max_distance, rating in MOON_RATING_BANDS:
        if distance < max_distance:
            return rating
    return 1


def get_moon_phase(value: DateLike) -> MoonPhase:
    """Moon phase for the calendar date of `value` (0 = new, 0.5 = full)."""
    dt = _as_datetime(value)
    age = _conway_age(dt.year, dt.month, dt.day)
    phase = age / SYNODIC_MONTH_DAYS
    return {
        "phase": phase,
        "illumination": round_half_up((1 - math.cos(phase * 2 * math.pi)) * 50),
        "name": moon_phase_name(phase),
        "fishing_rating": moon_fishing_rating(phase),
    }


class AstronomyCalculator:
    """Object wrapper so the calculator can be injected and replaced in tests."""

    def sun_times(self, latitude: float, longitude: float, value: Any) -> SunTimes:
        return get_sun_times(latitude, longitude, value)

    def moon_phase(self, value: Any) -> MoonPhase:
        return get_moon_phase(value)
