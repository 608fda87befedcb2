"""Unit conversion and value coercion helpers shared across the integration.

Numeric helpers attempt to coerce to float and return None on failure.
Canonical units used by the integration:
- wind: provider speed unit, km/h unless configured otherwise
- temperature: Celsius (°C)
- pressure: hectopascals (hPa)
- precipitation: millimetres (mm)
"""
from typing import Any, Optional
from datetime import date, datetime, time, timezone
import logging
import math

_LOGGER = logging.getLogger(__name__)


def to_float(v: Any) -> Optional[float]:
    """Coerce to a finite float; None, NaN, infinities and junk become None."""
    try:
        if v is None or isinstance(v, bool):
            return None
        f = float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike round()."""
    return int(math.floor(float(value) + 0.5))


# ---- Wind ----

def kmh_to_m_s(v: Any) -> Optional[float]:
    """Convert km/h to m/s."""
    f = to_float(v)
    if f is None:
        return None
    return f * 0.277777778


def mph_to_m_s(v: Any) -> Optional[float]:
    """Convert mph to m/s."""
    f = to_float(v)
    if f is None:
        return None
    return f * 0.44704


def m_s_to_kmh(v: Any) -> Optional[float]:
    f = to_float(v)
    if f is None:
        return None
    return f * 3.6


def m_s_to_mph(v: Any) -> Optional[float]:
    f = to_float(v)
    if f is None:
        return None
    return f * 2.2369362920544


def convert_wind(v: Any, from_unit: str, to_unit: str) -> Optional[float]:
    """Convert a wind speed between km/h, mph and m/s."""
    f = to_float(v)
    if f is None:
        return None
    if from_unit == to_unit:
        return f
    if from_unit == "km/h":
        m_s = kmh_to_m_s(f)
    elif from_unit == "mph":
        m_s = mph_to_m_s(f)
    elif from_unit == "m/s":
        m_s = f
    else:
        raise ValueError(f"Unsupported wind unit: {from_unit!r}")
    if to_unit == "km/h":
        return m_s_to_kmh(m_s)
    if to_unit == "mph":
        return m_s_to_mph(m_s)
    if to_unit == "m/s":
        return m_s
    raise ValueError(f"Unsupported wind unit: {to_unit!r}")


# ---- Coordinates ----

def clamp_coordinate(latitude: Any, longitude: Any) -> tuple:
    """Clamp latitude to [-90, 90] and longitude to [-180, 180].

    Non-numeric values are rejected with ValueError.
    """
    lat = to_float(latitude)
    lon = to_float(longitude)
    if lat is None or lon is None:
        raise ValueError(f"Invalid coordinate: {latitude!r}, {longitude!r}")
    return clamp(lat, -90.0, 90.0), clamp(lon, -180.0, 180.0)


# ---- Timestamps ----

def coerce_datetime(v: Any) -> Optional[datetime]:
    """Parse datetimes, dates, ISO strings and epoch seconds/milliseconds.

    Aware values keep their timezone; naive values are returned naive.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        return v
    if isinstance(v, date):
        return datetime.combine(v, time(12, 0))
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        val = float(v)
        if val > 1e12:
            val = val / 1000.0
        return datetime.fromtimestamp(val, tz=timezone.utc)
    try:
        s = str(v).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        return datetime.fromisoformat(s)
    except ValueError:
        _LOGGER.debug("Unable to parse timestamp %r", v)
        return None


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_z(dt: Optional[datetime]) -> Optional[str]:
    """Format as ISO-8601; aware values are converted to UTC with a trailing Z."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.isoformat()
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
