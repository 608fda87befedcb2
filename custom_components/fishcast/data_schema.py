"""Data schema for FishCast.

This module defines the payload shapes passed between the providers, the
scoring core and the Home Assistant entities. Every payload is a plain dict
so results stay JSON-serializable and can be handed to the cache as-is.
Timestamps inside results are ISO-8601 strings.
"""

from typing import TypedDict, List, Optional, Any, Tuple, Callable


# ============================================================================
# INPUT SCHEMAS
# ============================================================================

class Coordinate(TypedDict):
    """Geographic coordinate in decimal degrees."""
    latitude: float  # -90..90
    longitude: float  # -180..180


class WeatherSnapshot(TypedDict, total=False):
    """Current conditions as returned by a weather provider.

    Every field may be None; the scoring engine substitutes a neutral
    sub-score for the factor that depends on it.
    """
    temperature: Optional[float]  # Celsius
    wind_speed: Optional[float]  # provider speed unit (km/h by default)
    wind_direction: Optional[float]  # degrees
    wind_unit: Optional[str]
    cloud_cover: Optional[float]  # Percentage (0-100)
    precipitation: Optional[float]  # mm
    pressure_msl: Optional[float]  # hPa
    humidity: Optional[float]  # Percentage (0-100)
    weather_code: Optional[int]  # WMO code
    description: Optional[str]
    sunrise: Optional[str]  # ISO datetime string
    sunset: Optional[str]  # ISO datetime string
    fetched_at: Optional[str]
    stale: bool  # True when served from the stale copy after a failed fetch


class TideExtreme(TypedDict):
    """A single high or low water."""
    timestamp: str  # ISO datetime string
    height_m: float
    type: str  # "high" or "low"


class TideState(TypedDict, total=False):
    """Tide state at a point in time."""
    state: str  # "rising", "falling", "unknown"
    progress: int  # Percentage (0-100) between the surrounding extremes
    height_m: Optional[float]
    last_extreme: Optional[TideExtreme]
    next_extreme: Optional[TideExtreme]
    source: Optional[str]


class DailyForecast(TypedDict, total=False):
    """One day of a daily-aggregated forecast."""
    date: str  # ISO date string "YYYY-MM-DD"
    temperature_max: Optional[float]
    temperature_min: Optional[float]
    precipitation_sum: Optional[float]  # mm
    wind_speed_max: Optional[float]
    pressure_msl_max: Optional[float]  # hPa
    pressure_msl_min: Optional[float]  # hPa
    cloud_cover_mean: Optional[float]  # Percentage (0-100)
    weather_code: Optional[int]


# ============================================================================
# ASTRONOMICAL SCHEMAS
# ============================================================================

class MoonPhase(TypedDict):
    """Moon phase for a calendar day."""
    phase: float  # 0.0 to 1.0 (0=new, 0.5=full)
    illumination: int  # Percentage (0-100)
    name: str  # one of MOON_PHASE_NAMES
    fishing_rating: int  # 1-5


class SunTimes(TypedDict, total=False):
    """Sun events for a calendar day (UTC ISO strings)."""
    sunrise: str
    sunset: str
    solar_noon: str
    golden_hour_morning: str
    golden_hour_evening: str
    day_length_hours: float
    polar_night: bool  # sun never rises
    midnight_sun: bool  # sun never sets


class SolunarPeriod(TypedDict):
    """A feeding window."""
    start: str  # ISO datetime string
    end: str  # ISO datetime string
    kind: str  # "major" or "minor"


class SolunarDay(TypedDict):
    """Solunar table for a calendar day."""
    major: List[SolunarPeriod]
    minor: List[SolunarPeriod]
    moon_phase: MoonPhase
    sun_times: SunTimes
    overall_rating: int  # 1-5


# ============================================================================
# RESULT SCHEMAS
# ============================================================================

class ScoreFactors(TypedDict):
    """Per-factor sub-scores (0-100)."""
    pressure: int
    moonPhase: int
    solunarPeriod: int
    wind: int
    timeOfDay: int
    cloudCover: int
    precipitation: int
    tideState: int


class WeatherSummary(TypedDict, total=False):
    temp: Optional[float]
    wind: Optional[float]
    pressure: Optional[float]
    cloud_cover: Optional[float]
    precipitation: Optional[float]
    description: Optional[str]


class SolunarSummary(TypedDict, total=False):
    moon_phase: str
    illumination: int
    major_periods: List[SolunarPeriod]
    minor_periods: List[SolunarPeriod]
    overall_rating: int


class FishCastResult(TypedDict, total=False):
    """Result of a FishCast computation.

    Degraded results carry `error` and may omit factors and summaries.
    Species-adjusted results carry the species_* keys and `original_score`.
    """
    score: int  # 0-100
    label: str  # one of SCORE_LABELS
    factors: ScoreFactors
    weather: WeatherSummary
    solunar: SolunarSummary
    tide: Optional[TideState]
    forecast_time: str  # the instant that was scored, with the caller's UTC offset
    calculated_at: str
    error: str
    species_adjusted: bool
    species_name: str
    species_insights: List[str]
    original_score: int


class DailyOutlookEntry(TypedDict):
    """One day of the multi-day outlook."""
    date: str  # ISO date string "YYYY-MM-DD"
    day_name: str  # "Sun" .. "Sat"
    score: int
    label: str
    high_temp: int
    low_temp: int
    weather_code: int
    icon: str


# ============================================================================
# SPECIES SCHEMA
# ============================================================================

Modifier = Callable[[Any], float]


class SpeciesProfile(TypedDict, total=False):
    """Species preferences; every modifier returns a score multiplier."""
    display_name: str
    pressure: Modifier  # hPa -> multiplier
    wind: Modifier  # wind speed -> multiplier
    timeOfDay: Modifier  # local hour -> multiplier
    cloudCover: Modifier  # percent -> multiplier
    tideState: Modifier  # TideState -> multiplier
    precipitation: Modifier  # mm -> multiplier
    ideal_water_temp: Tuple[float, float]  # Celsius


# Sensor attributes produced by the coordinator
class CoordinatorData(TypedDict, total=False):
    fishcast: FishCastResult
    base_fishcast: FishCastResult
    outlook: List[DailyOutlookEntry]
    species: Optional[str]
    updated_at: str
