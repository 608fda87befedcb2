"""Constants for FishCast.

The weight table, the scoring bands and the labels are part of the public
contract: consumers display them, so changing a band edge is a breaking change.
"""

# Integration identity
DOMAIN = "fishcast"
DEFAULT_NAME = "FishCast"

# Update interval (seconds) default used by coordinator
DEFAULT_UPDATE_INTERVAL = 15 * 60

# Open-Meteo endpoints
OM_BASE = "https://api.open-meteo.com/v1/forecast"

# Cache TTLs (seconds)
FISHCAST_CACHE_TTL = 60 * 60
OUTLOOK_CACHE_TTL = 4 * 60 * 60
WEATHER_CACHE_TTL = 60 * 60
WEATHER_STALE_TTL = 24 * 60 * 60
TIDE_CACHE_TTL = 15 * 60

# Upper bound for the concurrent weather/tide fan-out (seconds)
DEFAULT_FETCH_TIMEOUT = 30

# ----- Scoring weights (sum to exactly 1.0) -----
WEIGHTS = {
    "pressure": 0.20,
    "moonPhase": 0.15,
    "solunarPeriod": 0.15,
    "wind": 0.12,
    "timeOfDay": 0.12,
    "tideState": 0.10,
    "cloudCover": 0.08,
    "precipitation": 0.08,
}

FACTOR_NAMES = tuple(WEIGHTS.keys())

# Neutral sub-score used whenever an input is missing
NEUTRAL_SCORE = 50

# ----- Scoring bands: (lower, upper, score) -----
PRESSURE_IDEAL = (1013.0, 1023.0, 90)
PRESSURE_FALLING = (1005.0, 1013.0, 70)
PRESSURE_HIGH = (1023.0, 1030.0, 60)
PRESSURE_LOW_SCORE = 40
PRESSURE_VERY_HIGH_SCORE = 30

# (max wind, score); anything above the last band scores WIND_STORM_SCORE
WIND_BANDS = ((5.0, 85), (12.0, 75), (20.0, 55), (30.0, 30))
WIND_STORM_SCORE = 10

# (first hour, last hour, score), evaluated in order
TIME_OF_DAY_BANDS = ((4, 8, 90), (17, 21, 85), (8, 10, 65), (15, 17, 65))
TIME_OF_DAY_NIGHT_SCORE = 50
TIME_OF_DAY_MIDDAY_SCORE = 40

CLOUD_OVERCAST = (50.0, 80.0, 80)
CLOUD_PARTLY = (30.0, 50.0, 65)
CLOUD_HEAVY_SCORE = 60
CLOUD_CLEAR_SCORE = 40

PRECIP_DRY_SCORE = 60
# (max mm, score); anything above the last band scores PRECIP_DOWNPOUR_SCORE
PRECIP_BANDS = ((2.0, 85), (5.0, 65), (10.0, 40))
PRECIP_DOWNPOUR_SCORE = 20

SOLUNAR_MAJOR_SCORE = 95
SOLUNAR_MINOR_SCORE = 75
SOLUNAR_OUTSIDE_SCORE = 40

TIDE_RISING_SCORE = 90
TIDE_FALLING_SCORE = 80
TIDE_SLACK_SCORE = 40
TIDE_OTHER_SCORE = 60
TIDE_MID_PROGRESS = (30, 70)
TIDE_SLACK_PROGRESS = (15, 85)

# (minimum score, label), highest first
SCORE_LABELS = (
    (85, "Excellent"),
    (70, "Very Good"),
    (55, "Good"),
    (40, "Fair"),
    (0, "Poor"),
)

# Daily outlook constants (intraday windows cannot be resolved from daily data)
OUTLOOK_DAYS = 7
OUTLOOK_SOLUNAR_SCORE = 60
OUTLOOK_TIME_OF_DAY_SCORE = 60
OUTLOOK_TIDE_SCORE = 50
OUTLOOK_DEFAULT_PRESSURE = 1013.0
OUTLOOK_DEFAULT_WIND = 10.0
OUTLOOK_DEFAULT_CLOUD = 50.0

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# ----- Moon phase -----
SYNODIC_MONTH_DAYS = 29.53
MOON_PHASE_NAMES = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)
# upper bound of each band after "New Moon"; phases > 0.97 wrap back to New Moon
MOON_PHASE_BOUNDS = (0.03, 0.22, 0.28, 0.47, 0.53, 0.72, 0.78, 0.97)
# (max distance from new/full, rating)
MOON_RATING_BANDS = ((0.05, 5), (0.10, 4), (0.20, 3), (0.30, 2))

# ----- Solunar (minutes) -----
SOLUNAR_DAY_OFFSET_MINUTES = 48.76
SOLUNAR_MAJOR_SPACING = 12 * 60 + 25
SOLUNAR_MINOR_OFFSET = 6 * 60 + 12
SOLUNAR_MAJOR_HALF_WIDTH = 60
SOLUNAR_MINOR_HALF_WIDTH = 30
DAWN_DUSK_HOURS = ((5, 8), (17, 20))
MIDDAY_HOURS = (11, 14)

# ----- Tide states -----
TIDE_STATE_RISING = "rising"
TIDE_STATE_FALLING = "falling"
TIDE_STATE_UNKNOWN = "unknown"

# ----- Config keys used by the flow and entry options -----
CONF_NAME = "name"
CONF_LATITUDE = "latitude"
CONF_LONGITUDE = "longitude"
CONF_SPECIES_ID = "species"
CONF_WATER_TEMP = "water_temperature"
CONF_WIND_UNIT = "wind_unit"
CONF_TIDE_ENABLED = "tide_enabled"

WIND_UNITS = ("km/h", "mph", "m/s")
DEFAULT_WIND_UNIT = "km/h"
