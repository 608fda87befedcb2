"""
Open-Meteo weather provider for FishCast.

- Current conditions (plus today's sunrise/sunset) via get_weather().
- Daily aggregates for the outlook via get_daily_forecast().
- Raises WeatherFetchError on HTTP or payload shape failures.
- When a cache is supplied, successful snapshots are kept fresh for an hour
  and as a stale copy for a day; the stale copy is served (flagged `stale`)
  when a live fetch fails.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
import async_timeout

from .cache import ResultCache, coord_key
from .const import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_WIND_UNIT,
    OM_BASE,
    WEATHER_CACHE_TTL,
    WEATHER_STALE_TTL,
    WIND_UNITS,
)
from .data_schema import DailyForecast, WeatherSnapshot
from .errors import WeatherFetchError
from . import unit_helpers

_LOGGER = logging.getLogger(__name__)

OM_PARAMS_CURRENT = ",".join(
    [
        "temperature_2m",
        "relative_humidity_2m",
        "weather_code",
        "wind_speed_10m",
        "wind_direction_10m",
        "precipitation",
        "cloud_cover",
        "pressure_msl",
    ]
)

OM_PARAMS_DAILY = ",".join(
    [
        "temperature_2m_max",
        "temperature_2m_min",
        "precipitation_sum",
        "wind_speed_10m_max",
        "pressure_msl_max",
        "pressure_msl_min",
        "cloud_cover_mean",
        "weather_code",
    ]
)

# Open-Meteo reports wind in km/h unless told otherwise
OM_WIND_UNIT = "km/h"

WMO_DESCRIPTIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def weather_description(code: Any) -> str:
    c = unit_helpers.to_float(code)
    if c is None:
        return "Unknown"
    return WMO_DESCRIPTIONS.get(int(c), "Unknown")


def _first(seq: Any) -> Any:
    if isinstance(seq, (list, tuple)) and seq:
        return seq[0]
    return None


def _at(seq: Any, index: int) -> Any:
    if isinstance(seq, (list, tuple)) and index < len(seq):
        return seq[index]
    return None


class OpenMeteoWeatherProvider:
    """Weather provider backed by the Open-Meteo forecast API.

    `session` is an aiohttp ClientSession owned by the caller (Home
    Assistant's shared session in production). Wind speeds are returned in
    `speed_unit`.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        speed_unit: str = DEFAULT_WIND_UNIT,
        cache: Optional[ResultCache] = None,
        base_url: str = OM_BASE,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        if speed_unit not in WIND_UNITS:
            raise ValueError(f"Unsupported speed_unit {speed_unit!r}; expected one of {WIND_UNITS}")
        self._session = session
        self.speed_unit = speed_unit
        self._cache = cache
        self._base_url = base_url
        self._timeout = timeout

    def _wind(self, value: Any) -> Optional[float]:
        converted = unit_helpers.convert_wind(value, OM_WIND_UNIT, self.speed_unit)
        return round(converted, 1) if converted is not None else None

    async def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with async_timeout.timeout(self._timeout):
                async with self._session.get(self._base_url, params=params) as resp:
                    resp.raise_for_status()
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise WeatherFetchError(f"Open-Meteo request failed: {exc!r}") from exc
        if not isinstance(data, dict):
            raise WeatherFetchError("Open-Meteo returned unexpected payload shape")
        return data

    def _map_current(self, data: Dict[str, Any]) -> WeatherSnapshot:
        current = data.get("current")
        if not isinstance(current, dict):
            raise WeatherFetchError("Open-Meteo payload missing 'current' block")
        daily = data.get("daily") or {}
        code = unit_helpers.to_float(current.get("weather_code"))
        return {
            "temperature": unit_helpers.to_float(current.get("temperature_2m")),
            "humidity": unit_helpers.to_float(current.get("relative_humidity_2m")),
            "wind_speed": self._wind(current.get("wind_speed_10m")),
            "wind_direction": unit_helpers.to_float(current.get("wind_direction_10m")),
            "wind_unit": self.speed_unit,
            "precipitation": unit_helpers.to_float(current.get("precipitation")) or 0.0,
            "cloud_cover": unit_helpers.to_float(current.get("cloud_cover")),
            "pressure_msl": unit_helpers.to_float(current.get("pressure_msl")),
            "weather_code": int(code) if code is not None else None,
            "description": weather_description(code),
            "sunrise": _first(daily.get("sunrise")),
            "sunset": _first(daily.get("sunset")),
            "fetched_at": unit_helpers.iso_z(datetime.now(timezone.utc)),
            "stale": False,
        }

    async def get_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Current conditions at a coordinate."""
        key = coord_key("weather", latitude, longitude)
        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached:
                return cached

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": OM_PARAMS_CURRENT,
            "daily": "sunrise,sunset",
            "timezone": "auto",
        }
        try:
            snapshot = self._map_current(await self._get_json(params))
        except WeatherFetchError:
            _LOGGER.warning("Open-Meteo current fetch failed for %s,%s", latitude, longitude, exc_info=True)
            if self._cache is not None:
                stale = await self._cache.get(key + "_stale")
                if stale:
                    _LOGGER.info("Serving stale weather for %s,%s", latitude, longitude)
                    result = dict(stale)
                    result["stale"] = True
                    return result
            raise

        if self._cache is not None:
            await self._cache.set(key, snapshot, WEATHER_CACHE_TTL)
            await self._cache.set(key + "_stale", snapshot, WEATHER_STALE_TTL)
        return snapshot

    async def get_daily_forecast(self, latitude: float, longitude: float, days: int = 7) -> List[DailyForecast]:
        """Daily aggregates, one dict per day in provider order."""
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": OM_PARAMS_DAILY,
            "forecast_days": int(days),
            "timezone": "auto",
        }
        data = await self._get_json(params)
        daily = data.get("daily")
        if not isinstance(daily, dict) or not isinstance(daily.get("time"), list):
            raise WeatherFetchError("Open-Meteo payload missing 'daily.time'")

        out: List[DailyForecast] = []
        for i, day in enumerate(daily["time"]):
            code = unit_helpers.to_float(_at(daily.get("weather_code"), i))
            out.append(
                {
                    "date": str(day),
                    "temperature_max": unit_helpers.to_float(_at(daily.get("temperature_2m_max"), i)),
                    "temperature_min": unit_helpers.to_float(_at(daily.get("temperature_2m_min"), i)),
                    "precipitation_sum": unit_helpers.to_float(_at(daily.get("precipitation_sum"), i)),
                    "wind_speed_max": self._wind(_at(daily.get("wind_speed_10m_max"), i)),
                    "pressure_msl_max": unit_helpers.to_float(_at(daily.get("pressure_msl_max"), i)),
                    "pressure_msl_min": unit_helpers.to_float(_at(daily.get("pressure_msl_min"), i)),
                    "cloud_cover_mean": unit_helpers.to_float(_at(daily.get("cloud_cover_mean"), i)),
                    "weather_code": int(code) if code is not None else None,
                }
            )
        _LOGGER.debug("Fetched %d forecast days for %s,%s", len(out), latitude, longitude)
        return out
