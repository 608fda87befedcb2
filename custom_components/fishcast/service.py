"""FishCast service: the public entry points.

Wires the providers, the cache and the pure scoring components together.
This is the error boundary: provider exceptions never escape, they turn
into a neutral tide factor or a degraded result.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

import async_timeout

from .cache import MemoryResultCache, ResultCache, coord_key, hour_key
from .const import (
    DEFAULT_FETCH_TIMEOUT,
    FISHCAST_CACHE_TTL,
    OUTLOOK_CACHE_TTL,
    OUTLOOK_DAYS,
)
from .data_schema import DailyForecast, DailyOutlookEntry, FishCastResult, TideState, WeatherSnapshot
from .errors import FishCastError
from .outlook import OutlookProjector
from .scoring import ScoringEngine, degraded_result
from .species import SpeciesAdjuster
from .unit_helpers import clamp_coordinate, coerce_datetime

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIDE_TIMEOUT = 10


class WeatherProvider(Protocol):
    async def get_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        ...

    async def get_daily_forecast(self, latitude: float, longitude: float, days: int = OUTLOOK_DAYS) -> List[DailyForecast]:
        ...


class TideProvider(Protocol):
    async def get_current_tide_state(self, latitude: float, longitude: float, now: Any = None) -> TideState:
        ...


class FishCastService:
    """Point scores, the multi-day outlook and species adjustment.

    Only `weather` is required. Without a tide provider the tide factor is
    always neutral.
    """

    def __init__(
        self,
        weather: WeatherProvider,
        tide: Optional[TideProvider] = None,
        cache: Optional[ResultCache] = None,
        engine: Optional[ScoringEngine] = None,
        adjuster: Optional[SpeciesAdjuster] = None,
        projector: Optional[OutlookProjector] = None,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        tide_timeout: float = DEFAULT_TIDE_TIMEOUT,
    ) -> None:
        self._weather = weather
        self._tide = tide
        self._cache = cache if cache is not None else MemoryResultCache()
        self._engine = engine or ScoringEngine()
        self._adjuster = adjuster or SpeciesAdjuster()
        self._projector = projector or OutlookProjector()
        self._fetch_timeout = fetch_timeout
        self._tide_timeout = tide_timeout
        # key -> [lock, number of callers holding or waiting on it]
        self._locks: Dict[str, List[Any]] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        """Lock for `key`; every call must be paired with `_release_lock`."""
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        return entry[0]

    def _release_lock(self, key: str) -> None:
        entry = self._locks.get(key)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            self._locks.pop(key, None)

    async def _fetch_tide(self, latitude: float, longitude: float, when: datetime) -> Optional[TideState]:
        if self._tide is None:
            return None
        async with async_timeout.timeout(self._tide_timeout):
            return await self._tide.get_current_tide_state(latitude, longitude, when)

    async def _compute(self, latitude: float, longitude: float, when: datetime) -> Optional[FishCastResult]:
        """Fetch inputs concurrently and score; None when the weather is unavailable."""
        async with async_timeout.timeout(self._fetch_timeout):
            weather, tide = await asyncio.gather(
                self._weather.get_weather(latitude, longitude),
                self._fetch_tide(latitude, longitude, when),
                return_exceptions=True,
            )

        if isinstance(tide, BaseException):
            _LOGGER.warning("Tide unavailable for %s,%s: %r; using neutral tide", latitude, longitude, tide)
            tide = None
        if isinstance(weather, BaseException):
            _LOGGER.error("Weather unavailable for %s,%s: %r", latitude, longitude, weather)
            return None

        return self._engine.score(
            {"latitude": latitude, "longitude": longitude}, when, weather, tide
        )

    async def calculate_fish_cast(self, latitude: Any, longitude: Any, date: Any = None) -> FishCastResult:
        """FishCast score for a coordinate at `date` (default: now, local time).

        Never raises: any failure yields a degraded Fair/50 result, which is
        not cached.
        """
        try:
            lat, lon = clamp_coordinate(latitude, longitude)
            when = coerce_datetime(date) if date is not None else datetime.now().astimezone()
            if when is None:
                raise ValueError(f"Invalid date: {date!r}")
        except ValueError as exc:
            _LOGGER.error("Invalid FishCast request: %s", exc)
            return degraded_result(str(exc))

        key = coord_key("fishcast_" + hour_key(when), lat, lon)
        try:
            cached = await self._cache.get(key)
            if cached:
                return cached

            lock = self._lock_for(key)
            try:
                async with lock:
                    # another caller may have filled the entry while we waited
                    cached = await self._cache.get(key)
                    if cached:
                        return cached

                    result = await self._compute(lat, lon, when)
                    if result is None:
                        return degraded_result("Weather data unavailable")
                    await self._cache.set(key, result, FISHCAST_CACHE_TTL)
                    return result
            finally:
                self._release_lock(key)
        except asyncio.TimeoutError:
            _LOGGER.error("FishCast fetch timed out after %ss for %s,%s", self._fetch_timeout, lat, lon)
            return degraded_result("Timed out fetching conditions")
        except Exception as exc:  # boundary: callers always get a result
            _LOGGER.exception("FishCast calculation failed for %s,%s", lat, lon)
            return degraded_result(str(exc) or exc.__class__.__name__)

    async def calculate_7day_outlook(self, latitude: Any, longitude: Any) -> List[DailyOutlookEntry]:
        """One entry per forecast day; an empty list when the forecast fails."""
        try:
            lat, lon = clamp_coordinate(latitude, longitude)
        except ValueError:
            _LOGGER.error("Invalid outlook coordinate %r,%r", latitude, longitude)
            return []

        key = coord_key("fishcast_7day", lat, lon)
        try:
            cached = await self._cache.get(key)
            if cached:
                return cached

            async with async_timeout.timeout(self._fetch_timeout):
                daily = await self._weather.get_daily_forecast(lat, lon, OUTLOOK_DAYS)
            entries = self._projector.project({"latitude": lat, "longitude": lon}, daily)
            if entries:
                await self._cache.set(key, entries, OUTLOOK_CACHE_TTL)
            return entries
        except (FishCastError, asyncio.TimeoutError) as exc:
            _LOGGER.error("Outlook unavailable for %s,%s: %r", lat, lon, exc)
            return []
        except Exception:
            _LOGGER.exception("Outlook calculation failed for %s,%s", lat, lon)
            return []

    def adjust_score_for_species(
        self, result: FishCastResult, species_name: Any, water_temp: Optional[float] = None
    ) -> FishCastResult:
        return self._adjuster.adjust(result, species_name, water_temp)
