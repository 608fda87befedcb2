import aiohttp
from aiohttp import web
import pytest

from custom_components.fishcast.cache import MemoryResultCache, coord_key
from custom_components.fishcast.errors import WeatherFetchError
from custom_components.fishcast.weather_fetcher import OpenMeteoWeatherProvider, weather_description

CURRENT_PAYLOAD = {
    "current": {
        "time": "2025-06-21T06:00",
        "temperature_2m": 18.4,
        "relative_humidity_2m": 81,
        "weather_code": 3,
        "wind_speed_10m": 16.1,
        "wind_direction_10m": 220,
        "precipitation": 0.0,
        "cloud_cover": 65,
        "pressure_msl": 1016.2,
    },
    "daily": {
        "time": ["2025-06-21"],
        "sunrise": ["2025-06-21T05:25"],
        "sunset": ["2025-06-21T20:31"],
    },
}

DAILY_PAYLOAD = {
    "daily": {
        "time": ["2025-06-21", "2025-06-22"],
        "temperature_2m_max": [24.5, 21.0],
        "temperature_2m_min": [13.4, 12.0],
        "precipitation_sum": [0.0, 6.2],
        "wind_speed_10m_max": [12.0, 30.0],
        "pressure_msl_max": [1018.0, 1009.0],
        "pressure_msl_min": [1014.0, 1003.0],
        "cloud_cover_mean": [40, 90],
        "weather_code": [2, 63],
    }
}


async def _start(aiohttp_server, payload, status=200):
    """Fake Open-Meteo endpoint; returns (server, request counter)."""
    calls = {"n": 0}

    async def handler(request):
        calls["n"] += 1
        if status != 200:
            return web.Response(status=status, text="upstream error")
        if "forecast_days" in request.query:
            return web.json_response(DAILY_PAYLOAD)
        return web.json_response(payload)

    app = web.Application()
    app.router.add_get("/v1/forecast", handler)
    server = await aiohttp_server(app)
    return server, calls


def test_weather_description():
    assert weather_description(3) == "Overcast"
    assert weather_description(None) == "Unknown"
    assert weather_description(42) == "Unknown"


def test_rejects_unknown_speed_unit():
    with pytest.raises(ValueError):
        OpenMeteoWeatherProvider(session=None, speed_unit="knots")


@pytest.mark.asyncio
async def test_current_conditions_are_mapped(aiohttp_server):
    server, _ = await _start(aiohttp_server, CURRENT_PAYLOAD)
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(session, base_url=str(server.make_url("/v1/forecast")))
        snapshot = await provider.get_weather(40.0, -74.0)

    assert snapshot["temperature"] == 18.4
    assert snapshot["wind_speed"] == 16.1
    assert snapshot["wind_unit"] == "km/h"
    assert snapshot["pressure_msl"] == 1016.2
    assert snapshot["cloud_cover"] == 65
    assert snapshot["precipitation"] == 0.0
    assert snapshot["weather_code"] == 3
    assert snapshot["description"] == "Overcast"
    assert snapshot["sunrise"] == "2025-06-21T05:25"
    assert snapshot["stale"] is False


@pytest.mark.asyncio
async def test_wind_converted_to_mph(aiohttp_server):
    server, _ = await _start(aiohttp_server, CURRENT_PAYLOAD)
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(
            session, speed_unit="mph", base_url=str(server.make_url("/v1/forecast"))
        )
        snapshot = await provider.get_weather(40.0, -74.0)

    assert snapshot["wind_speed"] == 10.0
    assert snapshot["wind_unit"] == "mph"


@pytest.mark.asyncio
async def test_http_error_raises(aiohttp_server):
    server, _ = await _start(aiohttp_server, CURRENT_PAYLOAD, status=500)
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(session, base_url=str(server.make_url("/v1/forecast")))
        with pytest.raises(WeatherFetchError):
            await provider.get_weather(40.0, -74.0)


@pytest.mark.asyncio
async def test_missing_current_block_raises(aiohttp_server):
    server, _ = await _start(aiohttp_server, {"daily": {}})
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(session, base_url=str(server.make_url("/v1/forecast")))
        with pytest.raises(WeatherFetchError):
            await provider.get_weather(40.0, -74.0)


@pytest.mark.asyncio
async def test_fresh_copy_served_from_cache(aiohttp_server):
    server, calls = await _start(aiohttp_server, CURRENT_PAYLOAD)
    cache = MemoryResultCache()
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(
            session, cache=cache, base_url=str(server.make_url("/v1/forecast"))
        )
        first = await provider.get_weather(40.0, -74.0)
        second = await provider.get_weather(40.001, -74.001)

    assert calls["n"] == 1
    assert second == first


@pytest.mark.asyncio
async def test_stale_copy_served_when_fetch_fails(aiohttp_server):
    good, _ = await _start(aiohttp_server, CURRENT_PAYLOAD)
    bad, _ = await _start(aiohttp_server, CURRENT_PAYLOAD, status=500)
    cache = MemoryResultCache()
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(session, cache=cache, base_url=str(good.make_url("/v1/forecast")))
        await provider.get_weather(40.0, -74.0)

        await cache.invalidate(coord_key("weather", 40.0, -74.0))
        failing = OpenMeteoWeatherProvider(session, cache=cache, base_url=str(bad.make_url("/v1/forecast")))
        snapshot = await failing.get_weather(40.0, -74.0)

    assert snapshot["stale"] is True
    assert snapshot["pressure_msl"] == 1016.2


@pytest.mark.asyncio
async def test_daily_forecast_parsed(aiohttp_server):
    server, _ = await _start(aiohttp_server, CURRENT_PAYLOAD)
    async with aiohttp.ClientSession() as session:
        provider = OpenMeteoWeatherProvider(session, base_url=str(server.make_url("/v1/forecast")))
        days = await provider.get_daily_forecast(40.0, -74.0, days=2)

    assert [d["date"] for d in days] == ["2025-06-21", "2025-06-22"]
    assert days[0]["temperature_max"] == 24.5
    assert days[1]["precipitation_sum"] == 6.2
    assert days[1]["wind_speed_max"] == 30.0
    assert days[1]["weather_code"] == 63
