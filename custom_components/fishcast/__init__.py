"""
FishCast - integration entry points.

The scoring core (astronomy, solunar, scoring, species, outlook, cache,
service) has no Home Assistant dependency; Home Assistant is only imported
here at setup time and by the platform modules.
"""
import logging

from .const import (
    DOMAIN,
    DEFAULT_UPDATE_INTERVAL,
    DEFAULT_WIND_UNIT,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_SPECIES_ID,
    CONF_TIDE_ENABLED,
    CONF_WATER_TEMP,
    CONF_WIND_UNIT,
    WIND_UNITS,
)

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["sensor"]


async def async_setup_entry(hass, entry):
    """Set up integration from a config entry."""
    from homeassistant.helpers import aiohttp_client

    from .cache import MemoryResultCache
    from .coordinator import FishCastCoordinator
    from .service import FishCastService
    from .species import resolve_species
    from .tide_proxy import TideProxy
    from .weather_fetcher import OpenMeteoWeatherProvider

    _LOGGER.debug("Starting async_setup_entry for entry %s", entry.entry_id)

    lat = entry.data.get(CONF_LATITUDE)
    lon = entry.data.get(CONF_LONGITUDE)
    if lat is None or lon is None:
        _LOGGER.error("Config entry missing latitude/longitude; aborting setup for entry %s", entry.entry_id)
        return False

    # options override the values captured by the flow
    config = {**entry.data, **(entry.options or {})}

    wind_unit = config.get(CONF_WIND_UNIT, DEFAULT_WIND_UNIT)
    if wind_unit not in WIND_UNITS:
        _LOGGER.error("Config entry %s has invalid wind_unit=%r", entry.entry_id, wind_unit)
        return False

    species = config.get(CONF_SPECIES_ID) or None
    if species and resolve_species(species) is None:
        _LOGGER.warning("Unknown species %r for entry %s; scores will not be species-adjusted", species, entry.entry_id)

    # one cache per domain so entries at the same rounded location share results
    cache = hass.data.setdefault(DOMAIN, {}).setdefault("result_cache", MemoryResultCache())

    session = aiohttp_client.async_get_clientsession(hass)
    weather = OpenMeteoWeatherProvider(session, speed_unit=wind_unit, cache=cache)
    tide = TideProxy() if config.get(CONF_TIDE_ENABLED, True) else None
    service = FishCastService(weather, tide=tide, cache=cache)

    coord = FishCastCoordinator(
        hass,
        entry.entry_id,
        service=service,
        lat=float(lat),
        lon=float(lon),
        update_interval=config.get("update_interval", DEFAULT_UPDATE_INTERVAL),
        species=species,
        water_temp=config.get(CONF_WATER_TEMP),
    )
    _LOGGER.debug("FishCastCoordinator created for entry %s", entry.entry_id)

    await coord.async_config_entry_first_refresh()

    hass.data[DOMAIN][entry.entry_id] = coord

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception:
        _LOGGER.exception("Failed to forward entry setups for entry %s to sensor platform", entry.entry_id)
        return False

    _LOGGER.debug("async_setup_entry completed for entry %s", entry.entry_id)
    return True


async def async_unload_entry(hass, entry):
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    _LOGGER.debug("async_unload_entry finished for entry %s, unload_ok=%s", entry.entry_id, unload_ok)
    return unload_ok
