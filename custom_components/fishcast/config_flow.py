"""Config flow for FishCast"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector
import homeassistant.helpers.config_validation as cv

from .const import (
    DOMAIN,
    CONF_NAME,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_SPECIES_ID,
    CONF_TIDE_ENABLED,
    CONF_WATER_TEMP,
    CONF_WIND_UNIT,
    DEFAULT_NAME,
    DEFAULT_WIND_UNIT,
    WIND_UNITS,
)
from .species import available_species

_LOGGER = logging.getLogger(__name__)

NO_SPECIES = "none"


class FishCastConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for FishCast."""

    VERSION = 1

    def __init__(self) -> None:
        self.fishcast_config: dict[str, Any] = {}

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        return await self.async_step_location(user_input)

    async def async_step_location(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Name and coordinates; defaults to the Home Assistant home location."""
        errors: dict[str, str] = {}
        if user_input is not None:
            try:
                lat = float(user_input[CONF_LATITUDE])
                lon = float(user_input[CONF_LONGITUDE])
                if not (-90 <= lat <= 90 and -180 <= lon <= 180):
                    errors["base"] = "invalid_coordinates"
            except (ValueError, KeyError):
                errors["base"] = "invalid_coordinates"

            if not errors:
                title = str(user_input.get(CONF_NAME, "")).strip() or DEFAULT_NAME
                await self.async_set_unique_id(f"{lat:.2f}_{lon:.2f}")
                self._abort_if_unique_id_configured()
                self.fishcast_config.update(user_input)
                self.fishcast_config[CONF_NAME] = title
                return await self.async_step_preferences()

        default_name = user_input.get(CONF_NAME, DEFAULT_NAME) if user_input else DEFAULT_NAME
        default_lat = user_input.get(CONF_LATITUDE) if user_input else self.hass.config.latitude
        default_lon = user_input.get(CONF_LONGITUDE) if user_input else self.hass.config.longitude

        return self.async_show_form(
            step_id="location",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME, default=default_name): str,
                    vol.Required(CONF_LATITUDE, default=default_lat): cv.latitude,
                    vol.Required(CONF_LONGITUDE, default=default_lon): cv.longitude,
                }
            ),
            errors=errors,
        )

    async def async_step_preferences(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Target species, water temperature, wind unit and tide toggle."""
        if user_input is not None:
            data = dict(self.fishcast_config)
            species = user_input.get(CONF_SPECIES_ID, NO_SPECIES)
            data[CONF_SPECIES_ID] = None if species == NO_SPECIES else species
            data[CONF_WATER_TEMP] = user_input.get(CONF_WATER_TEMP)
            data[CONF_WIND_UNIT] = user_input.get(CONF_WIND_UNIT, DEFAULT_WIND_UNIT)
            data[CONF_TIDE_ENABLED] = bool(user_input.get(CONF_TIDE_ENABLED, True))
            _LOGGER.debug("Creating FishCast entry with data keys: %s", list(data.keys()))
            return self.async_create_entry(title=data[CONF_NAME], data=data)

        species_options = [{"value": NO_SPECIES, "label": "Any species"}] + [
            {"value": s["key"], "label": s["name"]} for s in available_species()
        ]
        return self.async_show_form(
            step_id="preferences",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_SPECIES_ID, default=NO_SPECIES): selector.SelectSelector(
                        selector.SelectSelectorConfig(options=species_options, mode="dropdown")
                    ),
                    vol.Optional(CONF_WATER_TEMP): selector.NumberSelector(
                        selector.NumberSelectorConfig(min=-2, max=40, step=0.5, unit_of_measurement="°C", mode="box")
                    ),
                    vol.Required(CONF_WIND_UNIT, default=DEFAULT_WIND_UNIT): selector.SelectSelector(
                        selector.SelectSelectorConfig(options=list(WIND_UNITS), mode="dropdown")
                    ),
                    vol.Required(CONF_TIDE_ENABLED, default=True): bool,
                }
            ),
        )
