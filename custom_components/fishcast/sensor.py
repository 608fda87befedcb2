"""
FishCast sensors.

coordinator.data is a CoordinatorData dict:
 - "fishcast": the (species-adjusted when configured) FishCastResult
 - "base_fishcast": the unadjusted result
 - "outlook": list of DailyOutlookEntry, today first
 - "species", "updated_at"
"""
from typing import Any, Dict, Optional
import logging

from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN, CONF_NAME, DEFAULT_NAME

_LOGGER = logging.getLogger(__name__)

ATTRIBUTION = "Weather data provided by Open-Meteo"


class FishCastSensor(CoordinatorEntity):
    """Base class: naming, unique id and availability."""

    _attr_icon = "mdi:fish"

    def __init__(self, coordinator, name: str, key: str):
        super().__init__(coordinator)
        self._key = key
        self._attr_name = f"{name} {key.replace('_', ' ').title()}"
        self._attr_unique_id = f"{DOMAIN}_{getattr(coordinator, 'entry_id', 'noentry')}_{key}"

    @property
    def available(self) -> bool:
        return bool(self.coordinator.last_update_success and self.coordinator.data)

    def _data(self) -> Dict[str, Any]:
        return self.coordinator.data or {}


class FishCastScoreSensor(FishCastSensor):
    """Current FishCast score (0-100)."""

    _attr_native_unit_of_measurement = None

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator, name, "fishcast_score")

    def _result(self) -> Dict[str, Any]:
        return self._data().get("fishcast") or {}

    @property
    def state(self) -> Optional[int]:
        score = self._result().get("score")
        return int(score) if score is not None else None

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        result = self._result()
        attrs: Dict[str, Any] = {
            "label": result.get("label"),
            "factors": result.get("factors"),
            "weather": result.get("weather"),
            "solunar": result.get("solunar"),
            "tide": result.get("tide"),
            "forecast_time": result.get("forecast_time"),
            "calculated_at": result.get("calculated_at"),
            "updated_at": self._data().get("updated_at"),
            "attribution": ATTRIBUTION,
        }
        if result.get("error"):
            attrs["error"] = result["error"]
        if result.get("species_adjusted"):
            attrs["species"] = result.get("species_name")
            attrs["species_insights"] = result.get("species_insights", [])
            attrs["original_score"] = result.get("original_score")
        return attrs


class FishCastOutlookSensor(FishCastSensor):
    """Multi-day outlook; the state is today's outlook score."""

    _attr_icon = "mdi:calendar-week"

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator, name, "outlook")

    @property
    def state(self) -> Optional[int]:
        outlook = self._data().get("outlook") or []
        if not outlook:
            return None
        return int(outlook[0].get("score"))

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        outlook = self._data().get("outlook") or []
        return {
            "days": outlook,
            "best_day": max(outlook, key=lambda d: d.get("score", 0)).get("date") if outlook else None,
            "attribution": ATTRIBUTION,
        }


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities):
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if coordinator is None:
        raise RuntimeError("Coordinator not found in hass.data for this config entry")

    name = entry.data.get(CONF_NAME) or DEFAULT_NAME
    async_add_entities(
        [
            FishCastScoreSensor(coordinator, name),
            FishCastOutlookSensor(coordinator, name),
        ]
    )
