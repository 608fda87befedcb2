# Coordinator: polls the FishCast service for one configured location

from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import DOMAIN
from .data_schema import CoordinatorData
from .service import FishCastService
from .unit_helpers import iso_z

_LOGGER = logging.getLogger(__name__)


class FishCastCoordinator(DataUpdateCoordinator):
    def __init__(
        self,
        hass,
        entry_id: str,
        service: FishCastService,
        lat: float,
        lon: float,
        update_interval: int,
        species: Optional[str] = None,
        water_temp: Optional[float] = None,
    ):
        """
        - service owns the providers and the result cache; the coordinator
          only decides when to ask and what to attach for the sensors.
        - species/water_temp are optional; without a species the adjusted
          result is the base result.
        """
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=update_interval),
        )
        self.entry_id = entry_id
        self.service = service
        self.lat = lat
        self.lon = lon
        self.species = species
        self.water_temp = water_temp

    async def _async_update_data(self) -> CoordinatorData:
        """Score the current hour and refresh the outlook."""
        base = await self.service.calculate_fish_cast(self.lat, self.lon)
        if base.get("error") and not self.data:
            # nothing to fall back on yet: mark the refresh failed so entities show unavailable
            raise UpdateFailed(f"FishCast unavailable: {base['error']}")

        fishcast = base
        if self.species:
            fishcast = self.service.adjust_score_for_species(base, self.species, self.water_temp)

        outlook = await self.service.calculate_7day_outlook(self.lat, self.lon)
        if not outlook and self.data:
            outlook = self.data.get("outlook") or []

        _LOGGER.debug(
            "FishCast update for %s: score=%s label=%s outlook_days=%d",
            self.entry_id, fishcast.get("score"), fishcast.get("label"), len(outlook),
        )
        return {
            "fishcast": fishcast,
            "base_fishcast": base,
            "outlook": outlook,
            "species": self.species,
            "updated_at": iso_z(datetime.now(timezone.utc)),
        }
