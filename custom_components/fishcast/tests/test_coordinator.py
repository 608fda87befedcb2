import pytest

from homeassistant.helpers.update_coordinator import UpdateFailed

from custom_components.fishcast.coordinator import FishCastCoordinator

OUTLOOK = [{"date": "2025-06-21", "day_name": "Sat", "score": 68, "label": "Good",
            "high_temp": 20, "low_temp": 12, "weather_code": 2, "icon": "⛅"}]


class MockService:
    def __init__(self, result, outlook=None):
        self.result = result
        self.outlook = OUTLOOK if outlook is None else outlook
        self.adjusted_with = None

    async def calculate_fish_cast(self, latitude, longitude, date=None):
        return dict(self.result)

    async def calculate_7day_outlook(self, latitude, longitude):
        return list(self.outlook)

    def adjust_score_for_species(self, result, species, water_temp=None):
        self.adjusted_with = (species, water_temp)
        return dict(result, score=result["score"] + 5, species_adjusted=True)


def _coordinator(service, species=None, water_temp=None, data=None):
    # skip DataUpdateCoordinator.__init__: only the update logic is exercised here
    coord = FishCastCoordinator.__new__(FishCastCoordinator)
    coord.entry_id = "t1"
    coord.service = service
    coord.lat = 40.0
    coord.lon = -74.0
    coord.species = species
    coord.water_temp = water_temp
    coord.data = data
    return coord


@pytest.mark.asyncio
async def test_update_collects_score_and_outlook():
    service = MockService({"score": 72, "label": "Very Good"})
    data = await _coordinator(service)._async_update_data()
    assert data["fishcast"]["score"] == 72
    assert data["base_fishcast"] is not None
    assert data["outlook"] == OUTLOOK
    assert data["species"] is None
    assert data["updated_at"].endswith("Z")
    assert service.adjusted_with is None


@pytest.mark.asyncio
async def test_update_applies_species():
    service = MockService({"score": 72, "label": "Very Good"})
    data = await _coordinator(service, species="trout", water_temp=12.0)._async_update_data()
    assert service.adjusted_with == ("trout", 12.0)
    assert data["fishcast"]["score"] == 77
    assert data["base_fishcast"]["score"] == 72


@pytest.mark.asyncio
async def test_first_refresh_error_marks_update_failed():
    service = MockService({"score": 50, "label": "Fair", "error": "Weather data unavailable"})
    with pytest.raises(UpdateFailed):
        await _coordinator(service)._async_update_data()


@pytest.mark.asyncio
async def test_keeps_previous_outlook_when_refresh_is_empty():
    previous = {"fishcast": {"score": 60}, "outlook": OUTLOOK}
    service = MockService({"score": 50, "label": "Fair", "error": "Weather data unavailable"}, outlook=[])
    data = await _coordinator(service, data=previous)._async_update_data()
    assert data["fishcast"]["error"] == "Weather data unavailable"
    assert data["outlook"] == OUTLOOK
