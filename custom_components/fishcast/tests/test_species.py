from datetime import datetime, timedelta, timezone

from custom_components.fishcast.scoring import ScoringEngine
from custom_components.fishcast.species import (
    SPECIES_PROFILES,
    Species,
    SpeciesAdjuster,
    available_species,
    resolve_species,
)


def _excellent_base():
    solunar = {
        "major": [{"start": "2025-06-21T05:00:00", "end": "2025-06-21T07:00:00", "kind": "major"}],
        "minor": [],
        "moon_phase": {"phase": 0.5, "illumination": 100, "name": "Full Moon", "fishing_rating": 5},
        "sun_times": {},
        "overall_rating": 5,
    }
    return ScoringEngine().score(
        {"latitude": 40.0, "longitude": -74.0},
        datetime(2025, 6, 21, 6, 0),
        {"pressure_msl": 1016, "wind_speed": 8, "cloud_cover": 65, "precipitation": 0},
        {"state": "rising", "progress": 50},
        solunar=solunar,
    )


def _plain_base(score=50):
    return {"score": score, "label": "Fair", "weather": {}, "factors": {}}


def test_resolve_species_variants():
    assert resolve_species("Largemouth_Bass") == Species.LARGEMOUTH_BASS
    assert resolve_species("Mahi-Mahi") == Species.MAHI_MAHI
    assert resolve_species(Species.PIKE) == Species.PIKE
    assert resolve_species("bass") == Species.LARGEMOUTH_BASS
    assert resolve_species("brown trout") == Species.TROUT
    assert resolve_species("") is None
    assert resolve_species(None) is None
    assert resolve_species("goldfish") is None


def test_available_species_lists_table():
    listed = available_species()
    assert len(listed) == len(SPECIES_PROFILES)
    assert {"key": "mahi mahi", "name": "Mahi-Mahi"} in listed


def test_largemouth_bass_at_dawn_clamps_to_100():
    base = _excellent_base()
    assert base["score"] == 87
    adjusted = SpeciesAdjuster().adjust(base, "largemouth bass")
    assert adjusted["score"] == 100
    assert adjusted["label"] == "Excellent"
    assert adjusted["species_adjusted"] is True
    assert adjusted["species_name"] == "largemouth bass"
    assert adjusted["original_score"] == 87
    assert "Prime time for this species" in adjusted["species_insights"]
    # base result is left untouched
    assert base["score"] == 87
    assert "species_adjusted" not in base


def test_water_temperature_in_range_bonus():
    adjusted = SpeciesAdjuster().adjust(_plain_base(), Species.TROUT, water_temp=10)
    assert adjusted["score"] == 55
    assert adjusted["label"] == "Good"
    assert adjusted["species_name"] == "trout"
    assert "Water temp 10°C is in the ideal range" in adjusted["species_insights"]


def test_water_temperature_far_outside_penalty():
    adjusted = SpeciesAdjuster().adjust(_plain_base(), "trout", water_temp=25)
    assert adjusted["score"] == 45
    assert "Water temp 25°C is outside preferred range" in adjusted["species_insights"]


def test_water_temperature_near_range_is_neutral():
    adjusted = SpeciesAdjuster().adjust(_plain_base(), "trout", water_temp=18)
    assert adjusted["score"] == 50
    assert adjusted["species_insights"] == []


def test_unknown_species_returns_base_unchanged():
    base = _plain_base(62)
    assert SpeciesAdjuster().adjust(base, "goldfish") is base


def test_degraded_base_is_not_adjusted():
    base = {"score": 50, "label": "Fair", "error": "Weather data unavailable"}
    assert SpeciesAdjuster().adjust(base, "trout", water_temp=10) is base


def test_custom_profile_is_clamped():
    profiles = {"test fish": {"display_name": "Test Fish", "wind": lambda w: 2.0}}
    base = {"score": 99, "label": "Excellent", "weather": {"wind": 5}, "factors": {}}
    adjusted = SpeciesAdjuster(profiles).adjust(base, "Test Fish")
    assert adjusted["score"] == 100
    assert adjusted["original_score"] == 99


def test_tide_insights_for_saltwater_species():
    base = _excellent_base()
    adjusted = SpeciesAdjuster().adjust(base, "tarpon")
    assert "Tide is ideal for this species" in adjusted["species_insights"]
    falling = dict(base, tide={"state": "falling", "progress": 50})
    adjusted = SpeciesAdjuster().adjust(falling, "tarpon")
    assert "Tide is unfavorable for this species" in adjusted["species_insights"]


def test_time_of_day_uses_local_hour_of_aware_result():
    eastern = timezone(timedelta(hours=-5))
    base = ScoringEngine().score(
        {"latitude": 40.0, "longitude": -74.0},
        datetime(2025, 6, 21, 6, 0, tzinfo=eastern),
        {"pressure_msl": 1016, "wind_speed": 8, "cloud_cover": 65, "precipitation": 0},
        None,
        solunar={"major": [], "minor": [], "moon_phase": {"fishing_rating": 3}, "sun_times": {}, "overall_rating": 3},
    )
    assert base["factors"]["timeOfDay"] == 90
    assert base["forecast_time"] == "2025-06-21T06:00:00-05:00"

    adjusted = SpeciesAdjuster().adjust(base, "largemouth bass")
    assert "Prime time for this species" in adjusted["species_insights"]
