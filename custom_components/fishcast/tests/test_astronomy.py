from datetime import date, datetime, timedelta

import pytest

from custom_components.fishcast.astronomy import (
    day_of_year,
    get_moon_phase,
    get_sun_times,
    moon_fishing_rating,
    moon_phase_name,
)
from custom_components.fishcast.const import MOON_PHASE_NAMES, SYNODIC_MONTH_DAYS


def test_day_of_year():
    assert day_of_year(date(2025, 1, 1)) == 1
    assert day_of_year(date(2025, 3, 22)) == 81
    assert day_of_year(date(2024, 12, 31)) == 366


def test_moon_phase_full_moon_2024_06_21():
    moon = get_moon_phase(date(2024, 6, 21))
    assert moon["phase"] == pytest.approx(14 / SYNODIC_MONTH_DAYS)
    assert moon["name"] == "Full Moon"
    assert moon["fishing_rating"] == 5
    assert moon["illumination"] == 99


def test_moon_phase_waning_crescent_2025_06_21():
    moon = get_moon_phase(datetime(2025, 6, 21, 18, 30))
    assert moon["phase"] == pytest.approx(25 / SYNODIC_MONTH_DAYS)
    assert moon["name"] == "Waning Crescent"
    assert 0 <= moon["illumination"] <= 100


def test_moon_phase_before_2000_uses_older_correction():
    moon = get_moon_phase(date(1999, 1, 1))
    assert moon["phase"] == pytest.approx(14 / SYNODIC_MONTH_DAYS)


def test_moon_phase_repeats_after_a_lunation():
    start = date(2024, 1, 5)
    for i in range(0, 360, 7):
        d = start + timedelta(days=i)
        a = get_moon_phase(d)["phase"]
        b = get_moon_phase(d + timedelta(days=30))["phase"]
        diff = abs(a - b) % 1.0
        assert min(diff, 1.0 - diff) < 4 / SYNODIC_MONTH_DAYS


def test_moon_phase_fields_in_range():
    d = date(2023, 1, 1)
    for i in range(0, 400, 3):
        moon = get_moon_phase(d + timedelta(days=i))
        assert 0.0 <= moon["phase"] < 1.0
        assert 0 <= moon["illumination"] <= 100
        assert moon["name"] in MOON_PHASE_NAMES
        assert 1 <= moon["fishing_rating"] <= 5


@pytest.mark.parametrize(
    "phase,name",
    [
        (0.0, "New Moon"),
        (0.98, "New Moon"),
        (0.1, "Waxing Crescent"),
        (0.25, "First Quarter"),
        (0.4, "Waxing Gibbous"),
        (0.5, "Full Moon"),
        (0.6, "Waning Gibbous"),
        (0.75, "Last Quarter"),
        (0.9, "Waning Crescent"),
    ],
)
def test_moon_phase_name_bands(phase, name):
    assert moon_phase_name(phase) == name


def test_moon_fishing_rating_bands():
    assert moon_fishing_rating(0.02) == 5
    assert moon_fishing_rating(0.57) == 4
    assert moon_fishing_rating(0.15) == 3
    assert moon_fishing_rating(0.75) == 2
    # the quarters are the furthest a phase can be from new or full
    assert moon_fishing_rating(0.25) == 2


def test_sun_times_equator_equinox():
    sun = get_sun_times(0.0, 0.0, date(2025, 3, 22))
    assert sun["sunrise"] == "2025-03-22T06:04:00Z"
    assert sun["sunset"] == "2025-03-22T18:10:00Z"
    assert sun["solar_noon"] == "2025-03-22T12:07:00Z"
    assert sun["golden_hour_morning"] == "2025-03-22T07:04:00Z"
    assert sun["golden_hour_evening"] == "2025-03-22T17:10:00Z"
    assert sun["day_length_hours"] == pytest.approx(12.1)


def test_sun_times_shift_with_longitude():
    east = get_sun_times(0.0, 15.0, date(2025, 3, 22))
    west = get_sun_times(0.0, 0.0, date(2025, 3, 22))
    # 15 degrees east is one hour earlier
    assert east["sunrise"] == "2025-03-22T05:04:00Z"
    assert west["sunrise"] == "2025-03-22T06:04:00Z"


def test_polar_day_and_night():
    assert get_sun_times(80.0, 0.0, date(2025, 6, 21)) == {"midnight_sun": True}
    assert get_sun_times(80.0, 0.0, date(2025, 12, 21)) == {"polar_night": True}
    assert get_sun_times(-80.0, 0.0, date(2025, 6, 21)) == {"polar_night": True}


def test_invalid_date_raises():
    with pytest.raises(ValueError):
        get_moon_phase("not a date")
