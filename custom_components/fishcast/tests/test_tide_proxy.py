from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from custom_components.fishcast.tide_proxy import TideProxy, state_from_extremes

NOW = datetime(2025, 6, 21, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _ex(ts, kind):
    return {"timestamp": ts, "height_m": 1.0 if kind == "high" else -1.0, "type": kind}


def test_state_rising_after_low():
    extremes = [_ex("2025-06-21T10:00:00Z", "low"), _ex("2025-06-21T16:00:00Z", "high")]
    state = state_from_extremes(extremes, NOW)
    assert state["state"] == "rising"
    assert state["progress"] == 33
    assert state["last_extreme"]["type"] == "low"
    assert state["next_extreme"]["type"] == "high"


def test_state_falling_after_high():
    extremes = [_ex("2025-06-21T16:00:00Z", "low"), _ex("2025-06-21T09:00:00Z", "high")]
    state = state_from_extremes(extremes, NOW)
    assert state["state"] == "falling"
    assert 0 <= state["progress"] <= 100


def test_state_unknown_without_bracketing_extremes():
    state = state_from_extremes([_ex("2025-06-21T10:00:00Z", "low")], NOW)
    assert state["state"] == "unknown"
    assert state["next_extreme"] is None


def test_invalid_coefficients_rejected():
    with pytest.raises(ValueError):
        TideProxy(coef_vec=[1.0, 0.0])


def test_heights_are_vectorized():
    proxy = TideProxy()
    epochs = NOW.timestamp() + np.arange(0, 3600 * 6, 600)
    heights = proxy.heights(epochs, 0.0)
    assert heights.shape == epochs.shape
    assert np.all(np.isfinite(heights))


def test_extremes_alternate_between_high_and_low():
    proxy = TideProxy()
    start = NOW.timestamp()
    extremes = proxy.find_extremes(start, start + 2 * 86400, -70.0)
    assert len(extremes) >= 4
    kinds = [e["type"] for e in extremes]
    assert all(a != b for a, b in zip(kinds, kinds[1:]))
    times = [e["timestamp"] for e in extremes]
    assert times == sorted(times)


def test_find_extremes_empty_range():
    assert TideProxy().find_extremes(100.0, 100.0, 0.0) == []


def test_state_at_includes_height_and_source():
    state = TideProxy().state_at(-70.0, NOW)
    assert state["state"] in ("rising", "falling")
    assert state["last_extreme"]["type"] != state["next_extreme"]["type"]
    assert state["source"] == "tide_proxy"
    assert isinstance(state["height_m"], float)


@pytest.mark.asyncio
async def test_current_state_is_cached_per_location():
    clock = FakeClock()
    proxy = TideProxy(ttl=900, clock=clock)
    first = await proxy.get_current_tide_state(41.5, -70.7, NOW)
    again = await proxy.get_current_tide_state(41.5, -70.7, NOW + timedelta(minutes=5))
    assert again is first

    clock.now += 901
    refreshed = await proxy.get_current_tide_state(41.5, -70.7, NOW)
    assert refreshed is not first


@pytest.mark.asyncio
async def test_distant_time_is_not_served_from_cache():
    proxy = TideProxy(clock=FakeClock())
    first = await proxy.get_current_tide_state(41.5, -70.7, NOW)
    later = await proxy.get_current_tide_state(41.5, -70.7, NOW + timedelta(hours=3))
    assert later is not first
