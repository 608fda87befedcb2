"""Harmonic tide approximation for FishCast.

This is an astronomical approximation, not station data: heights are the sum
of the main tidal constituents with heuristic relative amplitudes, phased
from a reference lunar transit and shifted by longitude. It is good enough
to tell a rising tide from a falling one and how far it has run between
high and low water, which is all the scoring needs.
"""
from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .cache import coord_key
from .const import TIDE_CACHE_TTL, TIDE_STATE_FALLING, TIDE_STATE_RISING, TIDE_STATE_UNKNOWN
from .data_schema import TideExtreme, TideState
from .errors import TideUnavailableError
from .unit_helpers import as_utc, coerce_datetime, iso_z, round_half_up

_LOGGER = logging.getLogger(__name__)

_TIDE_HALF_DAY_HOURS = 12.42
_SECONDS_PER_HOUR = 3600.0

# numeric tolerances
EPS_ROOT = 1e-12
BISECT_TOL_SEC = 1.0
GRID_SECONDS_DEFAULT = 300  # 5 minutes

# how far either side of `now` to look for the surrounding high/low water
SEARCH_WINDOW_HOURS = 14.0

# New moon of 2000-01-06 18:14 UTC, used as the Greenwich transit reference
REFERENCE_TRANSIT_EPOCH = 947182440.0

# Constituent metadata (canonical)
CONSTITUENT_PERIOD_HOURS: Dict[str, float] = {
    "M2": 12.4206,
    "S2": 12.0,
    "N2": 12.6583,
    "K1": 23.9345,
    "O1": 25.8193,
    "P1": 24.0659,
    "Q1": 26.8683,
    "S1": 24.0,
    "M4": 12.4206 / 2.0,
    "M6": 12.4206 / 3.0,
}

# Default relative amplitudes (heuristic; not station-specific)
CONSTITUENT_DEFAULT_RATIOS: Dict[str, float] = {
    "M2": 1.00,
    "S2": 0.25,
    "N2": 0.18,
    "K1": 0.45,
    "O1": 0.25,
    "P1": 0.12,
    "Q1": 0.08,
    "S1": 0.06,
    "M4": 0.06,
    "M6": 0.02,
}


def _extreme(epoch: float, height: float, kind: str) -> TideExtreme:
    return {
        "timestamp": iso_z(datetime.fromtimestamp(epoch, tz=timezone.utc)),
        "height_m": round(float(height), 3),
        "type": kind,
    }


def state_from_extremes(extremes: Sequence[TideExtreme], now: Any) -> TideState:
    """Rising/falling and percent progress between the extremes around `now`.

    The tide is rising when the last extreme before `now` was a low. Without
    an extreme on both sides the state is unknown.
    """
    when = coerce_datetime(now)
    if when is None:
        return {"state": TIDE_STATE_UNKNOWN, "progress": 0}
    when = as_utc(when)

    parsed: List[Tuple[datetime, TideExtreme]] = []
    for ex in extremes or ():
        ts = coerce_datetime(ex.get("timestamp"))
        if ts is not None:
            parsed.append((as_utc(ts), ex))
    parsed.sort(key=lambda item: item[0])

    last = None
    nxt = None
    for ts, ex in parsed:
        if ts <= when:
            last = (ts, ex)
        elif nxt is None:
            nxt = (ts, ex)
    if last is None or nxt is None:
        return {
            "state": TIDE_STATE_UNKNOWN,
            "progress": 0,
            "last_extreme": last[1] if last else None,
            "next_extreme": nxt[1] if nxt else None,
        }

    span = (nxt[0] - last[0]).total_seconds()
    elapsed = (when - last[0]).total_seconds()
    progress = round_half_up(100.0 * elapsed / span) if span > 0 else 0
    state = TIDE_STATE_RISING if str(last[1].get("type")).lower() == "low" else TIDE_STATE_FALLING
    return {
        "state": state,
        "progress": max(0, min(100, progress)),
        "last_extreme": last[1],
        "next_extreme": nxt[1],
    }


class TideProxy:
    """
    Harmonic tide model with an in-memory per-location cache.

    Coefficients are (A_cos, B_sin) pairs per constituent in
    CONSTITUENT_PERIOD_HOURS order; by default they are derived from
    CONSTITUENT_DEFAULT_RATIOS with an M2 amplitude of `default_m2_amp`.
    """

    def __init__(
        self,
        ttl: int = TIDE_CACHE_TTL,
        *,
        coef_vec: Optional[Sequence[float]] = None,
        default_m2_amp: float = 1.0,
        bias: float = 0.0,
        clock=time.time,
    ) -> None:
        self._ttl = int(ttl)
        self._clock = clock
        self._constituents = list(CONSTITUENT_PERIOD_HOURS.keys())
        self._omegas = np.array(
            [2.0 * math.pi / (CONSTITUENT_PERIOD_HOURS[c] * _SECONDS_PER_HOUR) for c in self._constituents],
            dtype=float,
        )
        self._bias = float(bias)
        self._cache: Dict[str, Dict[str, Any]] = {}

        if coef_vec is not None:
            arr = np.asarray(coef_vec, dtype=float)
            if arr.size != 2 * len(self._constituents):
                raise ValueError(
                    f"coef_vec length {arr.size} != expected {2 * len(self._constituents)}"
                )
            self._coef_vec = arr.copy()
        else:
            self._coef_vec = self._build_default_coef_vec(default_m2_amp)

        _LOGGER.debug("TideProxy initialized coef_len=%d bias=%.3f", self._coef_vec.size, self._bias)

    def _build_default_coef_vec(self, m2_amp: float) -> np.ndarray:
        vals: List[float] = []
        for c in self._constituents:
            vals.extend([float(m2_amp * CONSTITUENT_DEFAULT_RATIOS.get(c, 0.0)), 0.0])
        return np.asarray(vals, dtype=float)

    @staticmethod
    def _anchor(longitude: float) -> float:
        # the transit reaches western longitudes later
        period_seconds = _TIDE_HALF_DAY_HOURS * _SECONDS_PER_HOUR
        return REFERENCE_TRANSIT_EPOCH - (float(longitude) / 360.0) * period_seconds

    def heights(self, epochs: Any, longitude: float) -> np.ndarray:
        """Modelled water level (m, relative) at epoch seconds."""
        t_rel = np.atleast_1d(np.asarray(epochs, dtype=float)) - self._anchor(longitude)
        phase = np.outer(t_rel, self._omegas)
        a = self._coef_vec[0::2]
        b = self._coef_vec[1::2]
        return (np.cos(phase) * a + np.sin(phase) * b).sum(axis=1) + self._bias

    def derivative(self, epochs: Any, longitude: float) -> np.ndarray:
        """d(height)/dt in m/s at epoch seconds."""
        t_rel = np.atleast_1d(np.asarray(epochs, dtype=float)) - self._anchor(longitude)
        phase = np.outer(t_rel, self._omegas)
        a = self._coef_vec[0::2] * self._omegas
        b = self._coef_vec[1::2] * self._omegas
        return (-np.sin(phase) * a + np.cos(phase) * b).sum(axis=1)

    def _root(self, a: float, b: float, longitude: float, maxiter: int = 60) -> Optional[float]:
        """Bisection on the derivative inside [a, b]."""
        f = lambda t: float(self.derivative(t, longitude)[0])  # noqa: E731
        fa = f(a)
        fb = f(b)
        if abs(fa) < EPS_ROOT:
            return a
        if abs(fb) < EPS_ROOT:
            return b
        if fa * fb > 0:
            return None
        lo, hi = a, b
        for _ in range(maxiter):
            mid = 0.5 * (lo + hi)
            fm = f(mid)
            if abs(fm) < EPS_ROOT or (hi - lo) < BISECT_TOL_SEC:
                return mid
            if fa * fm <= 0:
                hi = mid
            else:
                lo = mid
                fa = fm
        return 0.5 * (lo + hi)

    def find_extremes(self, start: float, end: float, longitude: float) -> List[TideExtreme]:
        """High and low waters between two epochs, in time order.

        The derivative is sampled on a 5-minute grid and every sign change is
        refined by bisection; a + to - change is a high water.
        """
        if end <= start:
            return []
        step = float(GRID_SECONDS_DEFAULT)
        grid = np.arange(start, end + 0.5 * step, step, dtype=float)
        d_grid = self.derivative(grid, longitude)

        out: List[TideExtreme] = []
        for idx in np.where(d_grid[:-1] * d_grid[1:] < 0)[0]:
            a = float(grid[idx])
            b = float(grid[idx + 1])
            root = self._root(a, b, longitude)
            if root is None:
                continue
            kind = "high" if d_grid[idx] > 0 else "low"
            out.append(_extreme(root, float(self.heights(root, longitude)[0]), kind))
        return out

    def state_at(self, longitude: float, now: datetime) -> TideState:
        now_ts = as_utc(now).timestamp()
        window = SEARCH_WINDOW_HOURS * _SECONDS_PER_HOUR
        extremes = self.find_extremes(now_ts - window, now_ts + window, longitude)
        state = state_from_extremes(extremes, now)
        height = float(self.heights(now_ts, longitude)[0])
        if not math.isfinite(height):
            raise TideUnavailableError("Tide model produced a non-finite height")
        state["height_m"] = round(height, 3)
        state["source"] = "tide_proxy"
        return state

    async def get_current_tide_state(self, latitude: float, longitude: float, now: Any = None) -> TideState:
        """Tide state at a coordinate, cached per rounded location."""
        when = coerce_datetime(now) if now is not None else datetime.now(timezone.utc)
        if when is None:
            raise TideUnavailableError(f"Invalid tide timestamp: {now!r}")
        key = coord_key("tide", latitude, longitude)
        at = as_utc(when).timestamp()

        entry = self._cache.get(key)
        if (
            entry is not None
            and self._clock() < entry["expires_at"]
            and abs(at - entry["at"]) < self._ttl
        ):
            return entry["data"]

        try:
            state = self.state_at(float(longitude), when)
        except (ValueError, FloatingPointError) as exc:
            raise TideUnavailableError(f"Tide model failed for {latitude},{longitude}") from exc

        if state.get("state") == TIDE_STATE_UNKNOWN:
            _LOGGER.debug("No bracketing extremes found for %s,%s at %s", latitude, longitude, when)
        self._cache[key] = {"data": state, "at": at, "expires_at": self._clock() + self._ttl}
        return state
