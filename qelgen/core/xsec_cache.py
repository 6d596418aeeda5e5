"""Cache of maximum differential cross sections.

One branch per interaction key (``Interaction.as_string()``), each
holding (probe energy → max xsec) points. Lookups return exact hits,
or a monotone spline interpolation once a branch has enough points and
the energy lies within the cached range. Energies below the configured
minimum are never cached, forcing an explicit computation.

Safe to share between threads.
"""

from __future__ import annotations

import logging
import threading

import numpy as np
from scipy.interpolate import PchipInterpolator

from qelgen.constants import CACHE_MIN_SPLINE_POINTS, DEFAULT_CACHE_MIN_ENERGY_GEV

logger = logging.getLogger(__name__)


class MaxXSecCache:
    """Thread-safe, read-mostly max-xsec cache.

    Args:
        min_energy: Probe energies below this [GeV] are not cached.
    """

    def __init__(self, min_energy: float = DEFAULT_CACHE_MIN_ENERGY_GEV) -> None:
        self._min_energy = min_energy
        self._branches: dict[str, dict[float, float]] = {}
        self._splines: dict[str, PchipInterpolator] = {}
        self._lock = threading.RLock()

    def find(self, key: str, energy: float) -> float | None:
        """Cached max xsec for *key* at *energy*, or None if unavailable."""
        if energy < self._min_energy:
            return None

        with self._lock:
            branch = self._branches.get(key)
            if not branch:
                return None
            if energy in branch:
                return branch[energy]
            if len(branch) < CACHE_MIN_SPLINE_POINTS:
                return None

            spline = self._splines.get(key)
            if spline is None:
                energies = np.array(sorted(branch))
                values = np.array([branch[e] for e in energies])
                spline = PchipInterpolator(energies, values, extrapolate=False)
                self._splines[key] = spline

        value = float(spline(energy))
        if not np.isfinite(value) or value <= 0.0:
            return None
        logger.debug("Interpolated cached max xsec for %s at E = %.4f GeV", key, energy)
        return value

    def store(self, key: str, energy: float, xsec_max: float) -> None:
        """Add a computed max xsec; non-positive values are not cached."""
        if energy < self._min_energy or xsec_max <= 0.0:
            return
        with self._lock:
            self._branches.setdefault(key, {})[energy] = xsec_max
            self._splines.pop(key, None)

    def size(self, key: str | None = None) -> int:
        with self._lock:
            if key is not None:
                return len(self._branches.get(key, {}))
            return sum(len(b) for b in self._branches.values())

    def clear(self) -> None:
        with self._lock:
            self._branches.clear()
            self._splines.clear()
