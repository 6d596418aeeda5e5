"""Nuclear ground-state models: struck nucleon momentum and removal energy.

A nuclear model holds the state of the most recently generated nucleon
(3-momentum and removal energy). The generator and the max-xsec
estimator read that state back, and may force it through the setters.

Each instance owns its own numpy random Generator so that parallel
workers can be given independent, reproducible streams.

All momenta in GeV/c, energies in GeV, radii in fm.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from qelgen.core import pdg
from qelgen.core.nuclear_data import NuclearDataService
from qelgen.models.interaction import Target


class NuclearModel:
    """Base class for nuclear models.

    Args:
        nuclear_data: Parameter lookup service. A default one is created if None.
        rng: numpy random Generator instance (for reproducibility in tests).
             If None, creates a default unseeded generator.
    """

    name = "NuclearModel"

    def __init__(
        self,
        nuclear_data: NuclearDataService | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._data = nuclear_data or NuclearDataService()
        self._rng = rng or np.random.default_rng()
        self._momentum3 = np.zeros(3, dtype=np.float64)
        self._removal_energy = 0.0

    @property
    def rng(self) -> np.random.Generator:
        """Access the random number generator."""
        return self._rng

    @property
    def nuclear_data(self) -> NuclearDataService:
        return self._data

    @property
    def momentum3(self) -> NDArray[np.float64]:
        """3-momentum of the current nucleon [GeV/c] (copy)."""
        return self._momentum3.copy()

    @property
    def momentum(self) -> float:
        """|p| of the current nucleon [GeV/c]."""
        return float(np.linalg.norm(self._momentum3))

    @property
    def removal_energy(self) -> float:
        """Removal energy of the current nucleon [GeV]."""
        return self._removal_energy

    def set_momentum3(self, p3: NDArray[np.float64]) -> None:
        self._momentum3 = np.asarray(p3, dtype=np.float64).copy()

    def set_removal_energy(self, energy: float) -> None:
        self._removal_energy = float(energy)

    def generate_nucleon(self, target: Target, radius: float = 0.0) -> bool:
        """Sample a struck nucleon state for *target* at *radius* [fm].

        Returns:
            True if a nucleon was generated.
        """
        raise NotImplementedError

    def _isotropic_momentum(self, p_fermi: float) -> NDArray[np.float64]:
        """Momentum uniformly distributed inside a sphere of radius p_fermi."""
        p = p_fermi * self._rng.random() ** (1.0 / 3.0)
        cos_theta = self._rng.uniform(-1.0, 1.0)
        phi = 2.0 * math.pi * self._rng.random()
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
        return np.array([
            p * sin_theta * math.cos(phi),
            p * sin_theta * math.sin(phi),
            p * cos_theta,
        ])


class FermiGasModel(NuclearModel):
    """Global relativistic Fermi gas.

    Momentum is uniform inside the Fermi sphere of the struck nucleon
    species; the removal energy is the tabulated average.
    """

    name = "FermiGas"

    def generate_nucleon(self, target: Target, radius: float = 0.0) -> bool:
        if not target.is_nucleus():
            self._momentum3 = np.zeros(3)
            self._removal_energy = 0.0
            return False

        k_f = self._data.fermi_momentum(target.pdg, target.hit_nuc_pdg)
        self._momentum3 = self._isotropic_momentum(k_f)
        self._removal_energy = self._data.removal_energy(target.pdg)
        return True


class LocalFermiGasModel(NuclearModel):
    """Local Fermi gas.

    The Fermi momentum follows the Woods-Saxon density at the nucleon
    radius. The removal energy is the tabulated separation energy plus
    the depth of the nucleon below the local Fermi surface:

        E_rm = ε + (k_F(r)² - p²) / 2M
    """

    name = "LocalFermiGas"

    def local_fermi_momentum(self, target: Target, nucleon_pdg: int, radius: float) -> float:
        """Local Fermi momentum at *radius* [GeV/c]."""
        return self._data.local_fermi_momentum(target.pdg, nucleon_pdg, radius)

    def generate_nucleon(self, target: Target, radius: float = 0.0) -> bool:
        if not target.is_nucleus():
            self._momentum3 = np.zeros(3)
            self._removal_energy = 0.0
            return False

        k_f = self.local_fermi_momentum(target, target.hit_nuc_pdg, radius)
        self._momentum3 = self._isotropic_momentum(k_f)

        m_nuc = pdg.mass(target.hit_nuc_pdg)
        p2 = float(np.dot(self._momentum3, self._momentum3))
        separation = self._data.removal_energy(target.pdg)
        self._removal_energy = separation + max(0.0, k_f * k_f - p2) / (2.0 * m_nuc)
        return True
