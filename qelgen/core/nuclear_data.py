"""Nuclear data service: Fermi-gas parameters and nuclear densities.

Provides global Fermi momenta and removal energies (Smith-Moniz /
Bodek-Ritchie style table) and a Woods-Saxon density for the local
Fermi gas. Nuclei missing from the table fall back to the nearest
tabulated mass number.

All returned momenta/energies in GeV, densities in fm⁻³.
"""

import logging
import math

from scipy import integrate

from qelgen.core import pdg
from qelgen.core.units import density_to_fermi_momentum
from qelgen.models.nucleus import NucleusData

logger = logging.getLogger(__name__)

_WOODS_SAXON_R0_FM = 1.12
_WOODS_SAXON_DIFFUSENESS_FM = 0.54

# A → (Z, symbol, kF_p, kF_n, E_removal)
_NUCLEI: dict[int, tuple[int, str, float, float, float]] = {
    2: (1, "H", 0.088, 0.088, 0.0022),
    4: (2, "He", 0.169, 0.169, 0.0200),
    6: (3, "Li", 0.169, 0.169, 0.0170),
    12: (6, "C", 0.221, 0.221, 0.0250),
    16: (8, "O", 0.225, 0.225, 0.0270),
    20: (10, "Ne", 0.225, 0.225, 0.0270),
    27: (13, "Al", 0.239, 0.239, 0.0280),
    40: (18, "Ar", 0.251, 0.263, 0.0295),
    56: (26, "Fe", 0.251, 0.263, 0.0360),
    208: (82, "Pb", 0.245, 0.265, 0.0440),
}


class NuclearDataService:
    """Lookup service for nuclear ground-state parameters.

    Args:
        extra_nuclei: Optional additional entries keyed by mass number,
                      overriding the built-in table.
    """

    def __init__(self, extra_nuclei: dict[int, NucleusData] | None = None) -> None:
        self._nuclei: dict[int, NucleusData] = {}
        self._norm_cache: dict[int, float] = {}
        for a, (z, symbol, kfp, kfn, eb) in _NUCLEI.items():
            self._nuclei[a] = NucleusData(
                a=a,
                z=z,
                symbol=symbol,
                fermi_momentum_p=kfp,
                fermi_momentum_n=kfn,
                removal_energy=eb,
                radius_fm=_WOODS_SAXON_R0_FM * a ** (1.0 / 3.0),
                diffuseness_fm=_WOODS_SAXON_DIFFUSENESS_FM,
            )
        if extra_nuclei:
            self._nuclei.update(extra_nuclei)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_nucleus(self, target_pdg: int) -> NucleusData:
        """Return parameters for a nuclear code, falling back to the nearest A.

        Raises:
            ValueError: If *target_pdg* is not a nucleus.
        """
        a = pdg.ion_a(target_pdg)
        if a < 2:
            raise ValueError(f"Not a composite nucleus: {target_pdg}")
        if a in self._nuclei:
            return self._nuclei[a]
        nearest = min(self._nuclei, key=lambda k: abs(k - a))
        logger.warning(
            "No nuclear data for A=%d; using A=%d (%s)",
            a, nearest, self._nuclei[nearest].symbol,
        )
        return self._nuclei[nearest]

    def fermi_momentum(self, target_pdg: int, nucleon_pdg: int) -> float:
        """Global Fermi momentum of a nucleon species [GeV/c]."""
        data = self.get_nucleus(target_pdg)
        if pdg.is_proton(nucleon_pdg):
            return data.fermi_momentum_p
        return data.fermi_momentum_n

    def removal_energy(self, target_pdg: int) -> float:
        """Average removal energy [GeV]."""
        return self.get_nucleus(target_pdg).removal_energy

    def density(self, target_pdg: int, radius_fm: float) -> float:
        """Woods-Saxon nucleon number density ρ(r) normalized to A [fm⁻³].

        ρ(r) = ρ₀ / (1 + exp((r - R)/a))
        """
        a_num = pdg.ion_a(target_pdg)
        data = self.get_nucleus(target_pdg)
        rho0 = self._central_density(a_num, data)
        return rho0 * self._woods_saxon_shape(radius_fm, data)

    def local_fermi_momentum(
        self, target_pdg: int, nucleon_pdg: int, radius_fm: float,
    ) -> float:
        """Local Fermi momentum of a nucleon species at radius r [GeV/c]."""
        a_num = pdg.ion_a(target_pdg)
        z_num = pdg.ion_z(target_pdg)
        fraction = z_num / a_num if pdg.is_proton(nucleon_pdg) else (a_num - z_num) / a_num
        return density_to_fermi_momentum(fraction * self.density(target_pdg, radius_fm))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _woods_saxon_shape(radius_fm: float, data: NucleusData) -> float:
        arg = (radius_fm - data.radius_fm) / data.diffuseness_fm
        if arg > 700.0:
            return 0.0
        return 1.0 / (1.0 + math.exp(arg))

    def _central_density(self, a_num: int, data: NucleusData) -> float:
        if a_num not in self._norm_cache:
            volume, _ = integrate.quad(
                lambda r: 4.0 * math.pi * r * r * self._woods_saxon_shape(r, data),
                0.0,
                data.radius_fm + 20.0 * data.diffuseness_fm,
            )
            self._norm_cache[a_num] = a_num / volume
        return self._norm_cache[a_num]
