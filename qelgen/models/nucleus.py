"""Nuclear ground-state parameter models.

Energies/momenta in GeV, lengths in fm.
"""

from dataclasses import dataclass


@dataclass
class NucleusData:
    """Tabulated Fermi-gas parameters for one nucleus.

    Attributes:
        a: Mass number.
        z: Proton number.
        symbol: Element symbol (e.g. "C").
        fermi_momentum_p: Global proton Fermi momentum [GeV/c].
        fermi_momentum_n: Global neutron Fermi momentum [GeV/c].
        removal_energy: Average nucleon removal energy [GeV].
        radius_fm: Woods-Saxon half-density radius [fm].
        diffuseness_fm: Woods-Saxon surface diffuseness [fm].
    """
    a: int = 1
    z: int = 1
    symbol: str = ""
    fermi_momentum_p: float = 0.0
    fermi_momentum_n: float = 0.0
    removal_energy: float = 0.0
    radius_fm: float = 0.0
    diffuseness_fm: float = 0.54
