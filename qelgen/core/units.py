"""Unit conversion module: single conversion point for core quantities.

Internal (core) units:
    Energy   : GeV
    Momentum : GeV/c
    Q2       : GeV²
    Radius   : fm
    Angle    : radian

Configuration units:
    Energy   : GeV or MeV
    Angle    : degree (EM minimum scattering angle)
"""

import math
from typing import NewType

# Type aliases
GeV = NewType('GeV', float)
MeV = NewType('MeV', float)
Fm = NewType('Fm', float)
InvGeV = NewType('InvGeV', float)
Radian = NewType('Radian', float)

# ħc [GeV·fm]
HBAR_C_GEV_FM = 0.1973269804


# ---------------------------------------------------------------------------
# Energy conversions
# ---------------------------------------------------------------------------

def MeV_to_GeV(mev: float) -> GeV:
    """MeV → GeV."""
    return GeV(mev / 1000.0)


def GeV_to_MeV(gev: float) -> MeV:
    """GeV → MeV."""
    return MeV(gev * 1000.0)


# ---------------------------------------------------------------------------
# Angle conversions
# ---------------------------------------------------------------------------

def deg_to_rad(deg: float) -> Radian:
    """Degree → Radian."""
    return Radian(deg * (math.pi / 180.0))


def rad_to_deg(rad: float) -> float:
    """Radian → Degree."""
    return rad * (180.0 / math.pi)


# ---------------------------------------------------------------------------
# Length / inverse-momentum conversions
# ---------------------------------------------------------------------------

def fm_to_inv_GeV(fm: float) -> InvGeV:
    """Length [fm] → natural units [GeV⁻¹]."""
    return InvGeV(fm / HBAR_C_GEV_FM)


def inv_GeV_to_fm(inv_gev: float) -> Fm:
    """Natural units [GeV⁻¹] → length [fm]."""
    return Fm(inv_gev * HBAR_C_GEV_FM)


def density_to_fermi_momentum(density_fm3: float) -> GeV:
    """Nucleon number density of one species [fm⁻³] → Fermi momentum [GeV/c].

    k_F = ħc (3π² ρ)^(1/3)

    Args:
        density_fm3: Density of protons or neutrons [fm⁻³].

    Returns:
        Local Fermi momentum [GeV/c].
    """
    if density_fm3 <= 0.0:
        return GeV(0.0)
    return GeV(HBAR_C_GEV_FM * (3.0 * math.pi ** 2 * density_fm3) ** (1.0 / 3.0))
