"""Particle data: PDG codes, masses and code utilities.

All masses in GeV/c² (core units).

Nuclear codes follow the 10LZZZAAAI convention: 100ZZZAAA0.
"""

import math

# Leptons
ELECTRON = 11
NU_E = 12
MUON = 13
NU_MU = 14
TAU = 15
NU_TAU = 16

# Nucleons
PROTON = 2212
NEUTRON = 2112

# Strange baryons
LAMBDA = 3122
SIGMA_P = 3222
SIGMA_0 = 3212
SIGMA_M = 3112

# Charm baryons
LAMBDA_C_P = 4122
SIGMA_C_P = 4212
SIGMA_C_PP = 4222

# Free nucleon targets
TARGET_FREE_PROTON = 1000010010
TARGET_FREE_NEUTRON = 1000000010

_MASSES_GEV: dict[int, float] = {
    ELECTRON: 0.000510999,
    MUON: 0.105658375,
    TAU: 1.77686,
    NU_E: 0.0,
    NU_MU: 0.0,
    NU_TAU: 0.0,
    PROTON: 0.938272081,
    NEUTRON: 0.939565413,
    LAMBDA: 1.115683,
    SIGMA_P: 1.18937,
    SIGMA_0: 1.192642,
    SIGMA_M: 1.197449,
    LAMBDA_C_P: 2.28646,
    SIGMA_C_P: 2.4529,
    SIGMA_C_PP: 2.45397,
}

# Semi-empirical mass formula coefficients [GeV]
_SEMF_VOLUME = 0.01575
_SEMF_SURFACE = 0.0178
_SEMF_COULOMB = 0.000711
_SEMF_ASYMMETRY = 0.0237
_SEMF_PAIRING = 0.01118


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_proton(pdg: int) -> bool:
    return pdg == PROTON


def is_neutron(pdg: int) -> bool:
    return pdg == NEUTRON


def is_nucleon(pdg: int) -> bool:
    return pdg in (PROTON, NEUTRON)


def is_neutrino(pdg: int) -> bool:
    return abs(pdg) in (NU_E, NU_MU, NU_TAU)


def is_charged_lepton(pdg: int) -> bool:
    return abs(pdg) in (ELECTRON, MUON, TAU)


def is_ion(pdg: int) -> bool:
    return pdg > 1000000000


# ---------------------------------------------------------------------------
# Code transformations
# ---------------------------------------------------------------------------

def switch_proton_neutron(pdg: int) -> int:
    """p ↔ n, used for the recoil nucleon of CC interactions."""
    if pdg == PROTON:
        return NEUTRON
    if pdg == NEUTRON:
        return PROTON
    raise ValueError(f"Not a nucleon: {pdg}")


def neutrino_to_charged_lepton(pdg: int) -> int:
    """ν_l → l⁻ and ν̄_l → l⁺."""
    if not is_neutrino(pdg):
        raise ValueError(f"Not a neutrino: {pdg}")
    return pdg - 1 if pdg > 0 else pdg + 1


def ion_pdg_code(a: int, z: int) -> int:
    """Nuclear PDG code for mass number *a* and charge *z*."""
    if a < 1 or z < 0 or z > a:
        raise ValueError(f"Invalid nucleus: A={a}, Z={z}")
    return 1000000000 + z * 10000 + a * 10


def ion_a(pdg: int) -> int:
    return (pdg // 10) % 1000


def ion_z(pdg: int) -> int:
    return (pdg // 10000) % 1000


# ---------------------------------------------------------------------------
# Masses
# ---------------------------------------------------------------------------

def nucleus_mass(a: int, z: int) -> float:
    """Nuclear mass from the semi-empirical (Weizsäcker) mass formula.

    M = Z m_p + (A - Z) m_n - B(A, Z)

    Args:
        a: Mass number.
        z: Proton number.

    Returns:
        Nuclear mass [GeV/c²].
    """
    n = a - z
    free = z * _MASSES_GEV[PROTON] + n * _MASSES_GEV[NEUTRON]
    if a < 2:
        return free

    binding = (
        _SEMF_VOLUME * a
        - _SEMF_SURFACE * a ** (2.0 / 3.0)
        - _SEMF_COULOMB * z * (z - 1) / a ** (1.0 / 3.0)
        - _SEMF_ASYMMETRY * (a - 2 * z) ** 2 / a
    )
    if z % 2 == 0 and n % 2 == 0:
        binding += _SEMF_PAIRING / math.sqrt(a)
    elif z % 2 == 1 and n % 2 == 1:
        binding -= _SEMF_PAIRING / math.sqrt(a)

    return free - max(0.0, binding)


def mass(pdg: int) -> float:
    """Rest mass for a particle or nucleus code [GeV/c²].

    Raises:
        KeyError: If *pdg* is not a known particle code.
    """
    if is_ion(pdg):
        return nucleus_mass(ion_a(pdg), ion_z(pdg))
    try:
        return _MASSES_GEV[abs(pdg)]
    except KeyError:
        raise KeyError(f"Unknown PDG code: {pdg}")
