"""Struck-nucleon binding utility.

Writes the struck nucleon 4-momentum into an interaction from the
nuclear model state, putting it off the mass shell according to the
configured binding mode.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

from qelgen.core import lorentz, pdg
from qelgen.core.nuclear_model import NuclearModel
from qelgen.models.interaction import Interaction


class BindingMode(Enum):
    """How the removal energy of the struck nucleon is handled."""
    USE_NUCLEAR_MODEL = "UseNuclearModel"
    USE_GROUND_STATE_REMNANT = "UseGroundStateRemnant"
    ON_SHELL = "OnShell"
    ON_SHELL_WITH_CORRECTION = "OnShellWithCorrection"


def binding_mode_from_string(name: str) -> BindingMode:
    """Parse a binding mode name (e.g. "UseNuclearModel").

    Raises:
        ValueError: If *name* is not a known binding mode.
    """
    for mode in BindingMode:
        if mode.value == name or mode.name == name:
            return mode
    raise ValueError(f"Unknown binding mode: {name!r}")


def remnant_nucleus(a: int, z: int, hit_nucleon_pdg: int) -> tuple[int, int]:
    """(A, Z) of the nucleus left after removing the struck nucleon."""
    z_rem = z - 1 if pdg.is_proton(hit_nucleon_pdg) else z
    return a - 1, z_rem


def bind_hit_nucleon(
    interaction: Interaction,
    nuclear_model: NuclearModel,
    mode: BindingMode,
) -> float:
    """Set the struck nucleon 4-momentum from the nuclear model state.

    - Free nucleon targets are always at rest, on-shell and unbound.
    - USE_NUCLEAR_MODEL: E = M - E_rm, with E_rm from the nuclear model.
    - USE_GROUND_STATE_REMNANT: E = M_A - sqrt(M_rem² + p²), the remnant
      left in its ground state.
    - ON_SHELL / ON_SHELL_WITH_CORRECTION: E = sqrt(p² + M²).

    Args:
        interaction: Working interaction, updated in place.
        nuclear_model: Source of the nucleon 3-momentum and removal energy.
        mode: Binding mode.

    Returns:
        The removal energy applied [GeV].
    """
    target = interaction.target
    p3 = nuclear_model.momentum3
    p2 = float(p3 @ p3)
    m_nuc = target.hit_nuc_mass()

    removal_energy = 0.0
    if not target.is_nucleus():
        target.hit_nuc_p4 = lorentz.four_vector(m_nuc, np.zeros(3))
        return removal_energy
    if mode == BindingMode.USE_NUCLEAR_MODEL:
        removal_energy = nuclear_model.removal_energy
        energy = m_nuc - removal_energy
    elif mode == BindingMode.USE_GROUND_STATE_REMNANT:
        a_rem, z_rem = remnant_nucleus(target.a, target.z, target.hit_nuc_pdg)
        m_rem = pdg.nucleus_mass(a_rem, z_rem)
        energy = target.mass - math.sqrt(m_rem * m_rem + p2)
        removal_energy = m_nuc - energy
    else:
        energy = math.sqrt(p2 + m_nuc * m_nuc)

    target.hit_nuc_p4 = lorentz.four_vector(energy, p3)
    return removal_energy
