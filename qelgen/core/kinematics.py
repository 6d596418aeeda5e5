"""Kinematic bounds for quasi-elastic scattering.

Maximum centre-of-mass lepton angle, physical Q² range and the
(W, Q²) ↔ (x, y) conversions.

Energies in GeV, Q² in GeV².
"""

from __future__ import annotations

import math

from qelgen.constants import Q2_MIN_CUT, SMALL_NUMBER
from qelgen.core import lorentz, pdg
from qelgen.models.interaction import Interaction


def _kallen(x: float, y: float, z: float) -> float:
    return x * x + y * y + z * z - 2.0 * x * y - 2.0 * x * z - 2.0 * y * z


def cos_theta0_max(interaction: Interaction) -> float:
    """Maximum cos θ₀ of the outgoing lepton in the probe + nucleon COM frame.

    θ₀ is measured with respect to the COM velocity as seen in the lab.
    The bound comes from requiring a non-negative lab-frame energy
    transfer, i.e. E_l(lab) = γ(E*_l + β p*_l cos θ₀) ≤ E_ν(lab).

    Returns:
        cos θ₀ upper bound (not clamped to 1). A value ≤ -1 means no
        accessible phase space (e.g. below threshold).
    """
    init_state = interaction.init_state
    p4_tot = init_state.probe_p4 + init_state.target.hit_nuc_p4
    s = lorentz.mass2(p4_tot)
    m_lep = interaction.fs_prim_lepton_mass()
    m_nf = interaction.recoil_nucleon_mass()

    if s <= 0.0 or p4_tot[0] <= 0.0:
        return -2.0
    sqrt_s = math.sqrt(s)
    if sqrt_s < m_lep + m_nf:
        return -2.0

    e_lep = (s - m_nf * m_nf + m_lep * m_lep) / (2.0 * sqrt_s)
    p2_lep = e_lep * e_lep - m_lep * m_lep
    if p2_lep < 0.0:
        return -2.0
    p_lep = math.sqrt(p2_lep)

    beta = lorentz.boost_vector(p4_tot)
    b = float((beta @ beta) ** 0.5)
    if b >= 1.0:
        return -2.0
    gamma = 1.0 / math.sqrt(1.0 - b * b)
    e_probe = init_state.probe_energy()

    if b * p_lep < SMALL_NUMBER:
        return 1.0 if gamma * e_lep <= e_probe else -2.0

    return (e_probe / gamma - e_lep) / (b * p_lep)


def q2_limits(interaction: Interaction) -> tuple[float, float]:
    """Physical Q² range for producing the recoil hadron.

    Two-body kinematics in the struck-nucleon rest frame with the
    on-shell nucleon mass. An empty range is returned as (0, -1).

    Returns:
        (Q2_min, Q2_max) [GeV²].
    """
    init_state = interaction.init_state
    e_probe = init_state.probe_energy_hit_nucleon_rest()
    m_nuc = init_state.target.hit_nuc_mass()
    m_probe = pdg.mass(init_state.probe_pdg)
    m_lep = interaction.fs_prim_lepton_mass()
    w = pdg.mass(interaction.recoil_hadron_pdg())

    m_probe2 = m_probe * m_probe
    m_lep2 = m_lep * m_lep
    s = m_nuc * m_nuc + m_probe2 + 2.0 * m_nuc * e_probe
    sqrt_s = math.sqrt(s)
    if sqrt_s <= w + m_lep:
        return 0.0, -1.0

    e_in = (s + m_probe2 - m_nuc * m_nuc) / (2.0 * sqrt_s)
    p_in = math.sqrt(max(0.0, _kallen(s, m_probe2, m_nuc * m_nuc))) / (2.0 * sqrt_s)
    e_out = (s + m_lep2 - w * w) / (2.0 * sqrt_s)
    p_out = math.sqrt(max(0.0, _kallen(s, m_lep2, w * w))) / (2.0 * sqrt_s)

    q2_min = 2.0 * (e_in * e_out - p_in * p_out) - m_probe2 - m_lep2
    q2_max = 2.0 * (e_in * e_out + p_in * p_out) - m_probe2 - m_lep2
    return max(q2_min, Q2_MIN_CUT), q2_max


def wq2_to_xy(energy: float, m_nuc: float, w: float, q2: float) -> tuple[float, float]:
    """(W, Q²) → (x, y) for probe energy E in the nucleon rest frame.

    x = Q² / (W² - M² + Q²)
    y = (W² - M² + Q²) / (2 M E)
    """
    w2_m2_q2 = w * w - m_nuc * m_nuc + q2
    x = q2 / w2_m2_q2
    y = w2_m2_q2 / (2.0 * m_nuc * energy)
    return x, y


def xy_to_wq2(energy: float, m_nuc: float, x: float, y: float) -> tuple[float, float]:
    """(x, y) → (W, Q²), the inverse of :func:`wq2_to_xy`.

    Q² = 2 M E x y
    W² = M² + 2 M E y (1 - x)
    """
    q2 = 2.0 * m_nuc * energy * x * y
    w2 = m_nuc * m_nuc + 2.0 * m_nuc * energy * y * (1.0 - x)
    return math.sqrt(max(0.0, w2)), q2


class KinematicBounds:
    """Injectable bundle of the kinematic limit calculations."""

    def cos_theta0_max(self, interaction: Interaction) -> float:
        return cos_theta0_max(interaction)

    def q2_limits(self, interaction: Interaction) -> tuple[float, float]:
        return q2_limits(interaction)
