"""Quasi-elastic differential cross-section evaluation.

FullQELEvaluator turns a trial point (cos θ₀, φ₀) in the probe + struck
nucleon COM frame into lab-frame final-state 4-momenta, records them as
running kinematics on the interaction, and asks a pluggable
DifferentialXSecModel for the cross-section value.

Energies in GeV, Q² in GeV², cross sections in 10⁻³⁸ cm² per unit
phase space (model-defined).
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from qelgen.core import lorentz
from qelgen.core.binding import BindingMode, bind_hit_nucleon
from qelgen.core.kinematics import KinematicBounds
from qelgen.core.nuclear_model import NuclearModel
from qelgen.core.units import rad_to_deg
from qelgen.models.interaction import Interaction, KineVar


class DifferentialXSecModel(Protocol):
    """Scalar differential cross-section model."""

    def xsec(self, interaction: Interaction, cos_theta0: float, phi0: float) -> float:
        ...


class CrossSectionEvaluator(Protocol):
    """Capability consumed by the generator and the max-xsec estimator."""

    def evaluate(
        self,
        interaction: Interaction,
        cos_theta0: float,
        phi0: float,
        binding_mode: BindingMode,
        min_angle_em: float,
        bind_nucleon: bool = True,
    ) -> float:
        ...


def com_two_body_final_state(
    interaction: Interaction,
    cos_theta0: float,
    phi0: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]] | None:
    """Lab-frame lepton and recoil nucleon 4-momenta for a COM-frame direction.

    The lepton is emitted at (θ₀, φ₀) with respect to the COM velocity:
    the direction is built about +z, rotated so that +z lies along β,
    then both particles are boosted to the lab.

    Returns:
        (lepton_p4, nucleon_p4), or None below threshold.
    """
    m_lep = interaction.fs_prim_lepton_mass()
    m_nf = interaction.recoil_nucleon_mass()
    p4_tot = interaction.init_state.probe_p4 + interaction.target.hit_nuc_p4
    s = lorentz.mass2(p4_tot)
    if s <= 0.0 or p4_tot[0] <= 0.0:
        return None
    sqrt_s = math.sqrt(s)
    if sqrt_s < m_lep + m_nf:
        return None

    e_lep = (s - m_nf * m_nf + m_lep * m_lep) / (2.0 * sqrt_s)
    p2_lep = e_lep * e_lep - m_lep * m_lep
    if p2_lep < 0.0:
        return None
    p_lep = math.sqrt(p2_lep)

    beta = lorentz.boost_vector(p4_tot)
    lep3 = lorentz.rotate_z_onto(lorentz.from_spherical(p_lep, cos_theta0, phi0), beta)

    lepton = lorentz.four_vector(e_lep, lep3)
    nucleon = lorentz.four_vector(math.sqrt(p2_lep + m_nf * m_nf), -lep3)

    return lorentz.boost(lepton, beta), lorentz.boost(nucleon, beta)


class FullQELEvaluator:
    """Differential cross section at a COM-frame trial point.

    Args:
        model: Scalar cross-section model.
        nuclear_model: Source of the struck nucleon state (used when binding).
        bounds: Kinematic limits (Q² range).
    """

    def __init__(
        self,
        model: DifferentialXSecModel,
        nuclear_model: NuclearModel,
        bounds: KinematicBounds | None = None,
    ) -> None:
        self._model = model
        self._nuclear_model = nuclear_model
        self._bounds = bounds or KinematicBounds()

    @property
    def model(self) -> DifferentialXSecModel:
        return self._model

    def evaluate(
        self,
        interaction: Interaction,
        cos_theta0: float,
        phi0: float,
        binding_mode: BindingMode,
        min_angle_em: float,
        bind_nucleon: bool = True,
    ) -> float:
        """Evaluate the cross section and store running kinematics.

        Args:
            interaction: Working interaction (updated in place).
            cos_theta0: COM-frame lepton polar angle cosine w.r.t. β.
            phi0: COM-frame lepton azimuth [radian].
            binding_mode: Binding mode used when *bind_nucleon* is set.
            min_angle_em: Minimum lab lepton angle for EM processes [degree].
            bind_nucleon: Put the struck nucleon off-shell from the nuclear
                          model state before computing kinematics.

        Returns:
            Non-negative cross section, 0 outside the allowed phase space.
        """
        if bind_nucleon:
            bind_hit_nucleon(interaction, self._nuclear_model, binding_mode)

        final_state = com_two_body_final_state(interaction, cos_theta0, phi0)
        if final_state is None:
            return 0.0
        lepton, nucleon = final_state

        if interaction.proc_info.is_em():
            theta_deg = rad_to_deg(lorentz.polar_angle(lepton[1:4]))
            if theta_deg < min_angle_em:
                return 0.0

        q4 = interaction.init_state.probe_p4 - lepton
        q2 = -lorentz.mass2(q4)

        kine = interaction.kine
        kine.fs_lepton_p4 = lepton
        kine.had_syst_p4 = nucleon
        kine.set(KineVar.Q2, q2)

        q2_min, q2_max = self._bounds.q2_limits(interaction)
        if q2 < q2_min or q2 > q2_max:
            return 0.0

        return max(0.0, float(self._model.xsec(interaction, cos_theta0, phi0)))


class DipoleQELModel:
    """Dipole form-factor quasi-elastic model.

    dσ ∝ (E_l p_l / E_ν²) × G_D(Q²)² × (1 + Q² / (4 M²) × (μ_p - μ_n)²)

    with G_D(Q²) = (1 + Q²/M_V²)⁻². A smooth, physically shaped stand-in
    used for tests and examples; absolute normalization is arbitrary.

    Args:
        vector_mass: Dipole mass M_V [GeV].
        normalization: Overall scale.
    """

    MAGNETIC_MOMENT_DIFF = 4.706

    def __init__(self, vector_mass: float = 0.84, normalization: float = 1.0) -> None:
        self.vector_mass = vector_mass
        self.normalization = normalization

    def xsec(self, interaction: Interaction, cos_theta0: float, phi0: float) -> float:
        kine = interaction.kine
        q2 = kine.q2()
        lepton = kine.fs_lepton_p4
        e_probe = interaction.init_state.probe_energy()
        if e_probe <= 0.0:
            return 0.0

        m_nuc = interaction.target.hit_nuc_mass()
        g_dipole = 1.0 / (1.0 + q2 / (self.vector_mass ** 2)) ** 2
        magnetic = 1.0 + q2 / (4.0 * m_nuc * m_nuc) * self.MAGNETIC_MOMENT_DIFF ** 2
        flux = float(lepton[0]) * lorentz.momentum(lepton) / (e_probe * e_probe)
        return self.normalization * flux * g_dipole ** 2 * magnetic
