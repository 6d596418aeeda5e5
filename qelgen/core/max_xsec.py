"""Adaptive maximum differential cross-section estimator.

Computes the bound thrown against in the rejection method. It does not
need to be the exact maximum (it is scaled up by a safety factor) but it
must be fast, as it runs once per distinct interaction.

Two phases:

1. Nucleon scan: throw nucleons from the nuclear model at r = 0 and keep
   the largest momentum and smallest removal energy among the throws
   with a non-degenerate angular window.
2. Angular refinement: fix the nucleon at that extremal state, heading
   straight at the probe, and hill-climb over (cos θ₀, φ₀) on a
   shrinking grid until the maximum stabilises.

The caller's interaction is never modified; both phases work on copies.
"""

from __future__ import annotations

import logging
import math

from qelgen.core.binding import bind_hit_nucleon
from qelgen.core.kinematics import KinematicBounds
from qelgen.core.nuclear_model import NuclearModel
from qelgen.core.qel_xsec import CrossSectionEvaluator
from qelgen.models.config import GeneratorConfig
from qelgen.models.interaction import Interaction

logger = logging.getLogger(__name__)


class MaxXSecEstimator:
    """Max-xsec search over nucleon state and COM scattering angles.

    Args:
        nuclear_model: Nucleon state source (its state is overwritten).
        evaluator: Differential cross-section evaluator.
        config: Generator configuration (safety factor, throws, grid).
        bounds: Kinematic limits.
    """

    def __init__(
        self,
        nuclear_model: NuclearModel,
        evaluator: CrossSectionEvaluator,
        config: GeneratorConfig | None = None,
        bounds: KinematicBounds | None = None,
    ) -> None:
        self._nuclear_model = nuclear_model
        self._evaluator = evaluator
        self._config = config or GeneratorConfig()
        self._bounds = bounds or KinematicBounds()

    def compute(self, interaction: Interaction) -> float:
        """Return the safety-scaled max xsec for *interaction*.

        Returns:
            The bound, or 0 if no nucleon throw gives accessible phase space.
        """
        logger.info("Computing maximum cross section to throw against")

        extremal = self.scan_nucleons(interaction)
        if extremal is None:
            logger.warning(
                "Failed to find a nonzero value of MaxXSec after sampling %d "
                "nucleons from the nuclear model",
                self._config.max_xsec_nucleon_throws,
            )
            return 0.0

        min_removal_energy, max_momentum = extremal
        xsec_max = self.refine_angles(interaction, min_removal_energy, max_momentum)
        xsec_max *= self._config.safety_factor

        logger.info(
            "Computed maximum cross section to throw against - value is %.6g", xsec_max,
        )
        return xsec_max

    def scan_nucleons(self, interaction: Interaction) -> tuple[float, float] | None:
        """Phase A: extremal (min removal energy, max momentum) over valid throws.

        Returns:
            (min_removal_energy, max_momentum), or None if no throw gives a
            non-degenerate cos θ₀ window.
        """
        cfg = self._config
        model = self._nuclear_model
        working = interaction.copy()
        target = working.target
        target.hit_nuc_position = 0.0
        direction = working.init_state.probe_direction()

        min_energy = math.inf
        max_momentum = -math.inf
        one_nucleon_ok = False

        for _ in range(cfg.max_xsec_nucleon_throws):
            # r = 0 gives the max xsec over all nucleon positions
            model.generate_nucleon(target, 0.0)
            bind_hit_nucleon(working, model, cfg.binding_mode)

            # point the nucleon 3-momentum at the probe
            target.hit_nuc_p4[1:4] = -model.momentum * direction

            cos_max = self._bounds.cos_theta0_max(working)
            logger.debug("cos_theta0_max = %.6f", cos_max)
            if cos_max > -1.0:
                min_energy = min(min_energy, model.removal_energy)
                max_momentum = max(max_momentum, model.momentum)
                one_nucleon_ok = True

        if not one_nucleon_ok:
            return None
        return min_energy, max_momentum

    def refine_angles(
        self,
        interaction: Interaction,
        removal_energy: float,
        momentum: float,
    ) -> float:
        """Phase B: hierarchical grid search over (cos θ₀, φ₀).

        Each layer scans an N×N grid over the current window, then
        re-centres the window on the best point with a half-width of one
        grid step. Stops once the layer-on-layer improvement falls below
        acceptable_fraction × (safety_factor - 1).

        Returns:
            The unscaled maximum found (≥ 0).
        """
        cfg = self._config
        model = self._nuclear_model
        working = interaction.copy()
        target = working.target
        target.hit_nuc_position = 0.0
        direction = working.init_state.probe_direction()

        # upstream nucleon at the extremal state
        model.generate_nucleon(target, 0.0)
        model.set_momentum3(-momentum * direction)
        model.set_removal_energy(removal_energy)
        bind_hit_nucleon(working, model, cfg.binding_mode)

        cos_upper = min(1.0, self._bounds.cos_theta0_max(working))
        logger.debug("costh_range_max = %.6f", cos_upper)
        if cos_upper <= -1.0:
            return 0.0

        costh_min, costh_max = -1.0, cos_upper
        phi_min, phi_max = 0.0, 2.0 * math.pi
        n_theta, n_phi = cfg.grid_points_theta, cfg.grid_points_phi
        improvement_cut = cfg.acceptable_fraction * (cfg.safety_factor - 1.0)

        xsec_max = -1.0
        costh_at_max = 0.0
        phi_at_max = -1.0

        for layer in range(cfg.max_search_layers):
            last_layer_max = xsec_max
            costh_step = (costh_max - costh_min) / n_theta
            phi_step = (phi_max - phi_min) / n_phi

            for itheta in range(n_theta):
                costh = costh_min + itheta * costh_step
                for iphi in range(n_phi):
                    phi = phi_min + iphi * phi_step
                    xs = self._evaluator.evaluate(
                        working, costh, phi, cfg.binding_mode, cfg.min_angle_em,
                    )
                    if xs > xsec_max:
                        xsec_max = xs
                        costh_at_max = costh
                        phi_at_max = phi

            costh_min = max(-1.0, costh_at_max - costh_step)
            costh_max = min(cos_upper, costh_at_max + costh_step)
            phi_min = phi_at_max - phi_step
            phi_max = phi_at_max + phi_step

            if layer == 0:
                continue
            if last_layer_max <= 0.0:
                if xsec_max <= 0.0:
                    break
                continue
            if xsec_max / last_layer_max - 1.0 < improvement_cut:
                logger.debug("Max xsec converged after %d layers", layer + 1)
                break

        logger.info("best estimate for xsec_max = %.6g", xsec_max)
        return max(0.0, xsec_max)
