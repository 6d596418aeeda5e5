"""Quasi-elastic event kinematics generator: rejection sampling.

Each rejection-loop iteration samples a struck nucleon (3-momentum and
removal energy) and the outgoing lepton angles (cos θ₀, φ₀) in the
probe + nucleon COM frame, evaluates the differential cross section and
accepts it against the cached maximum. Accepted kinematics may be
corrected for binding energy (and re-rejected), then locked on the
interaction and turned into an event record.

All energies in GeV, angles in radian (except the EM angle cut, degree).
"""

from __future__ import annotations

import logging
import math

import numpy as np

from qelgen.core import lorentz, pdg
from qelgen.core.binding import BindingMode, bind_hit_nucleon, remnant_nucleus
from qelgen.core.errors import (
    InvalidInitialStateError,
    KinematicSelectionError,
    ToleranceViolationError,
)
from qelgen.core.kinematics import KinematicBounds, wq2_to_xy
from qelgen.core.max_xsec import MaxXSecEstimator
from qelgen.core.nuclear_model import NuclearModel
from qelgen.core.pauli_blocker import PauliBlocker
from qelgen.core.qel_xsec import CrossSectionEvaluator, com_two_body_final_state
from qelgen.core.units import rad_to_deg
from qelgen.core.xsec_cache import MaxXSecCache
from qelgen.models.config import GeneratorConfig
from qelgen.models.event import (
    GeneratedEvent,
    GenerationResult,
    GenerationStatus,
    Particle,
    ParticleStatus,
)
from qelgen.models.interaction import Interaction, KineVar

logger = logging.getLogger(__name__)


def needs_pauli_override(p_corrected: float, p_uncorrected: float, k_fermi: float) -> bool:
    """True if binding corrections alone would Pauli-block the recoil nucleon."""
    return p_corrected < k_fermi <= p_uncorrected


class QELEventGenerator:
    """Rejection-sampling generator of QE final-state kinematics.

    Composition-based design: the nuclear model, cross-section
    evaluator, Pauli-blocking gate, kinematic bounds, max-xsec cache and
    estimator are injected. One instance (and one rng stream) per worker;
    the cache may be shared.

    Args:
        nuclear_model: Struck nucleon state source.
        evaluator: Differential cross-section evaluator.
        pauli_blocker: Pauli-blocking gate (Fermi momentum, one-shot override).
        config: Generator configuration.
        rng: numpy random Generator for angle and threshold draws.
        bounds: Kinematic limits.
        cache: Max-xsec cache; a private one is created if None.
        estimator: Max-xsec estimator; built from the other parts if None.
    """

    def __init__(
        self,
        nuclear_model: NuclearModel,
        evaluator: CrossSectionEvaluator,
        pauli_blocker: PauliBlocker,
        config: GeneratorConfig | None = None,
        rng: np.random.Generator | None = None,
        bounds: KinematicBounds | None = None,
        cache: MaxXSecCache | None = None,
        estimator: MaxXSecEstimator | None = None,
    ) -> None:
        self._config = config or GeneratorConfig()
        self._config.validate()
        self._nuclear_model = nuclear_model
        self._evaluator = evaluator
        self._pauli = pauli_blocker
        self._rng = rng or np.random.default_rng()
        self._bounds = bounds or KinematicBounds()
        self._cache = cache if cache is not None else MaxXSecCache(self._config.cache_min_energy)
        self._estimator = estimator or MaxXSecEstimator(
            nuclear_model, evaluator, self._config, self._bounds,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def rng(self) -> np.random.Generator:
        """Access the random number generator."""
        return self._rng

    @property
    def cache(self) -> MaxXSecCache:
        return self._cache

    @property
    def pauli_blocker(self) -> PauliBlocker:
        return self._pauli

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def max_xsec(self, interaction: Interaction) -> float:
        """Cached max xsec for the interaction, computing it on a miss."""
        key = interaction.as_string()
        energy = interaction.init_state.probe_energy()

        cached = self._cache.find(key, energy)
        if cached is not None:
            return cached

        xsec_max = self._estimator.compute(interaction)
        self._cache.store(key, energy, xsec_max)
        return xsec_max

    def generate(self, interaction: Interaction) -> GenerationResult:
        """Generate QE kinematics for *interaction* (modified in place).

        Never raises for generation failures; the outcome is reported
        through the result status:

        - ACCEPTED: event produced.
        - NO_PHASE_SPACE: the estimator found no accessible phase space.
        - SELECTION_FAILED: iteration cap reached; the caller may retry
          with a fresh interaction.
        - FATAL: tolerance violation or an invalid initial state.
        """
        logger.debug("Generating QE event kinematics...")
        xsec_max = -1.0
        try:
            self.check_initial_state(interaction)

            if not self._config.uniform_over_phase_space:
                xsec_max = self.max_xsec(interaction)
                if xsec_max <= 0.0:
                    message = f"No accessible phase space for {interaction.as_string()}"
                    logger.warning("%s", message)
                    return GenerationResult(
                        status=GenerationStatus.NO_PHASE_SPACE,
                        message=message,
                        xsec_max=xsec_max,
                    )

            event = self.select_kinematics(interaction, xsec_max)

        except KinematicSelectionError as exc:
            return GenerationResult(
                status=GenerationStatus.SELECTION_FAILED,
                message=str(exc),
                xsec_max=xsec_max,
            )
        except (ToleranceViolationError, InvalidInitialStateError) as exc:
            logger.error("QE event generation failed: %s", exc)
            return GenerationResult(
                status=GenerationStatus.FATAL,
                message=str(exc),
                xsec_max=xsec_max,
            )

        logger.debug("Done generating QE event kinematics!")
        return GenerationResult(
            status=GenerationStatus.ACCEPTED,
            event=event,
            xsec_max=xsec_max,
        )

    def check_initial_state(self, interaction: Interaction) -> None:
        """Validate the struck nucleon and the residual nucleus.

        Raises:
            InvalidInitialStateError: If no hit nucleon is set or the
                remnant nucleus is not a valid nucleus.
        """
        target = interaction.target
        if not target.hit_nuc_is_set():
            raise InvalidInitialStateError("No hit nucleon was set")
        if target.is_nucleus():
            a_rem, z_rem = remnant_nucleus(target.a, target.z, target.hit_nuc_pdg)
            try:
                pdg.ion_pdg_code(a_rem, z_rem)
            except ValueError as exc:
                raise InvalidInitialStateError(
                    f"No remnant nucleus with [A = {a_rem}, Z = {z_rem}]"
                ) from exc

    def select_kinematics(self, interaction: Interaction, xsec_max: float) -> GeneratedEvent:
        """Run the accept/reject loop.

        Args:
            interaction: Working interaction, updated in place and locked
                         on acceptance.
            xsec_max: Rejection bound (ignored in uniform mode).

        Returns:
            The accepted event.

        Raises:
            KinematicSelectionError: No acceptance within max_iterations.
            ToleranceViolationError: A sampled xsec exceeds the bound by
                more than the configured tolerance.
            ValueError: Non-positive bound outside uniform mode.
        """
        cfg = self._config
        uniform = cfg.uniform_over_phase_space
        if not uniform and xsec_max <= 0.0:
            raise ValueError(f"Non-positive maximum xsec: {xsec_max}")

        rng = self._rng
        model = self._nuclear_model
        target = interaction.target
        is_nucleus = target.is_nucleus()
        hit_nuc_position = target.hit_nuc_position
        correct_binding = is_nucleus and cfg.binding_mode == BindingMode.ON_SHELL_WITH_CORRECTION

        iteration = 0
        while True:
            iteration += 1
            logger.debug("Attempt #: %d", iteration)
            if iteration > cfg.max_iterations:
                logger.warning(
                    "Couldn't select a valid (pNi, Eb, cos_theta_0, phi_0) tuple "
                    "after %d iterations", cfg.max_iterations,
                )
                raise KinematicSelectionError(
                    "Couldn't select kinematics", iterations=cfg.max_iterations,
                )

            if is_nucleus:
                model.generate_nucleon(target, hit_nuc_position)
            else:
                # free nucleon: at rest and unbound
                model.set_momentum3(np.zeros(3))
                model.set_removal_energy(0.0)

            removal_energy = bind_hit_nucleon(interaction, model, cfg.binding_mode)

            cos_theta0_max = min(1.0, self._bounds.cos_theta0_max(interaction))
            if cos_theta0_max <= -1.0:
                continue

            cos_theta = rng.uniform(-1.0, cos_theta0_max)
            phi = 2.0 * math.pi * rng.random()

            xsec = self._evaluator.evaluate(
                interaction, cos_theta, phi, cfg.binding_mode, cfg.min_angle_em,
                bind_nucleon=False,
            )

            # uniform mode keeps every throw, zero-xsec ones carry weight 0
            if not uniform:
                self.assert_xsec_limits(xsec, xsec_max)
                t = xsec_max * rng.random()
                logger.debug("xsec= %.6g, Rnd= %.6g", xsec, t)
                if xsec <= t:
                    logger.debug("Reject current throw...")
                    continue

            if correct_binding:
                corrected = self._apply_binding_correction(interaction, cos_theta, phi)
                if corrected is None:
                    continue
                removal_energy = corrected

            weight = 1.0
            if uniform:
                weight = xsec * (cos_theta0_max + 1.0) * 2.0 * math.pi

            return self._finalize(interaction, xsec, removal_energy, weight, iteration)

    def assert_xsec_limits(self, xsec: float, xsec_max: float) -> None:
        """Check a sampled xsec against the rejection bound.

        An excess is logged; it is fatal only if the symmetric fractional
        deviation 200·(xsec - max)/(xsec + max) exceeds the tolerance.

        Raises:
            ToleranceViolationError: If the deviation exceeds the tolerance.
        """
        if xsec <= xsec_max:
            return
        deviation = 200.0 * (xsec - xsec_max) / (xsec_max + xsec)
        if deviation > self._config.max_xsec_diff_tolerance:
            logger.error(
                "xsec = %.6g > max xsec = %.6g (deviation %.3g%% > tolerance %.3g%%)",
                xsec, xsec_max, deviation, self._config.max_xsec_diff_tolerance,
            )
            raise ToleranceViolationError(xsec, xsec_max, deviation)
        logger.warning(
            "JUST A WARNING: The generated kinematics have higher xsec (%.6g) "
            "than the max xsec used in rejection (%.6g)", xsec, xsec_max,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _apply_binding_correction(
        self, interaction: Interaction, cos_theta: float, phi: float,
    ) -> float | None:
        """Redo accepted on-shell kinematics with a fully bound nucleon.

        Returns:
            The removal energy applied, or None if the corrected kinematics
            fall below threshold, fail the EM angle cut or leave the Q² range.
        """
        cfg = self._config
        kine = interaction.kine
        p_nf_uncorrected = lorentz.momentum(kine.had_syst_p4)

        removal_energy = bind_hit_nucleon(
            interaction, self._nuclear_model, BindingMode.USE_NUCLEAR_MODEL,
        )

        final_state = com_two_body_final_state(interaction, cos_theta, phi)
        if final_state is None:
            logger.debug(
                "Rejecting current throw, binding energy corrections move event below threshold"
            )
            return None
        lepton, nucleon = final_state

        if interaction.proc_info.is_em():
            theta_deg = rad_to_deg(lorentz.polar_angle(lepton[1:4]))
            if theta_deg < cfg.min_angle_em:
                logger.debug(
                    "Rejecting current throw, corrected lepton angle %.3f deg "
                    "below the EM cut", theta_deg,
                )
                return None

        q2 = -lorentz.mass2(interaction.init_state.probe_p4 - lepton)
        q2_min, q2_max = self._bounds.q2_limits(interaction)
        if q2 < q2_min or q2 > q2_max:
            logger.debug(
                "Rejecting current throw, binding energy corrections move event "
                "outside allowed Q2 range"
            )
            return None

        target = interaction.target
        k_f = self._pauli.fermi_momentum(
            target, interaction.recoil_nucleon_pdg(), target.hit_nuc_position,
        )
        if needs_pauli_override(lorentz.momentum(nucleon), p_nf_uncorrected, k_f):
            self._pauli.set_ignore_next()

        kine.fs_lepton_p4 = lepton
        kine.had_syst_p4 = nucleon
        kine.set(KineVar.Q2, q2)
        return removal_energy

    def _finalize(
        self,
        interaction: Interaction,
        xsec: float,
        removal_energy: float,
        weight: float,
        iterations: int,
    ) -> GeneratedEvent:
        """Lock the selected kinematics, build the event record and run the Pauli gate."""
        kine = interaction.kine
        q2 = kine.q2()
        logger.info("*Selected* Q^2 = %.6g GeV^2", q2)

        # probe energy at the struck nucleon rest frame and the struck
        # nucleon mass (can be off the mass shell)
        init_state = interaction.init_state
        energy = init_state.probe_energy_hit_nucleon_rest()
        m_nuc = lorentz.mass(init_state.target.hit_nuc_p4)
        logger.debug("E = %.6g, M = %.6g", energy, m_nuc)

        # W is the on-shell mass of the recoil hadron
        w = pdg.mass(interaction.recoil_hadron_pdg())
        logger.info("Selected: W = %.6g", w)

        x, y = wq2_to_xy(energy, m_nuc, w, q2)

        kine.set(KineVar.Q2, q2, selected=True)
        kine.set(KineVar.W, w, selected=True)
        kine.set(KineVar.X, x, selected=True)
        kine.set(KineVar.Y, y, selected=True)
        kine.clear_running_values()

        event = GeneratedEvent(
            interaction=interaction,
            diff_xsec=xsec,
            weight=weight,
            iterations=iterations,
        )
        self._add_particles(event, removal_energy)
        # consumes any override set by the binding correction
        self._pauli.process_event(event)
        return event

    def _add_particles(self, event: GeneratedEvent, removal_energy: float) -> None:
        interaction = event.interaction
        init_state = interaction.init_state
        target = init_state.target
        kine = interaction.kine
        is_nucleus = target.is_nucleus()

        particles = event.particles
        particles.append(Particle(
            pdg=init_state.probe_pdg,
            status=ParticleStatus.INITIAL_STATE,
            p4=init_state.probe_p4.copy(),
        ))
        probe_idx = 0

        nucleus_idx = -1
        if is_nucleus:
            particles.append(Particle(
                pdg=target.pdg,
                status=ParticleStatus.INITIAL_STATE,
                p4=np.array([target.mass, 0.0, 0.0, 0.0]),
            ))
            nucleus_idx = len(particles) - 1

        hit_p4 = target.hit_nuc_p4.copy()
        particles.append(Particle(
            pdg=target.hit_nuc_pdg,
            status=ParticleStatus.NUCLEON_TARGET if is_nucleus else ParticleStatus.INITIAL_STATE,
            p4=hit_p4,
            mother=nucleus_idx,
            removal_energy=removal_energy,
        ))
        hit_idx = len(particles) - 1
        logger.debug("pn: %.5f, %.5f, %.5f, %.5f", hit_p4[1], hit_p4[2], hit_p4[3], hit_p4[0])

        particles.append(Particle(
            pdg=interaction.fs_prim_lepton_pdg(),
            status=ParticleStatus.STABLE_FINAL_STATE,
            p4=kine.fs_lepton_p4.copy(),
            mother=probe_idx,
        ))
        particles.append(Particle(
            pdg=interaction.recoil_nucleon_pdg(),
            status=(
                ParticleStatus.HADRON_IN_THE_NUCLEUS if is_nucleus
                else ParticleStatus.STABLE_FINAL_STATE
            ),
            p4=kine.had_syst_p4.copy(),
            mother=hit_idx,
        ))

        if is_nucleus:
            self._add_remnant(event, nucleus_idx, hit_p4)

    def _add_remnant(self, event: GeneratedEvent, nucleus_idx: int, hit_p4: np.ndarray) -> None:
        """Add the residual nucleus, balancing the struck nucleon 4-momentum."""
        target = event.interaction.target
        a_rem, z_rem = remnant_nucleus(target.a, target.z, target.hit_nuc_pdg)
        remnant_pdg = pdg.ion_pdg_code(a_rem, z_rem)
        logger.debug("Adding nucleus [A = %d, Z = %d, pdgc = %d]", a_rem, z_rem, remnant_pdg)

        p4 = np.array([target.mass - hit_p4[0], -hit_p4[1], -hit_p4[2], -hit_p4[3]])
        event.particles.append(Particle(
            pdg=remnant_pdg,
            status=ParticleStatus.STABLE_FINAL_STATE,
            p4=p4,
            mother=nucleus_idx,
        ))
