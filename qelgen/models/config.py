"""Generator configuration data model."""

from dataclasses import dataclass

from qelgen.constants import (
    ACCEPTABLE_FRACTION_OF_SAFETY_FACTOR,
    DEFAULT_CACHE_MIN_ENERGY_GEV,
    DEFAULT_MAX_XSEC_DIFF_TOLERANCE,
    DEFAULT_MAX_XSEC_NUCLEON_THROWS,
    DEFAULT_MIN_ANGLE_EM_DEG,
    DEFAULT_SAFETY_FACTOR,
    MAX_REJECTION_ITERATIONS,
    MAX_XSEC_GRID_POINTS_PHI,
    MAX_XSEC_GRID_POINTS_THETA,
    MAX_XSEC_SEARCH_LAYERS,
    NUCLEAR_MODEL_IDS,
    PAULI_BLOCKER_IDS,
)
from qelgen.core.binding import BindingMode


@dataclass
class GeneratorConfig:
    """QE kinematics generator parameters.

    Attributes:
        safety_factor: Multiplier applied to the estimated max xsec.
        cache_min_energy: Probe energies below this are not cached [GeV].
        max_xsec_diff_tolerance: Allowed excess of a sampled xsec over the
            bound, as 200·(xsec - max)/(xsec + max) [%]. 0 makes any
            excess fatal.
        uniform_over_phase_space: Sample angles uniformly and weight events.
        min_angle_em: Minimum lab lepton angle for EM processes [degree].
        binding_mode: Struck nucleon binding treatment.
        max_xsec_nucleon_throws: Nuclear model throws in the estimator scan.
        pauli_blocker: Pauli-blocking policy identifier.
        nuclear_model: Nuclear model identifier.
        max_iterations: Rejection loop iteration cap.
        grid_points_theta: cos θ grid points per estimator layer.
        grid_points_phi: φ grid points per estimator layer.
        max_search_layers: Estimator refinement layer cap.
        acceptable_fraction: Stop refining when the improvement is below
            this fraction of (safety_factor - 1).
    """
    safety_factor: float = DEFAULT_SAFETY_FACTOR
    cache_min_energy: float = DEFAULT_CACHE_MIN_ENERGY_GEV
    max_xsec_diff_tolerance: float = DEFAULT_MAX_XSEC_DIFF_TOLERANCE
    uniform_over_phase_space: bool = False
    min_angle_em: float = DEFAULT_MIN_ANGLE_EM_DEG
    binding_mode: BindingMode = BindingMode.USE_NUCLEAR_MODEL
    max_xsec_nucleon_throws: int = DEFAULT_MAX_XSEC_NUCLEON_THROWS
    pauli_blocker: str = "Default"
    nuclear_model: str = "LocalFermiGas"
    max_iterations: int = MAX_REJECTION_ITERATIONS
    grid_points_theta: int = MAX_XSEC_GRID_POINTS_THETA
    grid_points_phi: int = MAX_XSEC_GRID_POINTS_PHI
    max_search_layers: int = MAX_XSEC_SEARCH_LAYERS
    acceptable_fraction: float = ACCEPTABLE_FRACTION_OF_SAFETY_FACTOR

    def validate(self) -> None:
        """Check parameter ranges.

        Raises:
            ValueError: On the first invalid parameter.
        """
        if self.safety_factor < 1.0:
            raise ValueError(f"safety_factor must be >= 1, got {self.safety_factor}")
        if self.max_xsec_diff_tolerance < 0.0:
            raise ValueError(
                f"max_xsec_diff_tolerance must be >= 0, got {self.max_xsec_diff_tolerance}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.max_xsec_nucleon_throws < 1:
            raise ValueError(
                f"max_xsec_nucleon_throws must be >= 1, got {self.max_xsec_nucleon_throws}"
            )
        if self.grid_points_theta < 2 or self.grid_points_phi < 2:
            raise ValueError("Estimator grid needs at least 2 points per axis")
        if self.max_search_layers < 1:
            raise ValueError(f"max_search_layers must be >= 1, got {self.max_search_layers}")
        if self.nuclear_model not in NUCLEAR_MODEL_IDS:
            raise ValueError(f"Unknown nuclear model: {self.nuclear_model!r}")
        if self.pauli_blocker not in PAULI_BLOCKER_IDS:
            raise ValueError(f"Unknown Pauli blocker: {self.pauli_blocker!r}")
