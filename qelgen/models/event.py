"""Generated event and generation result data models.

All 4-momenta in GeV, lab frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from qelgen.models.interaction import Interaction


class ParticleStatus(Enum):
    """Particle status in the event record."""
    INITIAL_STATE = "initial_state"
    NUCLEON_TARGET = "nucleon_target"
    STABLE_FINAL_STATE = "stable_final_state"
    HADRON_IN_THE_NUCLEUS = "hadron_in_the_nucleus"


class GenerationStatus(Enum):
    """Outcome of one event generation attempt."""
    ACCEPTED = "accepted"
    NO_PHASE_SPACE = "no_phase_space"
    SELECTION_FAILED = "selection_failed"
    FATAL = "fatal"


def _zero_p4() -> NDArray[np.float64]:
    return np.zeros(4, dtype=np.float64)


@dataclass
class Particle:
    """Event record entry.

    Attributes:
        pdg: PDG code.
        status: Particle status.
        p4: 4-momentum [GeV].
        mother: Index of the mother entry, -1 if none.
        removal_energy: Removal energy of a struck nucleon [GeV].
    """
    pdg: int = 0
    status: ParticleStatus = ParticleStatus.STABLE_FINAL_STATE
    p4: NDArray[np.float64] = field(default_factory=_zero_p4)
    mother: int = -1
    removal_energy: float = 0.0


@dataclass
class GeneratedEvent:
    """Accepted QE event.

    Attributes:
        interaction: Locked interaction summary.
        particles: Event record entries (probe, target, struck nucleon,
                   final-state lepton, recoil nucleon, remnant nucleus).
        diff_xsec: Differential cross section at the selected kinematics.
        weight: Event weight (1 unless sampled uniformly).
        iterations: Rejection-loop iterations used.
        pauli_blocked: Set by the Pauli-blocking gate.
    """
    interaction: Interaction = field(default_factory=Interaction)
    particles: list[Particle] = field(default_factory=list)
    diff_xsec: float = 0.0
    weight: float = 1.0
    iterations: int = 0
    pauli_blocked: bool = False

    def find(self, status: ParticleStatus) -> list[Particle]:
        return [p for p in self.particles if p.status == status]


@dataclass
class GenerationResult:
    """Result of QELEventGenerator.generate.

    Attributes:
        status: Outcome.
        event: The event if status is ACCEPTED, else None.
        message: Reason for a non-accepted outcome.
        xsec_max: Rejection bound used (-1 in uniform mode).
    """
    status: GenerationStatus = GenerationStatus.FATAL
    event: GeneratedEvent | None = None
    message: str = ""
    xsec_max: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.ACCEPTED
