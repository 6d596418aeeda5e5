"""Pauli-blocking gate.

Flags events whose recoil nucleon would land inside the Fermi sea of
the residual nucleus. The one-shot override (``set_ignore_next``) is
state of the instance and is consumed by the next query; use one
instance per worker.
"""

from __future__ import annotations

import logging
import threading

from qelgen.core import lorentz, pdg
from qelgen.core.nuclear_data import NuclearDataService
from qelgen.core.nuclear_model import LocalFermiGasModel
from qelgen.models.event import GeneratedEvent, ParticleStatus
from qelgen.models.interaction import Target

logger = logging.getLogger(__name__)


class PauliBlocker:
    """Fermi-momentum based Pauli blocking.

    Args:
        nuclear_data: Parameter lookup for the global Fermi momentum.
        local_model: If given, the local Fermi momentum at the struck
                     nucleon radius is used instead of the global one.
    """

    def __init__(
        self,
        nuclear_data: NuclearDataService | None = None,
        local_model: LocalFermiGasModel | None = None,
    ) -> None:
        self._data = nuclear_data or NuclearDataService()
        self._local_model = local_model
        self._ignore_next = False
        self._lock = threading.Lock()

    def fermi_momentum(self, target: Target, recoil_pdg: int, radius: float) -> float:
        """Fermi momentum of the recoil species at *radius* [GeV/c].

        Free nucleon targets have no Fermi sea (0).
        """
        if not target.is_nucleus() or not pdg.is_nucleon(recoil_pdg):
            return 0.0
        if self._local_model is not None:
            return self._local_model.local_fermi_momentum(target, recoil_pdg, radius)
        return self._data.fermi_momentum(target.pdg, recoil_pdg)

    def set_ignore_next(self) -> None:
        """Skip blocking for the next query only."""
        with self._lock:
            self._ignore_next = True

    @property
    def ignore_next(self) -> bool:
        return self._ignore_next

    def _consume_ignore_next(self) -> bool:
        with self._lock:
            ignore = self._ignore_next
            self._ignore_next = False
            return ignore

    def is_blocked(self, event: GeneratedEvent) -> bool:
        """True if the recoil nucleon momentum is below the Fermi momentum.

        Consumes a pending override, which makes this query return False.
        """
        if self._consume_ignore_next():
            logger.debug("Ignoring Pauli blocking for this event")
            return False

        interaction = event.interaction
        target = interaction.target
        recoil_pdg = interaction.recoil_nucleon_pdg()
        k_f = self.fermi_momentum(target, recoil_pdg, target.hit_nuc_position)
        if k_f <= 0.0:
            return False

        for particle in event.find(ParticleStatus.HADRON_IN_THE_NUCLEUS):
            if particle.pdg == recoil_pdg:
                p = lorentz.momentum(particle.p4)
                blocked = p < k_f
                if blocked:
                    logger.debug("Pauli blocked: p = %.4f < kF = %.4f GeV", p, k_f)
                return blocked
        return False

    def process_event(self, event: GeneratedEvent) -> GeneratedEvent:
        """Run the gate on an event and record the outcome on it."""
        event.pauli_blocked = self.is_blocked(event)
        return event
