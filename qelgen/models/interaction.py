"""Interaction summary data models.

An Interaction aggregates the initial state (probe, target, struck
nucleon), the process classification, the kinematic variables and the
exclusive final-state tag. It is mutated in place during rejection
sampling and locked once on acceptance.

All energies/momenta in GeV, positions in fm.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from qelgen.core import lorentz, pdg


def _zero_p4() -> NDArray[np.float64]:
    return np.zeros(4, dtype=np.float64)


class ScatteringType(Enum):
    """Scattering process classification."""
    QUASI_ELASTIC = "QES"
    RESONANT = "RES"
    DEEP_INELASTIC = "DIS"
    COHERENT = "COH"
    MEC = "MEC"


class InteractionType(Enum):
    """Interaction (current) classification."""
    WEAK_CC = "Weak[CC]"
    WEAK_NC = "Weak[NC]"
    EM = "EM"


class KineVar(Enum):
    """Kinematic variables tracked on the interaction."""
    Q2 = "Q2"
    W = "W"
    X = "x"
    Y = "y"


@dataclass
class Target:
    """Target nucleus (or free nucleon) and the struck nucleon state.

    Attributes:
        pdg: Nuclear PDG code (100ZZZAAA0).
        hit_nuc_pdg: Struck nucleon PDG code, 0 if not set.
        hit_nuc_p4: Struck nucleon 4-momentum (may be off-shell) [GeV].
        hit_nuc_position: Radial position of the struck nucleon [fm].
    """
    pdg: int = pdg.TARGET_FREE_PROTON
    hit_nuc_pdg: int = 0
    hit_nuc_p4: NDArray[np.float64] = field(default_factory=_zero_p4)
    hit_nuc_position: float = 0.0

    @property
    def a(self) -> int:
        return pdg.ion_a(self.pdg)

    @property
    def z(self) -> int:
        return pdg.ion_z(self.pdg)

    @property
    def n(self) -> int:
        return self.a - self.z

    @property
    def mass(self) -> float:
        return pdg.mass(self.pdg)

    def is_nucleus(self) -> bool:
        return self.a > 1

    def is_free_nucleon(self) -> bool:
        return self.a == 1

    def hit_nuc_is_set(self) -> bool:
        return pdg.is_nucleon(self.hit_nuc_pdg)

    def hit_nuc_mass(self) -> float:
        """On-shell mass of the struck nucleon [GeV]."""
        return pdg.mass(self.hit_nuc_pdg)


@dataclass
class InitialState:
    """Probe and target.

    Attributes:
        probe_pdg: Probe PDG code.
        probe_p4: Probe 4-momentum in the lab frame [GeV].
        target: Target nucleus and struck nucleon.
    """
    probe_pdg: int = pdg.NU_MU
    probe_p4: NDArray[np.float64] = field(default_factory=_zero_p4)
    target: Target = field(default_factory=Target)

    def probe_energy(self) -> float:
        """Probe energy in the lab frame [GeV]."""
        return float(self.probe_p4[0])

    def probe_energy_hit_nucleon_rest(self) -> float:
        """Probe energy in the struck-nucleon rest frame [GeV]."""
        p4_ni = self.target.hit_nuc_p4
        if p4_ni[0] <= 0.0:
            return self.probe_energy()
        beta = lorentz.boost_vector(p4_ni)
        return float(lorentz.boost(self.probe_p4, -beta)[0])

    def probe_direction(self) -> NDArray[np.float64]:
        """Unit vector along the probe 3-momentum (+z if undefined)."""
        p3 = lorentz.momentum3(self.probe_p4)
        pmag = float(np.linalg.norm(p3))
        if pmag <= 0.0:
            return np.array([0.0, 0.0, 1.0])
        return p3 / pmag

    def cm_energy(self) -> float:
        """√s of the probe + struck nucleon system [GeV]."""
        return lorentz.mass(self.probe_p4 + self.target.hit_nuc_p4)


@dataclass
class ProcessInfo:
    """Scattering and interaction type.

    Attributes:
        scattering_type: QE, RES, DIS...
        interaction_type: Weak CC, weak NC or EM.
    """
    scattering_type: ScatteringType = ScatteringType.QUASI_ELASTIC
    interaction_type: InteractionType = InteractionType.WEAK_CC

    def is_quasi_elastic(self) -> bool:
        return self.scattering_type == ScatteringType.QUASI_ELASTIC

    def is_weak_cc(self) -> bool:
        return self.interaction_type == InteractionType.WEAK_CC

    def is_weak_nc(self) -> bool:
        return self.interaction_type == InteractionType.WEAK_NC

    def is_em(self) -> bool:
        return self.interaction_type == InteractionType.EM


@dataclass
class Kinematics:
    """Kinematic variables and final-state 4-momenta.

    Running values are provisional (overwritten each trial); selected
    values are written once when an event is accepted.

    Attributes:
        running: Provisional values per variable.
        selected: Locked values per variable.
        fs_lepton_p4: Final-state primary lepton 4-momentum [GeV].
        had_syst_p4: Hadronic system (recoil nucleon) 4-momentum [GeV].
    """
    running: dict[KineVar, float] = field(default_factory=dict)
    selected: dict[KineVar, float] = field(default_factory=dict)
    fs_lepton_p4: NDArray[np.float64] = field(default_factory=_zero_p4)
    had_syst_p4: NDArray[np.float64] = field(default_factory=_zero_p4)

    def set(self, var: KineVar, value: float, selected: bool = False) -> None:
        if selected:
            self.selected[var] = value
        else:
            self.running[var] = value

    def get(self, var: KineVar, selected: bool = False) -> float:
        """Return a running or selected value.

        Raises:
            KeyError: If the value has not been set.
        """
        values = self.selected if selected else self.running
        try:
            return values[var]
        except KeyError:
            kind = "selected" if selected else "running"
            raise KeyError(f"No {kind} value for {var.value}")

    def q2(self, selected: bool = False) -> float:
        return self.get(KineVar.Q2, selected)

    def w(self, selected: bool = False) -> float:
        return self.get(KineVar.W, selected)

    def x(self, selected: bool = False) -> float:
        return self.get(KineVar.X, selected)

    def y(self, selected: bool = False) -> float:
        return self.get(KineVar.Y, selected)

    def clear_running_values(self) -> None:
        self.running.clear()


@dataclass
class ExclusiveTag:
    """Exclusive final-state tag.

    Attributes:
        charm_hadron_pdg: Charm baryon produced in QE charm events, or 0.
        strange_hadron_pdg: Strange baryon produced in QE strange events, or 0.
    """
    charm_hadron_pdg: int = 0
    strange_hadron_pdg: int = 0

    def is_charm_event(self) -> bool:
        return self.charm_hadron_pdg != 0

    def is_strange_event(self) -> bool:
        return self.strange_hadron_pdg != 0

    def as_string(self) -> str:
        if self.is_charm_event():
            return f"charm:{self.charm_hadron_pdg}"
        if self.is_strange_event():
            return f"strange:{self.strange_hadron_pdg}"
        return ""


@dataclass
class Interaction:
    """Interaction summary (working state of one candidate event)."""
    init_state: InitialState = field(default_factory=InitialState)
    proc_info: ProcessInfo = field(default_factory=ProcessInfo)
    kine: Kinematics = field(default_factory=Kinematics)
    excl_tag: ExclusiveTag = field(default_factory=ExclusiveTag)

    # ── Named constructors ──────────────────────────────────────────

    @classmethod
    def create(
        cls,
        target: int,
        hit_nucleon: int,
        probe: int,
        energy: float,
        interaction_type: InteractionType,
        scattering_type: ScatteringType = ScatteringType.QUASI_ELASTIC,
    ) -> Interaction:
        """Interaction with the probe travelling along +z with the given energy."""
        m_probe = pdg.mass(probe)
        pz = math.sqrt(max(0.0, energy * energy - m_probe * m_probe))
        init_state = InitialState(
            probe_pdg=probe,
            probe_p4=np.array([energy, 0.0, 0.0, pz]),
            target=Target(pdg=target, hit_nuc_pdg=hit_nucleon),
        )
        if pdg.is_nucleon(hit_nucleon):
            m_nuc = pdg.mass(hit_nucleon)
            init_state.target.hit_nuc_p4 = np.array([m_nuc, 0.0, 0.0, 0.0])
        return cls(
            init_state=init_state,
            proc_info=ProcessInfo(scattering_type, interaction_type),
        )

    @classmethod
    def qel_cc(cls, target: int, hit_nucleon: int, probe: int, energy: float) -> Interaction:
        return cls.create(target, hit_nucleon, probe, energy, InteractionType.WEAK_CC)

    @classmethod
    def qel_nc(cls, target: int, hit_nucleon: int, probe: int, energy: float) -> Interaction:
        return cls.create(target, hit_nucleon, probe, energy, InteractionType.WEAK_NC)

    @classmethod
    def qel_em(cls, target: int, hit_nucleon: int, probe: int, energy: float) -> Interaction:
        return cls.create(target, hit_nucleon, probe, energy, InteractionType.EM)

    # ── Derived particles ───────────────────────────────────────────

    @property
    def target(self) -> Target:
        return self.init_state.target

    def fs_prim_lepton_pdg(self) -> int:
        """Final-state primary lepton: CC switches ν → l, NC/EM keep the probe."""
        probe = self.init_state.probe_pdg
        if self.proc_info.is_weak_cc():
            return pdg.neutrino_to_charged_lepton(probe)
        return probe

    def fs_prim_lepton_mass(self) -> float:
        return pdg.mass(self.fs_prim_lepton_pdg())

    def recoil_nucleon_pdg(self) -> int:
        """Recoil nucleon: CC switches p ↔ n, NC/EM keep the struck nucleon."""
        struck = self.target.hit_nuc_pdg
        if not pdg.is_nucleon(struck):
            return 0
        if self.proc_info.is_weak_cc():
            return pdg.switch_proton_neutron(struck)
        return struck

    def recoil_nucleon_mass(self) -> float:
        return pdg.mass(self.recoil_nucleon_pdg())

    def recoil_hadron_pdg(self) -> int:
        """Recoil hadron honoring the exclusive tag (charm/strange baryons)."""
        if self.excl_tag.is_charm_event():
            return self.excl_tag.charm_hadron_pdg
        if self.excl_tag.is_strange_event():
            return self.excl_tag.strange_hadron_pdg
        return self.recoil_nucleon_pdg()

    # ── Utilities ───────────────────────────────────────────────────

    def as_string(self) -> str:
        """Code-ify the interaction for use as a cache key.

        Template: nu:x;tgt:x;N:x;proc:x,x;xcls
        """
        parts = [
            f"nu:{self.init_state.probe_pdg}",
            f"tgt:{self.target.pdg}",
        ]
        if self.target.hit_nuc_is_set():
            parts.append(f"N:{self.target.hit_nuc_pdg}")
        parts.append(
            f"proc:{self.proc_info.interaction_type.value},"
            f"{self.proc_info.scattering_type.value}"
        )
        xcls = self.excl_tag.as_string()
        if xcls:
            parts.append(xcls)
        return ";".join(parts) + ";"

    def copy(self) -> Interaction:
        """Independent deep snapshot of this working state."""
        return copy.deepcopy(self)
