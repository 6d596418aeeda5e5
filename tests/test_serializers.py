"""Tests for qelgen.core.serializers: configuration and event dicts.

Covers:
  - GeneratorConfig round-trip (Enum binding mode, defaults)
  - Rejection of unknown keys and invalid values
  - JSON file round-trip
  - JSON-safe event and result dumps
"""

import json

import numpy as np
import pytest

from qelgen.core import pdg
from qelgen.core.binding import BindingMode
from qelgen.core.serializers import (
    config_to_dict,
    dict_to_config,
    event_to_dict,
    load_config,
    result_to_dict,
    save_config,
)
from qelgen.models.config import GeneratorConfig
from qelgen.models.event import (
    GeneratedEvent,
    GenerationResult,
    GenerationStatus,
    Particle,
    ParticleStatus,
)
from qelgen.models.interaction import Interaction, KineVar


# ── Helpers ──────────────────────────────────────────────────────────

def _make_event() -> GeneratedEvent:
    interaction = Interaction.qel_cc(1000060120, pdg.NEUTRON, pdg.NU_MU, 1.0)
    interaction.kine.set(KineVar.Q2, np.float64(0.42), selected=True)
    interaction.kine.set(KineVar.W, pdg.mass(pdg.PROTON), selected=True)
    return GeneratedEvent(
        interaction=interaction,
        particles=[
            Particle(pdg=pdg.NU_MU, status=ParticleStatus.INITIAL_STATE,
                     p4=np.array([1.0, 0.0, 0.0, 1.0])),
            Particle(pdg=pdg.MUON, status=ParticleStatus.STABLE_FINAL_STATE,
                     p4=np.array([0.7, 0.1, 0.0, 0.68]), mother=0),
        ],
        diff_xsec=1.25,
        iterations=3,
    )


# ── Configuration ────────────────────────────────────────────────────

class TestConfigSerialization:
    def test_round_trip(self):
        config = GeneratorConfig(
            safety_factor=2.0,
            binding_mode=BindingMode.ON_SHELL_WITH_CORRECTION,
            nuclear_model="FermiGas",
            min_angle_em=5.0,
        )
        data = config_to_dict(config)
        assert data["binding_mode"] == "OnShellWithCorrection"
        assert dict_to_config(data) == config

    def test_missing_keys_use_defaults(self):
        config = dict_to_config({"safety_factor": 1.8})
        assert config.safety_factor == 1.8
        assert config.binding_mode is BindingMode.USE_NUCLEAR_MODEL
        assert config.max_xsec_nucleon_throws == 800

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            dict_to_config({"safety_factr": 1.8})

    def test_unknown_binding_mode_rejected(self):
        with pytest.raises(ValueError):
            dict_to_config({"binding_mode": "Frozen"})

    def test_invalid_value_rejected(self):
        with pytest.raises(ValueError):
            dict_to_config({"pauli_blocker": "Nope"})

    def test_file_round_trip(self, tmp_path):
        config = GeneratorConfig(uniform_over_phase_space=True, cache_min_energy=0.5)
        path = tmp_path / "generator.json"
        save_config(config, path)
        assert load_config(path) == config


# ── Events ───────────────────────────────────────────────────────────

class TestEventSerialization:
    def test_event_is_json_safe(self):
        data = event_to_dict(_make_event())
        text = json.dumps(data)
        assert "stable_final_state" in text

    def test_event_content(self):
        data = event_to_dict(_make_event())
        assert data["interaction"]["key"] == "nu:14;tgt:1000060120;N:2112;proc:Weak[CC],QES;"
        assert data["interaction"]["kinematics"]["Q2"] == pytest.approx(0.42)
        assert data["particles"][1]["p4"] == [0.7, 0.1, 0.0, 0.68]
        assert data["particles"][1]["mother"] == 0
        assert data["iterations"] == 3

    def test_result_with_event(self):
        result = GenerationResult(
            status=GenerationStatus.ACCEPTED, event=_make_event(), xsec_max=3.0,
        )
        data = result_to_dict(result)
        assert data["status"] == "accepted"
        assert data["event"]["diff_xsec"] == 1.25

    def test_result_without_event(self):
        result = GenerationResult(status=GenerationStatus.NO_PHASE_SPACE, message="none")
        data = result_to_dict(result)
        assert data["event"] is None
        json.dumps(data)
