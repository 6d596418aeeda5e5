"""Serialization utilities: dataclass ↔ JSON-safe dict conversion.

Handles Enum fields and NumPy arrays. Used for generator configuration
files and for dumping generated events.
"""

from __future__ import annotations

import dataclasses
import json
import pathlib
from enum import Enum
from typing import Any

import numpy as np

from qelgen.core.binding import binding_mode_from_string
from qelgen.models.config import GeneratorConfig
from qelgen.models.event import GeneratedEvent, GenerationResult
from qelgen.models.interaction import Interaction, KineVar


# =====================================================================
# Generic helpers
# =====================================================================


def _serialize_value(val: Any) -> Any:
    """Convert a value to a JSON-safe type."""
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, np.ndarray):
        return val.tolist()
    if isinstance(val, np.generic):
        return val.item()
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        return _dataclass_to_dict(val)
    if isinstance(val, dict):
        return {_serialize_value(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, (int, float, str, bool)):
        return val
    return str(val)


def _dataclass_to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a JSON-safe dict."""
    result = {}
    for f in dataclasses.fields(obj):
        val = getattr(obj, f.name)
        result[f.name] = _serialize_value(val)
    return result


# =====================================================================
# Generator configuration
# =====================================================================


def config_to_dict(config: GeneratorConfig) -> dict:
    """Serialize GeneratorConfig to a JSON-safe dict."""
    return _dataclass_to_dict(config)


def dict_to_config(data: dict) -> GeneratorConfig:
    """Deserialize a dict to GeneratorConfig.

    Missing keys take their defaults; unknown keys are rejected.

    Raises:
        ValueError: On unknown keys, an unknown binding mode or invalid
            parameter values.
    """
    data = dict(data)  # shallow copy
    known = {f.name for f in dataclasses.fields(GeneratorConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    if "binding_mode" in data:
        data["binding_mode"] = binding_mode_from_string(data["binding_mode"])

    config = GeneratorConfig(**data)
    config.validate()
    return config


def save_config(config: GeneratorConfig, path: str | pathlib.Path) -> None:
    """Write a configuration as JSON."""
    pathlib.Path(path).write_text(
        json.dumps(config_to_dict(config), indent=2), encoding="utf-8",
    )


def load_config(path: str | pathlib.Path) -> GeneratorConfig:
    """Read a JSON configuration file."""
    data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    return dict_to_config(data)


# =====================================================================
# Events
# =====================================================================


def interaction_to_dict(interaction: Interaction) -> dict:
    """Summary of an interaction: key, probe and the locked kinematics."""
    kine = interaction.kine
    return {
        "key": interaction.as_string(),
        "probe_p4": _serialize_value(interaction.init_state.probe_p4),
        "hit_nuc_p4": _serialize_value(interaction.target.hit_nuc_p4),
        "hit_nuc_position": interaction.target.hit_nuc_position,
        "kinematics": {
            var.value: float(kine.selected[var]) for var in KineVar if var in kine.selected
        },
    }


def event_to_dict(event: GeneratedEvent) -> dict:
    """Serialize a generated event to a JSON-safe dict."""
    return {
        "interaction": interaction_to_dict(event.interaction),
        "particles": [_dataclass_to_dict(p) for p in event.particles],
        "diff_xsec": event.diff_xsec,
        "weight": event.weight,
        "iterations": event.iterations,
        "pauli_blocked": event.pauli_blocked,
    }


def result_to_dict(result: GenerationResult) -> dict:
    """Serialize a generation result (event included when accepted)."""
    return {
        "status": result.status.value,
        "message": result.message,
        "xsec_max": result.xsec_max,
        "event": event_to_dict(result.event) if result.event is not None else None,
    }
