"""Composition of generator collaborators from a configuration.

Identifiers in the configuration (nuclear model, Pauli blocker) are
resolved here, once, and the resulting objects are injected. Each
generator gets its own random streams spawned from one seed so that
parallel workers stay reproducible.
"""

from __future__ import annotations

import logging

import numpy as np

from qelgen.core.nuclear_data import NuclearDataService
from qelgen.core.nuclear_model import FermiGasModel, LocalFermiGasModel, NuclearModel
from qelgen.core.pauli_blocker import PauliBlocker
from qelgen.core.qel_generator import QELEventGenerator
from qelgen.core.qel_xsec import DifferentialXSecModel, DipoleQELModel, FullQELEvaluator
from qelgen.core.xsec_cache import MaxXSecCache
from qelgen.models.config import GeneratorConfig

logger = logging.getLogger(__name__)


def make_nuclear_model(
    name: str,
    nuclear_data: NuclearDataService,
    rng: np.random.Generator,
) -> NuclearModel:
    """Instantiate a nuclear model by identifier.

    Raises:
        ValueError: If *name* is unknown.
    """
    if name == FermiGasModel.name:
        return FermiGasModel(nuclear_data, rng)
    if name == LocalFermiGasModel.name:
        return LocalFermiGasModel(nuclear_data, rng)
    raise ValueError(f"Unknown nuclear model: {name!r}")


def make_pauli_blocker(
    name: str,
    nuclear_data: NuclearDataService,
    nuclear_model: NuclearModel,
) -> PauliBlocker:
    """Instantiate a Pauli-blocking policy by identifier.

    "Default" uses the global Fermi momentum table, "LocalFermiGas" the
    local Fermi momentum at the struck nucleon radius.

    Raises:
        ValueError: If *name* is unknown.
    """
    if name == "Default":
        return PauliBlocker(nuclear_data)
    if name == "LocalFermiGas":
        if isinstance(nuclear_model, LocalFermiGasModel):
            local = nuclear_model
        else:
            local = LocalFermiGasModel(nuclear_data)
        return PauliBlocker(nuclear_data, local_model=local)
    raise ValueError(f"Unknown Pauli blocker: {name!r}")


def build_generator(
    config: GeneratorConfig | None = None,
    seed: int | np.random.SeedSequence | None = None,
    xsec_model: DifferentialXSecModel | None = None,
    cache: MaxXSecCache | None = None,
    nuclear_data: NuclearDataService | None = None,
) -> QELEventGenerator:
    """Wire a QELEventGenerator and its collaborators.

    Args:
        config: Generator configuration (defaults if None).
        seed: Seed or SeedSequence; independent streams are spawned for the
              nuclear model and the generator.
        xsec_model: Differential cross-section model (DipoleQELModel if None).
        cache: Max-xsec cache, shareable between generators.
        nuclear_data: Nuclear parameter service.

    Returns:
        A ready-to-use generator.
    """
    config = config or GeneratorConfig()
    config.validate()

    seq = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    model_seq, generator_seq = seq.spawn(2)

    data = nuclear_data or NuclearDataService()
    nuclear_model = make_nuclear_model(config.nuclear_model, data, np.random.default_rng(model_seq))
    pauli = make_pauli_blocker(config.pauli_blocker, data, nuclear_model)
    evaluator = FullQELEvaluator(xsec_model or DipoleQELModel(), nuclear_model)

    logger.debug(
        "Built generator: nuclear model %s, Pauli blocker %s, binding %s",
        config.nuclear_model, config.pauli_blocker, config.binding_mode.value,
    )
    return QELEventGenerator(
        nuclear_model,
        evaluator,
        pauli,
        config,
        rng=np.random.default_rng(generator_seq),
        cache=cache,
    )


def build_worker_generators(
    n_workers: int,
    config: GeneratorConfig | None = None,
    seed: int | None = None,
    xsec_model: DifferentialXSecModel | None = None,
) -> list[QELEventGenerator]:
    """One generator per worker with independent streams and a shared cache."""
    config = config or GeneratorConfig()
    cache = MaxXSecCache(config.cache_min_energy)
    data = NuclearDataService()
    return [
        build_generator(config, worker_seq, xsec_model, cache, data)
        for worker_seq in np.random.SeedSequence(seed).spawn(n_workers)
    ]
