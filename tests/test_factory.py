"""Tests for generator composition (qelgen.core.factory)."""

import numpy as np
import pytest

from qelgen.core import pdg
from qelgen.core.binding import BindingMode
from qelgen.core.factory import (
    build_generator,
    build_worker_generators,
    make_nuclear_model,
    make_pauli_blocker,
)
from qelgen.core.nuclear_data import NuclearDataService
from qelgen.core.nuclear_model import FermiGasModel, LocalFermiGasModel
from qelgen.models.config import GeneratorConfig
from qelgen.models.interaction import Interaction, Target

CARBON = 1000060120


@pytest.fixture(scope="module")
def data() -> NuclearDataService:
    return NuclearDataService()


class TestIdentifiers:
    def test_nuclear_models(self, data):
        rng = np.random.default_rng(0)
        assert isinstance(make_nuclear_model("FermiGas", data, rng), FermiGasModel)
        assert isinstance(make_nuclear_model("LocalFermiGas", data, rng), LocalFermiGasModel)
        with pytest.raises(ValueError):
            make_nuclear_model("SpectralFunction", data, rng)

    def test_local_pauli_blocker(self, data):
        model = LocalFermiGasModel(data)
        blocker = make_pauli_blocker("LocalFermiGas", data, model)
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.NEUTRON)
        assert blocker.fermi_momentum(target, pdg.PROTON, 0.0) == pytest.approx(
            model.local_fermi_momentum(target, pdg.PROTON, 0.0)
        )

    def test_default_pauli_blocker(self, data):
        blocker = make_pauli_blocker("Default", data, FermiGasModel(data))
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.NEUTRON)
        assert blocker.fermi_momentum(target, pdg.PROTON, 0.0) == pytest.approx(0.221)

    def test_unknown_pauli_blocker(self, data):
        with pytest.raises(ValueError):
            make_pauli_blocker("Strict", data, FermiGasModel(data))


class TestBuildGenerator:
    def test_generates_event(self):
        gen = build_generator(seed=1)
        result = gen.generate(Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, 1.0))
        assert result.ok
        assert result.xsec_max > 0.0
        assert result.event.diff_xsec > 0.0

    def test_same_seed_reproducible(self):
        leptons = []
        for _ in range(2):
            gen = build_generator(GeneratorConfig(nuclear_model="FermiGas"), seed=123)
            event = gen.generate(Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, 1.5)).event
            leptons.append(event.interaction.kine.fs_lepton_p4)
        np.testing.assert_array_equal(leptons[0], leptons[1])

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            build_generator(GeneratorConfig(max_iterations=0))

    def test_pauli_override_consumed_by_each_event(self):
        config = GeneratorConfig(
            binding_mode=BindingMode.ON_SHELL_WITH_CORRECTION, cache_min_energy=0.1,
        )
        gen = build_generator(config, seed=11)
        for energy in (0.5, 1.0):
            for _ in range(20):
                gen.generate(Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, energy))
                assert not gen.pauli_blocker.ignore_next


class TestWorkerGenerators:
    def test_shared_cache_independent_streams(self):
        workers = build_worker_generators(2, GeneratorConfig(nuclear_model="FermiGas"), seed=7)
        assert workers[0].cache is workers[1].cache

        events = []
        for gen in workers:
            result = gen.generate(Interaction.qel_cc(CARBON, pdg.PROTON, -pdg.NU_MU, 2.0))
            assert result.ok
            events.append(result.event)

        assert workers[0].cache.size() == 1
        assert not np.array_equal(
            events[0].interaction.kine.fs_lepton_p4,
            events[1].interaction.kine.fs_lepton_p4,
        )
