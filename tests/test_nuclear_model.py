"""Tests for nuclear data, nuclear models and hit-nucleon binding."""

import logging
import math

import numpy as np
import pytest
from scipy import integrate, stats

from qelgen.core import lorentz, pdg
from qelgen.core.binding import (
    BindingMode,
    bind_hit_nucleon,
    binding_mode_from_string,
    remnant_nucleus,
)
from qelgen.core.nuclear_data import NuclearDataService
from qelgen.core.nuclear_model import FermiGasModel, LocalFermiGasModel
from qelgen.models.interaction import Interaction, Target

CARBON = 1000060120
ARGON = 1000180400


@pytest.fixture(scope="module")
def data() -> NuclearDataService:
    return NuclearDataService()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


# ── Nuclear data ─────────────────────────────────────────────────────

class TestNuclearData:
    def test_carbon_parameters(self, data: NuclearDataService):
        assert data.fermi_momentum(CARBON, pdg.PROTON) == pytest.approx(0.221)
        assert data.removal_energy(CARBON) == pytest.approx(0.025)

    def test_isospin_asymmetric(self, data: NuclearDataService):
        assert data.fermi_momentum(ARGON, pdg.NEUTRON) > data.fermi_momentum(ARGON, pdg.PROTON)

    def test_nearest_mass_fallback(self, data: NuclearDataService, caplog):
        with caplog.at_level(logging.WARNING):
            nucleus = data.get_nucleus(pdg.ion_pdg_code(14, 7))
        assert nucleus.a == 16 or nucleus.a == 12
        assert "No nuclear data" in caplog.text

    def test_free_nucleon_rejected(self, data: NuclearDataService):
        with pytest.raises(ValueError):
            data.get_nucleus(pdg.TARGET_FREE_PROTON)

    def test_density_normalized_to_a(self, data: NuclearDataService):
        total, _ = integrate.quad(
            lambda r: 4.0 * math.pi * r * r * data.density(CARBON, r), 0.0, 20.0,
        )
        assert total == pytest.approx(12.0, rel=1e-3)

    def test_local_fermi_momentum_falls_off(self, data: NuclearDataService):
        centre = data.local_fermi_momentum(CARBON, pdg.NEUTRON, 0.0)
        surface = data.local_fermi_momentum(CARBON, pdg.NEUTRON, 3.0)
        outside = data.local_fermi_momentum(CARBON, pdg.NEUTRON, 15.0)
        assert 0.2 < centre < 0.3
        assert centre > surface > outside


# ── Nuclear models ───────────────────────────────────────────────────

class TestFermiGasModel:
    def test_momentum_inside_fermi_sphere(self, data, rng):
        model = FermiGasModel(data, rng)
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.NEUTRON)
        for _ in range(200):
            assert model.generate_nucleon(target)
            assert model.momentum <= 0.221 + 1e-12
            assert model.removal_energy == pytest.approx(0.025)

    def test_momentum_distribution(self, data, rng):
        """|p|³ is uniform on [0, kF³] for a filled Fermi sphere."""
        model = FermiGasModel(data, rng)
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.PROTON)
        samples = []
        for _ in range(2000):
            model.generate_nucleon(target)
            samples.append((model.momentum / 0.221) ** 3)
        _, p_value = stats.kstest(samples, "uniform")
        assert p_value > 0.001

    def test_free_nucleon_state(self, data, rng):
        model = FermiGasModel(data, rng)
        assert not model.generate_nucleon(Target(pdg=pdg.TARGET_FREE_PROTON, hit_nuc_pdg=pdg.PROTON))
        assert model.momentum == 0.0
        assert model.removal_energy == 0.0

    def test_setters(self, data, rng):
        model = FermiGasModel(data, rng)
        model.set_momentum3(np.array([0.0, 0.0, -0.2]))
        model.set_removal_energy(0.03)
        assert model.momentum == pytest.approx(0.2)
        assert model.removal_energy == 0.03
        p3 = model.momentum3
        p3[2] = 5.0
        assert model.momentum == pytest.approx(0.2)


class TestLocalFermiGasModel:
    def test_removal_energy_depends_on_momentum(self, data, rng):
        model = LocalFermiGasModel(data, rng)
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.NEUTRON)
        k_f = model.local_fermi_momentum(target, pdg.NEUTRON, 0.0)
        m_n = pdg.mass(pdg.NEUTRON)
        for _ in range(50):
            model.generate_nucleon(target, 0.0)
            expected = 0.025 + (k_f ** 2 - model.momentum ** 2) / (2.0 * m_n)
            assert model.removal_energy == pytest.approx(expected)
            assert model.momentum <= k_f + 1e-12

    def test_outer_radius_gives_smaller_momenta(self, data):
        model = LocalFermiGasModel(data, np.random.default_rng(7))
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.PROTON)
        k_outer = model.local_fermi_momentum(target, pdg.PROTON, 4.0)
        for _ in range(100):
            model.generate_nucleon(target, 4.0)
            assert model.momentum <= k_outer + 1e-12

    def test_same_seed_same_stream(self, data):
        target = Target(pdg=CARBON, hit_nuc_pdg=pdg.PROTON)
        a = LocalFermiGasModel(data, np.random.default_rng(3))
        b = LocalFermiGasModel(data, np.random.default_rng(3))
        a.generate_nucleon(target)
        b.generate_nucleon(target)
        np.testing.assert_array_equal(a.momentum3, b.momentum3)


# ── Binding ──────────────────────────────────────────────────────────

class TestBinding:
    @pytest.fixture
    def model(self, data, rng) -> FermiGasModel:
        model = FermiGasModel(data, rng)
        model.set_momentum3(np.array([0.1, 0.0, 0.15]))
        model.set_removal_energy(0.025)
        return model

    def test_use_nuclear_model(self, model):
        interaction = Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, 1.0)
        eb = bind_hit_nucleon(interaction, model, BindingMode.USE_NUCLEAR_MODEL)
        p4 = interaction.target.hit_nuc_p4
        assert eb == pytest.approx(0.025)
        assert p4[0] == pytest.approx(pdg.mass(pdg.NEUTRON) - 0.025)
        np.testing.assert_allclose(p4[1:4], [0.1, 0.0, 0.15])
        assert lorentz.mass(p4) < pdg.mass(pdg.NEUTRON)

    def test_ground_state_remnant(self, model):
        interaction = Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, 1.0)
        bind_hit_nucleon(interaction, model, BindingMode.USE_GROUND_STATE_REMNANT)
        m_rem = pdg.nucleus_mass(11, 6)
        expected = pdg.mass(CARBON) - math.sqrt(m_rem ** 2 + 0.1 ** 2 + 0.15 ** 2)
        assert interaction.target.hit_nuc_p4[0] == pytest.approx(expected)

    @pytest.mark.parametrize("mode", [BindingMode.ON_SHELL, BindingMode.ON_SHELL_WITH_CORRECTION])
    def test_on_shell(self, model, mode):
        interaction = Interaction.qel_cc(CARBON, pdg.NEUTRON, pdg.NU_MU, 1.0)
        eb = bind_hit_nucleon(interaction, model, mode)
        assert eb == 0.0
        assert lorentz.mass(interaction.target.hit_nuc_p4) == pytest.approx(pdg.mass(pdg.NEUTRON))

    def test_free_nucleon_at_rest(self, model):
        interaction = Interaction.qel_cc(pdg.TARGET_FREE_NEUTRON, pdg.NEUTRON, pdg.NU_MU, 1.0)
        eb = bind_hit_nucleon(interaction, model, BindingMode.USE_NUCLEAR_MODEL)
        assert eb == 0.0
        assert lorentz.mass(interaction.target.hit_nuc_p4) == pytest.approx(pdg.mass(pdg.NEUTRON))
        np.testing.assert_array_equal(interaction.target.hit_nuc_p4[1:4], 0.0)

    def test_remnant_nucleus(self):
        assert remnant_nucleus(12, 6, pdg.PROTON) == (11, 5)
        assert remnant_nucleus(12, 6, pdg.NEUTRON) == (11, 6)

    def test_mode_from_string(self):
        assert binding_mode_from_string("OnShellWithCorrection") is BindingMode.ON_SHELL_WITH_CORRECTION
        assert binding_mode_from_string("USE_NUCLEAR_MODEL") is BindingMode.USE_NUCLEAR_MODEL
        with pytest.raises(ValueError):
            binding_mode_from_string("Frozen")
