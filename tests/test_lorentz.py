"""Tests for 4-vector helpers (qelgen.core.lorentz)."""

import math

import numpy as np
import pytest

from qelgen.core import lorentz


class TestInvariants:
    def test_mass_of_particle_at_rest(self):
        p4 = np.array([0.938, 0.0, 0.0, 0.0])
        assert lorentz.mass(p4) == pytest.approx(0.938)

    def test_spacelike_mass_is_negative(self):
        q = np.array([0.1, 0.0, 0.0, 0.5])
        assert lorentz.mass2(q) == pytest.approx(0.01 - 0.25)
        assert lorentz.mass(q) < 0.0

    def test_momentum(self):
        assert lorentz.momentum(np.array([5.0, 3.0, 0.0, 4.0])) == pytest.approx(5.0)


class TestBoost:
    def test_boost_to_rest_frame(self):
        p3 = np.array([0.2, -0.1, 0.5])
        p4 = lorentz.four_vector(math.sqrt(0.938 ** 2 + p3 @ p3), p3)
        rest = lorentz.boost(p4, -lorentz.boost_vector(p4))
        assert rest[0] == pytest.approx(0.938)
        np.testing.assert_allclose(rest[1:4], 0.0, atol=1e-12)

    def test_boost_preserves_mass(self):
        p4 = np.array([1.5, 0.3, 0.4, 1.0])
        boosted = lorentz.boost(p4, np.array([0.1, -0.5, 0.6]))
        assert lorentz.mass2(boosted) == pytest.approx(lorentz.mass2(p4))

    def test_zero_beta_is_identity(self):
        p4 = np.array([1.0, 0.1, 0.2, 0.3])
        np.testing.assert_allclose(lorentz.boost(p4, np.zeros(3)), p4)

    def test_superluminal_beta_raises(self):
        with pytest.raises(ValueError):
            lorentz.boost(np.array([1.0, 0.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]))


class TestRotation:
    def test_z_onto_x(self):
        rotated = lorentz.rotate_z_onto(np.array([0.0, 0.0, 2.0]), np.array([3.0, 0.0, 0.0]))
        np.testing.assert_allclose(rotated, [2.0, 0.0, 0.0], atol=1e-12)

    def test_plus_z_is_identity(self):
        vec = np.array([0.1, 0.2, 0.3])
        np.testing.assert_allclose(lorentz.rotate_z_onto(vec, np.array([0.0, 0.0, 0.7])), vec)

    def test_minus_z_flips(self):
        rotated = lorentz.rotate_z_onto(np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, -1.0]))
        np.testing.assert_allclose(rotated, [0.0, 0.0, -1.0], atol=1e-12)

    def test_preserves_angle_to_axis(self):
        """A vector at polar angle θ about +z ends up at angle θ about the direction."""
        direction = np.array([0.3, -0.4, 0.5])
        vec = lorentz.from_spherical(1.0, 0.6, 1.1)
        rotated = lorentz.rotate_z_onto(vec, direction)
        cos_angle = rotated @ direction / np.linalg.norm(direction)
        assert cos_angle == pytest.approx(0.6)
        assert np.linalg.norm(rotated) == pytest.approx(1.0)


class TestAngles:
    def test_polar_angle(self):
        assert lorentz.polar_angle(np.array([1.0, 0.0, 1.0])) == pytest.approx(math.pi / 4)

    def test_angle_between_null_vector(self):
        assert lorentz.angle_between(np.zeros(3), np.array([1.0, 0.0, 0.0])) == 0.0

    def test_from_spherical(self):
        vec = lorentz.from_spherical(2.0, 0.0, 0.0)
        np.testing.assert_allclose(vec, [2.0, 0.0, 0.0], atol=1e-12)
