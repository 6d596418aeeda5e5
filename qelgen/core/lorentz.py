"""Lorentz 4-vector helpers.

4-vectors are numpy arrays ``(E, px, py, pz)`` in GeV; 3-vectors are
``(px, py, pz)``.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from qelgen.constants import SMALL_NUMBER

_Z_AXIS = np.array([0.0, 0.0, 1.0])


def four_vector(energy: float, p3: NDArray[np.float64]) -> NDArray[np.float64]:
    """Build a 4-vector from an energy and a 3-momentum."""
    return np.array([energy, p3[0], p3[1], p3[2]], dtype=np.float64)


def momentum3(p4: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.asarray(p4[1:4], dtype=np.float64)


def momentum(p4: NDArray[np.float64]) -> float:
    """|p| of a 4-vector [GeV/c]."""
    return float(np.linalg.norm(p4[1:4]))


def mass2(p4: NDArray[np.float64]) -> float:
    """Invariant mass squared E² - |p|²."""
    return float(p4[0] * p4[0] - np.dot(p4[1:4], p4[1:4]))


def mass(p4: NDArray[np.float64]) -> float:
    """Invariant mass; negative for space-like vectors."""
    m2 = mass2(p4)
    return math.sqrt(m2) if m2 >= 0.0 else -math.sqrt(-m2)


def polar_angle(p3: NDArray[np.float64]) -> float:
    """Polar angle of a 3-vector with respect to +z [radian]."""
    pmag = float(np.linalg.norm(p3))
    if pmag <= 0.0:
        return 0.0
    return float(np.arccos(np.clip(p3[2] / pmag, -1.0, 1.0)))


def angle_between(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    na = float(np.linalg.norm(a))
    nb = float(np.linalg.norm(b))
    if na <= 0.0 or nb <= 0.0:
        return 0.0
    return float(np.arccos(np.clip(np.dot(a, b) / (na * nb), -1.0, 1.0)))


def boost_vector(p4: NDArray[np.float64]) -> NDArray[np.float64]:
    """Velocity β = p/E of the frame in which *p4* is at rest."""
    return np.asarray(p4[1:4], dtype=np.float64) / p4[0]


def boost(p4: NDArray[np.float64], beta: NDArray[np.float64]) -> NDArray[np.float64]:
    """Active Lorentz boost of (E, p) by velocity β (|β| < 1).

    Raises:
        ValueError: If |β| ≥ 1.
    """
    b2 = float(np.dot(beta, beta))
    if b2 < 1e-30:
        return np.array(p4, dtype=np.float64)
    if b2 >= 1.0:
        raise ValueError("Superluminal beta encountered.")
    gamma = 1.0 / math.sqrt(1.0 - b2)
    energy = float(p4[0])
    p3 = np.asarray(p4[1:4], dtype=np.float64)
    bp = float(np.dot(beta, p3))
    e_new = gamma * (energy + bp)
    p_new = p3 + ((gamma - 1.0) / b2) * bp * beta + gamma * energy * beta
    return four_vector(e_new, p_new)


def from_spherical(p: float, cos_theta: float, phi: float) -> NDArray[np.float64]:
    """3-vector of magnitude *p* with polar angle acos(cos_theta) and azimuth phi."""
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    return np.array([
        p * sin_theta * math.cos(phi),
        p * sin_theta * math.sin(phi),
        p * cos_theta,
    ])


def rotate_z_onto(
    vec: NDArray[np.float64], direction: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Rotate *vec* by the rotation that takes +z onto *direction*.

    The rotation axis is z × direction; a null axis (direction along ±z)
    leaves the vector unchanged for +z and flips it about x for -z.
    """
    dmag = float(np.linalg.norm(direction))
    if dmag < SMALL_NUMBER:
        return np.array(vec, dtype=np.float64)

    axis = np.cross(_Z_AXIS, direction)
    axis_mag = float(np.linalg.norm(axis))
    if axis_mag < SMALL_NUMBER:
        if direction[2] >= 0.0:
            return np.array(vec, dtype=np.float64)
        return Rotation.from_rotvec(math.pi * np.array([1.0, 0.0, 0.0])).apply(vec)

    angle = angle_between(direction, _Z_AXIS)
    return Rotation.from_rotvec(angle * axis / axis_mag).apply(vec)
