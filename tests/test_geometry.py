"""
Tests for coordinates, ring helpers and rotations.
"""
import math

import numpy as np
import pytest

from rocketframe.geometry import (
    NUL,
    ZERO,
    Coordinate,
    add_bounding_box,
    axial_angles_to_vectors,
    ring_cg,
    ring_longitudinal_unit_inertia,
    ring_mass,
    ring_rotational_unit_inertia,
    rotate_points,
    safe_sqrt,
)


class TestCoordinate:

    def test_weighted_average(self):
        a = Coordinate(0.0, 0.0, 0.0, 1.0)
        b = Coordinate(1.0, 0.0, 0.0, 3.0)
        avg = a.average(b)
        assert avg.x == pytest.approx(0.75)
        assert avg.weight == pytest.approx(4.0)

    def test_average_of_weightless_points(self):
        avg = Coordinate(0.0, 2.0).average(Coordinate(1.0, 0.0))
        assert avg.x == pytest.approx(0.5)
        assert avg.y == pytest.approx(1.0)
        assert avg.weight == 0.0

    def test_add_sub(self):
        c = Coordinate(1.0, 2.0, 3.0, 0.5).add(Coordinate(1.0, 1.0, 1.0, 0.5))
        assert (c.x, c.y, c.z, c.weight) == (2.0, 3.0, 4.0, 1.0)
        d = c.sub(Coordinate(1.0, 1.0, 1.0, 9.0))
        assert (d.x, d.weight) == (1.0, 1.0)

    def test_array_round_trip(self):
        c = Coordinate.from_array(np.array([0.1, 0.2, 0.3]), weight=2.0)
        np.testing.assert_array_equal(c.to_array(), [0.1, 0.2, 0.3])
        assert c.weight == 2.0

    def test_constants(self):
        assert ZERO.weight == 0.0
        assert math.isnan(NUL.x)


class TestRing:

    def test_mass(self):
        assert ring_mass(0.02, 0.01, 1.0, 1000.0) == pytest.approx(math.pi * 3e-4 * 1000.0)

    def test_inverted_radii_give_zero(self):
        assert ring_mass(0.01, 0.02, 1.0, 1000.0) == 0.0

    def test_cg(self):
        cg = ring_cg(0.02, 0.0, 0.1, 0.3, 1000.0)
        assert cg.x == pytest.approx(0.2)
        assert cg.weight == pytest.approx(ring_mass(0.02, 0.0, 0.2, 1000.0))

    def test_solid_cylinder_inertia(self):
        assert ring_rotational_unit_inertia(0.1, 0.0) == pytest.approx(0.005)
        assert ring_longitudinal_unit_inertia(0.1, 0.0, 1.0) == pytest.approx((0.03 + 1.0) / 12)

    def test_safe_sqrt(self):
        assert safe_sqrt(-1e-18) == 0.0
        assert safe_sqrt(4.0) == 2.0

    def test_bounding_box(self):
        bounds = []
        add_bounding_box(bounds, 0.0, 1.0, 0.1)
        assert [(b.x, b.y, b.z) for b in bounds] == [(0.0, -0.1, -0.1), (1.0, 0.1, 0.1)]


class TestRotation:

    def test_axial_vectors(self):
        vectors = axial_angles_to_vectors([0.0, np.pi])
        assert vectors.shape == (2, 3)
        np.testing.assert_array_equal(vectors[:, 1:], 0.0)

    def test_roll_quarter_turn(self):
        rotated = rotate_points([np.pi / 2, 0.0, 0.0], [[0.0, 1.0, 0.0], [0.5, 0.0, 0.0]])
        np.testing.assert_allclose(rotated, [[0.0, 0.0, 1.0], [0.5, 0.0, 0.0]], atol=1e-12)

    def test_zero_rotation_returns_copy(self):
        points = np.array([[1.0, 2.0, 3.0]])
        rotated = rotate_points([0.0, 0.0, 0.0], points)
        rotated[0, 0] = 99.0
        assert points[0, 0] == 1.0
