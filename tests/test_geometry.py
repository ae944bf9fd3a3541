"""Tests for polyprism.geometry: area, centroid, and winding."""

import numpy as np
import pytest

from polyprism.errors import DegeneratePolygonError, InvalidRingError
from polyprism.geometry import (
    analyse_ring,
    as_ring,
    centroid,
    is_clockwise,
    normalise_winding,
    polygon_area,
    signed_area_2x,
)


class TestSignedArea:
    def test_unit_square_ccw_positive(self, unit_square):
        assert signed_area_2x(unit_square) == pytest.approx(2.0)

    def test_unit_square_cw_negative(self, unit_square):
        assert signed_area_2x(unit_square[::-1]) == pytest.approx(-2.0)

    def test_polygon_area_is_absolute(self, unit_square):
        assert polygon_area(unit_square) == pytest.approx(1.0)
        assert polygon_area(unit_square[::-1]) == pytest.approx(1.0)

    def test_l_shape_area(self, l_shape):
        assert polygon_area(l_shape) == pytest.approx(3.0)

    def test_translation_does_not_change_area(self, l_shape):
        shifted = l_shape + np.array([1000.0, -250.0])
        assert polygon_area(shifted) == pytest.approx(3.0)


class TestIsClockwise:
    def test_ccw_square(self, unit_square):
        assert is_clockwise(unit_square) is False

    def test_cw_square(self, unit_square):
        assert is_clockwise(unit_square[::-1]) is True

    @pytest.mark.parametrize("reverse", [False, True])
    def test_agrees_with_signed_area(self, l_shape, reverse):
        """Clockwise exactly when the shoelace sum is non-positive."""
        ring = l_shape[::-1] if reverse else l_shape
        assert is_clockwise(ring) == (signed_area_2x(ring) <= 0)

    def test_reversal_flips_both(self, l_shape):
        assert is_clockwise(l_shape) != is_clockwise(l_shape[::-1])
        assert np.sign(signed_area_2x(l_shape)) == -np.sign(
            signed_area_2x(l_shape[::-1])
        )


class TestCentroid:
    def test_unit_square(self, unit_square):
        np.testing.assert_allclose(centroid(unit_square), [0.5, 0.5])

    def test_orientation_independent(self, unit_square):
        """Dividing by the signed area cancels the winding sign."""
        np.testing.assert_allclose(centroid(unit_square[::-1]), [0.5, 0.5])

    def test_right_triangle(self):
        ring = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 3.0]])
        np.testing.assert_allclose(centroid(ring), [1.0, 1.0])

    def test_l_shape(self, l_shape):
        # 2x1 slab centred at (1, 0.5) plus a unit square at (0.5, 1.5).
        np.testing.assert_allclose(centroid(l_shape), [2.5 / 3, 2.5 / 3])

    def test_precomputed_area_used(self, unit_square):
        np.testing.assert_allclose(
            centroid(unit_square, signed_area_2x(unit_square)), [0.5, 0.5],
        )

    def test_zero_area_raises(self):
        ring = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
        with pytest.raises(DegeneratePolygonError, match="zero-area"):
            centroid(ring)


class TestNormaliseWinding:
    def test_ccw_reversed(self, unit_square):
        result = normalise_winding(unit_square.copy())
        assert is_clockwise(result)
        np.testing.assert_array_equal(result, unit_square[::-1])

    def test_cw_unchanged(self, unit_square):
        cw = unit_square[::-1].copy()
        result = normalise_winding(cw.copy())
        np.testing.assert_array_equal(result, cw)

    def test_idempotent(self, l_shape):
        once = normalise_winding(l_shape.copy())
        twice = normalise_winding(once.copy())
        np.testing.assert_array_equal(once, twice)

    def test_in_place_for_writable_array(self, unit_square):
        ring = unit_square.copy()
        result = normalise_winding(ring)
        assert result is ring
        assert is_clockwise(ring)

    def test_read_only_input_copied(self, unit_square):
        ring = unit_square.copy()
        ring.setflags(write=False)
        result = normalise_winding(ring)
        assert result is not ring
        assert is_clockwise(result)
        np.testing.assert_array_equal(ring, unit_square)

    def test_reversal_is_index_order(self, unit_square):
        """Vertices are reordered, not reflected."""
        result = normalise_winding(unit_square.copy())
        assert {tuple(p) for p in result} == {tuple(p) for p in unit_square}


class TestAsRing:
    def test_list_input(self):
        ring = as_ring([(0, 0), (1, 0), (0, 1)])
        assert ring.shape == (3, 2)
        assert ring.dtype == float

    def test_closing_vertex_dropped(self, unit_square):
        closed = np.vstack([unit_square, unit_square[:1]])
        assert as_ring(closed).shape == (4, 2)

    def test_two_vertices_raises(self):
        with pytest.raises(InvalidRingError, match="at least 3"):
            as_ring([(0, 0), (1, 0)])

    def test_closed_triangle_of_two_points_raises(self):
        with pytest.raises(InvalidRingError, match="at least 3"):
            as_ring([(0, 0), (1, 0), (0, 0)])

    def test_wrong_shape_raises(self):
        with pytest.raises(InvalidRingError, match=r"\(n, 2\)"):
            as_ring(np.zeros((4, 3)))

    def test_non_finite_raises(self):
        with pytest.raises(InvalidRingError, match="non-finite"):
            as_ring([(0, 0), (1, np.nan), (0, 1)])

    def test_non_numeric_raises(self):
        with pytest.raises(InvalidRingError, match="not numeric"):
            as_ring([("a", "b"), ("c", "d"), ("e", "f")])

    def test_invalid_ring_is_value_error(self):
        with pytest.raises(ValueError):
            as_ring([(0, 0)])


class TestAnalyseRing:
    def test_unit_square(self, unit_square):
        props = analyse_ring(unit_square)
        assert props.area == pytest.approx(1.0)
        np.testing.assert_allclose(props.centroid, [0.5, 0.5])
        assert is_clockwise(props.ring)
        assert props.signed_area_2x == pytest.approx(-2.0)

    def test_input_not_modified(self, unit_square):
        original = unit_square.copy()
        analyse_ring(unit_square)
        np.testing.assert_array_equal(unit_square, original)

    def test_ring_read_only(self, unit_square):
        props = analyse_ring(unit_square)
        assert not props.ring.flags.writeable

    def test_collinear_raises(self):
        ring = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
        with pytest.raises(DegeneratePolygonError) as excinfo:
            analyse_ring(ring)
        assert excinfo.value.area == pytest.approx(0.0)

    def test_tiny_area_below_epsilon_raises(self):
        ring = np.array([[0.0, 0.0], [1e-6, 0.0], [0.0, 1e-6]])
        with pytest.raises(DegeneratePolygonError):
            analyse_ring(ring)

    def test_custom_epsilon(self):
        ring = np.array([[0.0, 0.0], [1e-6, 0.0], [0.0, 1e-6]])
        props = analyse_ring(ring, epsilon=1e-15)
        assert props.area == pytest.approx(5e-13)
