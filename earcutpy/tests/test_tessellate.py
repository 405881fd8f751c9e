"""Tests for the tessellate entry point."""

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from earcutpy import InvalidInputError, deviation, flatten, tessellate


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _circle(n, radius=100.0, cx=0.0, cy=0.0, reverse=False):
    """Flat coordinates of a regular n-gon."""
    angles = 2 * np.pi * np.arange(n) / n
    if reverse:
        angles = angles[::-1]
    xy = np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)])
    return xy.ravel().tolist()


def _star(n, seed):
    """Flat coordinates of a random star-shaped (hence simple) polygon."""
    rng = np.random.default_rng(seed)
    angles = 2 * np.pi * (np.arange(n) + rng.uniform(0.1, 0.9, n)) / n
    radii = rng.uniform(50.0, 100.0, n)
    xy = np.column_stack([radii * np.cos(angles), radii * np.sin(angles)])
    return xy.ravel().tolist()


def _assert_valid(indices, num_vertices):
    """Output is a flat list of triples referencing existing vertices."""
    assert len(indices) % 3 == 0
    if len(indices):
        assert indices.min() >= 0
        assert indices.max() < num_vertices


# ---------------------------------------------------------------------------
# Basic polygons
# ---------------------------------------------------------------------------

class TestTessellateBasic:
    """Small polygons with known triangulations."""

    def test_empty(self):
        result = tessellate([], [])
        assert len(result) == 0
        assert result.dtype == np.int32

    def test_indices_2d(self):
        result = tessellate([10, 0, 0, 50, 60, 60, 70, 10])
        assert result.tolist() == [1, 0, 3, 3, 2, 1]

    def test_indices_3d(self):
        """The z coordinate is ignored."""
        result = tessellate([10, 0, 0, 0, 50, 0, 60, 60, 0, 70, 10, 0], dim=3)
        assert result.tolist() == [1, 0, 3, 3, 2, 1]

    def test_2d_array_input(self):
        """An (N, 2) array is flattened row-major."""
        verts = np.array([[10, 0], [0, 50], [60, 60], [70, 10]], dtype=np.float32)
        assert tessellate(verts).tolist() == [1, 0, 3, 3, 2, 1]

    def test_single_triangle(self):
        result = tessellate([0, 0, 1, 0, 0, 1])
        assert len(result) == 3
        assert sorted(result.tolist()) == [0, 1, 2]

    def test_square_with_hole(self):
        verts = [0, 0, 100, 0, 100, 100, 0, 100,
                 20, 20, 80, 20, 80, 80, 20, 80]
        result = tessellate(verts, [4])
        assert len(result) == 8 * 3
        assert set(result.tolist()) <= set(range(8))
        assert deviation(verts, [4], 2, result) < 1e-14

    def test_steiner_point(self):
        """A single-point hole is fanned to the square's corners."""
        verts = [0, 0, 10, 0, 10, 10, 0, 10, 5, 5]
        result = tessellate(verts, [4])
        assert result.tolist() == [4, 0, 1, 3, 0, 4, 4, 1, 2, 2, 3, 4]
        for tri in result.reshape(-1, 3):
            assert 4 in tri
        assert deviation(verts, [4], 2, result) == 0

    def test_two_holes(self):
        """Holes are bridged left to right, each adding two vertices."""
        verts = [0, 0, 100, 0, 100, 100, 0, 100,
                 20, 20, 40, 20, 40, 40, 20, 40,
                 60, 30, 80, 30, 80, 50, 60, 50]
        result = tessellate(verts, [4, 8])
        assert len(result) // 3 == 12 + 4 - 2
        assert deviation(verts, [4, 8], 2, result) < 1e-14

    def test_unbridgeable_hole_dropped(self):
        """A hole entirely left of the outer ring contributes nothing."""
        verts = [0, 0, 10, 0, 10, 10, 0, 10,
                 -30, -5, -20, -5, -20, 5, -30, 5]
        result = tessellate(verts, [4])
        assert len(result) == 6
        assert set(result.tolist()) <= {0, 1, 2, 3}


# ---------------------------------------------------------------------------
# Larger polygons (z-order index active above 80 vertices)
# ---------------------------------------------------------------------------

class TestTessellateLarge:
    """Polygons large enough to use the spatial index."""

    def test_regular_polygon(self):
        verts = _circle(100)
        result = tessellate(verts)
        assert len(result) // 3 == 98
        assert deviation(verts, None, 2, result) < 1e-12

    def test_regular_polygon_reversed_winding(self):
        verts = _circle(100, reverse=True)
        result = tessellate(verts)
        assert len(result) // 3 == 98
        assert deviation(verts, None, 2, result) < 1e-12

    def test_polygon_with_hole(self):
        outer = _circle(64, radius=100.0)
        hole = _circle(32, radius=30.0, cx=5.0, cy=3.0)
        verts = outer + hole
        result = tessellate(verts, [64])
        # 96 vertices plus two bridge duplicates
        assert len(result) // 3 == 96
        _assert_valid(result, 96)
        assert deviation(verts, [64], 2, result) < 1e-12

    @pytest.mark.parametrize("n", [10, 50, 79, 81, 200, 500])
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_simple_polygon_triangle_count(self, n, seed):
        """A simple polygon with n vertices yields n - 2 triangles."""
        verts = _star(n, seed)
        result = tessellate(verts)
        assert len(result) // 3 == n - 2
        assert deviation(verts, None, 2, result) < 1e-10


# ---------------------------------------------------------------------------
# Known shapes: exact triangles and area error bound
# ---------------------------------------------------------------------------

# name: (rings, expected indices, max deviation)
KNOWN_SHAPES = {
    # two triangles meeting at a repeated vertex; needs the zero-length diagonal
    "hourglass": (
        [[[7, 18], [7, 15], [5, 15], [7, 13], [7, 15], [17, 17]]],
        [5, 0, 4, 2, 3, 1],
        1e-14,
    ),
    "self-touching": (
        [[[0, 0], [10, 0], [10, 10], [20, 10], [20, 20], [10, 20], [10, 10], [0, 10]]],
        [7, 0, 1, 3, 4, 5, 3, 5, 2, 7, 1, 6],
        1e-14,
    ),
    "hole-touching-outer": (
        [[[0, 0], [10, 0], [10, 10], [0, 10]],
         [[0, 5], [3, 3], [3, 7]]],
        [3, 4, 6, 5, 4, 0, 2, 3, 6, 5, 0, 1, 1, 2, 6, 6, 5, 1],
        1e-14,
    ),
    # the collinear hole is filtered away entirely at the bridge
    "zero-area-hole": (
        [[[0, 0], [10, 0], [10, 10], [0, 10]],
         [[2, 2], [4, 4], [6, 6]]],
        [2, 3, 0, 0, 1, 2],
        1e-14,
    ),
    "steiner": (
        [[[0, 0], [10, 0], [10, 10], [0, 10]],
         [[5, 5]]],
        [4, 0, 1, 3, 0, 4, 4, 1, 2, 2, 3, 4],
        1e-14,
    ),
    "repeated-points": (
        [[[0, 0], [0, 0], [10, 0], [10, 10], [10, 10], [0, 10]]],
        [1, 2, 4, 4, 5, 1],
        1e-14,
    ),
}


class TestTessellateKnownShapes:
    """Exact output and area error for shapes with traced triangulations."""

    @pytest.mark.parametrize("name", sorted(KNOWN_SHAPES))
    def test_known_shape(self, name):
        rings, expected, max_deviation = KNOWN_SHAPES[name]
        vertices, holes, dim = flatten(rings)
        result = tessellate(vertices, holes, dim)
        assert result.tolist() == expected
        assert len(result) // 3 == len(expected) // 3
        assert deviation(vertices, holes, dim, result) < max_deviation


# ---------------------------------------------------------------------------
# Degenerate and adversarial input
# ---------------------------------------------------------------------------

class TestTessellateDegenerate:
    """Degenerate input never raises and never references missing vertices."""

    @pytest.mark.parametrize("verts", [
        [5, 5],
        [0, 0, 1, 1],
        [0, 0, 1, 1, 2, 2],
        [0, 0, 0, 0, 0, 0],
        [0, 0, 1, 0, 2, 0, 3, 0, 1, 0],
    ])
    def test_degenerate_gives_empty(self, verts):
        assert len(tessellate(verts)) == 0

    def test_empty_outer_ring(self):
        """A hole starting at vertex 0 leaves no outer ring."""
        assert len(tessellate([0, 0, 1, 0, 1, 1], [0])) == 0

    def test_bowtie(self):
        """A self-intersecting ring is triangulated as far as possible."""
        result = tessellate([0, 0, 10, 10, 10, 0, 0, 10])
        assert result.tolist() == [3, 2, 1]

    def test_self_intersecting_split_order(self):
        """Diagonal choice and split order on a self-intersecting ring."""
        verts = [6, 7, 3, 4, 3, 7, 6, 1, 7, 4, 0, 4, 1, 3, 4, 6, 6, 1, 0, 2, 2, 5]
        result = tessellate(verts)
        assert result.tolist() == [1, 0, 10, 3, 2, 1, 8, 7, 9, 9, 6, 5, 3, 10, 9]

    def test_infinite_loop_input_terminates(self):
        verts = [1, 2, 2, 2, 1, 2, 1, 1, 1, 2, 4, 1, 5, 1, 3, 2, 4, 2, 4, 1]
        result = tessellate(verts, [5])
        _assert_valid(result, 10)

    def test_touching_holes(self):
        verts = [0, 0, 30, 0, 30, 30, 0, 30,
                 5, 5, 15, 5, 15, 15, 5, 15,
                 15, 15, 25, 15, 25, 25, 15, 25]
        result = tessellate(verts, [4, 8])
        _assert_valid(result, 12)

    def test_random_self_intersecting(self):
        rng = np.random.default_rng(42)
        for n in (5, 20, 100):
            verts = rng.uniform(0, 100, 2 * n).tolist()
            result = tessellate(verts)
            _assert_valid(result, n)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

class TestTessellateValidation:
    """Caller contract violations raise InvalidInputError."""

    square = [0, 0, 10, 0, 10, 10, 0, 10]

    @pytest.mark.parametrize("holes", [
        [3, 2],
        [2, 2],
        [4],
        [-1],
        [1, 10],
    ])
    def test_bad_hole_offsets(self, holes):
        with pytest.raises(InvalidInputError):
            tessellate(self.square, holes)

    def test_non_integer_hole_offsets(self):
        with pytest.raises(InvalidInputError, match="integers"):
            tessellate(self.square, [1.5])

    def test_length_not_multiple_of_dim(self):
        with pytest.raises(InvalidInputError, match="multiple"):
            tessellate([0, 0, 1, 0, 1], dim=2)

    @pytest.mark.parametrize("dim", [0, 1, 2.0, True, "2"])
    def test_bad_dim(self, dim):
        with pytest.raises(InvalidInputError, match="dim"):
            tessellate(self.square, dim=dim)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            tessellate(self.square, [9])

    def test_non_numeric_vertices(self):
        with pytest.raises(TypeError):
            tessellate(["a", "b", "c", "d", "e", "f"])


# ---------------------------------------------------------------------------
# Array containers and threading
# ---------------------------------------------------------------------------

class TestTessellateInputs:

    def test_xarray_input(self):
        xr = pytest.importorskip("xarray")
        verts = xr.DataArray(np.array([[10, 0], [0, 50], [60, 60], [70, 10]], dtype=np.float64),
                             dims=("vertex", "coord"))
        assert tessellate(verts).tolist() == [1, 0, 3, 3, 2, 1]

    def test_numpy_hole_indices(self):
        verts = [0, 0, 100, 0, 100, 100, 0, 100,
                 20, 20, 80, 20, 80, 80, 20, 80]
        expected = tessellate(verts, [4])
        result = tessellate(np.array(verts), np.array([4], dtype=np.uint32))
        np.testing.assert_array_equal(result, expected)

    def test_independent_calls_in_threads(self):
        """Each call owns its arena, so concurrent calls agree."""
        verts = _star(300, seed=7)
        expected = tessellate(verts)
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: tessellate(verts), range(8)))
        for result in results:
            np.testing.assert_array_equal(result, expected)

    def test_large_coordinates(self):
        """Coordinates far from the origin keep full precision."""
        offset = 1e6
        verts = [offset + v for v in _circle(120, radius=10.0)]
        result = tessellate(verts)
        assert len(result) // 3 == 118
        assert math.isfinite(deviation(verts, None, 2, result))
