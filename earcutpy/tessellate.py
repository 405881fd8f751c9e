"""Polygon triangulation entry point.

Wires the ring builder, hole merger, z-order index and ear-clipping engine
together for one call, on an arena that lives only for that call.
"""

import numpy as np

from ._array_utils import as_flat_array
from .arena import NEXT, NIL, PREV, NodeArena, arena_capacity
from .earcut import earcut_linked
from .holes import eliminate_holes
from .ring import linked_list
from .spatial import bounding_scale, use_hashing


class InvalidInputError(ValueError):
    """Raised when the coordinate buffer, hole offsets or ``dim`` are inconsistent."""


def _check_dim(dim):
    if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)) or dim < 2:
        raise InvalidInputError(f"dim must be an integer >= 2, got {dim!r}")
    return int(dim)


def _prepare_vertices(vertices, dim):
    data = as_flat_array(vertices).astype(np.float64, copy=False)
    if data.size % dim:
        raise InvalidInputError(
            f"Vertex buffer of length {data.size} is not a multiple of dim={dim}"
        )
    return np.ascontiguousarray(data)


def _prepare_holes(hole_indices, num_vertices):
    if hole_indices is None:
        return np.empty(0, dtype=np.int64)

    holes = as_flat_array(hole_indices)
    if holes.size == 0:
        return np.empty(0, dtype=np.int64)
    if not np.issubdtype(holes.dtype, np.integer):
        raise InvalidInputError(
            f"Hole indices must be integers, got dtype {holes.dtype}"
        )

    holes = holes.astype(np.int64)
    if np.any(np.diff(holes) <= 0):
        raise InvalidInputError(
            f"Hole indices must be strictly ascending, got {holes.tolist()}"
        )
    if holes[0] < 0 or holes[-1] >= num_vertices:
        raise InvalidInputError(
            f"Hole indices must lie in [0, {num_vertices}), got {holes.tolist()}"
        )
    return holes


def tessellate(vertices, hole_indices=None, dim=2):
    """Triangulate a polygon with optional holes by ear clipping.

    Parameters
    ----------
    vertices : array-like
        Flat coordinate buffer ``[x0, y0, (z0, ...), x1, y1, ...]`` with
        ``dim`` values per vertex. An ``(N, dim)`` array is flattened
        row-major. Only the first two coordinates of each vertex are used.
        Can be a sequence, numpy array, cupy array or xarray DataArray.
    hole_indices : array-like of int, optional
        Strictly ascending vertex indices (not flat offsets) at which each
        hole ring starts. Everything before the first hole is the outer ring.
    dim : int, optional
        Number of coordinates per vertex. Default is 2.

    Returns
    -------
    numpy.ndarray
        Flat int32 array of triangle vertex indices, three per triangle,
        referencing vertices of the input (``flat offset // dim``). Empty for
        empty or fully degenerate input.

    Raises
    ------
    InvalidInputError
        If ``dim`` is not an integer >= 2, the buffer length is not a
        multiple of ``dim``, or the hole indices are not strictly ascending
        integers inside the vertex range.
    TypeError
        If ``vertices`` or ``hole_indices`` can not be read as numbers.

    Examples
    --------
    >>> tessellate([10, 0, 0, 50, 60, 60, 70, 10]).tolist()
    [1, 0, 3, 3, 2, 1]

    A square with a square hole starting at vertex 4:

    >>> square = [0, 0, 100, 0, 100, 100, 0, 100]
    >>> hole = [20, 20, 80, 20, 80, 80, 20, 80]
    >>> len(tessellate(square + hole, [4])) // 3
    8

    Notes
    -----
    Self-intersecting rings, zero-area rings and holes that can not be
    bridged never raise; they produce a best-effort, possibly partial or
    empty, triangulation.
    """
    dim = _check_dim(dim)
    data = _prepare_vertices(vertices, dim)
    num_vertices = data.size // dim
    holes = _prepare_holes(hole_indices, num_vertices)

    if num_vertices == 0:
        return np.empty(0, dtype=np.int32)

    outer_len = holes[0] * dim if len(holes) else data.size
    capacity = arena_capacity(num_vertices, len(holes))

    with NodeArena(capacity) as arena:
        nodes, coords, size = arena.nodes, arena.coords, arena.size

        outer = linked_list(nodes, coords, size, data, 0, outer_len, dim, True)
        if outer == NIL or nodes[outer, NEXT] == nodes[outer, PREV]:
            return np.empty(0, dtype=np.int32)

        if len(holes):
            outer = eliminate_holes(nodes, coords, size, data, holes, outer, dim)

        min_x = min_y = inv_size = 0.0
        if use_hashing(data.size, dim):
            min_x, min_y, inv_size = bounding_scale(data, outer_len, dim)

        triangles = np.empty(capacity, dtype=np.int64)
        count = np.zeros(1, dtype=np.int64)
        n = earcut_linked(nodes, coords, size, triangles, count, outer, dim,
                          min_x, min_y, inv_size)

    return triangles[:n].astype(np.int32)
