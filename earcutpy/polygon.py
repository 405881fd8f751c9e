"""Caller-side helpers around :func:`~earcutpy.tessellate.tessellate`.

``flatten`` turns nested ring coordinates (GeoJSON polygon style) into the
flat buffer and hole offsets the triangulator expects; ``deviation`` measures
how far a triangulation's area is from the polygon's true area and is used to
verify results.
"""

import warnings

import numpy as np

from ._array_utils import as_flat_array
from .geometry import signed_area
from .tessellate import InvalidInputError, _check_dim, _prepare_holes, _prepare_vertices


def flatten(rings):
    """Flatten nested polygon rings into a coordinate buffer and hole offsets.

    Parameters
    ----------
    rings : sequence of sequence of sequence of float
        ``[outer_ring, hole_1, hole_2, ...]`` where each ring is a sequence of
        vertices ``[x, y, (z, ...)]``, e.g. GeoJSON Polygon coordinates.

    Returns
    -------
    vertices : numpy.ndarray
        Flat float64 coordinate buffer.
    holes : list of int
        Vertex index at which each ring after the first starts.
    dim : int
        Coordinates per vertex, taken from the first vertex of the first ring.

    Raises
    ------
    InvalidInputError
        If there are no rings, any ring is empty, or a vertex has fewer
        coordinates than the first one.

    Examples
    --------
    >>> vertices, holes, dim = flatten([[[0, 0], [4, 0], [4, 4], [0, 4]],
    ...                                 [[1, 1], [2, 1], [2, 2]]])
    >>> holes, dim
    ([4], 2)
    """
    if len(rings) == 0 or len(rings[0]) == 0:
        raise InvalidInputError("flatten needs at least one ring with one vertex")

    dim = len(rings[0][0])
    values = []
    holes = []
    hole_index = 0
    dropped = 0

    for k, ring in enumerate(rings):
        if len(ring) == 0:
            raise InvalidInputError(f"Ring {k} is empty")
        for point in ring:
            if len(point) < dim:
                raise InvalidInputError(
                    f"Vertex {list(point)} in ring {k} has fewer than {dim} coordinates"
                )
            if len(point) > dim:
                dropped += 1
            values.extend(point[:dim])
        if k > 0:
            hole_index += len(rings[k - 1])
            holes.append(hole_index)

    if dropped:
        warnings.warn(
            f"{dropped} vertices have more than {dim} coordinates; "
            "the extra coordinates were dropped.",
            stacklevel=2,
        )

    vertices = np.asarray(values, dtype=np.float64)
    return vertices, holes, dim


def deviation(vertices, hole_indices, dim, indices):
    """Relative difference between triangulated area and polygon area.

    Parameters
    ----------
    vertices : array-like
        Flat coordinate buffer as passed to ``tessellate``.
    hole_indices : array-like of int or None
        Hole start vertex indices as passed to ``tessellate``.
    dim : int
        Coordinates per vertex.
    indices : array-like of int
        Triangle indices returned by ``tessellate``.

    Returns
    -------
    float
        ``|triangles_area - polygon_area| / polygon_area``, where the polygon
        area is the outer ring's area minus the holes' areas. 0.0 when both
        areas are zero, ``inf`` when only the polygon area is zero.

    Raises
    ------
    InvalidInputError
        For inconsistent buffers, or triangle indices that are not a
        multiple of three or fall outside the vertex range.
    """
    dim = _check_dim(dim)
    data = _prepare_vertices(vertices, dim)
    num_vertices = data.size // dim
    holes = _prepare_holes(hole_indices, num_vertices)

    tris = as_flat_array(indices)
    if tris.size and not np.issubdtype(tris.dtype, np.integer):
        raise InvalidInputError(f"Triangle indices must be integers, got dtype {tris.dtype}")
    tris = tris.astype(np.int64)
    if tris.size % 3:
        raise InvalidInputError(
            f"Triangle index buffer of length {tris.size} is not a multiple of 3"
        )
    if tris.size and (tris.min() < 0 or tris.max() >= num_vertices):
        raise InvalidInputError(
            f"Triangle indices must lie in [0, {num_vertices})"
        )

    outer_len = int(holes[0]) * dim if len(holes) else data.size
    polygon_area = abs(signed_area(data, 0, outer_len, dim))
    for k in range(len(holes)):
        start = int(holes[k]) * dim
        end = int(holes[k + 1]) * dim if k < len(holes) - 1 else data.size
        polygon_area -= abs(signed_area(data, start, end, dim))

    a = tris[0::3] * dim
    b = tris[1::3] * dim
    c = tris[2::3] * dim
    triangles_area = float(np.abs(
        (data[a] - data[c]) * (data[b + 1] - data[a + 1])
        - (data[a] - data[b]) * (data[c + 1] - data[a + 1])
    ).sum())

    if polygon_area == 0 and triangles_area == 0:
        return 0.0
    if polygon_area == 0:
        return float('inf')
    return abs((triangles_area - polygon_area) / polygon_area)
