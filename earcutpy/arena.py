"""Node arena backing the ring structures of one triangulation call.

Every ring vertex lives in a row of a preallocated record table and is
addressed by its row index. Links (ring order and z-order) are plain row
indices with ``NIL`` marking the absence of a link, so the whole structure can
be handed to numba kernels and released in one go when the call finishes.
"""

import numba as nb
import numpy as np


# Column layout of the integer record table
I = 0        # raw offset of the vertex in the flat coordinate buffer
Z = 1        # z-order locality code, 0 until computed
PREV = 2     # ring links
NEXT = 3
PREV_Z = 4   # z-order links
NEXT_Z = 5
STEINER = 6  # 1 for a single-point hole

NUM_FIELDS = 7

NIL = -1


def arena_capacity(num_vertices, num_holes=0):
    """Upper bound on the records needed to triangulate a polygon.

    Ring building allocates at most one record per vertex. Every hole bridge
    and every polygon split allocates two more, and the number of splits can
    not exceed the size of the merged ring.
    """
    merged = num_vertices + 2 * num_holes
    return 3 * merged + 2


class NodeArena:
    """Owner of all ring records created during one triangulation call.

    Parameters
    ----------
    capacity : int
        Maximum number of records. See :func:`arena_capacity`.

    Notes
    -----
    The arena is meant to be used as a context manager; leaving the context
    severs every link and drops the tables. An arena must never be shared
    between concurrent calls.

    Examples
    --------
    >>> with NodeArena(arena_capacity(4)) as arena:
    ...     p = create_node(arena.nodes, arena.coords, arena.size, 0, 1.0, 2.0)
    >>> len(arena)
    0
    """

    def __init__(self, capacity):
        self.nodes = np.full((capacity, NUM_FIELDS), NIL, dtype=np.int64)
        self.coords = np.zeros((capacity, 2), dtype=np.float64)
        self.size = np.zeros(1, dtype=np.int64)

    def __len__(self):
        return int(self.size[0])

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.clear()
        return False

    @property
    def capacity(self):
        return self.nodes.shape[0]

    def clear(self):
        """Release every record at once."""
        self.size[0] = 0
        self.nodes = np.empty((0, NUM_FIELDS), dtype=np.int64)
        self.coords = np.empty((0, 2), dtype=np.float64)


@nb.njit
def create_node(nodes, coords, size, i, x, y):
    """Allocate one unlinked record and return its index."""
    p = size[0]
    if p >= nodes.shape[0]:
        raise IndexError("node arena capacity exceeded")
    size[0] = p + 1

    nodes[p, I] = i
    nodes[p, Z] = 0
    nodes[p, PREV] = NIL
    nodes[p, NEXT] = NIL
    nodes[p, PREV_Z] = NIL
    nodes[p, NEXT_Z] = NIL
    nodes[p, STEINER] = 0
    coords[p, 0] = x
    coords[p, 1] = y
    return p
