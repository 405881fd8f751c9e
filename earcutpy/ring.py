"""Circular doubly linked rings stored in a node arena.

Builds boundary rings from slices of a flat coordinate buffer with a requested
winding order, and provides the relinking primitives (insert, remove, filter,
split) shared by the hole merger and the ear-clipping engine.
"""

import numba as nb

from .arena import I, NEXT, NEXT_Z, NIL, PREV, PREV_Z, STEINER, create_node
from .geometry import area, equals, signed_area


@nb.njit
def insert_node(nodes, coords, size, i, x, y, last):
    """Create a node and link it after ``last`` (or as a new ring)."""
    p = create_node(nodes, coords, size, i, x, y)
    if last == NIL:
        nodes[p, PREV] = p
        nodes[p, NEXT] = p
    else:
        nxt = nodes[last, NEXT]
        nodes[p, NEXT] = nxt
        nodes[p, PREV] = last
        nodes[nxt, PREV] = p
        nodes[last, NEXT] = p
    return p


@nb.njit
def remove_node(nodes, p):
    """Unlink ``p`` from its ring and from the z-order list.

    The links stored on ``p`` itself are left untouched, so callers can keep
    walking from a removed node.
    """
    prev = nodes[p, PREV]
    nxt = nodes[p, NEXT]
    nodes[nxt, PREV] = prev
    nodes[prev, NEXT] = nxt

    prev_z = nodes[p, PREV_Z]
    next_z = nodes[p, NEXT_Z]
    if prev_z != NIL:
        nodes[prev_z, NEXT_Z] = next_z
    if next_z != NIL:
        nodes[next_z, PREV_Z] = prev_z


@nb.njit
def linked_list(nodes, coords, size, data, start, end, dim, clockwise):
    """Build a ring from ``data[start:end]`` stepped by ``dim``.

    The ring is walked forward when the slice's winding already matches
    ``clockwise`` and backward otherwise, so the result always has the
    requested orientation. A duplicated closing point is dropped.

    Returns the last inserted node, or ``NIL`` for an empty slice.
    """
    last = NIL
    if clockwise == (signed_area(data, start, end, dim) > 0):
        for i in range(start, end, dim):
            last = insert_node(nodes, coords, size, i, data[i], data[i + 1], last)
    else:
        for i in range(end - dim, start - 1, -dim):
            last = insert_node(nodes, coords, size, i, data[i], data[i + 1], last)

    if last != NIL and equals(coords, last, nodes[last, NEXT]):
        remove_node(nodes, last)
        last = nodes[last, NEXT]
    return last


@nb.njit
def get_leftmost(nodes, coords, start):
    """Leftmost node of a ring; ties go to the smaller y."""
    p = start
    leftmost = start
    while True:
        if (coords[p, 0] < coords[leftmost, 0]
                or (coords[p, 0] == coords[leftmost, 0]
                    and coords[p, 1] < coords[leftmost, 1])):
            leftmost = p
        p = nodes[p, NEXT]
        if p == start:
            break
    return leftmost


@nb.njit
def filter_points(nodes, coords, start, end):
    """Remove duplicate and collinear points between ``start`` and ``end``.

    Steiner points are kept. Pass ``end == start`` to filter the whole ring.
    Returns the node the scan stopped at, which is still part of the ring.
    """
    p = start
    while True:
        again = False
        nxt = nodes[p, NEXT]
        if (nodes[p, STEINER] == 0
                and (equals(coords, p, nxt)
                     or area(coords, nodes[p, PREV], p, nxt) == 0)):
            remove_node(nodes, p)
            p = nodes[p, PREV]
            end = p
            if p == nodes[p, NEXT]:
                break
            again = True
        else:
            p = nxt
        if not again and p == end:
            break
    return end


@nb.njit
def split_polygon(nodes, coords, size, a, b):
    """Link vertices a and b with a two-way bridge.

    When a and b belong to the same ring the ring is split in two; when b
    belongs to a hole ring the hole is merged into a's ring. Two duplicate
    nodes are allocated; the duplicate of ``b`` is returned and heads the
    second ring.
    """
    a2 = create_node(nodes, coords, size, nodes[a, I], coords[a, 0], coords[a, 1])
    b2 = create_node(nodes, coords, size, nodes[b, I], coords[b, 0], coords[b, 1])
    an = nodes[a, NEXT]
    bp = nodes[b, PREV]

    nodes[a, NEXT] = b
    nodes[b, PREV] = a

    nodes[a2, NEXT] = an
    nodes[an, PREV] = a2

    nodes[b2, NEXT] = a2
    nodes[a2, PREV] = b2

    nodes[bp, NEXT] = b2
    nodes[b2, PREV] = bp

    return b2

