"""Ear-clipping engine.

A ring is clipped ear by ear. When a full loop over the ring finds no ear the
engine escalates:

* pass 0: plain ear clipping (z-order accelerated when an index is active),
* pass 1: drop duplicate and collinear points, then clip again,
* pass 2: cure small local self-intersections, then clip again,
* finally: split the ring along a valid diagonal and start both halves over
  at pass 0. A fragment without any valid diagonal is left untriangulated.

Every step shrinks the ring or splits it into two smaller rings, so the loop
terminates for any input.
"""

import numba as nb
import numpy as np

from .arena import I, NEXT, NEXT_Z, NIL, PREV, PREV_Z, Z
from .geometry import area, equals, intersects, is_valid_diagonal, locally_inside, point_in_triangle
from .ring import filter_points, remove_node, split_polygon
from .spatial import index_curve, z_order


@nb.njit
def _emit(triangles, count, a, b, c, dim):
    n = count[0]
    triangles[n] = a // dim
    triangles[n + 1] = b // dim
    triangles[n + 2] = c // dim
    count[0] = n + 3


@nb.njit
def _blocks_ear(nodes, coords, p, ax, ay, bx, by, cx, cy, x0, y0, x1, y1):
    """Whether node p is a reflex vertex inside the candidate ear triangle."""
    px = coords[p, 0]
    py = coords[p, 1]
    return (px >= x0 and px <= x1 and py >= y0 and py <= y1
            and point_in_triangle(ax, ay, bx, by, cx, cy, px, py)
            and area(coords, nodes[p, PREV], p, nodes[p, NEXT]) >= 0)


@nb.njit
def is_ear(nodes, coords, ear):
    """Whether ``ear`` and its neighbours form a clippable triangle."""
    a = nodes[ear, PREV]
    b = ear
    c = nodes[ear, NEXT]

    if area(coords, a, b, c) >= 0:
        return False  # reflex

    ax = coords[a, 0]
    ay = coords[a, 1]
    bx = coords[b, 0]
    by = coords[b, 1]
    cx = coords[c, 0]
    cy = coords[c, 1]

    x0 = min(ax, bx, cx)
    y0 = min(ay, by, cy)
    x1 = max(ax, bx, cx)
    y1 = max(ay, by, cy)

    p = nodes[c, NEXT]
    while p != a:
        if _blocks_ear(nodes, coords, p, ax, ay, bx, by, cx, cy, x0, y0, x1, y1):
            return False
        p = nodes[p, NEXT]
    return True


@nb.njit
def is_ear_hashed(nodes, coords, ear, min_x, min_y, inv_size):
    """:func:`is_ear` restricted to nodes in the triangle's z-order range."""
    a = nodes[ear, PREV]
    b = ear
    c = nodes[ear, NEXT]

    if area(coords, a, b, c) >= 0:
        return False  # reflex

    ax = coords[a, 0]
    ay = coords[a, 1]
    bx = coords[b, 0]
    by = coords[b, 1]
    cx = coords[c, 0]
    cy = coords[c, 1]

    x0 = min(ax, bx, cx)
    y0 = min(ay, by, cy)
    x1 = max(ax, bx, cx)
    y1 = max(ay, by, cy)

    min_z = z_order(x0, y0, min_x, min_y, inv_size)
    max_z = z_order(x1, y1, min_x, min_y, inv_size)

    p = nodes[ear, PREV_Z]
    n = nodes[ear, NEXT_Z]

    # walk both directions while both stay in range
    while p != NIL and nodes[p, Z] >= min_z and n != NIL and nodes[n, Z] <= max_z:
        if (p != a and p != c
                and _blocks_ear(nodes, coords, p, ax, ay, bx, by, cx, cy, x0, y0, x1, y1)):
            return False
        p = nodes[p, PREV_Z]

        if (n != a and n != c
                and _blocks_ear(nodes, coords, n, ax, ay, bx, by, cx, cy, x0, y0, x1, y1)):
            return False
        n = nodes[n, NEXT_Z]

    # remaining points in decreasing z-order
    while p != NIL and nodes[p, Z] >= min_z:
        if (p != a and p != c
                and _blocks_ear(nodes, coords, p, ax, ay, bx, by, cx, cy, x0, y0, x1, y1)):
            return False
        p = nodes[p, PREV_Z]

    # remaining points in increasing z-order
    while n != NIL and nodes[n, Z] <= max_z:
        if (n != a and n != c
                and _blocks_ear(nodes, coords, n, ax, ay, bx, by, cx, cy, x0, y0, x1, y1)):
            return False
        n = nodes[n, NEXT_Z]

    return True


@nb.njit
def cure_local_intersections(nodes, coords, triangles, count, start, dim):
    """Clip the triangle at every small self-intersection of the ring.

    For a vertex p where edge (p.prev, p) crosses edge (p.next, p.next.next),
    the triangle (p.prev, p, p.next.next) is emitted and p and p.next are
    removed.
    """
    p = start
    while True:
        a = nodes[p, PREV]
        nxt = nodes[p, NEXT]
        b = nodes[nxt, NEXT]

        if (not equals(coords, a, b)
                and intersects(coords, a, p, nxt, b)
                and locally_inside(nodes, coords, a, b)
                and locally_inside(nodes, coords, b, a)):
            _emit(triangles, count, nodes[a, I], nodes[p, I], nodes[b, I], dim)

            remove_node(nodes, p)
            remove_node(nodes, nxt)

            p = b
            start = b
        p = nodes[p, NEXT]
        if p == start:
            break

    return filter_points(nodes, coords, p, p)


@nb.njit
def split_earcut(nodes, coords, size, start):
    """Split the ring along the first valid diagonal found.

    Returns
    -------
    tuple of int
        Heads of the two resulting rings, or ``(NIL, NIL)`` when the ring has
        no valid diagonal.
    """
    a = start
    while True:
        b = nodes[nodes[a, NEXT], NEXT]
        while b != nodes[a, PREV]:
            if nodes[a, I] != nodes[b, I] and is_valid_diagonal(nodes, coords, a, b):
                c = split_polygon(nodes, coords, size, a, b)

                # filter collinear points around the cuts
                a = filter_points(nodes, coords, a, nodes[a, NEXT])
                c = filter_points(nodes, coords, c, nodes[c, NEXT])
                return a, c
            b = nodes[b, NEXT]
        a = nodes[a, NEXT]
        if a == start:
            break
    return NIL, NIL


@nb.njit
def earcut_linked(nodes, coords, size, triangles, count, ear, dim, min_x, min_y, inv_size):
    """Triangulate the ring containing ``ear`` into ``triangles``.

    Rings waiting to be processed are kept on a LIFO worklist of
    ``(head, pass)`` pairs, which yields the same triangle order as clipping
    each split half to completion before starting the next.

    Returns
    -------
    int
        Number of index values written to ``triangles``.
    """
    # every entry but the first comes from a split, and a split needs two
    # fresh nodes, so the arena size bounds the worklist
    stack = np.empty((nodes.shape[0] + 1, 2), dtype=np.int64)
    stack[0, 0] = ear
    stack[0, 1] = 0
    top = 1

    while top > 0:
        top -= 1
        ear = stack[top, 0]
        stage = stack[top, 1]

        if stage == 0 and inv_size > 0:
            index_curve(nodes, coords, ear, min_x, min_y, inv_size)

        stop = ear
        while nodes[ear, PREV] != nodes[ear, NEXT]:
            prev = nodes[ear, PREV]
            nxt = nodes[ear, NEXT]

            if inv_size > 0:
                clip = is_ear_hashed(nodes, coords, ear, min_x, min_y, inv_size)
            else:
                clip = is_ear(nodes, coords, ear)

            if clip:
                _emit(triangles, count, nodes[prev, I], nodes[ear, I], nodes[nxt, I], dim)
                remove_node(nodes, ear)

                # skipping the next vertex leads to fewer sliver triangles
                ear = nodes[nxt, NEXT]
                stop = ear
                continue

            ear = nxt

            # a whole loop without finding an ear
            if ear == stop:
                if stage == 0:
                    stack[top, 0] = filter_points(nodes, coords, ear, ear)
                    stack[top, 1] = 1
                    top += 1
                elif stage == 1:
                    ear = cure_local_intersections(
                        nodes, coords, triangles, count,
                        filter_points(nodes, coords, ear, ear), dim)
                    stack[top, 0] = ear
                    stack[top, 1] = 2
                    top += 1
                else:
                    a, c = split_earcut(nodes, coords, size, ear)
                    if a != NIL:
                        stack[top, 0] = c
                        stack[top, 1] = 0
                        stack[top + 1, 0] = a
                        stack[top + 1, 1] = 0
                        top += 2
                break

    return count[0]
