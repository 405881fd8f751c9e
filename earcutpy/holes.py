"""Merging hole rings into the outer ring.

Each hole is connected to the outer ring by a two-way bridge found with David
Eberly's algorithm ("Triangulation by Ear Clipping", Geometric Tools). The
result is a single weakly simple ring that the ear clipper can consume.
"""

import numba as nb
import numpy as np

from .arena import NEXT, NIL, STEINER
from .geometry import locally_inside, point_in_triangle, sector_contains_sector
from .ring import filter_points, get_leftmost, linked_list, split_polygon


@nb.njit
def eliminate_holes(nodes, coords, size, data, hole_indices, outer, dim):
    """Link every hole into the outer ring and return the new outer node.

    Holes are bridged strictly left to right by the x coordinate of their
    leftmost vertex, since every bridge changes the ring later bridges search.
    A hole given as a single point becomes a Steiner point.
    """
    num_holes = hole_indices.shape[0]
    queue = np.empty(num_holes, dtype=np.int64)
    keys = np.empty(num_holes, dtype=np.float64)
    count = 0

    for k in range(num_holes):
        start = hole_indices[k] * dim
        if k < num_holes - 1:
            end = hole_indices[k + 1] * dim
        else:
            end = data.shape[0]
        ring = linked_list(nodes, coords, size, data, start, end, dim, False)
        if ring == NIL:
            continue
        if ring == nodes[ring, NEXT]:
            nodes[ring, STEINER] = 1
        leftmost = get_leftmost(nodes, coords, ring)
        queue[count] = leftmost
        keys[count] = coords[leftmost, 0]
        count += 1

    order = np.argsort(keys[:count], kind='mergesort')
    for k in range(count):
        outer = eliminate_hole(nodes, coords, size, queue[order[k]], outer)
    return outer


@nb.njit
def eliminate_hole(nodes, coords, size, hole, outer):
    """Bridge one hole into the outer ring.

    Returns the node to use as the outer ring from now on. A hole without a
    bridge is left out and the outer ring is returned unchanged.
    """
    bridge = find_hole_bridge(nodes, coords, hole, outer)
    if bridge == NIL:
        return outer

    bridge_reverse = split_polygon(nodes, coords, size, bridge, hole)

    # collinear points around the cuts
    filter_points(nodes, coords, bridge_reverse, nodes[bridge_reverse, NEXT])
    return filter_points(nodes, coords, bridge, nodes[bridge, NEXT])


@nb.njit
def find_hole_bridge(nodes, coords, hole, outer):
    """Outer ring vertex that the hole's leftmost point can connect to.

    Returns ``NIL`` when no outer edge lies to the left of the hole.
    """
    hx = coords[hole, 0]
    hy = coords[hole, 1]
    qx = -np.inf
    m = NIL

    # Find the segment crossed by a ray from the hole point towards -x; its
    # endpoint with the lesser x is the candidate connection point
    p = outer
    while True:
        nxt = nodes[p, NEXT]
        px = coords[p, 0]
        py = coords[p, 1]
        nx = coords[nxt, 0]
        ny = coords[nxt, 1]
        if hy <= py and hy >= ny and ny != py:
            x = px + (hy - py) * (nx - px) / (ny - py)
            if x <= hx and x > qx:
                qx = x
                m = p if px < nx else nxt
                if x == hx:
                    # the hole touches the outer segment
                    return m
        p = nxt
        if p == outer:
            break

    if m == NIL:
        return NIL

    # Vertices inside the triangle (hole point, crossing, candidate) would make
    # the connection cross the ring; pick the one with the smallest angle to
    # the ray instead
    stop = m
    mx = coords[m, 0]
    my = coords[m, 1]
    tan_min = np.inf

    if hy < my:
        tx0 = hx
        tx1 = qx
    else:
        tx0 = qx
        tx1 = hx

    p = m
    while True:
        px = coords[p, 0]
        py = coords[p, 1]
        if (hx >= px and px >= mx and hx != px
                and point_in_triangle(tx0, hy, mx, my, tx1, hy, px, py)):
            tan = abs(hy - py) / (hx - px)
            if (locally_inside(nodes, coords, p, hole)
                    and (tan < tan_min
                         or (tan == tan_min
                             and (px > coords[m, 0]
                                  or (px == coords[m, 0]
                                      and sector_contains_sector(nodes, coords, m, p)))))):
                m = p
                tan_min = tan
        p = nodes[p, NEXT]
        if p == stop:
            break

    return m
