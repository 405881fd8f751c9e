"""Geometric predicates used by the ring builder, hole merger and ear clipper.

All functions are stateless numba kernels. Ring-aware predicates read the
``nodes``/``coords`` tables of a :class:`~earcutpy.arena.NodeArena`.

Sign convention: ``area(p, q, r)`` is twice the signed area of triangle pqr
with the orientation used by the ring builder, so a negative value is a
convex turn along a ring and a non-negative value is reflex or collinear.
"""

import numba as nb

from .arena import I, NEXT, PREV


@nb.njit
def signed_area(data, start, end, dim):
    """Shoelace sum (twice the signed area) of ``data[start:end:dim]``."""
    total = 0.0
    j = end - dim
    for i in range(start, end, dim):
        total += (data[j] - data[i]) * (data[i + 1] + data[j + 1])
        j = i
    return total


@nb.njit
def area(coords, p, q, r):
    """Twice the signed area of the triangle formed by nodes p, q and r."""
    return ((coords[q, 1] - coords[p, 1]) * (coords[r, 0] - coords[q, 0])
            - (coords[q, 0] - coords[p, 0]) * (coords[r, 1] - coords[q, 1]))


@nb.njit
def equals(coords, p, q):
    return coords[p, 0] == coords[q, 0] and coords[p, 1] == coords[q, 1]


@nb.njit
def point_in_triangle(ax, ay, bx, by, cx, cy, px, py):
    """Whether point p lies inside triangle abc, boundary included."""
    return ((cx - px) * (ay - py) >= (ax - px) * (cy - py)
            and (ax - px) * (by - py) >= (bx - px) * (ay - py)
            and (bx - px) * (cy - py) >= (cx - px) * (by - py))


@nb.njit
def sign(value):
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


@nb.njit
def on_segment(coords, p, q, r):
    """For collinear p, q, r: whether q lies on segment pr."""
    qx = coords[q, 0]
    qy = coords[q, 1]
    return (qx <= max(coords[p, 0], coords[r, 0]) and qx >= min(coords[p, 0], coords[r, 0])
            and qy <= max(coords[p, 1], coords[r, 1]) and qy >= min(coords[p, 1], coords[r, 1]))


@nb.njit
def intersects(coords, p1, q1, p2, q2):
    """Whether segment p1q1 intersects segment p2q2, touching included."""
    o1 = sign(area(coords, p1, q1, p2))
    o2 = sign(area(coords, p1, q1, q2))
    o3 = sign(area(coords, p2, q2, p1))
    o4 = sign(area(coords, p2, q2, q1))

    if o1 != o2 and o3 != o4:
        return True

    # Collinear cases: an endpoint of one segment lies on the other
    if o1 == 0 and on_segment(coords, p1, p2, q1):
        return True
    if o2 == 0 and on_segment(coords, p1, q2, q1):
        return True
    if o3 == 0 and on_segment(coords, p2, p1, q2):
        return True
    if o4 == 0 and on_segment(coords, p2, q1, q2):
        return True
    return False


@nb.njit
def intersects_polygon(nodes, coords, a, b):
    """Whether diagonal ab crosses any ring edge not incident to a or b."""
    ai = nodes[a, I]
    bi = nodes[b, I]
    p = a
    while True:
        q = nodes[p, NEXT]
        pi = nodes[p, I]
        qi = nodes[q, I]
        if (pi != ai and qi != ai and pi != bi and qi != bi
                and intersects(coords, p, q, a, b)):
            return True
        p = q
        if p == a:
            break
    return False


@nb.njit
def locally_inside(nodes, coords, a, b):
    """Whether diagonal ab leaves vertex a towards the ring's interior."""
    prev = nodes[a, PREV]
    nxt = nodes[a, NEXT]
    if area(coords, prev, a, nxt) < 0:
        return area(coords, a, b, nxt) >= 0 and area(coords, a, prev, b) >= 0
    return area(coords, a, b, prev) < 0 or area(coords, a, nxt, b) < 0


@nb.njit
def middle_inside(nodes, coords, a, b):
    """Ray-casting test for the midpoint of diagonal ab."""
    px = (coords[a, 0] + coords[b, 0]) / 2
    py = (coords[a, 1] + coords[b, 1]) / 2
    inside = False
    p = a
    while True:
        q = nodes[p, NEXT]
        x0 = coords[p, 0]
        y0 = coords[p, 1]
        x1 = coords[q, 0]
        y1 = coords[q, 1]
        if ((y0 > py) != (y1 > py) and y1 != y0
                and px < (x1 - x0) * (py - y0) / (y1 - y0) + x0):
            inside = not inside
        p = q
        if p == a:
            break
    return inside


@nb.njit
def sector_contains_sector(nodes, coords, m, p):
    """Whether the sector at m contains the sector at p (same coordinates)."""
    return (area(coords, nodes[m, PREV], m, nodes[p, PREV]) < 0
            and area(coords, nodes[p, NEXT], m, nodes[m, NEXT]) < 0)


@nb.njit
def is_valid_diagonal(nodes, coords, a, b):
    """Whether ab can split the ring into two independently triangulable rings."""
    bi = nodes[b, I]
    a_prev = nodes[a, PREV]
    a_next = nodes[a, NEXT]
    b_prev = nodes[b, PREV]
    b_next = nodes[b, NEXT]

    if nodes[a_next, I] == bi or nodes[a_prev, I] == bi:
        return False
    if intersects_polygon(nodes, coords, a, b):
        return False

    if (locally_inside(nodes, coords, a, b)
            and locally_inside(nodes, coords, b, a)
            and middle_inside(nodes, coords, a, b)
            # does not create opposite-facing sectors
            and (area(coords, a_prev, a, b_prev) > 0 or area(coords, a, b_prev, b) > 0)):
        return True

    # zero-length diagonal between two occurrences of a self-touching vertex
    return (equals(coords, a, b)
            and area(coords, a_prev, a, a_next) > 0
            and area(coords, b_prev, b, b_next) > 0)
