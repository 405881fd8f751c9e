"""Z-order locality index over ring nodes.

For large inputs the ear test only needs to look at nodes near the candidate
triangle. Every node gets a Morton code from its quantised coordinates and
the ring is threaded a second time, through ``PREV_Z``/``NEXT_Z``, in code
order so the ear test can walk outward from the ear and stop as soon as the
codes leave the triangle's bounding-box range.
"""

import numba as nb

from .arena import NEXT, NEXT_Z, NIL, PREV, PREV_Z, Z


# The index is only worth building above 80 vertices
HASH_THRESHOLD = 80

# Coordinates are quantised to 15 bits per axis
Z_ORDER_SCALE = 32767


def use_hashing(num_values, dim):
    """Whether a flat buffer of ``num_values`` coordinates gets the z-order index."""
    return num_values > HASH_THRESHOLD * dim


@nb.njit
def bounding_scale(data, outer_len, dim):
    """Bounding box origin of the outer ring and the z-order scale factor.

    Returns
    -------
    tuple of float
        ``(min_x, min_y, inv_size)`` where ``inv_size`` maps the larger box
        side onto ``[0, 32767]``, or is 0 for a degenerate box.
    """
    min_x = max_x = data[0]
    min_y = max_y = data[1]
    for i in range(dim, outer_len, dim):
        x = data[i]
        y = data[i + 1]
        if x < min_x:
            min_x = x
        if y < min_y:
            min_y = y
        if x > max_x:
            max_x = x
        if y > max_y:
            max_y = y

    inv_size = max(max_x - min_x, max_y - min_y)
    if inv_size != 0:
        inv_size = Z_ORDER_SCALE / inv_size
    else:
        inv_size = 0.0
    return min_x, min_y, inv_size


@nb.njit
def z_order(x, y, min_x, min_y, inv_size):
    """Interleave the bits of the quantised coordinates (x even, y odd)."""
    ix = int((x - min_x) * inv_size)
    iy = int((y - min_y) * inv_size)

    ix = (ix | (ix << 8)) & 0x00FF00FF
    ix = (ix | (ix << 4)) & 0x0F0F0F0F
    ix = (ix | (ix << 2)) & 0x33333333
    ix = (ix | (ix << 1)) & 0x55555555

    iy = (iy | (iy << 8)) & 0x00FF00FF
    iy = (iy | (iy << 4)) & 0x0F0F0F0F
    iy = (iy | (iy << 2)) & 0x33333333
    iy = (iy | (iy << 1)) & 0x55555555

    return ix | (iy << 1)


@nb.njit
def index_curve(nodes, coords, start, min_x, min_y, inv_size):
    """Thread the ring starting at ``start`` in z-order."""
    p = start
    while True:
        if nodes[p, Z] == 0:
            nodes[p, Z] = z_order(coords[p, 0], coords[p, 1], min_x, min_y, inv_size)
        nodes[p, PREV_Z] = nodes[p, PREV]
        nodes[p, NEXT_Z] = nodes[p, NEXT]
        p = nodes[p, NEXT]
        if p == start:
            break

    tail = nodes[p, PREV_Z]
    if tail != NIL:
        nodes[tail, NEXT_Z] = NIL
    nodes[p, PREV_Z] = NIL

    return sort_linked(nodes, p)


@nb.njit
def sort_linked(nodes, head):
    """Stable bottom-up merge sort of a ``NEXT_Z`` list by z code.

    Simon Tatham's linked list merge sort: runs of doubling width are merged
    pass after pass until a pass performs at most one merge. Only links are
    rewritten. Returns the new head.
    """
    in_size = 1
    while True:
        p = head
        head = NIL
        tail = NIL
        num_merges = 0

        while p != NIL:
            num_merges += 1
            q = p
            p_size = 0
            for _ in range(in_size):
                p_size += 1
                q = nodes[q, NEXT_Z]
                if q == NIL:
                    break
            q_size = in_size

            while p_size > 0 or (q_size > 0 and q != NIL):
                if p_size != 0 and (q_size == 0 or q == NIL or nodes[p, Z] <= nodes[q, Z]):
                    e = p
                    p = nodes[p, NEXT_Z]
                    p_size -= 1
                else:
                    e = q
                    q = nodes[q, NEXT_Z]
                    q_size -= 1

                if tail != NIL:
                    nodes[tail, NEXT_Z] = e
                else:
                    head = e
                nodes[e, PREV_Z] = tail
                tail = e

            p = q

        nodes[tail, NEXT_Z] = NIL
        in_size *= 2
        if num_merges <= 1:
            break
    return head
