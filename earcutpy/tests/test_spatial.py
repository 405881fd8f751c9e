"""Tests for the z-order index."""

import numpy as np
import pytest

from earcutpy.arena import NEXT_Z, NIL, PREV_Z, Z, NodeArena, arena_capacity, create_node
from earcutpy.ring import linked_list
from earcutpy.spatial import bounding_scale, index_curve, sort_linked, use_hashing, z_order


def _walk_z(nodes, head):
    out = []
    p = head
    while p != NIL:
        out.append(p)
        p = nodes[p, NEXT_Z]
    return out


class TestZOrder:

    @pytest.mark.parametrize("x, y, expected", [
        (0, 0, 0),
        (1, 0, 1),
        (0, 1, 2),
        (1, 1, 3),
        (2, 0, 4),
        (3, 3, 15),
        (32767, 0, 357913941),
        (32767, 32767, 1073741823),
    ])
    def test_interleave(self, x, y, expected):
        assert z_order(float(x), float(y), 0.0, 0.0, 1.0) == expected

    def test_offset_and_scale(self):
        # (15 - 10) * 2 = 10 on both axes
        assert z_order(15.0, 25.0, 10.0, 20.0, 2.0) == 204

    def test_truncates(self):
        assert z_order(0.9, 1.99, 0.0, 0.0, 1.0) == 2


class TestBoundingScale:

    def test_larger_side(self):
        data = np.float64([0, 0, 10, 0, 10, 20, 0, 20])
        min_x, min_y, inv_size = bounding_scale(data, 8, 2)
        assert (min_x, min_y) == (0, 0)
        assert inv_size == pytest.approx(32767 / 20)

    def test_outer_ring_only(self):
        data = np.float64([5, 5, 15, 5, 15, 15, -100, -100])
        min_x, min_y, inv_size = bounding_scale(data, 6, 2)
        assert (min_x, min_y) == (5, 5)
        assert inv_size == pytest.approx(32767 / 10)

    def test_degenerate(self):
        data = np.float64([3, 3, 3, 3, 3, 3])
        assert bounding_scale(data, 6, 2)[2] == 0

    def test_threshold(self):
        assert not use_hashing(160, 2)
        assert use_hashing(162, 2)
        assert not use_hashing(240, 3)
        assert use_hashing(243, 3)


class TestSortLinked:

    def test_stable_sort(self):
        keys = [5, 3, 9, 1, 3, 7]
        arena = NodeArena(len(keys))
        nodes = arena.nodes
        for k, key in enumerate(keys):
            p = create_node(nodes, arena.coords, arena.size, 2 * k, 0.0, 0.0)
            nodes[p, Z] = key
        for k in range(len(keys) - 1):
            nodes[k, NEXT_Z] = k + 1
            nodes[k + 1, PREV_Z] = k

        head = sort_linked(nodes, 0)
        order = _walk_z(nodes, head)
        assert order == [3, 1, 4, 0, 5, 2]
        assert nodes[head, PREV_Z] == NIL
        for a, b in zip(order, order[1:]):
            assert nodes[b, PREV_Z] == a

    def test_single_node(self):
        arena = NodeArena(1)
        p = create_node(arena.nodes, arena.coords, arena.size, 0, 0.0, 0.0)
        assert sort_linked(arena.nodes, p) == p
        assert arena.nodes[p, NEXT_Z] == NIL


class TestIndexCurve:

    def test_index_ring(self):
        n = 100
        angles = 2 * np.pi * np.arange(n) / n
        data = np.column_stack([np.cos(angles), np.sin(angles)]).ravel() * 50
        arena = NodeArena(arena_capacity(n))
        start = linked_list(arena.nodes, arena.coords, arena.size, data, 0, len(data), 2, True)
        min_x, min_y, inv_size = bounding_scale(data, len(data), 2)

        head = index_curve(arena.nodes, arena.coords, start, min_x, min_y, inv_size)
        order = _walk_z(arena.nodes, head)
        assert sorted(order) == list(range(n))
        codes = arena.nodes[order, Z]
        assert np.all(np.diff(codes) >= 0)
