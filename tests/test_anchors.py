import math
import random

import pytest

from erdlayout.anchors import (
    AnchorAssignment,
    AnchorStrategy,
    assign_anchors,
    closest_pair,
    dominant_axis,
    select_anchor,
)
from erdlayout.geometry import SIDES, Side
from erdlayout.graph import Edge, Graph, Node, Point, Size


# =============================================================================
# Reference Implementation (loop over candidate pairs)
# =============================================================================

def _midpoints_ref(node: Node) -> list[tuple[Side, float, float]]:
    x, y = node.position.x, node.position.y
    w, h = node.size.width, node.size.height
    return [
        (Side.TOP, x + w / 2, y),
        (Side.RIGHT, x + w, y + h / 2),
        (Side.BOTTOM, x + w / 2, y + h),
        (Side.LEFT, x, y + h / 2),
    ]


def closest_pair_reference(source: Node, target: Node) -> tuple[Side, Side]:
    best = (Side.RIGHT, Side.LEFT)
    min_dist = math.inf
    for s_side, sx, sy in _midpoints_ref(source):
        for t_side, tx, ty in _midpoints_ref(target):
            dx, dy = sx - tx, sy - ty
            dist = math.sqrt(dx * dx + dy * dy)
            if dist < min_dist:
                min_dist = dist
                best = (s_side, t_side)
    return best


class TestDominantAxis:
    def test_target_to_the_right(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(500, 0))
        assert dominant_axis(p, q) == (Side.RIGHT, Side.LEFT)

    def test_target_to_the_left(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(-500, 100))
        assert dominant_axis(p, q) == (Side.LEFT, Side.RIGHT)

    def test_target_below(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(100, 400))
        assert dominant_axis(p, q) == (Side.BOTTOM, Side.TOP)

    def test_target_above(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(100, -400))
        assert dominant_axis(p, q) == (Side.TOP, Side.BOTTOM)

    def test_diagonal_tie_is_vertical(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(300, 300))
        assert dominant_axis(p, q) == (Side.BOTTOM, Side.TOP)

    def test_coincident_centers(self):
        p, q = Node("p"), Node("q")
        assert dominant_axis(p, q) == (Side.TOP, Side.BOTTOM)

    def test_uses_centers_not_corners(self):
        # Top-left corners are level but the small box's center sits much higher
        small = Node("s", Point(0, 0), Size(10, 10))
        tall = Node("t", Point(20, 0), Size(10, 1000))
        assert dominant_axis(small, tall) == (Side.BOTTOM, Side.TOP)


class TestClosestPair:
    def test_side_by_side(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(500, 0))
        assert closest_pair(p, q) == (Side.RIGHT, Side.LEFT)

    def test_stacked(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(0, 500))
        assert closest_pair(p, q) == (Side.BOTTOM, Side.TOP)

    def test_target_above_left(self):
        p, q = Node("p", Point(1000, 1000)), Node("q", Point(0, 0))
        assert closest_pair(p, q) == closest_pair_reference(p, q)

    def test_respects_node_size(self):
        wide = Node("w", Point(0, 0), Size(1000, 50))
        small = Node("s", Point(450, 300), Size(100, 50))
        assert closest_pair(wide, small) == (Side.BOTTOM, Side.TOP)

    def test_matches_reference_on_random_boxes(self):
        random.seed(42)
        for _ in range(300):
            src = Node("a", Point(random.uniform(-2000, 2000), random.uniform(-2000, 2000)),
                       Size(random.uniform(50, 400), random.uniform(50, 400)))
            dst = Node("b", Point(random.uniform(-2000, 2000), random.uniform(-2000, 2000)),
                       Size(random.uniform(50, 400), random.uniform(50, 400)))
            assert closest_pair(src, dst) == closest_pair_reference(src, dst)

    def test_matches_reference_on_grid_positions(self):
        # Integer grid positions produce many exact ties
        for x in range(-600, 700, 150):
            for y in range(-600, 700, 150):
                src, dst = Node("a"), Node("b", Point(x, y))
                assert closest_pair(src, dst) == closest_pair_reference(src, dst)


class TestSelectAnchor:
    @pytest.mark.parametrize("strategy", list(AnchorStrategy))
    def test_sides_always_valid(self, strategy):
        random.seed(7)
        for _ in range(50):
            src = Node("a", Point(random.uniform(-1000, 1000), random.uniform(-1000, 1000)))
            dst = Node("b", Point(random.uniform(-1000, 1000), random.uniform(-1000, 1000)))
            source_side, target_side = select_anchor(src, dst, strategy)
            assert source_side in SIDES
            assert target_side in SIDES

    def test_accepts_string_strategy(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(500, 0))
        assert select_anchor(p, q, "dominant-axis") == (Side.RIGHT, Side.LEFT)
        assert select_anchor(p, q, "closest-pair") == (Side.RIGHT, Side.LEFT)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            select_anchor(Node("p"), Node("q"), "shortest")

    def test_pure(self):
        p, q = Node("p", Point(0, 0)), Node("q", Point(0, 900))
        assert select_anchor(p, q) == select_anchor(p, q)
        assert p.position == Point(0, 0)
        assert q.position == Point(0, 900)


class TestAssignAnchors:
    def test_one_assignment_per_kept_edge(self):
        g = Graph(
            [Node("a", Point(0, 0)), Node("b", Point(500, 0)), Node("c", Point(0, 500))],
            [Edge("r1", "a", "b"), Edge("r2", "a", "c"), Edge("r3", "a", "nowhere")],
        )
        anchors = assign_anchors(g, AnchorStrategy.DOMINANT_AXIS)
        assert anchors == [
            AnchorAssignment("r1", Side.RIGHT, Side.LEFT),
            AnchorAssignment("r2", Side.BOTTOM, Side.TOP),
        ]

    def test_to_dict(self):
        a = AnchorAssignment("r1", Side.RIGHT, Side.LEFT)
        assert a.to_dict() == {"edgeId": "r1", "sourceSide": "right", "targetSide": "left"}

    def test_no_edges(self):
        assert assign_anchors(Graph([Node("a")])) == []
