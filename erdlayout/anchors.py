"""Edge anchor (attachment side) selection."""

import dataclasses
import enum

import numpy as np

from erdlayout.geometry import SIDES, Side, center_delta, side_midpoints
from erdlayout.graph import Graph, Node


class AnchorStrategy(str, enum.Enum):
    CLOSEST_PAIR = "closest-pair"
    DOMINANT_AXIS = "dominant-axis"


@dataclasses.dataclass(frozen=True)
class AnchorAssignment:
    edge_id: str
    source_side: Side
    target_side: Side

    def to_dict(self) -> dict:
        return {
            "edgeId": self.edge_id,
            "sourceSide": self.source_side.value,
            "targetSide": self.target_side.value,
        }


def closest_pair(source: Node, target: Node) -> tuple[Side, Side]:
    """
    Pick the pair of side midpoints with the smallest Euclidean distance.

    Candidates are scanned source side first, then target side, both in
    top/right/bottom/left order; on ties the first pair wins.
    """
    src = side_midpoints(source)
    dst = side_midpoints(target)
    # (4, 4) matrix of distances between every source and target midpoint
    dists = np.linalg.norm(src[:, None, :] - dst[None, :, :], axis=2)
    i, j = np.unravel_index(np.argmin(dists), dists.shape)
    return SIDES[i], SIDES[j]


def dominant_axis(source: Node, target: Node) -> tuple[Side, Side]:
    """Attach horizontally or vertically depending on which center offset is larger."""
    dx, dy = center_delta(source, target)
    if abs(dx) > abs(dy):
        if dx > 0:
            return Side.RIGHT, Side.LEFT
        return Side.LEFT, Side.RIGHT
    if dy > 0:
        return Side.BOTTOM, Side.TOP
    return Side.TOP, Side.BOTTOM


STRATEGIES = {
    AnchorStrategy.CLOSEST_PAIR: closest_pair,
    AnchorStrategy.DOMINANT_AXIS: dominant_axis,
}


def select_anchor(
    source: Node,
    target: Node,
    strategy: AnchorStrategy | str = AnchorStrategy.CLOSEST_PAIR,
) -> tuple[Side, Side]:
    """
    Choose the (source side, target side) an edge between two nodes attaches to.

    Args:
        source: Edge source node.
        target: Edge target node.
        strategy: Selection strategy, enum member or its string value.

    Returns:
        Tuple of (source side, target side).
    """
    return STRATEGIES[AnchorStrategy(strategy)](source, target)


def assign_anchors(
    g: Graph,
    strategy: AnchorStrategy | str = AnchorStrategy.CLOSEST_PAIR,
) -> list[AnchorAssignment]:
    """Compute anchors for every edge of the graph, in edge order."""
    strategy = AnchorStrategy(strategy)
    anchors = []
    for edge in g.edges:
        source_side, target_side = select_anchor(g.node(edge.source), g.node(edge.target), strategy)
        anchors.append(AnchorAssignment(edge.id, source_side, target_side))
    return anchors
