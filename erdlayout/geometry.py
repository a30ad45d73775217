import enum

import numpy as np

from erdlayout.graph import Node


class Side(str, enum.Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


# Scan order for anchor candidates
SIDES = (Side.TOP, Side.RIGHT, Side.BOTTOM, Side.LEFT)


def side_midpoints(node: Node) -> np.ndarray:
    """
    Midpoint of each side of a node's box.

    Args:
        node: Node whose ``position`` is the top-left corner of the box.

    Returns:
        Array of shape (4, 2), rows ordered as ``SIDES``.
    """
    x, y = node.position.x, node.position.y
    w, h = node.size.width, node.size.height
    return np.array([
        [x + w / 2, y],
        [x + w, y + h / 2],
        [x + w / 2, y + h],
        [x, y + h / 2],
    ], dtype=float)


def center_delta(source: Node, target: Node) -> tuple[float, float]:
    """Vector from the source box center to the target box center."""
    sc, tc = source.center, target.center
    return tc.x - sc.x, tc.y - sc.y
