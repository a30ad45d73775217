"""Layout quality measures used for diagnostics."""

import numpy as np

from erdlayout.graph import Adjacency, Graph


def segment_cross(
    ax: float, ay: float,
    bx: float, by: float,
    cx: float, cy: float,
    dx: float, dy: float
) -> bool:
    """Check if segment AB properly crosses segment CD (scalar version for tests)."""
    def orient(px, py, qx, qy, rx, ry):
        return (qx - px) * (ry - py) - (qy - py) * (rx - px)

    o1 = orient(cx, cy, dx, dy, ax, ay)
    o2 = orient(cx, cy, dx, dy, bx, by)
    o3 = orient(ax, ay, bx, by, cx, cy)
    o4 = orient(ax, ay, bx, by, dx, dy)

    return o1 * o2 < 0 and o3 * o4 < 0


def _segment_cross_vectorized(ax, ay, bx, by, cx, cy, dx, dy):
    """Vectorized orientation test for segment crossing."""
    def orient(px, py, qx, qy, rx, ry):
        return (qx - px) * (ry - py) - (qy - py) * (rx - px)

    o1 = orient(cx, cy, dx, dy, ax, ay)
    o2 = orient(cx, cy, dx, dy, bx, by)
    o3 = orient(ax, ay, bx, by, cx, cy)
    o4 = orient(ax, ay, bx, by, dx, dy)

    return (o1 * o2 < 0) & (o3 * o4 < 0)


def count_edge_crossings(g: Graph) -> int:
    """
    Count crossings between the straight center-to-center segments of all edges.

    Edges sharing an endpoint never count, since they only touch.
    """
    m = len(g.edges)
    if m < 2:
        return 0

    id2idx = {nid: i for i, nid in enumerate(g.node_ids)}
    coords = np.array([[n.center.x, n.center.y] for n in g.nodes], dtype=float)
    edge_indices = np.array([
        (id2idx[e.source], id2idx[e.target]) for e in g.edges
    ], dtype=np.int32)

    edge_starts = coords[edge_indices[:, 0]]
    edge_ends = coords[edge_indices[:, 1]]
    i_idx, j_idx = np.triu_indices(m, k=1)

    crosses = _segment_cross_vectorized(
        edge_starts[i_idx, 0], edge_starts[i_idx, 1],
        edge_ends[i_idx, 0], edge_ends[i_idx, 1],
        edge_starts[j_idx, 0], edge_starts[j_idx, 1],
        edge_ends[j_idx, 0], edge_ends[j_idx, 1],
    )
    return int(np.count_nonzero(crosses))


def count_layer_crossings(layers: list[list[str]], adjacency: dict[str, Adjacency]) -> int:
    """
    Count pairwise crossings of edges drawn between adjacent layers.

    Two edges (a, b) and (c, d) running from layer L to layer L+1 cross
    when their endpoints appear in opposite order in the two layers. Edges
    pointing upwards (from L+1 to L) are counted the same way.
    """
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        upper_pos = {nid: i for i, nid in enumerate(upper)}
        lower_pos = {nid: i for i, nid in enumerate(lower)}
        segments = []
        for nid in upper:
            for neighbor in adjacency[nid].outgoing + adjacency[nid].incoming:
                if neighbor in lower_pos:
                    segments.append((upper_pos[nid], lower_pos[neighbor]))
        for k, (a, b) in enumerate(segments):
            for c, d in segments[k + 1:]:
                if (a - c) * (b - d) < 0:
                    total += 1
    return total
