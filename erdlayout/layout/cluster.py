"""Category cluster layout engine."""

import logging
import math

import numpy as np

from erdlayout import graph
from erdlayout.layout import LayoutEngine, Result, apply_positions

logger = logging.getLogger(__name__)

CLUSTER_SPACING = 800       # distance between cluster centers
ENTITY_SPACING = 300        # distance between entities inside a cluster
CLUSTER_RADIUS_FACTOR = 1.5
PULL_RATIO = 0.1            # fraction of the gap closed per inter-cluster edge
MAX_CIRCLE_SIZE = 8


def group_by_category(g: graph.Graph) -> dict[str, list[str]]:
    """
    Group node ids into buckets keyed by category.

    Uncategorized nodes go to the ``"none"`` bucket, which comes first when
    it has members; categories follow in order of first appearance.
    """
    buckets: dict[str, list[str]] = {}
    uncategorized = [node.id for node in g.nodes if node.category is None]
    if uncategorized:
        buckets[graph.NO_CATEGORY] = uncategorized
    for node in g.nodes:
        if node.category is not None:
            buckets.setdefault(node.category, []).append(node.id)
    return buckets


def circle_positions(n: int, center: np.ndarray, radius: float) -> np.ndarray:
    """Place ``n`` points evenly on a circle, starting at angle 0."""
    angles = 2 * np.pi * np.arange(n) / n
    return center + radius * np.column_stack([np.cos(angles), np.sin(angles)])


def grid_positions(n: int, center: np.ndarray, spacing: float) -> np.ndarray:
    """Place ``n`` points row by row on a square grid around ``center``."""
    size = math.ceil(math.sqrt(n))
    idx = np.arange(n)
    cols = idx % size - size / 2
    rows = idx // size - size / 2
    return center + spacing * np.column_stack([cols, rows])


class Cluster(LayoutEngine):
    """Groups nodes by category and lays each group out around its own center."""

    def __init__(
        self,
        cluster_spacing: float = CLUSTER_SPACING,
        entity_spacing: float = ENTITY_SPACING,
        cluster_radius_factor: float = CLUSTER_RADIUS_FACTOR,
        pull_ratio: float = PULL_RATIO,
    ):
        self.cluster_spacing = cluster_spacing
        self.entity_spacing = entity_spacing
        self.cluster_radius_factor = cluster_radius_factor
        self.pull_ratio = pull_ratio

    @property
    def radius(self) -> float:
        return self.entity_spacing * self.cluster_radius_factor

    def cluster_center(self, index: int, grid_size: int) -> np.ndarray:
        row, col = divmod(index, grid_size)
        return np.array([col, row], dtype=float) * self.cluster_spacing

    def place_cluster(self, n: int, center: np.ndarray) -> np.ndarray:
        if n == 1:
            return center.reshape(1, 2)
        if n <= MAX_CIRCLE_SIZE:
            return circle_positions(n, center, self.radius)
        return grid_positions(n, center, self.entity_spacing)

    def fit(self, g: graph.Graph) -> Result:
        """
        Lay out every category bucket on a coarse grid, then pull endpoints
        of long inter-cluster edges toward each other.

        Returns:
            A Result whose metadata holds ``clusters`` (bucket to node ids)
            and ``pulled_edges`` (ids of edges that triggered a pull).
        """
        if not g.nodes:
            return Result(g, metadata={"clusters": {}, "pulled_edges": []})

        buckets = group_by_category(g)
        grid_size = math.ceil(math.sqrt(len(buckets)))

        id2idx = {nid: i for i, nid in enumerate(g.node_ids)}
        coords = np.zeros((len(g.nodes), 2))
        for k, members in enumerate(buckets.values()):
            center = self.cluster_center(k, grid_size)
            coords[[id2idx[nid] for nid in members]] = self.place_cluster(len(members), center)

        coords, pulled = self._pull_inter_cluster(g, coords, id2idx)
        logger.debug("Placed %d cluster(s), pulled %d inter-cluster edge(s)",
                     len(buckets), len(pulled))

        positions = {nid: graph.Point(float(coords[i, 0]), float(coords[i, 1]))
                     for nid, i in id2idx.items()}
        return apply_positions(g, positions, metadata={
            "clusters": buckets,
            "pulled_edges": pulled,
        })

    def _pull_inter_cluster(
        self,
        g: graph.Graph,
        coords: np.ndarray,
        id2idx: dict[str, int],
    ) -> tuple[np.ndarray, list[str]]:
        """
        Move endpoints of long inter-cluster edges toward each other.

        All deltas are measured on the positions before any pull and summed,
        so the outcome does not depend on edge order.
        """
        deltas = np.zeros_like(coords)
        pulled = []
        threshold = self.cluster_spacing / 2
        for edge in g.edges:
            src, dst = g.node(edge.source), g.node(edge.target)
            if src.bucket == dst.bucket:
                continue
            i, j = id2idx[edge.source], id2idx[edge.target]
            delta = coords[j] - coords[i]
            if np.hypot(*delta) > threshold:
                deltas[i] += delta * self.pull_ratio
                deltas[j] -= delta * self.pull_ratio
                pulled.append(edge.id)
        return coords + deltas, pulled
