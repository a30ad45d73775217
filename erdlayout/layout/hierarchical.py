"""Sugiyama-style layered (hierarchical) layout engine."""

import logging
from collections import defaultdict

from erdlayout import graph
from erdlayout.layout import LayoutEngine, Result, apply_positions
from erdlayout.metrics import count_layer_crossings

logger = logging.getLogger(__name__)

# Spacing constants
HORIZONTAL_SPACING = 400  # pixels between nodes in the same layer
VERTICAL_SPACING = 350    # pixels between layers
MAX_CROSSING_ITERATIONS = 24

Layer = list[str]

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def find_back_edges(adjacency: dict[str, graph.Adjacency]) -> set[tuple[str, str]]:
    """
    Find back edges using a three-color DFS over outgoing edges.

    An edge (u, v) is a back edge when v is still on the traversal path
    while u is being expanded. The graph is left untouched.

    Returns:
        Set of (source, target) edges closing a cycle.
    """
    state = {nid: _UNVISITED for nid in adjacency}
    back_edges: set[tuple[str, str]] = set()

    for root in adjacency:
        if state[root] != _UNVISITED:
            continue
        state[root] = _IN_PROGRESS
        stack = [(root, iter(adjacency[root].outgoing))]
        while stack:
            node, neighbors = stack[-1]
            for neighbor in neighbors:
                if state[neighbor] == _UNVISITED:
                    state[neighbor] = _IN_PROGRESS
                    stack.append((neighbor, iter(adjacency[neighbor].outgoing)))
                    break
                if state[neighbor] == _IN_PROGRESS:
                    back_edges.add((node, neighbor))
            else:
                state[node] = _DONE
                stack.pop()

    return back_edges


def rank_nodes(adjacency: dict[str, graph.Adjacency]) -> tuple[dict[str, int], int]:
    """
    Rank nodes by iterative longest-path relaxation.

    Every node starts on layer 0 and is pushed one layer below its deepest
    incoming neighbor until nothing changes. The number of sweeps is capped
    at twice the node count so unresolved cycles still terminate.

    Returns:
        The layer index of every node and the number of sweeps performed.
    """
    node_layers = {nid: 0 for nid in adjacency}
    max_iterations = 2 * len(node_layers)

    changed = True
    iteration = 0
    while changed and iteration < max_iterations:
        changed = False
        iteration += 1
        for nid, entry in adjacency.items():
            for source in entry.incoming:
                candidate = node_layers[source] + 1
                if candidate > node_layers[nid]:
                    node_layers[nid] = candidate
                    changed = True

    if changed:
        logger.debug("Layer assignment stopped at iteration cap %d", max_iterations)
    else:
        logger.debug("Layer assignment converged after %d iteration(s)", iteration)

    return node_layers, iteration


def group_layers(node_layers: dict[str, int]) -> list[Layer]:
    layers: dict[int, Layer] = defaultdict(list)
    for nid, layer in node_layers.items():
        layers[layer].append(nid)

    # Sorting the keys drops the gaps left by empty layers
    return [layers[k] for k in sorted(layers)]


def assign_layers(adjacency: dict[str, graph.Adjacency]) -> list[Layer]:
    """
    Assign nodes to layers by longest path, see ``rank_nodes``.

    Returns:
        Non-empty layers, top first; node ids keep input order within a layer.
    """
    node_layers, _ = rank_nodes(adjacency)
    return group_layers(node_layers)


def _barycenter_sort(
    layer_nodes: Layer,
    fixed_layer: Layer,
    neighbors_of,
) -> Layer:
    """
    Sort nodes in a layer by barycenter (average index of neighbors in the fixed layer).

    Nodes without neighbors in the fixed layer are placed in the middle.
    """
    fixed_positions = {nid: i for i, nid in enumerate(fixed_layer)}
    middle = len(layer_nodes) / 2

    def barycenter(node: str) -> float:
        indices = [fixed_positions[n] for n in neighbors_of(node) if n in fixed_positions]
        if not indices:
            return middle
        return sum(indices) / len(indices)

    return sorted(layer_nodes, key=barycenter)


def reduce_crossings(
    layers: list[Layer],
    adjacency: dict[str, graph.Adjacency],
    max_iterations: int = MAX_CROSSING_ITERATIONS,
) -> list[Layer]:
    """
    Order nodes within each layer using the barycenter heuristic.

    Even iterations sweep down using incoming neighbors, odd iterations
    sweep up using outgoing neighbors. Only the order inside each layer
    changes; the input lists are not modified.

    Returns:
        New list of reordered layers.
    """
    ordered = [list(layer) for layer in layers]
    if len(ordered) < 2:
        return ordered

    for iteration in range(max_iterations):
        if iteration % 2 == 0:
            for i in range(1, len(ordered)):
                ordered[i] = _barycenter_sort(
                    ordered[i], ordered[i - 1], lambda n: adjacency[n].incoming
                )
        else:
            for i in range(len(ordered) - 2, -1, -1):
                ordered[i] = _barycenter_sort(
                    ordered[i], ordered[i + 1], lambda n: adjacency[n].outgoing
                )

    return ordered


def assign_coordinates(
    layers: list[Layer],
    horizontal_spacing: float = HORIZONTAL_SPACING,
    vertical_spacing: float = VERTICAL_SPACING,
) -> dict[str, graph.Point]:
    """
    Assign x, y coordinates to each node from its layer and index.

    Shorter layers are centered against the widest one.

    Returns:
        Dict mapping node id to its new top-left position.
    """
    if not layers:
        return {}

    max_width = max(len(layer) for layer in layers)
    positions: dict[str, graph.Point] = {}
    for layer_idx, layer in enumerate(layers):
        y = layer_idx * vertical_spacing
        start_x = (max_width - len(layer)) * horizontal_spacing / 2
        for i, nid in enumerate(layer):
            positions[nid] = graph.Point(start_x + i * horizontal_spacing, y)
    return positions


class Hierarchical(LayoutEngine):
    """Sugiyama-style layered layout engine."""

    def __init__(
        self,
        horizontal_spacing: float = HORIZONTAL_SPACING,
        vertical_spacing: float = VERTICAL_SPACING,
        max_iterations: int = MAX_CROSSING_ITERATIONS,
    ):
        """
        Initialize the hierarchical layout engine.

        Args:
            horizontal_spacing: Distance between neighbors in the same layer.
            vertical_spacing: Distance between consecutive layers.
            max_iterations: Cap on barycenter sweeps.
        """
        if max_iterations < 0:
            raise ValueError(f"Invalid max_iterations: {max_iterations}")
        self.horizontal_spacing = horizontal_spacing
        self.vertical_spacing = vertical_spacing
        self.max_iterations = max_iterations

    def fit(self, g: graph.Graph) -> Result:
        """
        Generate a layered layout for the given graph.

        Args:
            g: Graph snapshot containing nodes and edges.

        Returns:
            A Result with the repositioned graph. Metadata holds the
            ordered layers, the back edges found, the number of layering
            sweeps and the layer crossing counts before and after reordering.
        """
        if not g.nodes:
            return Result(g, metadata={
                "layers": [],
                "back_edges": set(),
                "crossings_before": 0,
                "crossings_after": 0,
                "layer_iterations": 0,
            })

        adjacency = g.adjacency

        # Phase 1: Detect cycles (reported only, layering does not use them)
        back_edges = find_back_edges(adjacency)
        if back_edges:
            logger.debug("Found %d back edge(s): %s", len(back_edges), sorted(back_edges))

        # Phase 2: Assign layers
        node_layers, layer_iterations = rank_nodes(adjacency)
        layers = group_layers(node_layers)

        # Phase 3: Minimize crossings
        ordered = reduce_crossings(layers, adjacency, self.max_iterations)

        # Phase 4: Assign coordinates
        positions = assign_coordinates(ordered, self.horizontal_spacing, self.vertical_spacing)

        return apply_positions(g, positions, metadata={
            "layers": ordered,
            "back_edges": back_edges,
            "crossings_before": count_layer_crossings(layers, adjacency),
            "crossings_after": count_layer_crossings(ordered, adjacency),
            "layer_iterations": layer_iterations,
        })
