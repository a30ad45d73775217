import dataclasses
import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0


@dataclasses.dataclass(frozen=True)
class Size:
    width: float = 300.0
    height: float = 200.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Size must be positive, got {self.width}x{self.height}")


DEFAULT_SIZE = Size()
NO_CATEGORY = "none"


@dataclasses.dataclass(frozen=True)
class Node:
    """An entity box. ``position`` is the top-left corner."""

    id: str
    position: Point = Point()
    size: Size = DEFAULT_SIZE
    category: str | None = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Node id must be a non-empty string")
        if not self.category:
            object.__setattr__(self, "category", None)

    @property
    def center(self) -> Point:
        return Point(
            self.position.x + self.size.width / 2,
            self.position.y + self.size.height / 2,
        )

    @property
    def bucket(self) -> str:
        return self.category if self.category is not None else NO_CATEGORY


@dataclasses.dataclass(frozen=True)
class Edge:
    """A directed relationship between two entities."""

    id: str
    source: str
    target: str


@dataclasses.dataclass
class Adjacency:
    outgoing: list[str] = dataclasses.field(default_factory=list)
    incoming: list[str] = dataclasses.field(default_factory=list)


def build_adjacency(node_ids: Iterable[str], edges: Iterable[Edge]) -> dict[str, Adjacency]:
    """
    Build outgoing/incoming neighbor lists keyed by node id.

    Every node gets an entry, even without edges. Edges whose source or
    target is not among ``node_ids`` are skipped.

    Args:
        node_ids: Node ids in input order.
        edges: Edges in input order.

    Returns:
        Dict mapping node id to its Adjacency, in ``node_ids`` order.
    """
    adjacency = {nid: Adjacency() for nid in node_ids}
    for edge in edges:
        if edge.source not in adjacency or edge.target not in adjacency:
            continue
        adjacency[edge.source].outgoing.append(edge.target)
        adjacency[edge.target].incoming.append(edge.source)
    return adjacency


class Graph:
    """
    Immutable snapshot of a diagram.

    The id index and the adjacency map are built once here and shared by
    every layout phase. Edges pointing at unknown nodes are kept aside in
    ``dropped_edges`` instead of raising.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge] = ()):
        self.nodes: tuple[Node, ...] = tuple(nodes)
        self.id2node: dict[str, Node] = {}
        for node in self.nodes:
            if node.id in self.id2node:
                raise ValueError(f"Duplicate node id: {node.id}")
            self.id2node[node.id] = node

        kept, dropped = [], []
        for edge in edges:
            if edge.source in self.id2node and edge.target in self.id2node:
                kept.append(edge)
            else:
                dropped.append(edge)
        if dropped:
            logger.debug("Ignoring %d edge(s) with unknown endpoints: %s",
                         len(dropped), [e.id for e in dropped])
        self.edges: tuple[Edge, ...] = tuple(kept)
        self.dropped_edges: tuple[Edge, ...] = tuple(dropped)
        self.adjacency = build_adjacency(self.id2node, self.edges)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.id2node

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def node(self, node_id: str) -> Node:
        return self.id2node[node_id]

    def positions(self) -> dict[str, Point]:
        return {node.id: node.position for node in self.nodes}

    def with_positions(self, positions: Mapping[str, Point]) -> "Graph":
        """Return a new snapshot with positions replaced for the given ids."""
        nodes = [
            dataclasses.replace(node, position=positions[node.id]) if node.id in positions else node
            for node in self.nodes
        ]
        moved = Graph(nodes, self.edges)
        moved.dropped_edges = self.dropped_edges
        return moved
