"""Layout engine registry and lookup."""

import dataclasses

from erdlayout.anchors import AnchorAssignment, AnchorStrategy, assign_anchors
from erdlayout.graph import Graph, Point
from erdlayout.layout import LayoutEngine
from erdlayout.layout.cluster import Cluster
from erdlayout.layout.hierarchical import Hierarchical

ENGINES: dict[str, type[LayoutEngine]] = {
    "hierarchical": Hierarchical,
    "cluster": Cluster,
}


def get_engine(name: str) -> type[LayoutEngine]:
    """Get engine class by name."""
    if name not in ENGINES:
        raise ValueError(f"Unknown layout engine: {name}. Available: {list(ENGINES.keys())}")
    return ENGINES[name]


@dataclasses.dataclass
class LayoutOutput:
    """New positions and edge anchors for a diagram, plus engine metadata."""

    graph: Graph
    anchors: list[AnchorAssignment]
    metadata: dict = dataclasses.field(default_factory=dict)

    @property
    def positions(self) -> dict[str, Point]:
        return self.graph.positions()

    def to_dict(self) -> dict:
        return {
            "positions": [
                {"id": nid, "position": {"x": p.x, "y": p.y}}
                for nid, p in self.positions.items()
            ],
            "anchors": [a.to_dict() for a in self.anchors],
        }


def run_layout(
    g: Graph,
    engine: LayoutEngine,
    strategy: AnchorStrategy | str = AnchorStrategy.CLOSEST_PAIR,
) -> LayoutOutput:
    """Lay out the graph, then refresh every edge's anchors on the new positions."""
    result = engine.fit(g)
    anchors = assign_anchors(result.graph, strategy)
    return LayoutOutput(result.graph, anchors, result.metadata)
