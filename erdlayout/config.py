from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, Field

from erdlayout.anchors import AnchorStrategy

if TYPE_CHECKING:
    from erdlayout.apply import FrameCallback, LayoutApplier, PersistCallback
    from erdlayout.graph import Graph
    from erdlayout.layout import LayoutEngine


class HierarchicalConfig(BaseModel):
    """Configuration for the Hierarchical layout engine."""

    horizontal_spacing: float = Field(400.0, gt=0)
    vertical_spacing: float = Field(350.0, gt=0)
    max_iterations: int = Field(24, ge=0)

    def bind(self) -> LayoutEngine:
        from erdlayout.layout.hierarchical import Hierarchical

        return Hierarchical(**self.model_dump())


class ClusterConfig(BaseModel):
    """Configuration for the Cluster layout engine."""

    cluster_spacing: float = Field(800.0, gt=0)
    entity_spacing: float = Field(300.0, gt=0)
    cluster_radius_factor: float = Field(1.5, gt=0)
    pull_ratio: float = Field(0.1, ge=0, le=0.5)

    def bind(self) -> LayoutEngine:
        from erdlayout.layout.cluster import Cluster

        return Cluster(**self.model_dump())


class AnimationConfig(BaseModel):
    """Timing of the animated layout application."""

    duration_ms: int = Field(800, gt=0)
    step_ms: int = Field(20, gt=0)

    def bind(self, on_frame: FrameCallback, persist: PersistCallback | None = None) -> LayoutApplier:
        from erdlayout.apply import LayoutApplier

        return LayoutApplier(on_frame, persist=persist, **self.model_dump())


class LayoutConfig(BaseModel):
    """Container for all layout configurations."""

    engine: str = "hierarchical"
    anchors: AnchorStrategy = AnchorStrategy.CLOSEST_PAIR
    hierarchical: HierarchicalConfig = HierarchicalConfig()
    cluster: ClusterConfig = ClusterConfig()
    animation: AnimationConfig = AnimationConfig()

    def bind(self, engine: str | None = None) -> LayoutEngine:
        """Build the named engine (or the configured one) with its settings."""
        name = engine or self.engine
        match name:
            case "hierarchical":
                return self.hierarchical.bind()
            case "cluster":
                return self.cluster.bind()
            case _:
                from erdlayout.layout.engines import get_engine

                # Raises with the list of known engines
                return get_engine(name)()


class NodeConfig(BaseModel):
    """A diagram entity as written in the input file."""

    id: str = Field(min_length=1)
    x: float = 0.0
    y: float = 0.0
    width: float = Field(300.0, gt=0)
    height: float = Field(200.0, gt=0)
    category: str | None = None


class DiagramInputConfig(BaseModel):
    """Top-level configuration for diagram input."""

    nodes: list[str | NodeConfig]
    edges: list[list[str] | dict] = []
    layout: LayoutConfig = LayoutConfig()

    def build_graph(self) -> Graph:
        """Build a Graph instance from this configuration."""
        from erdlayout.graph import Edge, Graph, Node, Point, Size

        nodes = []
        for n in self.nodes:
            if isinstance(n, str):
                n = NodeConfig(id=n)
            nodes.append(Node(
                n.id,
                position=Point(n.x, n.y),
                size=Size(n.width, n.height),
                category=n.category,
            ))

        edges = []
        for i, e in enumerate(self.edges):
            match e:
                case [src, dst]:
                    edges.append(Edge(f"e{i}", src, dst))
                case {"source": src, "target": dst, **rest}:
                    edges.append(Edge(str(rest.get("id", f"e{i}")), src, dst))
                case _:
                    raise ValueError(f"Invalid edge format: {e}")

        return Graph(nodes, edges)


def load_config(path: str | Path) -> DiagramInputConfig:
    """Load a DiagramInputConfig from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return DiagramInputConfig.model_validate(data)
