from abc import abstractmethod

from erdlayout import graph


class LayoutEngine:
    """Base class for layout engines."""

    @abstractmethod
    def fit(self, g: graph.Graph) -> "Result":
        """Compute layout for the given graph."""
        pass


class Result:
    """Layout result container."""

    def __init__(
        self,
        g: graph.Graph,
        metadata: dict | None = None
    ):
        self.graph = g
        self.metadata = metadata or {}

    @property
    def positions(self) -> dict[str, graph.Point]:
        return self.graph.positions()


def apply_positions(g: graph.Graph, positions: dict[str, graph.Point], metadata: dict) -> Result:
    """Wrap computed positions into a new graph snapshot."""
    return Result(g.with_positions(positions), metadata=metadata)


__all__ = [
    "LayoutEngine",
    "Result",
    "apply_positions",
]
