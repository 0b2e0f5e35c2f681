"""Derived graph models produced by the transformers and the layout engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

FUNCTION = "function"
FILE = "file"
DIRECTORY = "directory"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class GraphNode:
    node_id: str
    kind: str
    data: Dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)
    style: Optional[Dict[str, str]] = None

    def moved_to(self, x: float, y: float) -> "GraphNode":
        """Return a copy of this node placed at ``(x, y)``."""
        return replace(self, position=Position(x, y))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.node_id,
            "type": f"{self.kind}Node",
            "position": {"x": self.position.x, "y": self.position.y},
            "data": dict(self.data),
        }
        if self.style:
            payload["style"] = dict(self.style)
        return payload


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str

    @property
    def edge_id(self) -> str:
        return f"{self.source}->{self.target}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.edge_id, "source": self.source, "target": self.target}


@dataclass
class Graph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    @property
    def node_ids(self) -> List[str]:
        return [n.node_id for n in self.nodes]

    def node(self, node_id: str) -> Optional[GraphNode]:
        for n in self.nodes:
            if n.node_id == node_id:
                return n
        return None

    def edge_pairs(self) -> List[Tuple[str, str]]:
        return [(e.source, e.target) for e in self.edges]

    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


class EdgeSet:
    """Insertion-ordered set of edges keyed by ``"<source>-><target>"``."""

    def __init__(self) -> None:
        self._edges: Dict[str, GraphEdge] = {}

    def add(self, source: str, target: str) -> bool:
        edge = GraphEdge(source, target)
        if edge.edge_id in self._edges:
            return False
        self._edges[edge.edge_id] = edge
        return True

    def __contains__(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def to_list(self) -> List[GraphEdge]:
        return list(self._edges.values())
