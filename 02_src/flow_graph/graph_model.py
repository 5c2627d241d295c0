"""Flow graph data model: parsed records, normalized graph and diagnostics."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class NodeType(str, Enum):
    PRODUCT = "product"
    EXTERNAL = "external"
    CONTEXT = "context"

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["NodeType"]:
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass
class GeneratedNode:
    source_id: str
    node_type: NodeType
    title: str
    content: str
    position: Position


@dataclass
class GeneratedEdge:
    source_ref: str
    target_ref: str
    label: Optional[str] = None


@dataclass
class ParsedGraph:
    nodes: List[GeneratedNode] = field(default_factory=list)
    edges: List[GeneratedEdge] = field(default_factory=list)


@dataclass(frozen=True)
class FlowNode:
    id: str
    type: NodeType
    title: str
    content: str
    position: Position


@dataclass(frozen=True)
class FlowEdge:
    id: str
    source: str
    target: str
    label: Optional[str] = None


@dataclass(frozen=True)
class NormalizedGraph:
    nodes: Tuple[FlowNode, ...] = ()
    edges: Tuple[FlowEdge, ...] = ()

    def node(self, node_id: str) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_json(self) -> Dict[str, Any]:
        """Shape consumed by the document store and the graph canvas."""
        return {
            "nodes": [
                {
                    "id": node.id,
                    "type": node.type.value,
                    "position": asdict(node.position),
                    "data": {"title": node.title, "content": node.content},
                    "draggable": True,
                }
                for node in self.nodes
            ],
            "edges": [asdict(edge) for edge in self.edges],
        }


@dataclass(frozen=True)
class Diagnostic:
    stage: str
    code: str
    message: str
    offset: Optional[int] = None

    def __str__(self) -> str:
        where = f" @{self.offset}" if self.offset is not None else ""
        return f"[{self.stage}:{self.code}{where}] {self.message}"


@dataclass(frozen=True)
class SemanticViolation:
    node_id: str
    title: str
    rule: str
    message: str
