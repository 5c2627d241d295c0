"""Identifier assignment and reference resolution for a single normalization run."""

import uuid
from typing import Callable, Dict, List, Optional, Set

from .graph_model import FlowEdge, FlowNode, GeneratedNode, NormalizedGraph, Position

IdFactory = Callable[[], str]

POSITION_PRECISION = 2
MAX_ID_RETRIES = 100


def uuid_factory() -> str:
    return str(uuid.uuid4())


class FlowGraphBuilder:
    """Owns identifiers and the reference lookup of one graph under construction."""

    def __init__(self, id_factory: Optional[IdFactory] = None) -> None:
        self._id_factory = id_factory or uuid_factory
        self._issued: Set[str] = set()
        self._node_ids: Set[str] = set()
        self._by_source_id: Dict[str, str] = {}
        self._by_title: Dict[str, str] = {}
        self._nodes: List[FlowNode] = []
        self._edges: List[FlowEdge] = []

    def add_node(self, node: GeneratedNode) -> str:
        node_id = self._new_id()
        self._node_ids.add(node_id)
        self._nodes.append(
            FlowNode(
                id=node_id,
                type=node.node_type,
                title=node.title,
                content=node.content,
                position=Position(
                    x=round(node.position.x, POSITION_PRECISION),
                    y=round(node.position.y, POSITION_PRECISION),
                ),
            )
        )
        if node.source_id:
            self._by_source_id.setdefault(node.source_id, node_id)
        self._by_title.setdefault(node.title.strip(), node_id)
        return node_id

    def knows_source_id(self, source_id: str) -> bool:
        return source_id in self._by_source_id

    def resolve(self, reference: str) -> Optional[str]:
        for candidate in (reference, reference.strip()):
            node_id = self._by_source_id.get(candidate) or self._by_title.get(candidate)
            if node_id:
                return node_id
        return None

    def add_edge(self, source_id: str, target_id: str, label: Optional[str] = None) -> str:
        if source_id not in self._node_ids:
            raise ValueError(f"Unknown source node: {source_id}")
        if target_id not in self._node_ids:
            raise ValueError(f"Unknown target node: {target_id}")
        edge_id = self._new_id()
        self._edges.append(FlowEdge(id=edge_id, source=source_id, target=target_id, label=label))
        return edge_id

    def build(self) -> NormalizedGraph:
        return NormalizedGraph(nodes=tuple(self._nodes), edges=tuple(self._edges))

    def _new_id(self) -> str:
        for _ in range(MAX_ID_RETRIES):
            new_id = self._id_factory()
            if new_id not in self._issued:
                self._issued.add(new_id)
                return new_id
        raise RuntimeError(f"Id factory produced no fresh id in {MAX_ID_RETRIES} tries.")
