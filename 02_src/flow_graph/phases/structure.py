"""Structural validation phase: shape checks on the decoded JSON value."""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import InvalidEdgeError, InvalidNodeError, MissingFieldError
from ..graph_model import (
    Diagnostic,
    GeneratedEdge,
    GeneratedNode,
    NodeType,
    ParsedGraph,
    Position,
)
from ..pipeline import PipelinePhase, record_diagnostic

STAGE = "structure"

# Lookup order for fields the model places either on the node or under "data".
TITLE_PATHS: Sequence[Tuple[str, ...]] = (("title",), ("data", "label"), ("data", "title"), ("label",))
CONTENT_PATHS: Sequence[Tuple[str, ...]] = (("content",), ("data", "content"))
EDGE_LABEL_PATHS: Sequence[Tuple[str, ...]] = (("label",), ("description",), ("data", "label"))


def _lookup(payload: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    current: Any = payload
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def first_text(payload: Dict[str, Any], paths: Sequence[Tuple[str, ...]]) -> Optional[str]:
    """Return the first non-blank string found along ``paths``."""
    for path in paths:
        value = _lookup(payload, path)
        if isinstance(value, str) and value.strip():
            return value
    return None


def node_title(node: Dict[str, Any]) -> Optional[str]:
    return first_text(node, TITLE_PATHS)


def node_content(node: Dict[str, Any]) -> Optional[str]:
    return first_text(node, CONTENT_PATHS)


def _reference(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _coordinate(position: Dict[str, Any], axis: str) -> Optional[float]:
    value = position.get(axis)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        coordinate = float(value)
    except OverflowError:
        return None
    return coordinate if math.isfinite(coordinate) else None


def _validate_node(
    index: int, node: Any, diagnostics: Optional[List[Diagnostic]]
) -> GeneratedNode:
    if not isinstance(node, dict):
        raise InvalidNodeError(index, "node is not an object")

    title = node_title(node)
    if title is None:
        raise InvalidNodeError(index, "missing non-empty title (title, data.label or data.title)")

    content = node_content(node)
    if content is None:
        raise InvalidNodeError(index, "missing non-empty content (content or data.content)")

    node_type = NodeType.from_tag(node.get("type"))
    if node_type is None:
        record_diagnostic(
            diagnostics,
            STAGE,
            "unknown_node_type",
            f"Node #{index} has type {node.get('type')!r}; treated as '{NodeType.PRODUCT.value}'.",
            level=logging.WARNING,
        )
        node_type = NodeType.PRODUCT

    position = node.get("position")
    if not isinstance(position, dict):
        raise InvalidNodeError(index, "missing position object")
    x = _coordinate(position, "x")
    y = _coordinate(position, "y")
    if x is None or y is None:
        raise InvalidNodeError(index, "position.x and position.y must be numbers")

    return GeneratedNode(
        source_id=_reference(node.get("id")) or "",
        node_type=node_type,
        title=title,
        content=content,
        position=Position(x=x, y=y),
    )


def _validate_edge(index: int, edge: Any) -> GeneratedEdge:
    if not isinstance(edge, dict):
        raise InvalidEdgeError(index, "edge is not an object")
    source = _reference(edge.get("source"))
    if source is None:
        raise InvalidEdgeError(index, "missing source reference")
    target = _reference(edge.get("target"))
    if target is None:
        raise InvalidEdgeError(index, "missing target reference")
    return GeneratedEdge(source_ref=source, target_ref=target, label=first_text(edge, EDGE_LABEL_PATHS))


def validate_structure(value: Any, diagnostics: Optional[List[Diagnostic]] = None) -> ParsedGraph:
    if not isinstance(value, dict) or not isinstance(value.get("nodes"), list):
        raise MissingFieldError("nodes")
    if not isinstance(value.get("edges"), list):
        raise MissingFieldError("edges")

    nodes = [_validate_node(index, node, diagnostics) for index, node in enumerate(value["nodes"])]
    edges = [_validate_edge(index, edge) for index, edge in enumerate(value["edges"])]
    return ParsedGraph(nodes=nodes, edges=edges)


class StructureValidationPhase(PipelinePhase):
    phase_name = STAGE

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        parsed_graph = validate_structure(context.get("parsed_value"), diagnostics)
        return {"parsed_graph": parsed_graph, "diagnostics": diagnostics}
