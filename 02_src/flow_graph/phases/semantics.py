"""Semantic validation phase: per-node content rules reported as violations."""

import logging
import re
from typing import Any, Dict, List, Optional

from ..config import SemanticRules
from ..graph_model import FlowEdge, FlowNode, NodeType, NormalizedGraph, SemanticViolation
from ..pipeline import PipelinePhase

STAGE = "semantics"

# Markup that belongs to the response envelope, not to node text.
FORMATTING_MARKERS = ("```", "{", "}")

_LETTER_NUMBERING = re.compile(r"[a-z]\)")
_NUMBER_NUMBERING = re.compile(r"\d+\.")

logger = logging.getLogger(__name__)


def _mentions_known_service(node: FlowNode, rules: SemanticRules) -> bool:
    haystack = f"{node.title} {node.content}".lower()
    return any(name.lower() in haystack for name in rules.known_external_service_names if name)


def has_formatting_markers(text: str) -> bool:
    return any(marker in text for marker in FORMATTING_MARKERS)


def has_mixed_numbering(text: str) -> bool:
    return bool(_LETTER_NUMBERING.search(text)) and bool(_NUMBER_NUMBERING.search(text))


def _node_violations(node: FlowNode, rules: SemanticRules) -> List[SemanticViolation]:
    violations: List[SemanticViolation] = []

    content_length = len(node.content)
    if content_length < rules.min_content_length:
        violations.append(
            SemanticViolation(
                node_id=node.id,
                title=node.title,
                rule="content_too_short",
                message=(
                    f"Node '{node.title}' has {content_length} content characters; "
                    f"at least {rules.min_content_length} required."
                ),
            )
        )

    if node.type is NodeType.EXTERNAL:
        long_enough = content_length >= rules.min_external_service_content_length
        if not long_enough and not _mentions_known_service(node, rules):
            violations.append(
                SemanticViolation(
                    node_id=node.id,
                    title=node.title,
                    rule="external_service_unspecified",
                    message=(
                        f"External service node '{node.title}' names no known service and has "
                        f"fewer than {rules.min_external_service_content_length} content characters."
                    ),
                )
            )

    if has_formatting_markers(node.content):
        violations.append(
            SemanticViolation(
                node_id=node.id,
                title=node.title,
                rule="formatting_characters",
                message=f"Node '{node.title}' content contains code fences or JSON braces.",
            )
        )

    if has_mixed_numbering(node.content):
        violations.append(
            SemanticViolation(
                node_id=node.id,
                title=node.title,
                rule="mixed_numbering",
                message=f"Node '{node.title}' content mixes letter and number list markers.",
            )
        )

    return violations


def _edge_violations(edge: FlowEdge, graph: NormalizedGraph) -> List[SemanticViolation]:
    if not edge.label or not has_formatting_markers(edge.label):
        return []
    # Edge findings are attached to the edge's source node.
    source = graph.node(edge.source)
    target = graph.node(edge.target)
    source_title = source.title if source else edge.source
    target_title = target.title if target else edge.target
    return [
        SemanticViolation(
            node_id=edge.source,
            title=source_title,
            rule="edge_label_formatting",
            message=(
                f"Edge '{source_title}' -> '{target_title}' label contains code fences or JSON braces."
            ),
        )
    ]


def validate_semantics(graph: NormalizedGraph, rules: SemanticRules) -> List[SemanticViolation]:
    violations: List[SemanticViolation] = []
    for node in graph.nodes:
        violations.extend(_node_violations(node, rules))
    for edge in graph.edges:
        violations.extend(_edge_violations(edge, graph))

    for violation in violations:
        logger.warning("Semantic violation [%s] %s", violation.rule, violation.message)
    return violations


class SemanticValidationPhase(PipelinePhase):
    phase_name = STAGE

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        rules: Optional[SemanticRules] = context.get("rules")
        if rules is None:
            return {"violations": []}
        return {"violations": validate_semantics(context["graph"], rules)}
