"""Normalization phase: fresh ids, reference resolution and rounded positions."""

import logging
from typing import Any, Dict, List, Optional

from ..graph_builder import FlowGraphBuilder, IdFactory
from ..graph_model import Diagnostic, NormalizedGraph, ParsedGraph
from ..pipeline import PipelinePhase, record_diagnostic

STAGE = "normalizer"


def normalize(
    parsed: ParsedGraph,
    diagnostics: Optional[List[Diagnostic]] = None,
    id_factory: Optional[IdFactory] = None,
) -> NormalizedGraph:
    builder = FlowGraphBuilder(id_factory=id_factory)

    for index, node in enumerate(parsed.nodes):
        if node.source_id and builder.knows_source_id(node.source_id):
            record_diagnostic(
                diagnostics,
                STAGE,
                "duplicate_source_id",
                f"Node #{index} repeats id {node.source_id!r}; references keep the first node.",
                level=logging.WARNING,
            )
        builder.add_node(node)

    for index, edge in enumerate(parsed.edges):
        source_id = builder.resolve(edge.source_ref)
        target_id = builder.resolve(edge.target_ref)
        if source_id is None or target_id is None:
            missing = [
                ref
                for ref, found in ((edge.source_ref, source_id), (edge.target_ref, target_id))
                if found is None
            ]
            record_diagnostic(
                diagnostics,
                STAGE,
                "edge_dropped",
                f"Edge #{index} dropped; unresolved reference(s): {', '.join(repr(ref) for ref in missing)}.",
                level=logging.WARNING,
            )
            continue
        builder.add_edge(source_id, target_id, label=edge.label)

    return builder.build()


class NormalizationPhase(PipelinePhase):
    phase_name = STAGE

    def __init__(self, id_factory: Optional[IdFactory] = None) -> None:
        self._id_factory = id_factory

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        graph = normalize(context["parsed_graph"], diagnostics, id_factory=self._id_factory)
        return {"graph": graph, "diagnostics": diagnostics}
