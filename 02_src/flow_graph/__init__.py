"""Recovery and validation pipeline for model-generated flow graphs."""

from .config import PipelineSettings, SemanticRules
from .errors import (
    InvalidEdgeError,
    InvalidNodeError,
    MissingFieldError,
    PipelineError,
    UnrecoverableSyntaxError,
)
from .graph_builder import FlowGraphBuilder
from .graph_model import (
    Diagnostic,
    FlowEdge,
    FlowNode,
    GeneratedEdge,
    GeneratedNode,
    NodeType,
    NormalizedGraph,
    ParsedGraph,
    Position,
    SemanticViolation,
)
from .pipeline import PipelinePhase, PipelineRunner
from .processor import PipelineOutcome, process

__all__ = [
    "process",
    "PipelineOutcome",
    "PipelineSettings",
    "SemanticRules",
    "PipelineError",
    "UnrecoverableSyntaxError",
    "MissingFieldError",
    "InvalidNodeError",
    "InvalidEdgeError",
    "FlowGraphBuilder",
    "NodeType",
    "Position",
    "GeneratedNode",
    "GeneratedEdge",
    "ParsedGraph",
    "FlowNode",
    "FlowEdge",
    "NormalizedGraph",
    "Diagnostic",
    "SemanticViolation",
    "PipelinePhase",
    "PipelineRunner",
]
