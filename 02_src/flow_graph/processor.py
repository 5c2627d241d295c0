"""End-to-end recovery of a flow graph from raw model output."""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import PipelineSettings, SemanticRules
from .graph_builder import IdFactory
from .graph_model import Diagnostic, NormalizedGraph, SemanticViolation
from .phases import (
    BoundaryScanPhase,
    ExtractionPhase,
    NormalizationPhase,
    ParseRepairPhase,
    SanitizationPhase,
    SemanticValidationPhase,
    StructureValidationPhase,
)
from .pipeline import PipelinePhase, PipelineRunner


@dataclass(frozen=True)
class PipelineOutcome:
    graph: NormalizedGraph
    diagnostics: List[Diagnostic] = field(default_factory=list)
    violations: List[SemanticViolation] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.violations


def build_default_phases(
    settings: Optional[PipelineSettings] = None,
    id_factory: Optional[IdFactory] = None,
) -> List[PipelinePhase]:
    settings = settings or PipelineSettings()
    return [
        ExtractionPhase(),
        SanitizationPhase(),
        BoundaryScanPhase(),
        ParseRepairPhase(max_attempts=settings.max_attempts, window_radius=settings.window_radius),
        StructureValidationPhase(),
        NormalizationPhase(id_factory=id_factory),
        SemanticValidationPhase(),
    ]


def process(
    raw: str,
    rules: Optional[SemanticRules] = None,
    settings: Optional[PipelineSettings] = None,
    id_factory: Optional[IdFactory] = None,
) -> PipelineOutcome:
    """Recover, validate and normalize the graph encoded in ``raw``.

    Raises a ``PipelineError`` subclass when the text cannot be parsed or does not
    have the node/edge shape. Semantic rule violations are returned on the outcome
    instead; passing ``rules=None`` skips that check.
    """
    runner = PipelineRunner(phases=build_default_phases(settings, id_factory))
    final_context = runner.run({"raw_text": raw, "rules": rules})
    return PipelineOutcome(
        graph=final_context["graph"],
        diagnostics=list(final_context.get("diagnostics", [])),
        violations=list(final_context.get("violations", [])),
    )
