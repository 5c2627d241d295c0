"""Pipeline abstractions, sequential runner and the diagnostics channel."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .graph_model import Diagnostic

logger = logging.getLogger(__name__)


def record_diagnostic(
    diagnostics: Optional[List[Diagnostic]],
    stage: str,
    code: str,
    message: str,
    offset: Optional[int] = None,
    level: int = logging.INFO,
) -> Diagnostic:
    diagnostic = Diagnostic(stage=stage, code=code, message=message, offset=offset)
    logger.log(level, "%s", diagnostic)
    if diagnostics is not None:
        diagnostics.append(diagnostic)
    return diagnostic


class PipelinePhase(ABC):
    phase_name: str

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class PipelineRunner:
    """Runs phases in order; each phase sees the merged output of its predecessors.

    A phase reports notes under the ``diagnostics`` key; those lists are
    accumulated instead of replaced.
    """

    def __init__(self, phases: Iterable[PipelinePhase]) -> None:
        self.phases: List[PipelinePhase] = list(phases)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        current = dict(context)
        diagnostics: List[Diagnostic] = list(current.get("diagnostics", []))
        for phase in self.phases:
            logger.debug("Running phase '%s'", phase.phase_name)
            current["diagnostics"] = list(diagnostics)
            phase_result = phase.run(current)
            if not isinstance(phase_result, dict):
                raise TypeError(f"Phase '{phase.phase_name}' must return dict context.")
            diagnostics.extend(phase_result.pop("diagnostics", []))
            current.update(phase_result)
        current["diagnostics"] = diagnostics
        return current
