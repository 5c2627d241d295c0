"""Extraction phase: isolate the JSON object from fenced or prose-wrapped model output."""

import re
from typing import Any, Dict, List, Optional

from ..graph_model import Diagnostic
from ..pipeline import PipelinePhase, record_diagnostic

STAGE = "extraction"

_LEADING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```\s*$")
_FENCE_MARKER = re.compile(r"```[\w+-]*")


def extract(raw: str, diagnostics: Optional[List[Diagnostic]] = None) -> str:
    text = raw
    fenced = False

    leading = _LEADING_FENCE.match(text)
    if leading:
        text = text[leading.end():]
        fenced = True
    trailing = _TRAILING_FENCE.search(text)
    if trailing:
        text = text[:trailing.start()]
        fenced = True

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        if fenced:
            record_diagnostic(diagnostics, STAGE, "code_fence", "Stripped markdown code fence.")
        return text.strip()

    # Fences inside the object belong to string values and stay.
    outside = text[:start] + text[end + 1:]
    if fenced or "```" in outside:
        record_diagnostic(diagnostics, STAGE, "code_fence", "Stripped markdown code fence.")
    if _FENCE_MARKER.sub("", outside).strip():
        record_diagnostic(
            diagnostics,
            STAGE,
            "surrounding_prose",
            "Discarded text outside the outermost JSON object.",
            offset=start,
        )
    return text[start:end + 1]


class ExtractionPhase(PipelinePhase):
    phase_name = STAGE

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        document = extract(str(context.get("raw_text", "")), diagnostics)
        return {"document": document, "diagnostics": diagnostics}
