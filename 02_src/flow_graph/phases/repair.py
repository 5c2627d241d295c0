"""Parse-and-repair phase powered by a bounded LangGraph loop."""

import json
import logging
import operator
import re
from typing import Annotated, Any, Dict, List, Optional

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from ..errors import UnrecoverableSyntaxError
from ..graph_model import Diagnostic
from ..pipeline import PipelinePhase, record_diagnostic
from .boundary_scanner import escape_control_character

STAGE = "repair"

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_WINDOW_RADIUS = 50

_RAW_CONTROL = re.compile(r"[\x00-\x1f]")
_TRAILING_COMMA = re.compile(r",(?:\s*,)*(\s*[}\]])")


class RepairState(TypedDict, total=False):
    document: str
    attempts: int
    max_attempts: int
    window_radius: int
    parsed: bool
    value: Any
    error_message: str
    error_position: Optional[int]
    stalled: bool
    diagnostics: Annotated[List[Diagnostic], operator.add]


def _escape_controls(window: str) -> str:
    return _RAW_CONTROL.sub(lambda match: escape_control_character(match.group(0)), window)


def _drop_trailing_commas(window: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", window)


def repair_window(document: str, position: int, message: str, radius: int) -> str:
    """Apply the fixes matching ``message`` to the text around ``position`` only."""
    start = max(0, position - radius)
    end = min(len(document), position + radius)
    window = document[start:end]

    lowered = message.lower()
    if "control character" in lowered:
        window = _escape_controls(window)
    if any(hint in lowered for hint in ("trailing comma", "expecting value", "expecting property name")):
        window = _drop_trailing_commas(window)

    return document[:start] + window + document[end:]


class ParseRepairLoop:
    """Attempts ``json.loads``; on failure patches a window around the error offset."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_radius: int = DEFAULT_WINDOW_RADIUS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._window_radius = window_radius
        self._workflow = self._build_workflow()

    def run(self, document: str, diagnostics: Optional[List[Diagnostic]] = None) -> Any:
        result_state = self._workflow.invoke(
            {
                "document": document,
                "attempts": 0,
                "max_attempts": self._max_attempts,
                "window_radius": self._window_radius,
                "parsed": False,
                "error_message": "",
                "error_position": None,
                "stalled": False,
                "diagnostics": [],
            },
            # parse + repair per attempt, plus slack for the final hop to END
            {"recursion_limit": 2 * self._max_attempts + 5},
        )
        if diagnostics is not None:
            diagnostics.extend(result_state.get("diagnostics", []))

        if result_state.get("parsed"):
            return result_state.get("value")
        raise UnrecoverableSyntaxError(
            last_message=result_state.get("error_message", ""),
            attempts=result_state.get("attempts", 0),
        )

    def _build_workflow(self):
        graph = StateGraph(RepairState)
        graph.add_node("parse", self._parse)
        graph.add_node("repair", self._repair)
        graph.add_edge(START, "parse")
        graph.add_conditional_edges("parse", self._after_parse, {"repair": "repair", "end": END})
        graph.add_conditional_edges("repair", self._after_repair, {"parse": "parse", "end": END})
        return graph.compile()

    @staticmethod
    def _parse(state: RepairState) -> Dict[str, Any]:
        attempts = state.get("attempts", 0) + 1
        try:
            value = json.loads(state["document"])
        except json.JSONDecodeError as error:
            return {
                "attempts": attempts,
                "parsed": False,
                "error_message": str(error),
                "error_position": error.pos,
            }
        except (TypeError, ValueError, RecursionError) as error:
            return {
                "attempts": attempts,
                "parsed": False,
                "error_message": str(error),
                "error_position": None,
            }
        diagnostics: List[Diagnostic] = []
        if attempts > 1:
            record_diagnostic(
                diagnostics, STAGE, "parsed_after_repair", f"Parsed on attempt {attempts}."
            )
        return {"attempts": attempts, "parsed": True, "value": value, "diagnostics": diagnostics}

    @staticmethod
    def _after_parse(state: RepairState) -> str:
        if state.get("parsed"):
            return "end"
        if state.get("error_position") is None:
            return "end"
        if state.get("attempts", 0) >= state["max_attempts"]:
            return "end"
        return "repair"

    @staticmethod
    def _repair(state: RepairState) -> Dict[str, Any]:
        document = state["document"]
        position = int(state["error_position"] or 0)
        message = state.get("error_message", "")
        patched = repair_window(document, position, message, state["window_radius"])

        diagnostics: List[Diagnostic] = []
        if patched == document:
            record_diagnostic(
                diagnostics,
                STAGE,
                "no_repair",
                f"No targeted fix applies to: {message}",
                offset=position,
                level=logging.WARNING,
            )
            return {"stalled": True, "diagnostics": diagnostics}

        record_diagnostic(
            diagnostics,
            STAGE,
            "targeted_fix",
            f"Patched window around offset {position}: {message}",
            offset=position,
        )
        return {"document": patched, "diagnostics": diagnostics}

    @staticmethod
    def _after_repair(state: RepairState) -> str:
        return "end" if state.get("stalled") else "parse"


def parse_with_repair(
    doc: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    window_radius: int = DEFAULT_WINDOW_RADIUS,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Any:
    return ParseRepairLoop(max_attempts=max_attempts, window_radius=window_radius).run(
        doc, diagnostics
    )


class ParseRepairPhase(PipelinePhase):
    phase_name = STAGE

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_radius: int = DEFAULT_WINDOW_RADIUS,
    ) -> None:
        self._loop = ParseRepairLoop(max_attempts=max_attempts, window_radius=window_radius)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        value = self._loop.run(str(context.get("document", "")), diagnostics)
        return {"parsed_value": value, "diagnostics": diagnostics}
