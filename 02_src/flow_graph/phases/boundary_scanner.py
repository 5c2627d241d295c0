"""Boundary scanning phase.

A single left-to-right pass that re-establishes string-literal boundaries in a
candidate document:

* raw control characters (code point < 0x20) inside a string are replaced by
  their JSON escape (``\\n``, ``\\r``, ``\\t`` or ``\\uXXXX``);
* a backslash inside a string protects the next character, which is copied
  verbatim; a raw control character after a backslash is the one exception,
  the pair becomes an escaped backslash plus the escaped control character;
* a string still open at the end of the text is closed.

Text outside string literals is copied unchanged.

A quote that closes a string is always honoured, even when the character after
it is not a valid JSON continuation. Models regularly emit a legitimate string
end followed by a mislabeled delimiter, and treating the quote as content makes
things worse; the occurrence is only reported.
"""

import logging
from typing import Any, Dict, List, Optional

from ..graph_model import Diagnostic
from ..pipeline import PipelinePhase, record_diagnostic

STAGE = "boundary_scanner"

VALID_CONTINUATIONS = frozenset(",}]:")

_NAMED_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def escape_control_character(char: str) -> str:
    named = _NAMED_ESCAPES.get(char)
    if named is not None:
        return named
    return f"\\u{ord(char):04x}"


def is_control_character(char: str) -> bool:
    return ord(char) < 0x20


def rescan(doc: str, diagnostics: Optional[List[Diagnostic]] = None) -> str:
    result: List[str] = []
    in_string = False
    is_escaped = False
    string_start: Optional[int] = None
    escaped_controls = 0

    for offset, char in enumerate(doc):
        if is_escaped:
            is_escaped = False
            if is_control_character(char):
                result[-1] = "\\\\"
                result.append(escape_control_character(char))
                escaped_controls += 1
            else:
                result.append(char)
            continue

        if in_string and char == "\\":
            is_escaped = True
            result.append(char)
            continue

        if char == '"':
            if not in_string:
                in_string = True
                string_start = offset
            else:
                following = doc[offset + 1] if offset + 1 < len(doc) else ""
                if following and following not in VALID_CONTINUATIONS and not following.isspace():
                    record_diagnostic(
                        diagnostics,
                        STAGE,
                        "unexpected_continuation",
                        f"String closed before unexpected character {following!r}.",
                        offset=offset,
                    )
                in_string = False
                string_start = None
            result.append(char)
            continue

        if in_string and is_control_character(char):
            result.append(escape_control_character(char))
            escaped_controls += 1
            continue

        result.append(char)

    if escaped_controls:
        record_diagnostic(
            diagnostics,
            STAGE,
            "control_characters",
            f"Escaped {escaped_controls} raw control character(s) inside strings.",
        )

    if in_string:
        if is_escaped:
            result.append("\\")
        result.append('"')
        record_diagnostic(
            diagnostics,
            STAGE,
            "unterminated_string",
            f"Closed string left open at offset {string_start}.",
            offset=string_start,
            level=logging.WARNING,
        )

    return "".join(result)


class BoundaryScanPhase(PipelinePhase):
    phase_name = STAGE

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        document = rescan(str(context.get("document", "")), diagnostics)
        return {"document": document, "diagnostics": diagnostics}
