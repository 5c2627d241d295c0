"""Sanitization phase: ordered text-level fixes for common model artifacts."""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..graph_model import Diagnostic
from ..pipeline import PipelinePhase, record_diagnostic

STAGE = "sanitizer"

URL_PLACEHOLDER_PATH = "//example.com"

_FULLWIDTH_QUOTES = re.compile("[\\u201c\\u201d]")
_DOUBLE_COLON = re.compile(r'"\s*:(?:\s*:)+')
_ELLIPSIS = re.compile(r"\.{3,}")
_STRING_OR_COMMENT = re.compile(r'"(?:[^"\\]|\\.)*"|//[^\r\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(?:\s*,)*(\s*[}\]])")
# A line break right after the scheme, e.g. "https:\n  //host/path".
_BROKEN_URL = re.compile(r'(https?:/{0,2})[ \t]*[\r\n]\s*(?=[^"}\]\s])')
_TRUNCATED_URL_IN_STRING = re.compile(r'(https?:)\s*(")')
_TRUNCATED_URL_AT_TERMINATOR = re.compile(r"(https?:)\s*([}\]])")
_EXOTIC_SPACES = re.compile(
    "[\\u00a0\\u1680\\u180e\\u2000-\\u200b\\u202f\\u205f\\u3000\\ufeff]"
)


def _strip_comment(match: "re.Match[str]") -> str:
    token = match.group(0)
    return token if token.startswith('"') else ""


def _fix_broken_urls(doc: str) -> str:
    return _BROKEN_URL.sub(r"\g<1>", doc)


def _string_interior(doc: str) -> List[bool]:
    """Flag each offset that lies inside a double-quoted string literal."""
    interior: List[bool] = []
    in_string = False
    is_escaped = False
    for char in doc:
        interior.append(in_string)
        if is_escaped:
            is_escaped = False
        elif in_string and char == "\\":
            is_escaped = True
        elif char == '"':
            in_string = not in_string
    return interior


def _fill_url_path(doc: str, pattern: "re.Pattern[str]", closing: str) -> str:
    interior = _string_interior(doc)

    def fill(match: "re.Match[str]") -> str:
        # A bare scheme outside a string is left alone; a placeholder there
        # would read as a comment on the next pass.
        if not interior[match.start()]:
            return match.group(0)
        return f"{match.group(1)}{URL_PLACEHOLDER_PATH}{closing}{match.group(2)}"

    return pattern.sub(fill, doc)


def _fix_truncated_urls(doc: str) -> str:
    doc = _fill_url_path(doc, _TRUNCATED_URL_IN_STRING, "")
    # The closing quote was lost along with the path.
    return _fill_url_path(doc, _TRUNCATED_URL_AT_TERMINATOR, '"')


SanitizerStep = Tuple[str, str, Callable[[str], str]]

SANITIZER_STEPS: List[SanitizerStep] = [
    ("fullwidth_quotes", "Replaced full-width quotation marks.", lambda doc: _FULLWIDTH_QUOTES.sub('"', doc)),
    ("unicode_spaces", "Replaced non-standard whitespace.", lambda doc: _EXOTIC_SPACES.sub(" ", doc)),
    ("double_colon", "Collapsed repeated colon after a key.", lambda doc: _DOUBLE_COLON.sub('":', doc)),
    ("ellipsis", "Removed ellipsis placeholder.", lambda doc: _ELLIPSIS.sub("", doc)),
    ("comments", "Stripped comments.", lambda doc: _STRING_OR_COMMENT.sub(_strip_comment, doc)),
    ("trailing_comma", "Removed trailing comma.", lambda doc: _TRAILING_COMMA.sub(r"\1", doc)),
    ("broken_url", "Joined URL split across lines.", _fix_broken_urls),
    ("truncated_url", "Filled in URL with no path.", _fix_truncated_urls),
]


def sanitize(doc: str, diagnostics: Optional[List[Diagnostic]] = None) -> str:
    for code, message, step in SANITIZER_STEPS:
        fixed = step(doc)
        if fixed != doc:
            record_diagnostic(diagnostics, STAGE, code, message)
            doc = fixed
    return doc


class SanitizationPhase(PipelinePhase):
    phase_name = STAGE

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        diagnostics: List[Diagnostic] = []
        document = sanitize(str(context.get("document", "")), diagnostics)
        return {"document": document, "diagnostics": diagnostics}
