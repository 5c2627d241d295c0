"""Pipeline phases for flow graph recovery."""

from .boundary_scanner import BoundaryScanPhase, rescan
from .extraction import ExtractionPhase, extract
from .normalizer import NormalizationPhase, normalize
from .repair import ParseRepairLoop, ParseRepairPhase, parse_with_repair
from .sanitizer import SanitizationPhase, sanitize
from .semantics import SemanticValidationPhase, validate_semantics
from .structure import StructureValidationPhase, validate_structure

__all__ = [
    "ExtractionPhase",
    "SanitizationPhase",
    "BoundaryScanPhase",
    "ParseRepairPhase",
    "ParseRepairLoop",
    "StructureValidationPhase",
    "NormalizationPhase",
    "SemanticValidationPhase",
    "extract",
    "sanitize",
    "rescan",
    "parse_with_repair",
    "validate_structure",
    "normalize",
    "validate_semantics",
]
