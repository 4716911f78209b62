# TOSID / KMAC
# Taxonomic identifiers and the knowledge assertion language

"""
Core invariant: every classification code is parsed through one grammar,
and every statement serializes to exactly one canonical line.

This package provides:
    - Parser & validator for TOSID codes (tosid.parser)
    - Taxonomy classifier tables (tosid.taxonomy)
    - Hierarchy engine on parsed identifiers (tosid.identifier)
    - KMAC statement model and line format (tosid.statements)
    - Semantic store (tosid.store)
    - Code -> statement converter (tosid.integration)
"""

from .errors import (
    BatchConversionError,
    ConfidenceRangeError,
    DuplicateIDError,
    GrammarCause,
    GrammarError,
    NotFoundError,
    TosidError,
    ValidationError,
)
from .identifier import Comparison, Identifier, validate_pattern
from .parser import CodeGenerator, create, is_well_formed, parse, parse_batch, validate_code
from .statements import (
    Assertion,
    Confidence,
    Entity,
    Event,
    PartOf,
    Relation,
    Temporal,
    TemporalState,
    TimeReference,
    read_lines,
    serialize,
    serialize_all,
)
from .store import SemanticStore
from .integration import extract_semantic_info, generate_from_hierarchy

__version__ = "0.1.0"

__all__ = [
    "Assertion",
    "BatchConversionError",
    "CodeGenerator",
    "Comparison",
    "Confidence",
    "ConfidenceRangeError",
    "DuplicateIDError",
    "Entity",
    "Event",
    "GrammarCause",
    "GrammarError",
    "Identifier",
    "NotFoundError",
    "PartOf",
    "Relation",
    "SemanticStore",
    "Temporal",
    "TemporalState",
    "TimeReference",
    "TosidError",
    "ValidationError",
    "create",
    "extract_semantic_info",
    "generate_from_hierarchy",
    "is_well_formed",
    "parse",
    "parse_batch",
    "read_lines",
    "serialize",
    "serialize_all",
    "validate_code",
    "validate_pattern",
]
