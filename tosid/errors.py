"""
Error taxonomy for TOSID / KMAC.

Every failure the library can produce is one of the exceptions below.
None of them are raised for programming mistakes; they describe bad input
or a reference that does not resolve.

    GrammarError         — a code string is malformed (with a GrammarCause)
    ValidationError      — well-formed pieces in an invalid combination
    NotFoundError        — a referenced entity/relation/assertion is absent
    ConfidenceRangeError — a confidence level outside [0.0, 1.0]
    DuplicateIDError     — re-adding an ID that already exists in a store
    BatchConversionError — a converter batch failed on one of its codes
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class GrammarCause(Enum):
    """Which segment of a code failed the grammar."""
    TAXONOMY = "taxonomy"      # not exactly two ASCII digits
    NETMASK = "netmask"        # missing or non-alphanumeric netmask segment
    SEPARATOR = "separator"    # no dash between head and body
    BODY = "body"              # empty, malformed or too many category tokens
    SUFFIX = "suffix"          # colon present but specific suffix malformed


class TosidError(Exception):
    """Base class for all TOSID / KMAC errors."""
    pass


class GrammarError(TosidError):
    """Raised when a code string does not follow the identifier grammar."""

    def __init__(self, cause: GrammarCause, reason: str, code: Optional[str] = None):
        self.cause = cause
        self.reason = reason
        self.code = code
        super().__init__(f"[{cause.value}] {reason}")


class ValidationError(TosidError):
    """
    Raised when individually valid pieces do not form a valid whole.

    `cause` is set when the failure maps onto an identifier segment
    (component validation in `create()`).
    """

    def __init__(self, reason: str, cause: Optional[GrammarCause] = None):
        self.reason = reason
        self.cause = cause
        if cause is not None:
            super().__init__(f"[{cause.value}] {reason}")
        else:
            super().__init__(reason)


class NotFoundError(TosidError):
    """Raised when a referenced ID is not present."""

    def __init__(self, kind: str, ref_id: str, role: Optional[str] = None):
        self.kind = kind
        self.ref_id = ref_id
        self.role = role
        if role:
            super().__init__(f"{role} {kind} not found: {ref_id}")
        else:
            super().__init__(f"{kind} not found: {ref_id}")


class ConfidenceRangeError(TosidError):
    """Raised when a confidence level is outside [0.0, 1.0]."""

    def __init__(self, level: float):
        self.level = level
        super().__init__(f"confidence level must be in [0.0, 1.0], got {level}")


class DuplicateIDError(TosidError):
    """Raised when an ID is added to a store twice."""

    def __init__(self, kind: str, ref_id: str):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"{kind} ID already exists: {ref_id}")


class BatchConversionError(TosidError):
    """
    Raised when one code in a converter batch fails.

    The original error is kept as `cause` (and as `__cause__`), so callers
    can still inspect e.g. the GrammarCause of the offending code.
    """

    def __init__(self, code: str, index: int, cause: TosidError):
        self.code = code
        self.index = index
        self.cause = cause
        super().__init__(f"invalid code {code!r} at position {index}: {cause}")
