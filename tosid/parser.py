"""
Code Parser & Validator.

Grammar of a TOSID code:

    DD N+ - T1[-T2[-T3]] [: S1[-S2...]]

    DD   exactly two ASCII digits                 (taxonomy code)
    N+   one or more ASCII letters/digits         (netmask indicator)
    T    1 to MAX_CATEGORY_TOKENS alnum tokens    (category tokens)
    S    one or more alnum tokens after a colon   (specific suffix)

The netmask runs up to the first dash, so "00B2-SOL-STR-SUN" has netmask
"B2" and body "SOL-STR-SUN". Tokens never contain dashes themselves.

Two entry points apply the same rules:
    parse(code)                   — text in, GrammarError on failure
    create(taxonomy, netmask, body) — components in, ValidationError on failure

CodeGenerator hands out sequential codes under a fixed, validated prefix.

Failures always name the segment that broke (GrammarCause). Nothing in
this module raises anything other than GrammarError / ValidationError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from . import taxonomy
from .errors import GrammarCause, GrammarError, ValidationError
from .identifier import Identifier


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

MAX_CATEGORY_TOKENS = 3

_DIGITS = re.compile(r'[0-9]{2}')
_ALNUM = re.compile(r'[A-Za-z0-9]+')

Problem = tuple[GrammarCause, str]


# =============================================================================
# SEGMENT CHECKS
# =============================================================================

def _taxonomy_problem(taxonomy_code: str) -> Optional[Problem]:
    if len(taxonomy_code) != 2:
        return (
            GrammarCause.TAXONOMY,
            f"taxonomy code must be exactly 2 digits, got {taxonomy_code!r}",
        )
    if not _DIGITS.fullmatch(taxonomy_code):
        return (
            GrammarCause.TAXONOMY,
            f"taxonomy code must be ASCII digits, got {taxonomy_code!r}",
        )
    return None


def _netmask_problem(netmask_indicator: str) -> Optional[Problem]:
    if not netmask_indicator:
        return (GrammarCause.NETMASK, "netmask indicator is missing")
    if not _ALNUM.fullmatch(netmask_indicator):
        return (
            GrammarCause.NETMASK,
            f"netmask indicator must be ASCII letters/digits, got {netmask_indicator!r}",
        )
    return None


def _body_problem(
    identifier_body: str,
    max_tokens: int = MAX_CATEGORY_TOKENS,
) -> Optional[Problem]:
    main, sep, suffix = identifier_body.partition(":")

    if not main:
        return (GrammarCause.BODY, "identifier body is empty")

    tokens = main.split("-")
    if len(tokens) > max_tokens:
        return (
            GrammarCause.BODY,
            f"identifier body has {len(tokens)} category tokens, maximum is {max_tokens}",
        )
    for token in tokens:
        if not _ALNUM.fullmatch(token):
            return (
                GrammarCause.BODY,
                f"malformed category token {token!r} in {main!r}",
            )

    if sep:
        if not suffix:
            return (GrammarCause.SUFFIX, "specific suffix is empty after ':'")
        for token in suffix.split("-"):
            if not _ALNUM.fullmatch(token):
                return (
                    GrammarCause.SUFFIX,
                    f"malformed suffix token {token!r} in {suffix!r}",
                )

    return None


# =============================================================================
# PARSE / CREATE
# =============================================================================

def parse(code: str) -> Identifier:
    """
    Parse a code string into an Identifier.

    Raises:
        GrammarError: With the cause of the first failing segment
    """
    if not isinstance(code, str):
        raise GrammarError(
            GrammarCause.TAXONOMY,
            f"code must be a string, got {type(code).__name__}",
        )

    problem = _taxonomy_problem(code[:2])
    if problem:
        raise GrammarError(*problem, code=code)

    rest = code[2:]
    dash = rest.find("-")
    netmask = rest if dash < 0 else rest[:dash]

    problem = _netmask_problem(netmask)
    if problem:
        raise GrammarError(*problem, code=code)

    if dash < 0:
        raise GrammarError(
            GrammarCause.SEPARATOR,
            "missing '-' between netmask and identifier body",
            code=code,
        )

    body = rest[dash + 1:]
    problem = _body_problem(body)
    if problem:
        raise GrammarError(*problem, code=code)

    return Identifier(
        taxonomy_code=code[:2],
        netmask_indicator=netmask,
        identifier_body=body,
    )


def create(taxonomy_code: str, netmask_indicator: str, identifier_body: str) -> Identifier:
    """
    Build an Identifier from pre-split components.

    Raises:
        ValidationError: With the cause of the first failing component
    """
    for value, cause, what in (
        (taxonomy_code, GrammarCause.TAXONOMY, "taxonomy code"),
        (netmask_indicator, GrammarCause.NETMASK, "netmask indicator"),
        (identifier_body, GrammarCause.BODY, "identifier body"),
    ):
        if not isinstance(value, str):
            raise ValidationError(
                f"{what} must be a string, got {type(value).__name__}", cause=cause
            )

    for problem in (
        _taxonomy_problem(taxonomy_code),
        _netmask_problem(netmask_indicator),
        _body_problem(identifier_body),
    ):
        if problem:
            cause, reason = problem
            raise ValidationError(reason, cause=cause)

    return Identifier(
        taxonomy_code=taxonomy_code,
        netmask_indicator=netmask_indicator,
        identifier_body=identifier_body,
    )


def is_well_formed(code: str) -> bool:
    """True if `code` parses."""
    return validate_code(code).valid


# =============================================================================
# CODE GENERATION
# =============================================================================

GENERATED_SUFFIX_TAIL = "000-000-001"


class CodeGenerator:
    """
    Issues sequential codes under one fixed prefix.

    generate() yields `<base>:001-000-000-001`, `<base>:002-000-000-001`,
    and so on. The counter is per generator and not thread-safe; share one
    generator between threads only behind a lock.

    Example:
        >>> gen = CodeGenerator("00", "B3", "SOL-SYS-PLN")
        >>> gen.generate().canonical()
        '00B3-SOL-SYS-PLN:001-000-000-001'
    """

    def __init__(self, taxonomy_code: str, netmask_indicator: str, base_identifier: str):
        """
        Raises:
            ValidationError: If a component is malformed, the base already
                carries a suffix, or the netmask has no known scope
        """
        if isinstance(base_identifier, str) and ":" in base_identifier:
            raise ValidationError(
                f"base identifier must not carry a suffix, got {base_identifier!r}",
                cause=GrammarCause.SUFFIX,
            )
        create(taxonomy_code, netmask_indicator, base_identifier)
        if not taxonomy.is_known_scope(taxonomy_code, netmask_indicator):
            raise ValidationError(
                f"netmask {netmask_indicator!r} has no known scope under "
                f"taxonomy {taxonomy_code!r}, expected one of {taxonomy.scopes_for(taxonomy_code)}",
                cause=GrammarCause.NETMASK,
            )

        self.taxonomy_code = taxonomy_code
        self.netmask_indicator = netmask_indicator
        self.base_identifier = base_identifier
        self.counter = 1

    def generate(self) -> Identifier:
        """Next code in sequence. The counter only advances on success."""
        identifier = self.generate_with_suffix(f"{self.counter:03d}-{GENERATED_SUFFIX_TAIL}")
        self.counter += 1
        return identifier

    def generate_with_suffix(self, suffix: str) -> Identifier:
        """
        Code with a caller-chosen suffix. Does not touch the counter.

        Raises:
            ValidationError: If the suffix is malformed
        """
        if not isinstance(suffix, str):
            raise ValidationError(
                f"suffix must be a string, got {type(suffix).__name__}",
                cause=GrammarCause.SUFFIX,
            )
        return create(
            self.taxonomy_code,
            self.netmask_indicator,
            f"{self.base_identifier}:{suffix}",
        )

    def reset(self) -> None:
        self.counter = 1

    def set_counter(self, value: int) -> None:
        """
        Raises:
            ValidationError: If value is not a positive integer
        """
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"counter must be a positive integer, got {value!r}")
        self.counter = value


# =============================================================================
# NON-RAISING GATES
# =============================================================================

@dataclass
class CodeCheck:
    """Result of checking a single code. Exactly one of identifier/error is set."""
    valid: bool
    identifier: Optional[Identifier] = None
    error: Optional[GrammarError] = None


def validate_code(code: str) -> CodeCheck:
    """
    Check a code without raising.

    Returns:
        CodeCheck with either valid=True and the Identifier, or
        valid=False and the GrammarError
    """
    try:
        return CodeCheck(valid=True, identifier=parse(code))
    except GrammarError as e:
        return CodeCheck(valid=False, error=e)


@dataclass
class BatchParseResult:
    """Result of parsing many codes independently."""
    total_codes: int
    parsed: list[Identifier] = field(default_factory=list)
    rejected: list[GrammarError] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total_codes == 0:
            return 0.0
        return len(self.parsed) / self.total_codes


def parse_batch(codes: Iterable[str]) -> BatchParseResult:
    """
    Parse a batch of codes.

    Each code is processed independently; failures are collected in
    `rejected` and do not affect other codes.
    """
    codes = list(codes)
    result = BatchParseResult(total_codes=len(codes))

    for code in codes:
        check = validate_code(code)
        if check.valid and check.identifier:
            result.parsed.append(check.identifier)
        elif check.error:
            result.rejected.append(check.error)

    return result
