"""
Identifier value object and Hierarchy Engine.

An Identifier is the parsed form of a TOSID code:

    00B2-SOL-STR-SUN:000-000-000-001
    ^^                                taxonomy_code      "00"
      ^^                              netmask_indicator  "B2"
         ^^^^^^^^^^^^^^^^^^^^^^^^^^^  identifier_body    "SOL-STR-SUN:000-000-000-001"

Hierarchy levels run from least to most specific:

    00
    00B2
    00B2-SOL
    00B2-SOL-STR
    00B2-SOL-STR-SUN
    00B2-SOL-STR-SUN:000-000-000-001   (only when a specific suffix exists)

Containment (parent/child) and pattern matching work on these levels and on
whole tokens, never on raw string prefixes: "00B2-SOL" does not contain
"00B2-SOLAR".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from . import taxonomy
from .errors import GrammarError, ValidationError


WILDCARD = "*"


@dataclass(frozen=True)
class Identifier:
    """
    A parsed TOSID code.

    Immutable; equality is structural over the three fields. Build one with
    `tosid.parser.parse()` or `tosid.parser.create()` so the grammar is
    enforced.
    """
    taxonomy_code: str
    netmask_indicator: str
    identifier_body: str

    def __str__(self) -> str:
        return self.canonical()

    def canonical(self) -> str:
        """Canonical text form; re-parses to an equal Identifier."""
        return f"{self.taxonomy_code}{self.netmask_indicator}-{self.identifier_body}"

    # -------------------------------------------------------------------------
    # Derived parts
    # -------------------------------------------------------------------------

    @property
    def head(self) -> str:
        return self.taxonomy_code + self.netmask_indicator

    @property
    def scope_letter(self) -> str:
        return self.netmask_indicator[0]

    @property
    def scope_level(self) -> str:
        """Netmask characters after the scope letter ("2" in "B2")."""
        return self.netmask_indicator[1:]

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self.identifier_body.split(":", 1)[0].split("-"))

    @property
    def specific_suffix(self) -> Optional[str]:
        _, sep, suffix = self.identifier_body.partition(":")
        return suffix if sep else None

    @property
    def suffix_tokens(self) -> tuple[str, ...]:
        suffix = self.specific_suffix
        if suffix is None:
            return ()
        return tuple(suffix.split("-"))

    def classification(self) -> str:
        """Human-readable "domain / type / scope" description."""
        return taxonomy.classify(self.taxonomy_code, self.netmask_indicator)

    # -------------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------------

    def hierarchy(self) -> list[str]:
        """Ordered hierarchy levels, least specific first."""
        levels = [self.taxonomy_code, self.head]
        categories = self.categories
        for i in range(1, len(categories) + 1):
            levels.append(self.head + "-" + "-".join(categories[:i]))
        if self.specific_suffix is not None:
            levels.append(self.canonical())
        return levels

    def depth(self) -> int:
        return len(self.hierarchy())

    def parent(self) -> Optional[Identifier]:
        """
        The identifier one level up, or None at the top.

        Levels that do not form a complete code (e.g. "00B2") have no
        Identifier, so a single-category code has no parent.
        """
        from .parser import parse

        levels = self.hierarchy()
        if len(levels) <= 1:
            return None
        try:
            return parse(levels[-2])
        except GrammarError:
            return None

    def is_parent_of(self, other: Identifier) -> bool:
        """True if this hierarchy is a strict prefix of the other's."""
        mine = self.hierarchy()
        theirs = other.hierarchy()
        return len(mine) < len(theirs) and theirs[:len(mine)] == mine

    def is_child_of(self, other: Identifier) -> bool:
        return other.is_parent_of(self)

    def is_compatible_with(self, other: Identifier) -> bool:
        return (
            self.taxonomy_code == other.taxonomy_code
            and self.netmask_indicator == other.netmask_indicator
        )

    def matches_pattern(self, pattern: str) -> bool:
        """
        Match against a literal prefix with an optional trailing "*".

        The head ("00B2") is matched character by character, because each
        head character is its own hierarchy step: "0", "00", "00B" and
        "00B2" all cover "00B2-SOL-STR-SUN". Once the pattern contains a
        dash the head must match exactly, and category and suffix tokens
        must match whole tokens: "00B2-SOL" covers "00B2-SOL-STR" but not
        "00B2-SOLAR".

        Raises:
            ValidationError: If "*" appears anywhere but the end
        """
        head, categories, suffix, exact_head = _split_pattern(pattern)

        if exact_head:
            if head != self.head:
                return False
        elif not self.head.startswith(head):
            return False

        own_categories = self.categories
        if suffix is not None:
            if categories != own_categories:
                return False
            return self.suffix_tokens[:len(suffix)] == suffix
        return own_categories[:len(categories)] == categories

    def compare(self, other: Identifier) -> Comparison:
        """Describe how two identifiers relate within the hierarchy."""
        mine = self.hierarchy()
        theirs = other.hierarchy()
        shared = 0
        for a, b in zip(mine, theirs):
            if a != b:
                break
            shared += 1

        if self == other:
            relationship = "identical"
        elif self.is_parent_of(other):
            relationship = "parent"
        elif self.is_child_of(other):
            relationship = "child"
        elif self.is_compatible_with(other):
            relationship = "sibling"
        else:
            relationship = "unrelated"

        differences = []
        if self.taxonomy_code != other.taxonomy_code:
            differences.append(
                f"taxonomy_code: {self.taxonomy_code} != {other.taxonomy_code}"
            )
        if self.netmask_indicator != other.netmask_indicator:
            differences.append(
                f"netmask_indicator: {self.netmask_indicator} != {other.netmask_indicator}"
            )
        if self.identifier_body != other.identifier_body:
            differences.append(
                f"identifier_body: {self.identifier_body} != {other.identifier_body}"
            )

        return Comparison(
            compatible=self.is_compatible_with(other),
            shared_levels=shared,
            relationship=relationship,
            differences=tuple(differences),
        )


@dataclass(frozen=True)
class Comparison:
    """Result of `Identifier.compare()`."""
    compatible: bool
    shared_levels: int
    relationship: str  # identical, parent, child, sibling, unrelated
    differences: tuple[str, ...] = field(default_factory=tuple)


def _split_pattern(
    pattern: str,
) -> tuple[str, tuple[str, ...], Optional[tuple[str, ...]], bool]:
    """
    Split a pattern into (head, category tokens, suffix tokens, exact head).

    The head is exact as soon as the pattern reaches past it with a dash or
    a colon; "00B2-*" therefore does not cover "00B23-SOL".
    """
    literal = pattern[:-1] if pattern.endswith(WILDCARD) else pattern
    if WILDCARD in literal:
        raise ValidationError(
            f"wildcard is only allowed at the end of a pattern: {pattern!r}"
        )
    main, sep, suffix_text = literal.partition(":")
    head, dash, body = main.partition("-")

    body = body.rstrip("-")
    categories = tuple(body.split("-")) if body else ()
    suffix: Optional[tuple[str, ...]] = None
    if sep:
        suffix_text = suffix_text.rstrip("-")
        suffix = tuple(suffix_text.split("-")) if suffix_text else ()
    return head, categories, suffix, bool(dash or sep)


def validate_pattern(pattern: str) -> None:
    """
    Check a match pattern without matching anything.

    Raises:
        ValidationError: If the pattern is not a string or has an inner "*"
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"pattern must be a string, got {type(pattern).__name__}")
    _split_pattern(pattern)
