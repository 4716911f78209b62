"""
Statement Model for the KMAC assertion language.

A statement is one of a closed set of kinds, each with a fixed attribute
shape and exactly one canonical text line:

    DEF_ENTITY #E1001 [Sun] type=[00B2-SOL-STR-SUN:000-000-000-001]
    DEF_EVENT #V1001 [Moon_Landing] type=[11C1-EVT-HST-LND]
    DEF_RELATION #R1001 [ORBITS] type=[SPATIAL_RELATIONSHIP]
    DEF_TIME #T1001 type=[POINT] value=[1969-07-20T20:17:40Z]
    ASSERT #F1001 subject=[#E1002] relation=[#R1001] object=[#E1001]
    NEGATE #F1002 subject=[#E1003] relation=[#R1001] object=[#E1002]
    CONFIDENCE #F1001 level=[0.9500] source=[IAU]
    TEMPORAL #F1001 state=[DURING] timestamp=[#T1001]
    PART_OF #E1003 whole=[#E1004]

The attribute order and the `key=[value]` / `#ID` syntax are a contract
with external inspectors and must not change. Values are written as-is,
so IDs may not contain whitespace or brackets and free text may not
contain brackets or line breaks; both are refused at construction.

Statements are created once. The only mutation anywhere in the model is
attaching confidence to an Assertion after creation.
"""

from __future__ import annotations

import numbers
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Iterable, Optional, Union

from .errors import ConfidenceRangeError, ValidationError


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

CONFIDENCE_PRECISION = 4

# Built-in relation roles linking events to their participants.
EVENT_ROLES = ("AGENT", "LOCATION", "OCCURRED_AT", "INSTANCE_OF")
EVENT_ROLE_TYPE = "EVENT_ROLE"

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_FORBIDDEN_IN_ID = re.compile(r'[\s\[\]]')
_FORBIDDEN_IN_TEXT = re.compile(r'[\[\]\r\n]')


# =============================================================================
# KINDS
# =============================================================================

class StatementKind(Enum):
    """Line keyword for each statement kind."""
    ENTITY = "DEF_ENTITY"
    EVENT = "DEF_EVENT"
    RELATION = "DEF_RELATION"
    TIME = "DEF_TIME"
    ASSERTION = "ASSERT"
    NEGATION = "NEGATE"
    CONFIDENCE = "CONFIDENCE"
    TEMPORAL = "TEMPORAL"
    PART_OF = "PART_OF"


class TemporalState(Enum):
    POINT_IN_TIME = "POINT_IN_TIME"
    BEGAN_AT = "BEGAN_AT"
    ENDED_AT = "ENDED_AT"
    DURING = "DURING"
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    SIMULTANEOUS = "SIMULTANEOUS"


def _require_id(value: str, what: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be a string, got {type(value).__name__}")
    if not value:
        raise ValidationError(f"{what} is required")
    if _FORBIDDEN_IN_ID.search(value):
        raise ValidationError(
            f"{what} may not contain whitespace or brackets, got {value!r}"
        )


def _require_text(value: str, what: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be a string, got {type(value).__name__}")
    if _FORBIDDEN_IN_TEXT.search(value):
        raise ValidationError(
            f"{what} may not contain brackets or line breaks, got {value!r}"
        )


def _attr(key: str, value: str) -> str:
    return f"{key}=[{value}]"


def _ref(ref_id: str) -> str:
    return f"#{ref_id}"


def _definition_line(kind: StatementKind, ref_id: str, label: str, type_: str) -> str:
    return f"{kind.value} {_ref(ref_id)} [{label}] {_attr('type', type_)}"


# =============================================================================
# DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class Entity:
    """
    A thing in the world.

    `classification` is usually a TOSID code but is not required to be one;
    the store decides whether to validate it.
    """
    id: str
    label: str
    classification: str = ""

    kind: ClassVar[StatementKind] = StatementKind.ENTITY

    def __post_init__(self):
        _require_id(self.id, "entity id")
        _require_text(self.label, "entity label")
        _require_text(self.classification, "entity classification")

    def to_line(self) -> str:
        return _definition_line(self.kind, self.id, self.label, self.classification)


@dataclass(frozen=True)
class Event:
    """A timed occurrence. Same fields as Entity, its own keyword."""
    id: str
    label: str
    classification: str = ""

    kind: ClassVar[StatementKind] = StatementKind.EVENT

    def __post_init__(self):
        _require_id(self.id, "event id")
        _require_text(self.label, "event label")
        _require_text(self.classification, "event classification")

    def to_line(self) -> str:
        return _definition_line(self.kind, self.id, self.label, self.classification)


Definition = Union[Entity, Event]


@dataclass(frozen=True)
class Relation:
    """A named, typed relation that assertions can use."""
    id: str
    label: str
    relation_type: str

    kind: ClassVar[StatementKind] = StatementKind.RELATION

    def __post_init__(self):
        _require_id(self.id, "relation id")
        _require_text(self.label, "relation label")
        _require_text(self.relation_type, "relation type")

    @classmethod
    def event_role(cls, role: str) -> Relation:
        """
        Built-in relation for an event role (AGENT, LOCATION, ...).

        The role name doubles as the relation ID.

        Raises:
            ValidationError: If `role` is not one of EVENT_ROLES
        """
        if role not in EVENT_ROLES:
            raise ValidationError(
                f"unknown event role {role!r}, expected one of {list(EVENT_ROLES)}"
            )
        return cls(id=role, label=role, relation_type=EVENT_ROLE_TYPE)

    @property
    def is_event_role(self) -> bool:
        return self.relation_type == EVENT_ROLE_TYPE and self.id in EVENT_ROLES

    def to_line(self) -> str:
        return _definition_line(self.kind, self.id, self.label, self.relation_type)


@dataclass(frozen=True)
class TimeReference:
    """
    A named point in time that TEMPORAL statements point at.

    The value is kept at whole-second UTC precision, which is exactly what
    the RFC 3339 text form carries. Naive datetimes are taken as UTC.
    """
    id: str
    time_type: str
    value: datetime

    kind: ClassVar[StatementKind] = StatementKind.TIME

    def __post_init__(self):
        _require_id(self.id, "time reference id")
        _require_text(self.time_type, "time reference type")
        if not isinstance(self.value, datetime):
            raise ValidationError(
                f"time reference value must be a datetime, got {type(self.value).__name__}"
            )
        value = self.value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        object.__setattr__(
            self, "value", value.astimezone(timezone.utc).replace(microsecond=0)
        )

    def to_line(self) -> str:
        return (
            f"{self.kind.value} {_ref(self.id)} "
            f"{_attr('type', self.time_type)} "
            f"{_attr('value', self.value.strftime(RFC3339_FORMAT))}"
        )


def parse_timestamp(text: str) -> datetime:
    """
    Parse an RFC 3339 timestamp ("Z" or numeric offset).

    Raises:
        ValidationError: If the text is not a timestamp
    """
    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        value = datetime.fromisoformat(candidate)
    except ValueError:
        raise ValidationError(f"invalid RFC 3339 timestamp {text!r}")
    if value.tzinfo is None:
        raise ValidationError(f"timestamp {text!r} has no UTC offset")
    return value


# =============================================================================
# ASSERTIONS
# =============================================================================

@dataclass(frozen=True)
class Confidence:
    """Certainty in [0.0, 1.0] plus the source it came from."""
    level: float
    source: str = ""

    def __post_init__(self):
        if isinstance(self.level, bool) or not isinstance(self.level, numbers.Real):
            raise ValidationError(
                f"confidence level must be a number, got {self.level!r}"
            )
        if not (0.0 <= self.level <= 1.0):
            raise ConfidenceRangeError(self.level)
        object.__setattr__(self, "level", float(self.level))
        _require_text(self.source, "confidence source")

    def to_line(self, assertion_id: str) -> str:
        return (
            f"{StatementKind.CONFIDENCE.value} {_ref(assertion_id)} "
            f"{_attr('level', f'{self.level:.{CONFIDENCE_PRECISION}f}')} "
            f"{_attr('source', self.source)}"
        )


@dataclass(frozen=True)
class Assertion:
    """
    subject --relation--> object, with optional confidence.

    A negated assertion states that the triple does NOT hold and is written
    with the NEGATE keyword. Negation is fixed at construction.

    Frozen like every other statement, except `set_confidence()`, which is
    the single mutation point in the model.
    """
    id: str
    subject_id: str
    relation_id: str
    object_id: str
    negated: bool = False
    confidence: Optional[Confidence] = field(default=None, compare=False)

    def __post_init__(self):
        _require_id(self.id, "assertion id")
        _require_id(self.subject_id, "assertion subject")
        _require_id(self.relation_id, "assertion relation")
        _require_id(self.object_id, "assertion object")

    @property
    def kind(self) -> StatementKind:
        return StatementKind.NEGATION if self.negated else StatementKind.ASSERTION

    def set_confidence(self, level: float, source: str = "") -> None:
        """
        Attach (or replace) confidence.

        Raises:
            ConfidenceRangeError: If level is outside [0.0, 1.0]
            ValidationError: If level is not a number or source is malformed
        """
        object.__setattr__(self, "confidence", Confidence(level=level, source=source))

    def participants(self) -> tuple[str, str]:
        return (self.subject_id, self.object_id)

    def triple(self) -> tuple[str, str, str]:
        return (self.subject_id, self.relation_id, self.object_id)

    def is_equivalent(self, other: Assertion) -> bool:
        """Same triple, same polarity. IDs and confidence are ignored."""
        return self.triple() == other.triple() and self.negated == other.negated

    def conflicts_with(self, other: Assertion) -> bool:
        """Same triple, opposite polarity."""
        return self.triple() == other.triple() and self.negated != other.negated

    def to_line(self) -> str:
        return (
            f"{self.kind.value} {_ref(self.id)} "
            f"{_attr('subject', _ref(self.subject_id))} "
            f"{_attr('relation', _ref(self.relation_id))} "
            f"{_attr('object', _ref(self.object_id))}"
        )

    def confidence_line(self) -> Optional[str]:
        if self.confidence is None:
            return None
        return self.confidence.to_line(self.id)


@dataclass(frozen=True)
class Temporal:
    """Qualifies when an assertion holds, relative to a time reference."""
    assertion_id: str
    state: TemporalState
    time_id: str

    kind: ClassVar[StatementKind] = StatementKind.TEMPORAL

    def __post_init__(self):
        _require_id(self.assertion_id, "temporal assertion id")
        _require_id(self.time_id, "temporal time reference")
        if not isinstance(self.state, TemporalState):
            object.__setattr__(self, "state", temporal_state(self.state))

    def to_line(self) -> str:
        return (
            f"{self.kind.value} {_ref(self.assertion_id)} "
            f"{_attr('state', self.state.value)} "
            f"{_attr('timestamp', _ref(self.time_id))}"
        )


@dataclass(frozen=True)
class PartOf:
    """`part_id` is a component of `whole_id`."""
    part_id: str
    whole_id: str

    kind: ClassVar[StatementKind] = StatementKind.PART_OF

    def __post_init__(self):
        _require_id(self.part_id, "part id")
        _require_id(self.whole_id, "whole id")

    @property
    def id(self) -> str:
        return f"PO_{self.part_id}_{self.whole_id}"

    def to_line(self) -> str:
        return f"{self.kind.value} {_ref(self.part_id)} {_attr('whole', _ref(self.whole_id))}"


Statement = Union[Entity, Event, Relation, TimeReference, Assertion, Temporal, PartOf]


def temporal_state(value: str) -> TemporalState:
    """
    Raises:
        ValidationError: If value is not a TemporalState name
    """
    try:
        return TemporalState(value)
    except ValueError:
        raise ValidationError(
            f"invalid temporal state {value!r}, "
            f"expected one of {[s.value for s in TemporalState]}"
        )


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize(statement: Statement) -> str:
    """Canonical line for one statement (confidence not included)."""
    return statement.to_line()


def serialize_all(statements: Iterable[Statement]) -> list[str]:
    """
    Lines for a statement sequence.

    Each assertion carrying confidence is followed directly by its
    CONFIDENCE line.
    """
    lines: list[str] = []
    for statement in statements:
        lines.append(statement.to_line())
        if isinstance(statement, Assertion):
            confidence = statement.confidence_line()
            if confidence:
                lines.append(confidence)
    return lines


_LINE = re.compile(r'(?P<keyword>[A-Z_]+) #(?P<id>\S+)(?: \[(?P<label>[^\]]*)\])?(?P<attrs>.*)')
_ATTR = re.compile(r' (?P<key>[a-z]+)=\[(?P<value>[^\]]*)\]')


def _parse_attrs(text: str, line: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    pos = 0
    for match in _ATTR.finditer(text):
        if match.start() != pos:
            break
        attrs[match.group("key")] = match.group("value")
        pos = match.end()
    if pos != len(text):
        raise ValidationError(f"malformed attributes in line: {line!r}")
    return attrs


def _deref(value: str, line: str) -> str:
    if not value.startswith("#"):
        raise ValidationError(f"expected '#ID' reference in line: {line!r}")
    return value[1:]


def read_lines(lines: Iterable[str]) -> list[Statement]:
    """
    Rebuild statements from canonical lines (inverse of `serialize_all`).

    Blank lines are skipped. A CONFIDENCE line attaches to the most recent
    assertion with the same ID.

    Raises:
        ValidationError: On an unknown keyword, malformed attributes, or a
            CONFIDENCE line with no preceding assertion
        ConfidenceRangeError: On an out-of-range confidence level
    """
    statements: list[Statement] = []
    assertions: dict[str, Assertion] = {}

    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        match = _LINE.fullmatch(line)
        if not match:
            raise ValidationError(f"unrecognised statement line: {line!r}")

        keyword = match.group("keyword")
        ref_id = match.group("id")
        label = match.group("label")
        attrs = _parse_attrs(match.group("attrs"), line)

        try:
            kind = StatementKind(keyword)
        except ValueError:
            raise ValidationError(f"unknown statement keyword {keyword!r}")

        try:
            if kind is StatementKind.ENTITY:
                statements.append(Entity(ref_id, label or "", attrs["type"]))
            elif kind is StatementKind.EVENT:
                statements.append(Event(ref_id, label or "", attrs["type"]))
            elif kind is StatementKind.RELATION:
                statements.append(Relation(ref_id, label or "", attrs["type"]))
            elif kind is StatementKind.TIME:
                statements.append(TimeReference(
                    ref_id, attrs["type"], parse_timestamp(attrs["value"])
                ))
            elif kind in (StatementKind.ASSERTION, StatementKind.NEGATION):
                assertion = Assertion(
                    id=ref_id,
                    subject_id=_deref(attrs["subject"], line),
                    relation_id=_deref(attrs["relation"], line),
                    object_id=_deref(attrs["object"], line),
                    negated=kind is StatementKind.NEGATION,
                )
                assertions[ref_id] = assertion
                statements.append(assertion)
            elif kind is StatementKind.CONFIDENCE:
                if ref_id not in assertions:
                    raise ValidationError(
                        f"CONFIDENCE for unknown assertion #{ref_id}"
                    )
                try:
                    level = float(attrs["level"])
                except ValueError:
                    raise ValidationError(f"invalid confidence level in line: {line!r}")
                assertions[ref_id].set_confidence(level, attrs["source"])
            elif kind is StatementKind.TEMPORAL:
                statements.append(Temporal(
                    assertion_id=ref_id,
                    state=temporal_state(attrs["state"]),
                    time_id=_deref(attrs["timestamp"], line),
                ))
            elif kind is StatementKind.PART_OF:
                statements.append(PartOf(ref_id, _deref(attrs["whole"], line)))
        except KeyError as e:
            raise ValidationError(f"missing attribute {e.args[0]!r} in line: {line!r}")

    return statements
