"""
Tests for the Statement Model.

These tests verify:
1. Each statement kind renders its exact canonical line
2. IDs and free text cannot break a line; confidence is range-checked
   and is the only mutation
3. Event-role relations and temporal states
4. Negation, equivalence and conflicts
5. Time references and RFC 3339 timestamps
6. read_lines() rebuilds what serialize_all() wrote
"""

from datetime import datetime, timedelta, timezone

import pytest

from tosid.errors import ConfidenceRangeError, ValidationError
from tosid.statements import (
    EVENT_ROLES,
    Assertion,
    Confidence,
    Entity,
    Event,
    PartOf,
    Relation,
    StatementKind,
    Temporal,
    TemporalState,
    TimeReference,
    parse_timestamp,
    read_lines,
    serialize,
    serialize_all,
)


SUN = "00B2-SOL-STR-SUN:000-000-000-001"


# =============================================================================
# CANONICAL LINES
# =============================================================================

class TestCanonicalLines:
    """Test the exact text of each statement kind."""

    def test_entity_line(self):
        entity = Entity("E1001", "Sun", SUN)

        assert entity.to_line() == f"DEF_ENTITY #E1001 [Sun] type=[{SUN}]"

    def test_entity_without_classification(self):
        assert Entity("E1", "Thing").to_line() == "DEF_ENTITY #E1 [Thing] type=[]"

    def test_event_line(self):
        event = Event("V1001", "LANDING", "11B3-EVT-TRV-LND")

        assert event.to_line() == "DEF_EVENT #V1001 [LANDING] type=[11B3-EVT-TRV-LND]"

    def test_relation_line(self):
        relation = Relation("R1001", "ORBITS", "SPATIAL_RELATIONSHIP")

        assert relation.to_line() == "DEF_RELATION #R1001 [ORBITS] type=[SPATIAL_RELATIONSHIP]"

    def test_assertion_line(self):
        assertion = Assertion("F1001", "E1002", "R1001", "E1001")

        assert assertion.to_line() == (
            "ASSERT #F1001 subject=[#E1002] relation=[#R1001] object=[#E1001]"
        )

    def test_confidence_line(self):
        assertion = Assertion("F1001", "E1002", "R1001", "E1001")
        assertion.set_confidence(0.85, "IAU")

        assert assertion.confidence_line() == "CONFIDENCE #F1001 level=[0.8500] source=[IAU]"

    def test_temporal_line(self):
        temporal = Temporal("F1001", TemporalState.DURING, "T1001")

        assert temporal.to_line() == "TEMPORAL #F1001 state=[DURING] timestamp=[#T1001]"

    def test_part_of_line(self):
        edge = PartOf("E1003", "E1004")

        assert edge.to_line() == "PART_OF #E1003 whole=[#E1004]"
        assert edge.id == "PO_E1003_E1004"

    def test_serialize_is_deterministic(self):
        entity = Entity("E1001", "Sun", SUN)

        assert serialize(entity) == serialize(Entity("E1001", "Sun", SUN))

    def test_kinds(self):
        assert Entity("E1", "x").kind == StatementKind.ENTITY
        assert Event("V1", "x").kind == StatementKind.EVENT
        assert PartOf("a", "b").kind == StatementKind.PART_OF


class TestRequiredIds:
    """Test that statements need their IDs."""

    @pytest.mark.parametrize("factory", [
        lambda: Entity("", "x"),
        lambda: Event("", "x"),
        lambda: Relation("", "x", "T"),
        lambda: Assertion("", "a", "r", "b"),
        lambda: Assertion("F1", "a", "", "b"),
        lambda: Temporal("F1", TemporalState.AFTER, ""),
        lambda: PartOf("a", ""),
    ])
    def test_empty_id_rejected(self, factory):
        with pytest.raises(ValidationError):
            factory()

    @pytest.mark.parametrize("bad_id", ["E 1", "E\t1", "E1\n", "E[1", "E1]"])
    def test_id_characters_rejected(self, bad_id):
        with pytest.raises(ValidationError):
            Entity(bad_id, "x")
        with pytest.raises(ValidationError):
            Assertion("F1", bad_id, "R1", "E2")
        with pytest.raises(ValidationError):
            Temporal("F1", TemporalState.AFTER, bad_id)

    def test_non_string_id_rejected(self):
        with pytest.raises(ValidationError):
            Entity(1001, "x")

    @pytest.mark.parametrize("text", ["Sun]", "[Sun", "Sun\nDEF_ENTITY #E2 [x] type=[]", "Sun\r"])
    def test_text_characters_rejected(self, text):
        with pytest.raises(ValidationError):
            Entity("E1", text)
        with pytest.raises(ValidationError):
            Event("V1", "x", text)
        with pytest.raises(ValidationError):
            Relation("R1", "ORBITS", text)
        with pytest.raises(ValidationError):
            Confidence(0.5, text)

    def test_plain_punctuation_allowed(self):
        entity = Entity("E1", "Halley's Comet (1P), periodic", "")

        assert read_lines([entity.to_line()]) == [entity]


class TestEvent:
    """Test that events are their own statement kind."""

    def test_event_is_not_entity(self):
        event = Event("V1", "x")

        assert not isinstance(event, Entity)
        assert event != Entity("V1", "x")


# =============================================================================
# CONFIDENCE
# =============================================================================

class TestConfidence:
    """Test confidence range checks and attachment."""

    @pytest.mark.parametrize("level", [0.0, 0.5, 1.0])
    def test_valid_levels(self, level):
        assert Confidence(level, "src").level == level

    @pytest.mark.parametrize("level", [-0.01, 1.01, float("nan")])
    def test_out_of_range(self, level):
        with pytest.raises(ConfidenceRangeError):
            Confidence(level)

    @pytest.mark.parametrize("level", ["high", "0.5", None, True, False])
    def test_not_a_number(self, level):
        with pytest.raises(ValidationError):
            Confidence(level)

    def test_integer_level_stored_as_float(self):
        confidence = Confidence(1, "src")

        assert confidence.level == 1.0
        assert isinstance(confidence.level, float)

    def test_failed_set_keeps_previous(self):
        assertion = Assertion("F1", "a", "r", "b")
        assertion.set_confidence(0.5, "first")

        with pytest.raises(ConfidenceRangeError):
            assertion.set_confidence(2.0, "second")

        assert assertion.confidence == Confidence(0.5, "first")

    def test_other_fields_frozen(self):
        assertion = Assertion("F1", "a", "r", "b")

        with pytest.raises(Exception):
            assertion.subject_id = "c"

    def test_confidence_ignored_by_equality(self):
        a = Assertion("F1", "a", "r", "b")
        b = Assertion("F1", "a", "r", "b")
        a.set_confidence(0.9)

        assert a == b


# =============================================================================
# EVENT ROLES AND TEMPORAL STATES
# =============================================================================

class TestEventRoles:
    """Test built-in event-role relations."""

    @pytest.mark.parametrize("role", EVENT_ROLES)
    def test_role_relation(self, role):
        relation = Relation.event_role(role)

        assert relation.id == role
        assert relation.is_event_role
        assert relation.to_line() == f"DEF_RELATION #{role} [{role}] type=[EVENT_ROLE]"

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            Relation.event_role("WITNESS")

    def test_ordinary_relation_is_not_role(self):
        assert not Relation("R1", "ORBITS", "SPATIAL").is_event_role


class TestTemporalStates:
    """Test temporal state handling."""

    def test_state_from_text(self):
        temporal = Temporal("F1", "BEGAN_AT", "T1")

        assert temporal.state is TemporalState.BEGAN_AT

    def test_unknown_state(self):
        with pytest.raises(ValidationError):
            Temporal("F1", "SOMETIME", "T1")


# =============================================================================
# NEGATION
# =============================================================================

class TestNegation:
    """Test negated assertions, equivalence and conflicts."""

    def test_negate_line(self):
        assertion = Assertion("F1", "E1", "R1", "E2", negated=True)

        assert assertion.kind is StatementKind.NEGATION
        assert assertion.to_line() == "NEGATE #F1 subject=[#E1] relation=[#R1] object=[#E2]"

    def test_negation_fixed_after_construction(self):
        assertion = Assertion("F1", "E1", "R1", "E2")

        with pytest.raises(Exception):
            assertion.negated = True

    def test_equivalent_ignores_id_and_confidence(self):
        a = Assertion("F1", "E1", "R1", "E2")
        b = Assertion("F2", "E1", "R1", "E2")
        b.set_confidence(0.3)

        assert a.is_equivalent(b)
        assert not a.conflicts_with(b)

    def test_conflict_needs_opposite_polarity(self):
        a = Assertion("F1", "E1", "R1", "E2")
        b = Assertion("F2", "E1", "R1", "E2", negated=True)

        assert a.conflicts_with(b)
        assert b.conflicts_with(a)
        assert not a.is_equivalent(b)

    def test_different_triples_neither(self):
        a = Assertion("F1", "E1", "R1", "E2")
        b = Assertion("F2", "E2", "R1", "E1", negated=True)

        assert not a.is_equivalent(b)
        assert not a.conflicts_with(b)


# =============================================================================
# TIME REFERENCES
# =============================================================================

class TestTimeReference:
    """Test time reference values and their line."""

    def test_line(self):
        time_ref = TimeReference("T1969", "POINT", datetime(1969, 7, 20, 20, 17, 40))

        assert time_ref.to_line() == "DEF_TIME #T1969 type=[POINT] value=[1969-07-20T20:17:40Z]"

    def test_normalised_to_utc_seconds(self):
        local = datetime(1969, 7, 20, 22, 17, 40, 123456, tzinfo=timezone(timedelta(hours=2)))

        time_ref = TimeReference("T1", "POINT", local)

        assert time_ref.value == datetime(1969, 7, 20, 20, 17, 40, tzinfo=timezone.utc)
        assert time_ref.value.tzinfo is timezone.utc

    def test_value_must_be_datetime(self):
        with pytest.raises(ValidationError):
            TimeReference("T1", "POINT", "1969-07-20T20:17:40Z")

    def test_parse_timestamp(self):
        assert parse_timestamp("2000-01-01T00:00:00Z") == datetime(2000, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp("2000-01-01T02:00:00+02:00") == datetime(
            2000, 1, 1, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("text", ["yesterday", "2000-01-01T00:00:00", ""])
    def test_parse_timestamp_rejects(self, text):
        with pytest.raises(ValidationError):
            parse_timestamp(text)


# =============================================================================
# SERIALIZE / READ
# =============================================================================

class TestSerializeAll:
    """Test multi-statement serialization and reading back."""

    def make_statements(self):
        assertion = Assertion("F1001", "E1002", "R1001", "E1001")
        assertion.set_confidence(0.95, "IAU")
        return [
            Entity("E1001", "Sun", SUN),
            Entity("E1002", "Earth", "00B3-SOL-SYS-ERT:000-000-000-001"),
            Event("V1001", "LANDING", ""),
            Relation("R1001", "ORBITS", "SPATIAL_RELATIONSHIP"),
            assertion,
            Assertion("F1002", "E1001", "R1001", "E1002", negated=True),
            TimeReference("T1001", "POINT", datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)),
            Temporal("F1001", TemporalState.DURING, "T1001"),
            PartOf("E1002", "E1001"),
        ]

    def test_confidence_follows_assertion(self):
        lines = serialize_all(self.make_statements())

        assert len(lines) == 10
        assert lines[4].startswith("ASSERT #F1001")
        assert lines[5] == "CONFIDENCE #F1001 level=[0.9500] source=[IAU]"
        assert lines[6].startswith("NEGATE #F1002")
        assert lines[7] == "DEF_TIME #T1001 type=[POINT] value=[2024-03-01T12:00:00Z]"

    def test_read_lines_rebuilds_statements(self):
        statements = self.make_statements()
        rebuilt = read_lines(serialize_all(statements))

        assert rebuilt == statements
        assert rebuilt[4].confidence == Confidence(0.95, "IAU")
        assert isinstance(rebuilt[2], Event)
        assert rebuilt[5].negated
        assert rebuilt[6].value == statements[6].value

    def test_blank_lines_skipped(self):
        rebuilt = read_lines(["", "DEF_ENTITY #E1 [Thing] type=[]", "   "])

        assert rebuilt == [Entity("E1", "Thing", "")]

    def test_unknown_keyword(self):
        with pytest.raises(ValidationError):
            read_lines(["DEF_THING #X1 [x] type=[]"])

    def test_malformed_line(self):
        with pytest.raises(ValidationError):
            read_lines(["not a statement"])

    def test_missing_attribute(self):
        with pytest.raises(ValidationError):
            read_lines(["ASSERT #F1 subject=[#E1] relation=[#R1]"])

    def test_confidence_without_assertion(self):
        with pytest.raises(ValidationError):
            read_lines(["CONFIDENCE #F9 level=[0.5000] source=[x]"])

    def test_reference_needs_hash(self):
        with pytest.raises(ValidationError):
            read_lines(["PART_OF #E1 whole=[E2]"])

    def test_bad_timestamp(self):
        with pytest.raises(ValidationError):
            read_lines(["DEF_TIME #T1 type=[POINT] value=[someday]"])

    def test_bracket_in_label_cannot_be_written(self):
        """A label that would end the [...] early is refused before it is written."""
        with pytest.raises(ValidationError):
            Entity("E1", "Sun] type=[fake")
