"""
Tests for the TOSID -> KMAC Converter.

These tests verify:
1. One entity per distinct code with deterministic IDs and labels
2. PART_OF edges only between true hierarchy ancestors
3. A bad code fails the whole batch, naming the code
4. Oversized batches are refused
5. Semantic info extraction
"""

import pytest

from tosid.errors import BatchConversionError, GrammarCause, GrammarError, ValidationError
from tosid.identifier import Identifier
from tosid.integration import default_label, extract_semantic_info, generate_from_hierarchy
from tosid.statements import Entity, PartOf
from tosid.store import SemanticStore


SUN = "00B2-SOL-STR-SUN:000-000-000-001"
EARTH = "00B3-SOL-SYS-ERT:000-000-000-001"
MARS = "00B3-SOL-SYS-MRS:000-000-000-001"
NASA = "10C1-ORG-GOV-USA:NASA"


# =============================================================================
# HIERARCHY CONVERSION
# =============================================================================

class TestGenerateFromHierarchy:
    """Test entity and part-of generation."""

    def test_solar_system_has_no_part_of(self):
        result = generate_from_hierarchy([SUN, EARTH, MARS])

        assert len(result.entities) == 3
        assert result.part_of == []
        assert len(result.statements) == 3

    def test_generated_ids_and_default_labels(self):
        result = generate_from_hierarchy([SUN, EARTH, MARS])

        assert result.entities == [
            Entity("E0001", "SUN", SUN),
            Entity("E0002", "ERT", EARTH),
            Entity("E0003", "MRS", MARS),
        ]

    def test_caller_labels_win(self):
        result = generate_from_hierarchy([SUN, EARTH], labels={EARTH: "Earth"})

        assert [e.label for e in result.entities] == ["SUN", "Earth"]

    def test_reserved_ids_skipped(self):
        result = generate_from_hierarchy([SUN, EARTH], reserved_ids={"E0001", "E0003"})

        assert [e.id for e in result.entities] == ["E0002", "E0004"]

    def test_duplicate_codes_merge(self):
        result = generate_from_hierarchy([SUN, EARTH, SUN])

        assert len(result.entities) == 2
        assert result.entity_for(SUN).id == "E0001"
        assert result.entity_for(NASA) is None

    def test_part_of_from_containment(self):
        codes = ["00B3-SOL", "00B3-SOL-SYS", EARTH]
        result = generate_from_hierarchy(codes)

        assert result.part_of == [
            PartOf("E0002", "E0001"),
            PartOf("E0003", "E0001"),
            PartOf("E0003", "E0002"),
        ]

    def test_part_of_respects_token_boundary(self):
        result = generate_from_hierarchy(["00B2-SOL", "00B2-SOLAR-X"])

        assert result.part_of == []

    def test_statements_load_into_store(self):
        result = generate_from_hierarchy(["00B3-SOL", EARTH, MARS])
        store = SemanticStore.from_statements(result.statements)

        assert store.get_statistics()["part_of"] == 2
        assert [e.label for e in store.find_entities_by_pattern("00B3-SOL-SYS")] == [
            "ERT", "MRS",
        ]

    def test_label_with_bracket_refused(self):
        with pytest.raises(ValidationError):
            generate_from_hierarchy([SUN], labels={SUN: "Sun]"})


class TestDefaultLabel:
    """Test labels for codes the caller did not name."""

    def test_last_category_token(self):
        assert default_label(Identifier("00", "B2", "SOL-STR-SUN:000-000-000-001"), 1) == "SUN"

    def test_placeholder_for_empty_body(self):
        """Only a directly built Identifier can have no category token."""
        assert default_label(Identifier("00", "B2", ""), 1) == "Entity1"
        assert default_label(Identifier("00", "B2", ":X"), 7) == "Entity7"


class TestBatchFailures:
    """Test all-or-nothing batch behavior."""

    def test_bad_code_names_offender(self):
        with pytest.raises(BatchConversionError) as exc_info:
            generate_from_hierarchy([SUN, "00B2", EARTH])

        error = exc_info.value
        assert error.code == "00B2"
        assert error.index == 1
        assert isinstance(error.cause, GrammarError)
        assert error.cause.cause == GrammarCause.SEPARATOR
        assert error.__cause__ is error.cause

    def test_batch_limit(self):
        with pytest.raises(ValidationError):
            generate_from_hierarchy([SUN, EARTH, MARS], max_batch=2)

    def test_empty_batch(self):
        result = generate_from_hierarchy([])

        assert result.entities == []
        assert result.part_of == []


# =============================================================================
# SEMANTIC INFO
# =============================================================================

class TestExtractSemanticInfo:
    """Test flattening a code into a key/value map."""

    def test_sun(self):
        info = extract_semantic_info(SUN)

        assert info == {
            "domain": "Celestial/Natural",
            "type": "Physical/Material",
            "scope": "Stellar Scale",
            "category1": "SOL",
            "category2": "STR",
            "category3": "SUN",
            "specific_identifier": "000-000-000-001",
        }

    def test_no_suffix(self):
        info = extract_semantic_info("10C1-ORG-GOV")

        assert "specific_identifier" not in info
        assert "category3" not in info
        assert info["scope"] == "Complex Objects"

    def test_unknown_entries_omitted(self):
        info = extract_semantic_info("55Z-ODD")

        assert info == {"category1": "ODD"}

    def test_bad_code(self):
        with pytest.raises(GrammarError):
            extract_semantic_info("nonsense")
