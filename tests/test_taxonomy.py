"""
Tests for the Taxonomy Classifier.

These tests verify:
1. Domain / type / scope lookups from the static tables
2. Missing entries render as "Unknown ..." instead of failing
3. Tables cannot be mutated at runtime
4. Advisory semantic warnings
"""

import pytest

from tosid import taxonomy
from tosid.parser import parse


class TestLookups:
    """Test static table lookups."""

    def test_domain_names(self):
        assert taxonomy.domain_name("00") == "Celestial/Natural"
        assert taxonomy.domain_name("10") == "Artificial/Intelligent"

    def test_type_names(self):
        assert taxonomy.type_name("00") == "Physical/Material"
        assert taxonomy.type_name("01") == "Conceptual/Abstract"

    def test_scope_uses_leading_letter(self):
        """Level characters refine the scope without changing its name."""
        assert taxonomy.scope_name("00", "B") == "Stellar Scale"
        assert taxonomy.scope_name("00", "B2") == "Stellar Scale"
        assert taxonomy.scope_name("10", "C1") == "Complex Objects"

    def test_classify_joins_parts(self):
        assert taxonomy.classify("00", "B2") == (
            "Celestial/Natural / Physical/Material / Stellar Scale"
        )

    def test_identifier_classification(self):
        assert parse("10C1-ORG-GOV-USA:NASA").classification() == (
            "Artificial/Intelligent / Physical/Material / Complex Objects"
        )


class TestUnknownEntries:
    """Test placeholders for entries the tables do not define."""

    def test_unknown_domain(self):
        assert taxonomy.domain_name("90") == taxonomy.UNKNOWN_DOMAIN

    def test_unknown_type(self):
        assert taxonomy.type_name("09") == taxonomy.UNKNOWN_TYPE

    def test_unknown_scope_letter(self):
        assert taxonomy.scope_name("01", "F") == taxonomy.UNKNOWN_SCOPE

    def test_unknown_taxonomy_scope(self):
        assert taxonomy.scope_name("55", "A") == taxonomy.UNKNOWN_SCOPE

    def test_empty_inputs(self):
        assert taxonomy.domain_name("") == taxonomy.UNKNOWN_DOMAIN
        assert taxonomy.type_name("0") == taxonomy.UNKNOWN_TYPE
        assert taxonomy.scope_name("00", "") == taxonomy.UNKNOWN_SCOPE

    def test_unknown_code_still_parses(self):
        identifier = parse("55Z-ODD")

        assert identifier.classification() == " / ".join((
            taxonomy.UNKNOWN_DOMAIN,
            taxonomy.UNKNOWN_TYPE,
            taxonomy.UNKNOWN_SCOPE,
        ))

    def test_known_checks(self):
        assert taxonomy.is_known_taxonomy_code("11")
        assert not taxonomy.is_known_taxonomy_code("12")
        assert taxonomy.is_known_scope("00", "F")
        assert not taxonomy.is_known_scope("01", "F")

    def test_scopes_for(self):
        assert taxonomy.scopes_for("01") == ["A", "B", "C", "D", "E"]
        assert taxonomy.scopes_for("99") == []


class TestTablesReadOnly:
    """Test that the tables are process-wide constants."""

    def test_domains_immutable(self):
        with pytest.raises(TypeError):
            taxonomy.TAXONOMY_DOMAINS["2"] = "Other"

    def test_scopes_immutable(self):
        with pytest.raises(TypeError):
            taxonomy.NETMASK_SCOPES["00"]["Z"] = "Other"


class TestSemanticWarnings:
    """Test advisory consistency checks."""

    def test_consistent_code_has_no_warnings(self):
        assert taxonomy.semantic_warnings(parse("00B2-SOL-STR-SUN")) == []

    def test_artificial_token_in_natural_domain(self):
        warnings = taxonomy.semantic_warnings(parse("00C-ART-OBJ"))

        assert len(warnings) == 1
        assert "artificial" in warnings[0]

    def test_natural_token_in_artificial_domain(self):
        warnings = taxonomy.semantic_warnings(parse("10C-NAT-OBJ"))

        assert len(warnings) == 1
        assert "natural" in warnings[0]

    def test_scale_mismatches(self):
        assert taxonomy.semantic_warnings(parse("00F-GAL"))
        assert taxonomy.semantic_warnings(parse("00A-MOL"))
