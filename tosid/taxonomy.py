"""
Taxonomy Classifier — static lookup tables for TOSID heads.

A code's head is `taxonomy_code + netmask_indicator`, e.g. "00B2":

    0   domain digit   -> TAXONOMY_DOMAINS
    0   type digit     -> TAXONOMY_TYPES
    B   scope letter   -> NETMASK_SCOPES[taxonomy_code]
    2   scope level    (free-form refinement, not looked up)

Classification is advisory. Missing table entries render as an explicit
"Unknown ..." placeholder instead of failing.

The tables are module-level constants built once at import time and are
never mutated.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .identifier import Identifier


# =============================================================================
# STATIC TABLES
# =============================================================================

TAXONOMY_DOMAINS = MappingProxyType({
    "0": "Celestial/Natural",
    "1": "Artificial/Intelligent",
})

TAXONOMY_TYPES = MappingProxyType({
    "0": "Physical/Material",
    "1": "Conceptual/Abstract",
})

NETMASK_SCOPES = MappingProxyType({
    "00": MappingProxyType({  # Natural material
        "A": "Cosmic Scale",
        "B": "Stellar Scale",
        "C": "Planetary Scale",
        "D": "Regional Scale",
        "E": "Local Scale",
        "F": "Microscopic Scale",
    }),
    "01": MappingProxyType({  # Natural conceptual
        "A": "Universal Laws",
        "B": "Systemic Principles",
        "C": "Historical Events",
        "D": "Cyclic Phenomena",
        "E": "Emergent Patterns",
    }),
    "10": MappingProxyType({  # Artificial material
        "A": "Megastructures",
        "B": "Buildings",
        "C": "Complex Objects",
        "D": "Tools/Devices",
        "E": "Components",
        "F": "Manufactured Materials",
    }),
    "11": MappingProxyType({  # Artificial conceptual
        "A": "Civilizational Systems",
        "B": "Organized Knowledge",
        "C": "Cultural Expressions",
        "D": "Designed Processes",
        "E": "Linguistic Constructs",
    }),
})

UNKNOWN_DOMAIN = "Unknown Domain"
UNKNOWN_TYPE = "Unknown Type"
UNKNOWN_SCOPE = "Unknown Scope"

CLASSIFICATION_SEPARATOR = " / "


# =============================================================================
# LOOKUPS
# =============================================================================

def domain_name(taxonomy_code: str) -> str:
    """Name of the domain selected by the first taxonomy digit."""
    if not taxonomy_code:
        return UNKNOWN_DOMAIN
    return TAXONOMY_DOMAINS.get(taxonomy_code[0], UNKNOWN_DOMAIN)


def type_name(taxonomy_code: str) -> str:
    """Name of the type selected by the second taxonomy digit."""
    if len(taxonomy_code) < 2:
        return UNKNOWN_TYPE
    return TAXONOMY_TYPES.get(taxonomy_code[1], UNKNOWN_TYPE)


def scope_name(taxonomy_code: str, netmask_indicator: str) -> str:
    """
    Name of the scope selected by the netmask's leading letter.

    Only the first netmask character is looked up; trailing level
    characters ("2" in "B2") refine the scope without changing its name.
    """
    if not netmask_indicator:
        return UNKNOWN_SCOPE
    scopes = NETMASK_SCOPES.get(taxonomy_code)
    if scopes is None:
        return UNKNOWN_SCOPE
    return scopes.get(netmask_indicator[0], UNKNOWN_SCOPE)


def classify(taxonomy_code: str, netmask_indicator: str) -> str:
    """Compose "domain / type / scope" for a head."""
    return CLASSIFICATION_SEPARATOR.join((
        domain_name(taxonomy_code),
        type_name(taxonomy_code),
        scope_name(taxonomy_code, netmask_indicator),
    ))


def is_known_taxonomy_code(taxonomy_code: str) -> bool:
    return (
        len(taxonomy_code) == 2
        and taxonomy_code[0] in TAXONOMY_DOMAINS
        and taxonomy_code[1] in TAXONOMY_TYPES
    )


def is_known_scope(taxonomy_code: str, netmask_indicator: str) -> bool:
    return scope_name(taxonomy_code, netmask_indicator) != UNKNOWN_SCOPE


def scopes_for(taxonomy_code: str) -> list[str]:
    """Scope letters defined for a taxonomy code, sorted."""
    return sorted(NETMASK_SCOPES.get(taxonomy_code, {}))


# =============================================================================
# SEMANTIC CONSISTENCY (advisory)
# =============================================================================

def semantic_warnings(identifier: Identifier) -> list[str]:
    """
    Heuristic consistency checks between the head and the category tokens.

    Returns human-readable warnings; an empty list means nothing looked
    off. Never raises.
    """
    warnings: list[str] = []
    tokens = set(identifier.categories)
    domain = identifier.taxonomy_code[0]
    scope = identifier.scope_letter

    if "ART" in tokens and domain == "0":
        warnings.append(
            "identifier suggests artificial entity but taxonomy indicates natural"
        )
    if "NAT" in tokens and domain == "1":
        warnings.append(
            "identifier suggests natural entity but taxonomy indicates artificial"
        )
    if scope == "F" and "GAL" in tokens:
        warnings.append("microscopic scale inconsistent with galactic identifier")
    if scope == "A" and "MOL" in tokens:
        warnings.append("cosmic scale inconsistent with molecular identifier")

    return warnings
