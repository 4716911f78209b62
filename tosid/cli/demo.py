"""
Demo data for the TOSID CLI.

Builds a small, deterministic knowledge graph: the Sun, Earth and Mars,
NASA and the Apollo 11 mission, the events of the Moon landing and the
time it happened.

No configuration. No persistence. Same store on every call.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..statements import TemporalState
from ..store import SemanticStore


# =============================================================================
# SAMPLE DATA (For Demo Purposes)
# =============================================================================

SUN = "00B2-SOL-STR-SUN:000-000-000-001"
EARTH = "00B3-SOL-SYS-ERT:000-000-000-001"
MARS = "00B3-SOL-SYS-MRS:000-000-000-001"
NASA = "10C1-ORG-GOV-USA:NASA"

SAMPLE_CODES = [SUN, EARTH, MARS, NASA]

SAMPLE_ENTITIES = [
    ("E1001", "SUN", SUN),
    ("E1002", "EARTH", EARTH),
    ("E1003", "MARS", MARS),
    ("E1004", "NASA", NASA),
    ("E1005", "APOLLO_11", "10B2-SPC-MSN-APL:11"),
    ("E1006", "MOON", "00B2-CEL-MON-LUN:000-000-000-001"),
    ("E1007", "LUNAR_SURFACE", "00B2-CEL-MON-SFC:000-000-000-001"),
]

SAMPLE_EVENTS = [
    ("V1001", "LANDING", "11B3-EVT-TRV-LND:000-000-000-001"),
]

SAMPLE_RELATIONS = [
    ("R1001", "ORBITS", "SPATIAL_RELATIONSHIP"),
    ("R1002", "OPERATES", "AGENT_OPERATION"),
    ("R1003", "DESTINATION", "SPATIAL_RELATIONSHIP"),
]

# (id, subject, relation, object, confidence, source)
SAMPLE_ASSERTIONS = [
    ("F1001", "E1002", "R1001", "E1001", 1.0, "IAU"),
    ("F1002", "E1003", "R1001", "E1001", 1.0, "IAU"),
    ("F1003", "E1006", "R1001", "E1002", 0.9999, "IAU"),
    ("F1004", "E1004", "R1002", "E1005", 0.9999, "HISTORICAL_RECORD"),
    ("F1005", "E1005", "R1003", "E1006", None, ""),
    ("F1006", "V1001", "AGENT", "E1005", 0.95, "NASA_ARCHIVE"),
    ("F1007", "V1001", "LOCATION", "E1007", 0.95, "NASA_ARCHIVE"),
]

# (id, subject, relation, object), each stated as NOT holding
SAMPLE_NEGATIONS = [
    ("F1008", "E1003", "R1001", "E1002"),
]

# (id, type, value)
SAMPLE_TIMES = [
    ("T1969", "POINT", datetime(1969, 7, 20, 20, 17, 40, tzinfo=timezone.utc)),
]

SAMPLE_TEMPORALS = [
    ("F1006", TemporalState.POINT_IN_TIME, "T1969"),
]


def build_demo_store() -> SemanticStore:
    """Build the sample store."""
    store = SemanticStore()

    for entity_id, label, code in SAMPLE_ENTITIES:
        store.add_entity(entity_id, label, code)
    for event_id, label, code in SAMPLE_EVENTS:
        store.add_event(event_id, label, code)

    for relation_id, label, relation_type in SAMPLE_RELATIONS:
        store.add_relation(relation_id, label, relation_type)
    store.add_event_relation("AGENT")
    store.add_event_relation("LOCATION")

    for time_id, time_type, value in SAMPLE_TIMES:
        store.add_time_reference(time_id, time_type, value)

    for assertion_id, subject, relation, obj, level, source in SAMPLE_ASSERTIONS:
        store.create_assertion(assertion_id, subject, relation, obj)
        if level is not None:
            store.set_confidence(assertion_id, level, source)
    for assertion_id, subject, relation, obj in SAMPLE_NEGATIONS:
        store.create_assertion(assertion_id, subject, relation, obj, negated=True)

    for assertion_id, state, time_id in SAMPLE_TEMPORALS:
        store.add_temporal(assertion_id, state, time_id, require_time_reference=True)

    store.add_part_of("E1007", "E1006")

    return store
