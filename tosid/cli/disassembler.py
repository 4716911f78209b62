"""
Disassembler — human-readable views of a SemanticStore.

Read-only. Uses only the store's public API, so anything it prints can
be reproduced by any other consumer of the store.
"""

from __future__ import annotations

from ..errors import TosidError
from ..parser import validate_code
from ..statements import RFC3339_FORMAT, Assertion, Definition, Event
from ..store import SemanticStore


def _describe_code(code: str) -> str:
    check = validate_code(code)
    if not check.valid or check.identifier is None:
        return "(unclassified)"
    return check.identifier.classification()


def _entity_name(store: SemanticStore, entity_id: str) -> str:
    try:
        return store.get_entity(entity_id).label
    except TosidError:
        return f"#{entity_id}"


def _relation_name(store: SemanticStore, relation_id: str) -> str:
    try:
        return store.get_relation(relation_id).label
    except TosidError:
        return f"#{relation_id}"


def format_assertion_row(store: SemanticStore, assertion: Assertion) -> str:
    """
    One-line summary: SUBJECT --RELATION--> OBJECT (confidence).

    A negated assertion is drawn SUBJECT -/-RELATION--> OBJECT.
    """
    arrow = "-/-" if assertion.negated else "--"
    row = (
        f"{assertion.id}: {_entity_name(store, assertion.subject_id)} "
        f"{arrow}{_relation_name(store, assertion.relation_id)}--> "
        f"{_entity_name(store, assertion.object_id)}"
    )
    if assertion.confidence is not None:
        row += f" ({assertion.confidence.level:.0%})"
    return row


def format_knowledge_graph(store: SemanticStore) -> str:
    """Tables of entities, relations, times and assertions, plus statistics."""
    lines = []

    lines.append("ENTITIES:")
    for entity in store.entities():
        kind = "event " if isinstance(entity, Event) else "entity"
        lines.append(
            f"  [{kind}] #{entity.id:<6} {entity.label:<16} {entity.classification}"
        )

    lines.append("")
    lines.append("RELATIONS:")
    for relation in store.relations():
        lines.append(f"  #{relation.id:<12} {relation.label:<16} {relation.relation_type}")

    time_refs = store.time_references()
    if time_refs:
        lines.append("")
        lines.append("TIMES:")
        for time_ref in time_refs:
            lines.append(
                f"  #{time_ref.id:<12} {time_ref.time_type:<16} "
                f"{time_ref.value.strftime(RFC3339_FORMAT)}"
            )

    lines.append("")
    lines.append("ASSERTIONS:")
    for assertion in store.assertions():
        lines.append(f"  {format_assertion_row(store, assertion)}")

    edges = store.part_of_edges()
    if edges:
        lines.append("")
        lines.append("PART-OF:")
        for edge in edges:
            lines.append(
                f"  {_entity_name(store, edge.part_id)} is part of "
                f"{_entity_name(store, edge.whole_id)}"
            )

    lines.append("")
    lines.append("STATISTICS:")
    for key, value in store.get_statistics().items():
        lines.append(f"  {key + ':':<18}{value}")

    return "\n".join(lines)


def format_assertion_detail(store: SemanticStore, assertion_id: str) -> str:
    """
    Full view of one assertion: participants with their classification,
    confidence and temporal qualifier.

    Raises:
        NotFoundError: If the assertion does not exist
    """
    assertion = store.get_assertion(assertion_id)
    lines = []

    lines.append(f"Assertion #{assertion.id}")
    lines.append("=" * 50)
    lines.append(assertion.to_line())
    lines.append("")

    for role, ref_id in (("Subject", assertion.subject_id), ("Object", assertion.object_id)):
        entity = store.get_entity(ref_id)
        lines.append(f"  • {role}: {entity.label} (#{entity.id})")
        lines.append(f"    Type: {entity.classification or '-'}")
        lines.append(f"    Classification: {_describe_code(entity.classification)}")

    relation = store.get_relation(assertion.relation_id)
    lines.append(f"  • Relation: {relation.label} (#{relation.id}, {relation.relation_type})")
    if assertion.negated:
        lines.append("  • Polarity: negated (the relation does NOT hold)")

    if assertion.confidence is not None:
        lines.append(
            f"  • Confidence: {assertion.confidence.level:.0%} "
            f"from {assertion.confidence.source or 'unknown source'}"
        )
    else:
        lines.append("  • Confidence: not stated")

    temporal = store.get_temporal(assertion.id)
    if temporal is not None:
        try:
            when = store.get_time_reference(temporal.time_id).value.strftime(RFC3339_FORMAT)
        except TosidError:
            when = "undefined"
        lines.append(f"  • Time: {temporal.state.value} #{temporal.time_id} ({when})")

    return "\n".join(lines)


def format_entity_detail(store: SemanticStore, entity_id: str) -> str:
    """
    Full view of one entity: classification, hierarchy and neighbours.

    Raises:
        NotFoundError: If the entity does not exist
    """
    entity: Definition = store.get_entity(entity_id)
    lines = []

    lines.append(f"{entity.label} (#{entity.id})")
    lines.append("=" * 50)
    lines.append(entity.to_line())
    lines.append("")

    check = validate_code(entity.classification) if entity.classification else None
    if check is not None and check.identifier is not None:
        identifier = check.identifier
        lines.append(f"CLASSIFICATION: {identifier.classification()}")
        lines.append("HIERARCHY:")
        for depth, level in enumerate(identifier.hierarchy()):
            lines.append(f"  {'  ' * depth}{level}")
    else:
        lines.append("CLASSIFICATION: (unclassified)")

    related = store.find_related_entities(entity_id)
    lines.append("")
    lines.append("OUTBOUND:")
    for relation_id, other in related["outbound"]:
        lines.append(
            f"  --{_relation_name(store, relation_id)}--> {_entity_name(store, other)}"
        )
    if not related["outbound"]:
        lines.append("  (none)")

    lines.append("INBOUND:")
    for relation_id, other in related["inbound"]:
        lines.append(
            f"  <--{_relation_name(store, relation_id)}-- {_entity_name(store, other)}"
        )
    if not related["inbound"]:
        lines.append("  (none)")

    return "\n".join(lines)


def disassemble(store: SemanticStore) -> str:
    """Knowledge-graph tables followed by the detail of every assertion."""
    sections = [format_knowledge_graph(store)]
    for assertion in store.assertions():
        sections.append(format_assertion_detail(store, assertion.id))
    return "\n\n".join(sections)
