"""
Semantic Store — in-memory registry of KMAC statements.

Holds entities, events, relations, time references, assertions,
temporal qualifiers and part-of edges, plus a participant index mapping
every entity ID to the assertions that name it as subject or object.

Design principles:
- Every ID is unique across all definition kinds
- Mutations are fail-closed: all checks run before anything is recorded
- An assertion and its participant-index entries appear together or not
  at all
- Readers get copies of assertions, never the stored objects

One RLock guards every mutation path, so a store may be shared between
threads.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Union

from ..errors import DuplicateIDError, NotFoundError, ValidationError
from ..identifier import Identifier, validate_pattern
from ..parser import parse, validate_code
from ..statements import (
    Assertion,
    Definition,
    Entity,
    Event,
    PartOf,
    Relation,
    Statement,
    Temporal,
    TemporalState,
    TimeReference,
    serialize_all,
    temporal_state,
)


logger = logging.getLogger(__name__)


class SemanticStore:
    """
    Registry of statements with participant indexing.

    Entities and events share one table so either can appear in an
    assertion.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entities: dict[str, Definition] = {}
        self._relations: dict[str, Relation] = {}
        self._times: dict[str, TimeReference] = {}
        self._assertions: dict[str, Assertion] = {}
        self._temporals: dict[str, Temporal] = {}
        self._part_of: dict[str, PartOf] = {}
        self._participants: dict[str, list[str]] = defaultdict(list)

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def _check_new_id(self, kind: str, ref_id: str) -> None:
        if ref_id in self:
            raise DuplicateIDError(kind, ref_id)

    def add_entity(self, entity_id: str, label: str, classification: str = "") -> Entity:
        """
        Register an entity.

        A non-empty classification must be a well-formed code; an empty one
        is allowed.

        Raises:
            DuplicateIDError: If the ID is already used
            GrammarError: If the classification does not parse
        """
        return self._add_definition(Entity(entity_id, label, classification), "entity")

    def add_event(self, event_id: str, label: str, classification: str = "") -> Event:
        """Register an event. Same rules as `add_entity`."""
        return self._add_definition(Event(event_id, label, classification), "event")

    def _add_definition(self, entity: Definition, kind: str) -> Definition:
        with self._lock:
            self._check_new_id(kind, entity.id)
            if entity.classification:
                parse(entity.classification)
            self._entities[entity.id] = entity
        logger.debug("Added %s %s [%s]", kind, entity.id, entity.label)
        return entity

    def add_relation(self, relation_id: str, label: str, relation_type: str) -> Relation:
        """
        Raises:
            DuplicateIDError: If the ID is already used
        """
        return self._add_relation(Relation(relation_id, label, relation_type))

    def add_event_relation(self, role: str) -> Relation:
        """
        Register one of the built-in event roles (AGENT, LOCATION, ...).

        Raises:
            ValidationError: If the role is unknown
            DuplicateIDError: If the role is already registered
        """
        return self._add_relation(Relation.event_role(role))

    def _add_relation(self, relation: Relation) -> Relation:
        with self._lock:
            self._check_new_id("relation", relation.id)
            self._relations[relation.id] = relation
        logger.debug("Added relation %s [%s]", relation.id, relation.relation_type)
        return relation

    def add_time_reference(self, time_id: str, time_type: str, value: datetime) -> TimeReference:
        """
        Register a named point in time for TEMPORAL statements to point at.

        Raises:
            DuplicateIDError: If the ID is already used
            ValidationError: If value is not a datetime
        """
        time_ref = TimeReference(time_id, time_type, value)
        with self._lock:
            self._check_new_id("time reference", time_id)
            self._times[time_id] = time_ref
        logger.debug("Added time reference %s = %s", time_id, time_ref.value.isoformat())
        return time_ref

    # -------------------------------------------------------------------------
    # Assertions and qualifiers
    # -------------------------------------------------------------------------

    def create_assertion(
        self,
        assertion_id: str,
        subject_id: str,
        relation_id: str,
        object_id: str,
        negated: bool = False,
    ) -> Assertion:
        """
        Record `subject --relation--> object`, or its denial when `negated`.

        Nothing is recorded unless every reference resolves.

        Raises:
            DuplicateIDError: If the assertion ID is already used
            NotFoundError: Naming the first missing reference and its role
        """
        with self._lock:
            self._check_new_id("assertion", assertion_id)
            if subject_id not in self._entities:
                raise NotFoundError("entity", subject_id, role="subject")
            if relation_id not in self._relations:
                raise NotFoundError("relation", relation_id, role="relation")
            if object_id not in self._entities:
                raise NotFoundError("entity", object_id, role="object")

            assertion = Assertion(
                assertion_id, subject_id, relation_id, object_id, negated=negated
            )
            self._assertions[assertion_id] = assertion
            self._participants[subject_id].append(assertion_id)
            if object_id != subject_id:
                self._participants[object_id].append(assertion_id)

        logger.debug(
            "%s %s: %s -%s-> %s",
            "Negated" if negated else "Asserted",
            assertion_id, subject_id, relation_id, object_id,
        )
        return replace(assertion)

    def set_confidence(self, assertion_id: str, level: float, source: str = "") -> Assertion:
        """
        Raises:
            NotFoundError: If the assertion does not exist
            ConfidenceRangeError: If level is outside [0.0, 1.0]
            ValidationError: If level is not a number
        """
        with self._lock:
            assertion = self._assertions.get(assertion_id)
            if assertion is None:
                raise NotFoundError("assertion", assertion_id)
            assertion.set_confidence(level, source)
        logger.debug("Confidence %s = %.4f (%s)", assertion_id, assertion.confidence.level, source)
        return replace(assertion)

    def add_temporal(
        self,
        assertion_id: str,
        state: Union[TemporalState, str],
        time_id: str,
        require_time_reference: bool = False,
    ) -> Temporal:
        """
        Qualify an assertion in time. One temporal per assertion.

        The time ID is taken on trust unless `require_time_reference` is
        set, in which case it must name a registered time reference.

        Raises:
            NotFoundError: If the assertion (or a required time reference)
                does not exist
            ValidationError: On an unknown state or a second temporal
        """
        if not isinstance(state, TemporalState):
            state = temporal_state(state)
        with self._lock:
            if assertion_id not in self._assertions:
                raise NotFoundError("assertion", assertion_id)
            if require_time_reference and time_id not in self._times:
                raise NotFoundError("time reference", time_id)
            if assertion_id in self._temporals:
                raise ValidationError(f"assertion {assertion_id} already has a temporal qualifier")
            temporal = Temporal(assertion_id, state, time_id)
            self._temporals[assertion_id] = temporal
        logger.debug("Temporal %s %s %s", assertion_id, state.value, time_id)
        return temporal

    def add_part_of(self, part_id: str, whole_id: str) -> PartOf:
        """
        Raises:
            NotFoundError: If either entity is missing
            ValidationError: If part and whole are the same entity
        """
        with self._lock:
            if part_id not in self._entities:
                raise NotFoundError("entity", part_id, role="part")
            if whole_id not in self._entities:
                raise NotFoundError("entity", whole_id, role="whole")
            if part_id == whole_id:
                raise ValidationError(f"entity {part_id} cannot be part of itself")
            edge = PartOf(part_id, whole_id)
            self._part_of.setdefault(edge.id, edge)
        logger.debug("Part-of %s -> %s", part_id, whole_id)
        return edge

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_entity(self, entity_id: str) -> Definition:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise NotFoundError("entity", entity_id)

    def get_relation(self, relation_id: str) -> Relation:
        try:
            return self._relations[relation_id]
        except KeyError:
            raise NotFoundError("relation", relation_id)

    def get_time_reference(self, time_id: str) -> TimeReference:
        try:
            return self._times[time_id]
        except KeyError:
            raise NotFoundError("time reference", time_id)

    def get_assertion(self, assertion_id: str) -> Assertion:
        with self._lock:
            try:
                return replace(self._assertions[assertion_id])
            except KeyError:
                raise NotFoundError("assertion", assertion_id)

    def get_temporal(self, assertion_id: str) -> Optional[Temporal]:
        return self._temporals.get(assertion_id)

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def entities(self) -> list[Definition]:
        """All entities and events, in insertion order."""
        with self._lock:
            return list(self._entities.values())

    def relations(self) -> list[Relation]:
        with self._lock:
            return list(self._relations.values())

    def time_references(self) -> list[TimeReference]:
        with self._lock:
            return list(self._times.values())

    def assertions(self) -> list[Assertion]:
        """Copies of all assertions, in creation order."""
        with self._lock:
            return [replace(a) for a in self._assertions.values()]

    def part_of_edges(self) -> list[PartOf]:
        with self._lock:
            return list(self._part_of.values())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_entities_by_pattern(self, pattern: str) -> list[Definition]:
        """
        Entities whose classification matches `pattern`, in insertion order.

        Entities without a parsable classification are skipped. The pattern
        is checked before any entity is looked at, so a bad pattern fails
        even on an empty store.

        Raises:
            ValidationError: If the pattern itself is malformed
        """
        validate_pattern(pattern)
        found = []
        for entity in self.entities():
            identifier = self._classification_of(entity)
            if identifier is not None and identifier.matches_pattern(pattern):
                found.append(entity)
        return found

    @staticmethod
    def _classification_of(entity: Definition) -> Optional[Identifier]:
        if not entity.classification:
            return None
        return validate_code(entity.classification).identifier

    def find_entities_by_label(self, fragment: str) -> list[Definition]:
        """Case-insensitive substring search over labels."""
        needle = fragment.lower()
        return [e for e in self.entities() if needle in e.label.lower()]

    def find_assertions_for_entity(self, entity_id: str) -> list[Assertion]:
        """Assertions naming the entity as subject or object, oldest first."""
        with self._lock:
            ids = self._participants.get(entity_id, [])
            return [replace(self._assertions[a]) for a in ids]

    def find_related_entities(self, entity_id: str) -> dict[str, list[tuple[str, str]]]:
        """
        Neighbours of an entity through its assertions.

        Negated assertions deny a link, so they are not followed.

        Returns:
            {"outbound": [(relation_id, object_id), ...],
             "inbound":  [(relation_id, subject_id), ...]}

        Raises:
            NotFoundError: If the entity does not exist
        """
        self.get_entity(entity_id)
        related: dict[str, list[tuple[str, str]]] = {"outbound": [], "inbound": []}
        for assertion in self.find_assertions_for_entity(entity_id):
            if assertion.negated:
                continue
            if assertion.subject_id == entity_id:
                related["outbound"].append((assertion.relation_id, assertion.object_id))
            if assertion.object_id == entity_id:
                related["inbound"].append((assertion.relation_id, assertion.subject_id))
        return related

    def find_conflicts(self) -> list[tuple[Assertion, Assertion]]:
        """
        Pairs of assertions that state and deny the same triple.

        Each pair is (earlier, later) by creation order.
        """
        with self._lock:
            by_triple: dict[tuple[str, str, str], list[Assertion]] = defaultdict(list)
            for assertion in self._assertions.values():
                by_triple[assertion.triple()].append(assertion)

            conflicts = []
            for group in by_triple.values():
                for i, first in enumerate(group):
                    for second in group[i + 1:]:
                        if first.conflicts_with(second):
                            conflicts.append((replace(first), replace(second)))
        return conflicts

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_statistics(self) -> dict[str, int]:
        """Counts per statement kind plus per-taxonomy entity counts."""
        with self._lock:
            entities = list(self._entities.values())
            assertions = list(self._assertions.values())
            stats = {
                "entities": sum(1 for e in entities if isinstance(e, Entity)),
                "events": sum(1 for e in entities if isinstance(e, Event)),
                "relations": len(self._relations),
                "time_references": len(self._times),
                "assertions": len(assertions),
                "negated": sum(1 for a in assertions if a.negated),
                "with_confidence": sum(1 for a in assertions if a.confidence is not None),
                "temporals": len(self._temporals),
                "part_of": len(self._part_of),
            }

        for entity in entities:
            identifier = self._classification_of(entity)
            if identifier is not None:
                key = f"taxonomy_{identifier.taxonomy_code}"
                stats[key] = stats.get(key, 0) + 1
        return stats

    def validate(self) -> list[str]:
        """
        Advisory consistency report. An empty list means nothing to flag.

        Flags entities that take part in no assertion or part-of edge,
        relations that are never used, classifications that do not parse,
        temporals pointing at unregistered time references and assertions
        that contradict each other.
        """
        warnings = []
        with self._lock:
            in_part_of = set()
            for edge in self._part_of.values():
                in_part_of.add(edge.part_id)
                in_part_of.add(edge.whole_id)
            used_relations = {a.relation_id for a in self._assertions.values()}

            for entity in self._entities.values():
                if entity.classification and not validate_code(entity.classification).valid:
                    warnings.append(
                        f"entity {entity.id} has unparsable classification {entity.classification!r}"
                    )
                if not self._participants.get(entity.id) and entity.id not in in_part_of:
                    warnings.append(f"entity {entity.id} [{entity.label}] is not connected")
            for relation in self._relations.values():
                if relation.id not in used_relations:
                    warnings.append(f"relation {relation.id} [{relation.label}] is never used")
            for temporal in self._temporals.values():
                if temporal.time_id not in self._times:
                    warnings.append(
                        f"temporal on {temporal.assertion_id} points at undefined "
                        f"time reference {temporal.time_id}"
                    )
            for first, second in self.find_conflicts():
                warnings.append(f"assertions {first.id} and {second.id} contradict each other")
        return warnings

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def statements(self) -> list[Statement]:
        """
        All statements in export order: entities and events, relations,
        time references, assertions, temporals, part-of edges.
        """
        with self._lock:
            return [
                *self._entities.values(),
                *self._relations.values(),
                *self._times.values(),
                *(replace(a) for a in self._assertions.values()),
                *self._temporals.values(),
                *self._part_of.values(),
            ]

    def to_lines(self) -> list[str]:
        return serialize_all(self.statements())

    @classmethod
    def from_statements(cls, statements: Iterable[Statement]) -> SemanticStore:
        """
        Build a store by replaying statements.

        Definitions are loaded first (in input order), then assertions, then
        qualifiers, so the input order of kinds does not matter.

        Raises:
            TosidError: Whatever the corresponding mutation raises
        """
        statements = list(statements)
        store = cls()

        for statement in statements:
            if isinstance(statement, Entity):
                store.add_entity(statement.id, statement.label, statement.classification)
            elif isinstance(statement, Event):
                store.add_event(statement.id, statement.label, statement.classification)
            elif isinstance(statement, Relation):
                store.add_relation(statement.id, statement.label, statement.relation_type)
            elif isinstance(statement, TimeReference):
                store.add_time_reference(statement.id, statement.time_type, statement.value)
        for assertion in statements:
            if not isinstance(assertion, Assertion):
                continue
            store.create_assertion(
                assertion.id,
                assertion.subject_id,
                assertion.relation_id,
                assertion.object_id,
                negated=assertion.negated,
            )
            if assertion.confidence is not None:
                store.set_confidence(
                    assertion.id, assertion.confidence.level, assertion.confidence.source
                )
        for statement in statements:
            if isinstance(statement, Temporal):
                store.add_temporal(statement.assertion_id, statement.state, statement.time_id)
            elif isinstance(statement, PartOf):
                store.add_part_of(statement.part_id, statement.whole_id)

        logger.debug("Loaded store from %d statements", len(statements))
        return store

    def __len__(self) -> int:
        return (
            len(self._entities) + len(self._relations)
            + len(self._times) + len(self._assertions)
        )

    def __contains__(self, ref_id: str) -> bool:
        return (
            ref_id in self._entities
            or ref_id in self._relations
            or ref_id in self._times
            or ref_id in self._assertions
        )
