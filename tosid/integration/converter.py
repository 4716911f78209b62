"""
TOSID -> KMAC Converter.

Turns a batch of classification codes into DEF_ENTITY statements and
infers PART_OF edges from hierarchy containment.

Core principle:
    A batch is converted completely or not at all. The first code that
    does not parse aborts the batch with BatchConversionError naming it.

Scaling note:
    Part-of inference tests every ordered pair of codes, O(n^2) in the
    batch size. Batches above MAX_HIERARCHY_BATCH are refused rather than
    silently accepted. Indexing codes by hierarchy level would make this
    near-linear at the cost of extra bookkeeping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from .. import taxonomy
from ..errors import BatchConversionError, GrammarError, ValidationError
from ..identifier import Identifier
from ..parser import parse
from ..statements import Entity, PartOf, Statement


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

MAX_HIERARCHY_BATCH = 1000

ENTITY_ID_PREFIX = "E"
ENTITY_ID_WIDTH = 4

PLACEHOLDER_LABEL = "Entity"


# =============================================================================
# HIERARCHY CONVERSION
# =============================================================================

@dataclass
class HierarchyConversion:
    """
    Result of converting one batch of codes.

    `entities` follows first appearance of each distinct code; `part_of`
    lists (part, whole) edges in batch order of the part.
    """
    entities: list[Entity] = field(default_factory=list)
    part_of: list[PartOf] = field(default_factory=list)
    ids_by_code: dict[str, str] = field(default_factory=dict)

    @property
    def statements(self) -> list[Statement]:
        return [*self.entities, *self.part_of]

    def entity_for(self, code: str) -> Optional[Entity]:
        entity_id = self.ids_by_code.get(code)
        if entity_id is None:
            return None
        return next(e for e in self.entities if e.id == entity_id)


def _id_sequence(reserved: set[str], prefix: str, width: int):
    n = 0
    while True:
        n += 1
        candidate = f"{prefix}{n:0{width}d}"
        if candidate not in reserved:
            yield candidate


def default_label(identifier: Identifier, position: int) -> str:
    """
    Label for an entity the caller did not name: the last category token.

    Parsed codes always carry at least one category token. An Identifier
    built directly with an empty body has none and gets the
    `Entity<position>` placeholder instead.
    """
    categories = [t for t in identifier.categories if t]
    if categories:
        return categories[-1]
    return f"{PLACEHOLDER_LABEL}{position}"


def generate_from_hierarchy(
    codes: Iterable[str],
    labels: Optional[Mapping[str, str]] = None,
    reserved_ids: Iterable[str] = (),
    max_batch: int = MAX_HIERARCHY_BATCH,
) -> HierarchyConversion:
    """
    Convert codes to entities plus inferred part-of edges.

    Args:
        codes: TOSID codes; repeated codes map to a single entity
        labels: Optional code -> label overrides
        reserved_ids: IDs already in use elsewhere; generated IDs skip them
        max_batch: Refuse batches larger than this

    Returns:
        HierarchyConversion with one entity per distinct code and one
        PART_OF edge per (descendant, ancestor) pair in the batch

    Raises:
        ValidationError: If the batch exceeds max_batch
        BatchConversionError: On the first code that does not parse
    """
    codes = list(codes)
    labels = labels or {}

    if len(codes) > max_batch:
        raise ValidationError(
            f"hierarchy batch of {len(codes)} codes exceeds limit of {max_batch}"
        )

    # Parse everything before creating anything.
    parsed: list[tuple[str, Identifier]] = []
    seen: set[str] = set()
    for index, code in enumerate(codes):
        try:
            identifier = parse(code)
        except GrammarError as e:
            logger.debug("Batch rejected at %d: %s", index, e)
            raise BatchConversionError(code, index, e) from e
        if code in seen:
            continue
        seen.add(code)
        parsed.append((code, identifier))

    result = HierarchyConversion()
    ids = _id_sequence(set(reserved_ids), ENTITY_ID_PREFIX, ENTITY_ID_WIDTH)

    for position, (code, identifier) in enumerate(parsed, start=1):
        entity = Entity(
            id=next(ids),
            label=labels.get(code) or default_label(identifier, position),
            classification=identifier.canonical(),
        )
        result.entities.append(entity)
        result.ids_by_code[code] = entity.id

    for part_code, part in parsed:
        for whole_code, whole in parsed:
            if whole.is_parent_of(part):
                result.part_of.append(PartOf(
                    part_id=result.ids_by_code[part_code],
                    whole_id=result.ids_by_code[whole_code],
                ))

    logger.debug(
        "Converted %d codes into %d entities and %d part-of edges",
        len(codes), len(result.entities), len(result.part_of),
    )
    return result


# =============================================================================
# SEMANTIC INFO
# =============================================================================

def extract_semantic_info(code: str) -> dict[str, str]:
    """
    Flatten a code into a key -> value map.

    Keys: domain, type, scope (only when the tables know them),
    category1..category3 (one per category token present) and
    specific_identifier (only when a suffix exists).

    Raises:
        GrammarError: If the code does not parse
    """
    identifier = parse(code)
    info: dict[str, str] = {}

    domain = taxonomy.domain_name(identifier.taxonomy_code)
    if domain != taxonomy.UNKNOWN_DOMAIN:
        info["domain"] = domain
    type_ = taxonomy.type_name(identifier.taxonomy_code)
    if type_ != taxonomy.UNKNOWN_TYPE:
        info["type"] = type_
    scope = taxonomy.scope_name(identifier.taxonomy_code, identifier.netmask_indicator)
    if scope != taxonomy.UNKNOWN_SCOPE:
        info["scope"] = scope

    for i, token in enumerate(identifier.categories, start=1):
        info[f"category{i}"] = token

    if identifier.specific_suffix is not None:
        info["specific_identifier"] = identifier.specific_suffix

    return info
