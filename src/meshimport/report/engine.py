"""
Report engine for registration responses.

Turns a RegistryResponse into an ordered list of display blocks:

    SUMMARY: <message>
    MODEL: <name>                      (logical model names only)
      <components table>
      RELATIONSHIP(S): Kind of <k> and sub type <s>
      <from/to table>
      ERROR: Import did not occur for ...

Entity records are decoded once per report. A malformed record is logged
and skipped; it never stops the rest of the report.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from meshimport.contracts.records import (
    ENTITY_TYPE_COMPONENT,
    ENTITY_TYPE_RELATIONSHIP,
    ENTITY_TYPE_UNKNOWN,
    ComponentRecord,
    RecordShapeError,
    RelationshipRecord,
    UnsuccessfulEntity,
)
from meshimport.report.blocks import (
    DisplayBlock,
    ErrorBlock,
    ModelHeaderBlock,
    SummaryBlock,
    TableBlock,
)

if TYPE_CHECKING:
    from meshimport.contracts.response import RegistryResponse

logger = logging.getLogger(__name__)

# Model names ending in one of these are file references, not logical models
FILE_EXTENSIONS: tuple[str, ...] = (".json", ".yaml", ".yml", ".tar.gz", ".tar", ".zip", ".tgz")

COMPONENT_HEADERS: tuple[str, ...] = ("Component", "Category", "Version")
RELATIONSHIP_HEADERS: tuple[str, ...] = ("From", "To")

_R = TypeVar("_R")


def has_file_extension(name: str) -> bool:
    """True if a model name looks like a file name."""
    return name.endswith(FILE_EXTENSIONS)


def partition_model_names(names: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split model names into (logical names, file names).

    Empty names are dropped. Order and repeats are kept within each group.
    """
    logical: list[str] = []
    files: list[str] = []
    for name in names:
        if not name:
            continue
        if has_file_extension(name):
            files.append(name)
        else:
            logical.append(name)
    return logical, files


def model_names_summary(response: RegistryResponse) -> str:
    """Unique non-empty model names, comma separated, in first-seen order."""
    return ", ".join(dict.fromkeys(name for name in response.model_names if name))


def pluralize_entities(count: int) -> str:
    return "entity" if count == 1 else "entities"


def entity_type_phrase(component_count: int, relationship_count: int) -> str:
    """Compose ` <n> entity of type component and <n> entities of type relationship`.

    Returns "" when both counts are zero.
    """
    phrase = ""
    if component_count > 0:
        phrase = f" {component_count} {pluralize_entities(component_count)} of type component"
    if component_count > 0 and relationship_count > 0:
        phrase = f"{phrase} and"
    if relationship_count > 0:
        phrase = (
            f"{phrase} {relationship_count} {pluralize_entities(relationship_count)}"
            " of type relationship"
        )
    return phrase


@dataclass
class RelationshipGroup:
    """Deduplicated relationship rows sharing a (kind, subtype)."""

    kind: str
    subtype: str
    rows: list[tuple[str, str]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return "RELATIONSHIPS:" if len(self.rows) > 1 else "RELATIONSHIP:"

    @property
    def title(self) -> str:
        return f"Kind of {self.kind} and sub type {self.subtype}"

    def to_block(self) -> TableBlock:
        return TableBlock(
            headers=RELATIONSHIP_HEADERS,
            rows=tuple(self.rows),
            label=self.label,
            title=self.title,
        )


def component_rows(
    components: Sequence[ComponentRecord], model_name: str
) -> list[tuple[str, str, str]]:
    """Rows for components owned by a model, in source order."""
    return [c.to_row() for c in components if c.model_name == model_name]


def group_relationships(
    relationships: Sequence[RelationshipRecord], model_name: str
) -> list[RelationshipGroup]:
    """Group a model's relationships by (kind, subtype), in first-seen order.

    Rows are deduplicated on (kind, subtype, from, to).
    """
    groups: dict[tuple[str, str], RelationshipGroup] = {}
    seen: set[tuple[str, str, str, str]] = set()

    for rel in relationships:
        if rel.model_name != model_name:
            continue
        for from_kind, to_kind in rel.endpoints:
            key = (rel.kind, rel.subtype, from_kind, to_kind)
            if key in seen:
                continue
            seen.add(key)
            group = groups.get(rel.group_key)
            if group is None:
                group = groups[rel.group_key] = RelationshipGroup(rel.kind, rel.subtype)
            group.rows.append((from_kind, to_kind))

    return [group for group in groups.values() if group.rows]


def unsuccessful_entity_blocks(entity: UnsuccessfulEntity, model_name: str) -> list[ErrorBlock]:
    """Error blocks for one failed-entity record in the context of a model.

    With a model name, only indexes whose name matches are counted. Without
    one, only "Unknown" entity types are counted (unattributed errors).
    Each counted "Unknown" entry yields its own error block; components and
    relationships are summarized in one trailing block.
    """
    blocks: list[ErrorBlock] = []
    component_count = relationship_count = 0

    for index, name in enumerate(entity.names):
        entity_type = entity.entity_type_at(index)
        if model_name:
            if name != model_name:
                continue
        elif entity_type != ENTITY_TYPE_UNKNOWN:
            continue

        if entity_type == ENTITY_TYPE_UNKNOWN:
            blocks.append(
                ErrorBlock(
                    message=f"Import process for file {name} encountered error:",
                    detail=entity.description,
                    indent=False,
                )
            )
        elif entity_type == ENTITY_TYPE_COMPONENT:
            component_count += 1
        elif entity_type == ENTITY_TYPE_RELATIONSHIP:
            relationship_count += 1

    phrase = entity_type_phrase(component_count, relationship_count)
    if phrase:
        blocks.append(
            ErrorBlock(
                message=f"Import did not occur for{phrase} error:",
                detail=entity.description,
            )
        )
    return blocks


def decode_records(
    raw_records: Iterable[Any],
    decoder: Callable[[Any], _R],
    record_kind: str,
) -> list[_R]:
    """Decode raw records, logging and skipping malformed ones."""
    decoded: list[_R] = []
    for index, raw in enumerate(raw_records):
        try:
            decoded.append(decoder(raw))
        except RecordShapeError as e:
            logger.warning(
                "Skipping malformed record",
                extra={"record_kind": record_kind, "index": index, "error": str(e)},
            )
    return decoded


@dataclass
class DecodedEntities:
    """Typed entity records of one response."""

    components: list[ComponentRecord]
    relationships: list[RelationshipRecord]
    unsuccessful: list[UnsuccessfulEntity]

    @classmethod
    def from_response(cls, response: RegistryResponse) -> DecodedEntities:
        return cls(
            components=decode_records(
                response.successful_components, ComponentRecord.from_raw, "component"
            ),
            relationships=decode_records(
                response.successful_relationships, RelationshipRecord.from_raw, "relationship"
            ),
            unsuccessful=decode_records(
                response.unsuccessful_entities, UnsuccessfulEntity.from_raw, "unsuccessful entity"
            ),
        )


class ReportEngine:
    """Builds the display blocks for a registration response."""

    def build(self, response: RegistryResponse) -> list[DisplayBlock]:
        """Build the full report.

        Args:
            response: Decoded server response.

        Returns:
            Display blocks in render order.
        """
        blocks: list[DisplayBlock] = [SummaryBlock(response.message)]

        if response.is_empty_result():
            logger.debug(
                "Response names models but reports no entity activity",
                extra={"models": len(response.model_names)},
            )
            return blocks

        entities = DecodedEntities.from_response(response)
        logical, files = partition_model_names(response.model_names)

        for model_name in logical:
            blocks.append(ModelHeaderBlock(model_name))
            blocks.extend(self.model_blocks(entities, model_name))
        for model_name in files:
            blocks.extend(self.model_blocks(entities, model_name))

        return blocks

    def model_blocks(self, entities: DecodedEntities, model_name: str) -> list[DisplayBlock]:
        """Component, relationship and error blocks for one model name."""
        blocks: list[DisplayBlock] = []

        rows = component_rows(entities.components, model_name)
        if rows:
            blocks.append(TableBlock(headers=COMPONENT_HEADERS, rows=tuple(rows)))

        for group in group_relationships(entities.relationships, model_name):
            blocks.append(group.to_block())

        for entity in entities.unsuccessful:
            blocks.extend(unsuccessful_entity_blocks(entity, model_name))

        return blocks
