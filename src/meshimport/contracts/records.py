"""
Tolerant decoders for loosely-typed entity records.

The server reports imported and failed entities as free-form JSON objects.
Each decoder turns one raw record into a typed record or raises
RecordShapeError; callers log the error and skip the record.

Missing optional text fields decode to "". Present fields of the wrong type
are shape errors.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

ENTITY_TYPE_COMPONENT = "component"
ENTITY_TYPE_RELATIONSHIP = "relationship"
ENTITY_TYPE_UNKNOWN = "Unknown"


class RecordShapeError(ValueError):
    """Raised when a raw record does not have the expected shape."""

    def __init__(self, record_kind: str, field: str, detail: str) -> None:
        super().__init__(f"Malformed {record_kind} record: {field}: {detail}")
        self.record_kind = record_kind
        self.field = field
        self.detail = detail


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _mapping(value: Any, record_kind: str, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise RecordShapeError(record_kind, field, f"expected object, got {_type_name(value)}")
    return value


def _sequence(value: Any, record_kind: str, field: str) -> Sequence[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise RecordShapeError(record_kind, field, f"expected array, got {_type_name(value)}")
    return value


def _text(value: Any, record_kind: str, field: str) -> str:
    if not isinstance(value, str):
        raise RecordShapeError(record_kind, field, f"expected string, got {_type_name(value)}")
    return value


def _optional_text(container: Mapping[str, Any], key: str, record_kind: str, field: str) -> str:
    value = container.get(key)
    if value is None:
        return ""
    return _text(value, record_kind, field)


def _optional_nested_text(
    container: Mapping[str, Any], key: str, subkey: str, record_kind: str, prefix: str
) -> str:
    nested = container.get(key)
    if nested is None:
        return ""
    field = f"{prefix}.{key}"
    return _optional_text(
        _mapping(nested, record_kind, field), subkey, record_kind, f"{field}.{subkey}"
    )


@dataclass(frozen=True)
class ComponentRecord:
    """Successfully imported component.

    Attributes:
        display_name: Component display name.
        model_name: Name of the owning model.
        category: Owning model's category name.
        version: Owning model's version.
    """

    display_name: str
    model_name: str
    category: str
    version: str

    @classmethod
    def from_raw(cls, raw: Any) -> ComponentRecord:
        """Decode a raw successful_components entry.

        Expected shape:
            {"DisplayName": "...",
             "Model": {"name": "...", "category": {"name": "..."}, "model": {"version": "..."}}}
        """
        kind = "component"
        record = _mapping(raw, kind, "record")
        model = _mapping(record.get("Model"), kind, "Model")

        return cls(
            display_name=_optional_text(record, "DisplayName", kind, "DisplayName"),
            model_name=_optional_text(model, "name", kind, "Model.name"),
            category=_optional_nested_text(model, "category", "name", kind, "Model"),
            version=_optional_nested_text(model, "model", "version", kind, "Model"),
        )

    def to_row(self) -> tuple[str, str, str]:
        return (self.display_name, self.category, self.version)


@dataclass(frozen=True)
class RelationshipRecord:
    """Successfully imported relationship.

    Attributes:
        kind: Relationship kind (e.g. "edge").
        subtype: Relationship subtype (e.g. "binding").
        model_name: Name of the owning model.
        endpoints: One (from kind, to kind) pair per selector. Only the first
            allowed from/to kind of each selector is kept.
    """

    kind: str
    subtype: str
    model_name: str
    endpoints: tuple[tuple[str, str], ...]

    @property
    def group_key(self) -> tuple[str, str]:
        return (self.kind, self.subtype)

    @classmethod
    def from_raw(cls, raw: Any) -> RelationshipRecord:
        """Decode a raw successful_relationships entry.

        Expected shape:
            {"Kind": "...", "Subtype": "...", "Model": {"name": "..."},
             "Selectors": [{"allow": {"from": [{"kind": "..."}], "to": [{"kind": "..."}]}}]}
        """
        record_kind = "relationship"
        record = _mapping(raw, record_kind, "record")
        kind = _text(record.get("Kind"), record_kind, "Kind")
        subtype = _text(record.get("Subtype"), record_kind, "Subtype")
        model = _mapping(record.get("Model"), record_kind, "Model")
        model_name = _text(model.get("name"), record_kind, "Model.name")

        endpoints: list[tuple[str, str]] = []
        selectors = _sequence(record.get("Selectors"), record_kind, "Selectors")
        for index, selector in enumerate(selectors):
            field = f"Selectors[{index}]"
            allow = _mapping(
                _mapping(selector, record_kind, field).get("allow"),
                record_kind,
                f"{field}.allow",
            )
            endpoints.append(
                (
                    _first_kind(allow, "from", record_kind, f"{field}.allow.from"),
                    _first_kind(allow, "to", record_kind, f"{field}.allow.to"),
                )
            )

        return cls(kind=kind, subtype=subtype, model_name=model_name, endpoints=tuple(endpoints))


def _first_kind(allow: Mapping[str, Any], key: str, record_kind: str, field: str) -> str:
    candidates = _sequence(allow.get(key), record_kind, field)
    if not candidates:
        raise RecordShapeError(record_kind, field, "expected at least one entry")
    first = _mapping(candidates[0], record_kind, f"{field}[0]")
    return _text(first.get("kind"), record_kind, f"{field}[0].kind")


@dataclass(frozen=True)
class UnsuccessfulEntity:
    """Group of entities that failed to import with a shared error.

    Attributes:
        names: Entity or file names.
        entity_types: Entity type per name ("component", "relationship",
            "Unknown"). May be shorter than names.
        description: Error long description fragments joined with spaces.
    """

    names: tuple[str, ...]
    entity_types: tuple[str, ...]
    description: str

    def entity_type_at(self, index: int) -> str:
        if index < len(self.entity_types):
            return self.entity_types[index]
        return ""

    @classmethod
    def from_raw(cls, raw: Any) -> UnsuccessfulEntity:
        """Decode a raw unsuccessful entity entry.

        Expected shape:
            {"name": ["..."], "entityType": ["component"],
             "error": {"LongDescription": ["fragment", "fragment"]}}
        """
        kind = "unsuccessful entity"
        record = _mapping(raw, kind, "record")
        names = _sequence(record.get("name"), kind, "name")
        entity_types = _sequence(record.get("entityType"), kind, "entityType")
        error = _mapping(record.get("error"), kind, "error")

        return cls(
            names=tuple(_text(n, kind, f"name[{i}]") for i, n in enumerate(names)),
            entity_types=tuple(
                _text(t, kind, f"entityType[{i}]") for i, t in enumerate(entity_types)
            ),
            description=join_description(error.get("LongDescription")),
        )


def join_description(fragments: Any) -> str:
    """Join long description fragments with single spaces.

    A non-array description yields "" and non-string fragments are skipped;
    both are logged.
    """
    if isinstance(fragments, (str, bytes)) or not isinstance(fragments, Sequence):
        logger.info(
            "LongDescription is not an array",
            extra={"value_type": _type_name(fragments)},
        )
        return ""

    parts: list[str] = []
    for item in fragments:
        if not isinstance(item, str):
            logger.info(
                "LongDescription item is not a string",
                extra={"value_type": _type_name(item)},
            )
            continue
        parts.append(item)

    return " ".join(parts).strip()
