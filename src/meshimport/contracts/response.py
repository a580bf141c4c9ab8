"""
Registration response envelope.

Only the envelope is validated here. Entity records inside
entity_type_summary stay loosely typed and are decoded one by one by
meshimport.contracts.records, so a single malformed record never rejects
the whole response.
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityCount(BaseModel):
    """Per-entity-type counts reported by the server."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    comp_count: int = Field(default=0, ge=0, description="Successfully imported components")
    relationship_count: int = Field(
        default=0, ge=0, description="Successfully imported relationships"
    )
    total_err_count: int = Field(default=0, ge=0, description="Entities that failed to import")

    @field_validator("comp_count", "relationship_count", "total_err_count", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class EntityTypeSummary(BaseModel):
    """Raw entity records grouped by outcome."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    successful_components: list[Any] = Field(default_factory=list)
    successful_relationships: list[Any] = Field(default_factory=list)
    unsuccessful_entities: list[Any] = Field(
        default_factory=list, alias="unsuccessful_component_names"
    )

    @field_validator(
        "successful_components",
        "successful_relationships",
        "unsuccessful_entities",
        mode="before",
    )
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class RegistryResponse(BaseModel):
    """
    Structured form of the registration endpoint's reply.

    Attributes:
        message: Free-text summary.
        model_names: Models referenced by the import, in server order. May repeat
            and may contain file names instead of logical model names.
        entity_count: Success/error counts.
        entity_type_summary: Raw successful and failed entity records.
    """

    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True, protected_namespaces=()
    )

    message: str = Field(default="", alias="err_msg")
    model_names: list[str] = Field(default_factory=list, alias="model_name")
    entity_count: EntityCount = Field(default_factory=EntityCount)
    entity_type_summary: EntityTypeSummary = Field(default_factory=EntityTypeSummary)

    @field_validator("message", mode="before")
    @classmethod
    def null_message_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("model_names", mode="before")
    @classmethod
    def null_names_as_empty(cls, v: Any) -> Any:
        """Null list becomes []; null entries become "" and are dropped at render time."""
        if v is None:
            return []
        if isinstance(v, list):
            return ["" if name is None else name for name in v]
        return v

    @field_validator("entity_count", "entity_type_summary", mode="before")
    @classmethod
    def null_section_as_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def successful_components(self) -> list[Any]:
        return self.entity_type_summary.successful_components

    @property
    def successful_relationships(self) -> list[Any]:
        return self.entity_type_summary.successful_relationships

    @property
    def unsuccessful_entities(self) -> list[Any]:
        return self.entity_type_summary.unsuccessful_entities

    def is_empty_result(self) -> bool:
        """True when models are named but no entity was imported or rejected."""
        counts = self.entity_count
        return (
            len(self.model_names) > 0
            and counts.comp_count == 0
            and counts.relationship_count == 0
            and counts.total_err_count == 0
        )

    @classmethod
    def from_json(cls, data: bytes | str) -> RegistryResponse:
        """Deserialize from JSON.

        Raises:
            orjson.JSONDecodeError: If the body is not JSON.
            pydantic.ValidationError: If the envelope has the wrong shape.
        """
        if isinstance(data, str):
            data = data.encode()
        return cls.model_validate(orjson.loads(data))
