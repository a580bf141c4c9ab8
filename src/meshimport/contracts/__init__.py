"""Wire contracts for the model registration endpoint."""

from meshimport.contracts.records import (
    ENTITY_TYPE_COMPONENT,
    ENTITY_TYPE_RELATIONSHIP,
    ENTITY_TYPE_UNKNOWN,
    ComponentRecord,
    RecordShapeError,
    RelationshipRecord,
    UnsuccessfulEntity,
    join_description,
)
from meshimport.contracts.request import ImportBody, RegistrationRequest, UploadType
from meshimport.contracts.response import EntityCount, EntityTypeSummary, RegistryResponse

__all__ = [
    "ENTITY_TYPE_COMPONENT",
    "ENTITY_TYPE_RELATIONSHIP",
    "ENTITY_TYPE_UNKNOWN",
    "ComponentRecord",
    "EntityCount",
    "EntityTypeSummary",
    "ImportBody",
    "RecordShapeError",
    "RegistrationRequest",
    "RegistryResponse",
    "RelationshipRecord",
    "UnsuccessfulEntity",
    "UploadType",
    "join_description",
]
