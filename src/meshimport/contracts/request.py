"""
Registration request contract.

Wire format posted to /api/meshmodels/register:
    {
        "importBody": {"model_file": "<base64>", "file_name": "models.tar.gz"},
        "uploadType": "file"
    }
"""

from __future__ import annotations

import base64
from enum import Enum

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class UploadType(str, Enum):
    """How the model definition reaches the server."""

    FILE = "file"
    URL = "url"  # Reserved, not produced by this client


class ImportBody(BaseModel):
    """Payload section of the registration request."""

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    model_file: bytes = Field(..., description="Raw file bytes or a built archive")
    file_name: str = Field(..., min_length=1, description="Display file name")
    url: str | None = Field(default=None, description="Source URL for URL uploads")

    @field_serializer("model_file")
    def serialize_model_file(self, value: bytes) -> str:
        """Encode bytes as base64, the standard JSON encoding of byte arrays."""
        return base64.b64encode(value).decode("ascii")


class RegistrationRequest(BaseModel):
    """
    Request submitted to the registration endpoint.

    Attributes:
        import_body: Payload and file name.
        upload_type: Upload discriminator, always "file" for this client.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    import_body: ImportBody = Field(..., alias="importBody")
    upload_type: UploadType = Field(default=UploadType.FILE, alias="uploadType")

    @field_validator("upload_type")
    @classmethod
    def validate_upload_type(cls, v: UploadType) -> UploadType:
        """Only file uploads are supported."""
        if v is not UploadType.FILE:
            msg = f"Unsupported upload type: {v.value}"
            raise ValueError(msg)
        return v

    @classmethod
    def for_file(cls, payload: bytes, file_name: str) -> RegistrationRequest:
        """Build a file upload request."""
        return cls(
            import_body=ImportBody(model_file=payload, file_name=file_name),
            upload_type=UploadType.FILE,
        )

    @property
    def payload(self) -> bytes:
        return self.import_body.model_file

    @property
    def file_name(self) -> str:
        return self.import_body.file_name

    def to_wire(self) -> dict[str, object]:
        """Wire representation with camelCase keys and unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson."""
        return orjson.dumps(self.to_wire())
