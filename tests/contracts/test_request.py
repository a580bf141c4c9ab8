"""Tests for the registration request contract."""

from __future__ import annotations

import base64

import orjson
import pytest
from pydantic import ValidationError

from meshimport.contracts.request import ImportBody, RegistrationRequest, UploadType


class TestRegistrationRequest:
    """Tests for request construction and wire format."""

    def test_wire_format(self) -> None:
        """Body nests payload under importBody with a fixed uploadType."""
        request = RegistrationRequest.for_file(b"\x00\x01binary", "models.tar.gz")

        wire = orjson.loads(request.to_json())

        assert wire == {
            "importBody": {
                "model_file": base64.b64encode(b"\x00\x01binary").decode(),
                "file_name": "models.tar.gz",
            },
            "uploadType": "file",
        }

    def test_url_omitted_when_unset(self) -> None:
        """The reserved url field is not sent."""
        request = RegistrationRequest.for_file(b"x", "a.yaml")

        assert "url" not in request.to_wire()["importBody"]  # type: ignore[operator]

    def test_properties(self) -> None:
        request = RegistrationRequest.for_file(b"abc", "a.yaml")

        assert request.payload == b"abc"
        assert request.file_name == "a.yaml"

    def test_empty_file_name_rejected(self) -> None:
        """File name is mandatory."""
        with pytest.raises(ValidationError):
            RegistrationRequest.for_file(b"abc", "")

    def test_url_upload_rejected(self) -> None:
        """URL uploads are reserved and not accepted."""
        with pytest.raises(ValidationError, match="Unsupported upload type"):
            RegistrationRequest(
                import_body=ImportBody(model_file=b"", file_name="a.yaml", url="https://x"),
                upload_type=UploadType.URL,
            )

    def test_frozen(self) -> None:
        request = RegistrationRequest.for_file(b"abc", "a.yaml")

        with pytest.raises(ValidationError):
            request.upload_type = UploadType.FILE  # type: ignore[misc]
