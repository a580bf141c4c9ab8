"""Model registration client and import pipeline."""

from meshimport.registry.client import (
    REGISTER_PATH,
    RegistrationRequestError,
    RegistryClient,
    RegistryError,
    ResponseDecodeError,
    TransportError,
    decode_response,
)
from meshimport.registry.pipeline import ImportResult, import_model

__all__ = [
    "REGISTER_PATH",
    "ImportResult",
    "RegistrationRequestError",
    "RegistryClient",
    "RegistryError",
    "ResponseDecodeError",
    "TransportError",
    "decode_response",
    "import_model",
]
