"""
HTTP client for the model registration endpoint.

One POST per call, no retries:
    POST <base_url>/api/meshmodels/register
    Content-Type: application/json
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp
import orjson
from pydantic import ValidationError

from meshimport.config import RegistryClientConfig
from meshimport.contracts.response import RegistryResponse

if TYPE_CHECKING:
    from types import TracebackType

    from meshimport.contracts.request import RegistrationRequest

logger = logging.getLogger(__name__)

REGISTER_PATH = "/api/meshmodels/register"

RESPONSE_SOURCE = "response body"


class RegistryError(Exception):
    """Base exception for registration requests."""


class TransportError(RegistryError):
    """Raised when the request cannot be sent or the body cannot be read."""

    def __init__(self, method: str, url: str, cause: BaseException) -> None:
        super().__init__(f"Failed to perform {method} request to {url}: {cause}")
        self.method = method
        self.url = url


class RegistrationRequestError(RegistryError):
    """Raised when the server answers with a non-success status."""

    def __init__(self, method: str, url: str, status: int, body: str = "") -> None:
        message = f"{method} request to {url} failed with status {status}"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message)
        self.method = method
        self.url = url
        self.status = status
        self.body = body


class ResponseDecodeError(RegistryError):
    """Raised when the response cannot be decoded into a RegistryResponse."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"Failed to unmarshal {source}: {cause}")
        self.source = source


def decode_response(body: bytes, source: str = RESPONSE_SOURCE) -> RegistryResponse:
    """Decode a raw response body.

    Raises:
        ResponseDecodeError: If the body is not JSON or has the wrong envelope shape.
    """
    try:
        return RegistryResponse.from_json(body)
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise ResponseDecodeError(source, e) from e


class RegistryClient:
    """
    Async client for the model registration endpoint.

    Usage:
        async with RegistryClient(config) as client:
            response = await client.register(request)
    """

    def __init__(self, config: RegistryClientConfig | None = None) -> None:
        self._config = config or RegistryClientConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    def register_url(self) -> str:
        return f"{self._config.base_url}{REGISTER_PATH}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_s)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                cookies=self._config.cookies or None,
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        headers = dict(self._config.headers)
        headers["Content-Type"] = "application/json"
        return headers

    async def register(self, request: RegistrationRequest) -> RegistryResponse:
        """
        Submit a model definition for registration.

        Args:
            request: Upload request with payload and file name.

        Returns:
            Decoded server response.

        Raises:
            TransportError: On connection failures or timeouts.
            RegistrationRequestError: On a non-2xx status.
            ResponseDecodeError: If the body cannot be decoded.
        """
        method = "POST"
        url = self.register_url
        body = request.to_json()

        logger.info(
            "Registering model",
            extra={"url": url, "file_name": request.file_name, "size_bytes": len(body)},
        )

        try:
            session = await self._get_session()
            async with session.post(url, data=body, headers=self._headers()) as resp:
                status = resp.status
                raw: bytes = await resp.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("Registration request failed", extra={"url": url, "error": str(e)})
            raise TransportError(method, url, e) from e

        if not 200 <= status < 300:
            text = raw.decode("utf-8", errors="replace")
            logger.error(
                "Registration rejected",
                extra={"url": url, "status": status, "body": text},
            )
            raise RegistrationRequestError(method, url, status, text)

        response = decode_response(raw)
        logger.debug(
            "Registration response decoded",
            extra=_response_stats(response),
        )
        return response


def _response_stats(response: RegistryResponse) -> dict[str, Any]:
    return {
        "models": len(response.model_names),
        "components": response.entity_count.comp_count,
        "relationships": response.entity_count.relationship_count,
        "errors": response.entity_count.total_err_count,
    }
