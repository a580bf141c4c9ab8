"""
Import pipeline: package, register, report.

    prepare_upload(path) -> RegistryClient.register -> ReportEngine.build -> sink

Input errors abort before any network call. Transport and decode errors
abort before any report output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from meshimport.archive.upload import prepare_upload
from meshimport.registry.client import RegistryClient
from meshimport.report.engine import ReportEngine, model_names_summary
from meshimport.report.render import ConsoleReportSink

if TYPE_CHECKING:
    from pathlib import Path

    from meshimport.config import RegistryClientConfig
    from meshimport.contracts.response import RegistryResponse
    from meshimport.report.blocks import DisplayBlock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import.

    Attributes:
        file_name: Name the payload was uploaded under.
        response: Decoded server response.
        blocks: Rendered report blocks.
    """

    file_name: str
    response: RegistryResponse
    blocks: list[DisplayBlock]

    @property
    def model_names(self) -> str:
        return model_names_summary(self.response)


async def import_model(
    path: Path,
    config: RegistryClientConfig | None = None,
    *,
    client: RegistryClient | None = None,
    engine: ReportEngine | None = None,
    sink: ConsoleReportSink | None = None,
) -> ImportResult:
    """Upload a model definition and render the server's report.

    Args:
        path: Model definition file or directory.
        config: Client configuration (ignored if client is given).
        client: Registration client; one is created and closed if omitted.
        engine: Report engine.
        sink: Output sink (default: terminal).

    Returns:
        ImportResult with the response and rendered blocks.

    Raises:
        ArchiveError: On input path or file read errors.
        RegistryError: On transport, status or decode errors.
    """
    request = prepare_upload(path)
    engine = engine or ReportEngine()
    sink = sink or ConsoleReportSink()

    if client is None:
        async with RegistryClient(config) as owned_client:
            response = await owned_client.register(request)
    else:
        response = await client.register(request)

    blocks = engine.build(response)
    sink.render(blocks)

    result = ImportResult(file_name=request.file_name, response=response, blocks=blocks)
    logger.info(
        "Import finished",
        extra={"file_name": result.file_name, "models": result.model_names},
    )
    return result
