"""Turn an input path into a registration request.

Directories are packaged with build_archive and named <dirname>.tar.gz.
Single files are sent as-is under their base name.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from meshimport.archive.builder import (
    ARCHIVE_SUFFIX,
    ArchiveError,
    build_archive,
    read_file_bytes,
)
from meshimport.contracts.request import RegistrationRequest

logger = logging.getLogger(__name__)


class InputPathError(ArchiveError):
    """Raised when the input path cannot be accessed."""


def upload_file_name(path: Path, *, is_directory: bool) -> str:
    """File name reported to the server for an input path."""
    if is_directory:
        return f"{Path(os.path.abspath(path)).name}{ARCHIVE_SUFFIX}"
    return Path(path).name


def prepare_upload(path: Path) -> RegistrationRequest:
    """Read or package the input path.

    Args:
        path: Model definition file or directory.

    Returns:
        File upload request carrying the payload and display name.

    Raises:
        InputPathError: If the path does not exist or cannot be accessed.
        FileAccessError: If a file cannot be read.
        PathResolutionError: If an archive path cannot be computed.
    """
    path = Path(path)
    try:
        mode = path.stat().st_mode
    except OSError as e:
        msg = f"Could not access the specified path {path}: {e}"
        raise InputPathError(msg, path=path) from e

    is_directory = stat.S_ISDIR(mode)
    payload = build_archive(path) if is_directory else read_file_bytes(path)
    file_name = upload_file_name(path, is_directory=is_directory)

    logger.info(
        "Prepared upload",
        extra={"file_name": file_name, "size_bytes": len(payload), "archived": is_directory},
    )
    return RegistrationRequest.for_file(payload, file_name)
