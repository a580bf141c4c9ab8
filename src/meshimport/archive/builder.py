"""Directory-to-archive packaging.

Turns a directory tree into a single gzip-compressed tar stream.

Archive layout:
    <dirname>/file.yaml
    <dirname>/nested/relationship.json

Paths are relative to the parent of the walked directory so unpacking
reproduces the top-level directory name. Only regular files are stored.
Entries are sorted and carry fixed tar/gzip metadata, so identical trees
produce identical bytes.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"

_ENTRY_MODE = 0o644


class ArchiveError(Exception):
    """Base exception for archive operations."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class FileAccessError(ArchiveError):
    """Raised when a file cannot be opened or fully read."""


class PathResolutionError(ArchiveError):
    """Raised when an archive-relative path cannot be computed."""


@dataclass(frozen=True)
class ArchiveEntry:
    """Single file stored in an archive.

    Attributes:
        path: POSIX path relative to the archived directory's parent.
        content: Raw file bytes.
    """

    path: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def read_file_bytes(path: Path) -> bytes:
    """Read a whole file.

    Raises:
        FileAccessError: If the file cannot be opened or read.
    """
    try:
        with path.open("rb") as f:
            return f.read()
    except OSError as e:
        msg = f"Could not read file {path}: {e}"
        raise FileAccessError(msg, path=path) from e


def _relative_path(root_parent: Path, file_path: Path) -> str:
    try:
        relative = file_path.relative_to(root_parent)
    except ValueError as e:
        msg = f"Could not compute path of {file_path} relative to {root_parent}: {e}"
        raise PathResolutionError(msg, path=file_path) from e
    return PurePosixPath(*relative.parts).as_posix()


def collect_entries(directory: Path) -> list[ArchiveEntry]:
    """Walk a directory and read every regular file into an ArchiveEntry.

    Args:
        directory: Directory to walk.

    Returns:
        Entries sorted by archive path.

    Raises:
        FileAccessError: If the directory cannot be walked or a file cannot be read.
        PathResolutionError: If a relative path cannot be computed.
    """
    # abspath, not resolve: a symlinked root keeps the name it was given
    root = Path(os.path.abspath(directory))
    root_parent = root.parent

    def _on_walk_error(error: OSError) -> None:
        raise FileAccessError(
            f"Could not walk directory {error.filename}: {error}",
            path=error.filename,
        ) from error

    entries: list[ArchiveEntry] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            # Symlinks to files are followed; sockets, fifos and devices are skipped
            if not file_path.is_file():
                logger.debug("Skipping non-regular file", extra={"path": str(file_path)})
                continue
            entries.append(
                ArchiveEntry(
                    path=_relative_path(root_parent, file_path),
                    content=read_file_bytes(file_path),
                )
            )

    entries.sort(key=lambda entry: entry.path)
    return entries


def write_container(entries: list[ArchiveEntry]) -> bytes:
    """Write entries into an uncompressed tar container.

    Raises:
        ArchiveError: If two entries share a path.
    """
    buffer = io.BytesIO()
    seen: set[str] = set()

    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for entry in entries:
            if entry.path in seen:
                msg = f"Duplicate archive path: {entry.path}"
                raise ArchiveError(msg, path=entry.path)
            seen.add(entry.path)

            info = tarfile.TarInfo(name=entry.path)
            info.size = entry.size_bytes
            info.mode = _ENTRY_MODE
            info.mtime = 0
            info.uid = info.gid = 0
            info.uname = info.gname = ""
            tar.addfile(info, io.BytesIO(entry.content))

    return buffer.getvalue()


def compress_stream(data: bytes) -> bytes:
    """Gzip-compress a byte stream with a zeroed header timestamp."""
    return gzip.compress(data, mtime=0)


def build_archive(directory: Path) -> bytes:
    """Package a directory into a gzip-compressed tar stream.

    Args:
        directory: Directory to package.

    Returns:
        Compressed archive bytes.

    Raises:
        FileAccessError: If any file cannot be read (no partial archive is produced).
        PathResolutionError: If a relative path cannot be computed.
    """
    entries = collect_entries(directory)
    container = write_container(entries)
    archive = compress_stream(container)

    logger.info(
        "Built archive",
        extra={
            "directory": str(directory),
            "entries": len(entries),
            "container_bytes": len(container),
            "archive_bytes": len(archive),
        },
    )
    return archive


def extract_archive(data: bytes) -> dict[str, bytes]:
    """Unpack an archive produced by build_archive.

    Returns:
        Mapping of archive path to file bytes, in archive order.
    """
    files: dict[str, bytes] = {}
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        for member in tar.getmembers():
            if not member.isfile():
                continue
            extracted = tar.extractfile(member)
            if extracted is None:
                continue
            with extracted:
                files[member.name] = extracted.read()
    return files
