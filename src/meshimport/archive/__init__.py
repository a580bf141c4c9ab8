"""Packaging of model definitions for upload."""

from meshimport.archive.builder import (
    ARCHIVE_SUFFIX,
    ArchiveEntry,
    ArchiveError,
    FileAccessError,
    PathResolutionError,
    build_archive,
    collect_entries,
    compress_stream,
    extract_archive,
    read_file_bytes,
    write_container,
)
from meshimport.archive.upload import InputPathError, prepare_upload, upload_file_name

__all__ = [
    "ARCHIVE_SUFFIX",
    "ArchiveEntry",
    "ArchiveError",
    "FileAccessError",
    "InputPathError",
    "PathResolutionError",
    "build_archive",
    "collect_entries",
    "compress_stream",
    "extract_archive",
    "prepare_upload",
    "read_file_bytes",
    "upload_file_name",
    "write_container",
]
