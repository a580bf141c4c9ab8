"""Display blocks produced by the report engine and consumed by sinks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SummaryBlock:
    """Top-level summary line: `SUMMARY: <message>`."""

    message: str


@dataclass(frozen=True)
class ModelHeaderBlock:
    """Header for a logical model: `MODEL: <name>`."""

    model_name: str


@dataclass(frozen=True)
class TableBlock:
    """Table preceded by a blank line and an optional labelled title.

    Attributes:
        headers: Column headers.
        rows: Table rows, one string per column.
        label: Bold title label (e.g. "RELATIONSHIP:"), empty for untitled tables.
        title: Title text following the label.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    label: str = ""
    title: str = ""


@dataclass(frozen=True)
class ErrorBlock:
    """Error line: `ERROR: <message>` followed by a detail line.

    Attributes:
        message: Text after the `ERROR:` label.
        detail: Error description printed on its own line.
        indent: Indent the label under the model. File-level errors are not
            indented and carry a deeper detail line instead.
    """

    message: str
    detail: str = ""
    indent: bool = True


DisplayBlock = SummaryBlock | ModelHeaderBlock | TableBlock | ErrorBlock
