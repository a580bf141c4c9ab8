"""Console sink rendering display blocks with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from meshimport.report.blocks import ErrorBlock, ModelHeaderBlock, SummaryBlock, TableBlock

if TYPE_CHECKING:
    from collections.abc import Iterable

    from meshimport.report.blocks import DisplayBlock


class ConsoleReportSink:
    """
    Writes report blocks to a terminal.

    Labels are bold; server-supplied text is never interpreted as markup.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def render(self, blocks: Iterable[DisplayBlock]) -> None:
        """Render blocks in order."""
        for block in blocks:
            self.render_block(block)

    def render_block(self, block: DisplayBlock) -> None:
        if isinstance(block, SummaryBlock):
            self._console.print(Text.assemble(("SUMMARY", "bold"), f": {block.message}"))
        elif isinstance(block, ModelHeaderBlock):
            self._console.print()
            self._console.print(Text.assemble(("MODEL", "bold"), f": {block.model_name}"))
        elif isinstance(block, TableBlock):
            self._render_table(block)
        elif isinstance(block, ErrorBlock):
            label_indent, detail_indent = ("  ", "  ") if block.indent else ("", "    ")
            self._console.print()
            self._console.print(
                Text.assemble(label_indent, ("ERROR", "bold red"), f": {block.message}")
            )
            if block.detail:
                self._console.print(Text(f"{detail_indent}{block.detail}"))
        else:
            raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _render_table(self, block: TableBlock) -> None:
        self._console.print()
        if block.label:
            self._console.print(Text.assemble("  ", (block.label, "bold"), f" {block.title}"))

        table = Table(show_header=True, box=box.SIMPLE_HEAD, header_style="bold")
        for header in block.headers:
            table.add_column(header)
        for row in block.rows:
            table.add_row(*(Text(cell) for cell in row))
        self._console.print(table)


def render_text(blocks: Iterable[DisplayBlock], *, width: int = 120) -> str:
    """Render blocks to plain text without colors."""
    console = Console(width=width, color_system=None, force_terminal=False)
    with console.capture() as capture:
        ConsoleReportSink(console).render(blocks)
    return capture.get()
