"""Human-readable reports for registration responses."""

from meshimport.report.blocks import (
    DisplayBlock,
    ErrorBlock,
    ModelHeaderBlock,
    SummaryBlock,
    TableBlock,
)
from meshimport.report.engine import (
    FILE_EXTENSIONS,
    ReportEngine,
    entity_type_phrase,
    group_relationships,
    has_file_extension,
    model_names_summary,
    partition_model_names,
    unsuccessful_entity_blocks,
)
from meshimport.report.render import ConsoleReportSink, render_text

__all__ = [
    "FILE_EXTENSIONS",
    "ConsoleReportSink",
    "DisplayBlock",
    "ErrorBlock",
    "ModelHeaderBlock",
    "ReportEngine",
    "SummaryBlock",
    "TableBlock",
    "entity_type_phrase",
    "group_relationships",
    "has_file_extension",
    "model_names_summary",
    "partition_model_names",
    "render_text",
    "unsuccessful_entity_blocks",
]
