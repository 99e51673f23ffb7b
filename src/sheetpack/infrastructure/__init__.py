"""Infrastructure layer - external concerns and formatters."""

from .formatters import CutListFormatter, JsonExporter, PackingReportFormatter

__all__ = [
    "CutListFormatter",
    "JsonExporter",
    "PackingReportFormatter",
]
