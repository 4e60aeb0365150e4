from __future__ import annotations

from enum import Enum
from typing import Optional

from ..models import HealthData
from ..preferences import FormatCustomization
from .csv_export import to_csv
from .json_export import to_json
from .markdown import to_markdown
from .properties import to_properties

__all__ = ["ExportFormat", "serialize", "to_csv", "to_json", "to_markdown", "to_properties"]


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    PROPERTIES = "properties"
    JSON = "json"
    CSV = "csv"

    @property
    def file_extension(self) -> str:
        if self is ExportFormat.JSON:
            return "json"
        if self is ExportFormat.CSV:
            return "csv"
        return "md"

    @property
    def supports_merge(self) -> bool:
        """Only plain Markdown has the heading structure the merge engine works on."""
        return self is ExportFormat.MARKDOWN


def serialize(
    data: HealthData,
    fmt: ExportFormat,
    customization: Optional[FormatCustomization] = None,
    include_metadata: bool = True,
) -> str:
    if fmt is ExportFormat.MARKDOWN:
        return to_markdown(data, customization, include_metadata=include_metadata)
    if fmt is ExportFormat.PROPERTIES:
        return to_properties(data, customization)
    if fmt is ExportFormat.JSON:
        return to_json(data, customization)
    return to_csv(data, customization)
