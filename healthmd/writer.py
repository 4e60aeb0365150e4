from __future__ import annotations

from enum import Enum
from typing import Optional

import structlog

from .exporters import ExportFormat
from .merger import merge

logger = structlog.get_logger()


class WriteMode(str, Enum):
    OVERWRITE = "overwrite"
    APPEND = "append"
    UPDATE = "update"

    @property
    def verb(self) -> str:
        """Past-tense status word used in CLI output."""
        if self is WriteMode.APPEND:
            return "Appended to"
        if self is WriteMode.UPDATE:
            return "Updated"
        return "Exported to"


def resolve_content(
    existing: Optional[str],
    new: str,
    mode: WriteMode,
    fmt: ExportFormat = ExportFormat.MARKDOWN,
    target: Optional[str] = None,
) -> str:
    """Decide what ends up in the file.

    ``existing`` is None when the file does not exist yet. ``target`` is only
    used to label log lines.
    """
    if existing is None or mode is WriteMode.OVERWRITE:
        return new
    if mode is WriteMode.APPEND:
        return existing + "\n\n" + new
    if not fmt.supports_merge:
        # no section structure to merge into; the previous file is replaced
        logger.warning("update_fallback_overwrite", format=fmt.value, target=target)
        return new
    return merge(existing, new)
