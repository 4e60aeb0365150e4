import pytest
from structlog.testing import capture_logs

from healthmd.exporters import ExportFormat
from healthmd.writer import WriteMode, resolve_content

EXISTING = "# Old\n\n## Sleep\n\nold\n\n## Journal\n\nmine\n"
NEW = "# New\n\n## Sleep\n\nnew\n"


@pytest.mark.parametrize("mode", list(WriteMode))
def test_missing_file_gets_new_content(mode):
    assert resolve_content(None, NEW, mode) == NEW


def test_overwrite():
    assert resolve_content(EXISTING, NEW, WriteMode.OVERWRITE) == NEW


def test_append_separates_with_blank_line():
    assert resolve_content("a\n", "b\n", WriteMode.APPEND) == "a\n\n\nb\n"
    assert resolve_content("", "b", WriteMode.APPEND) == "\n\nb"


def test_update_merges_markdown():
    assert resolve_content(EXISTING, NEW, WriteMode.UPDATE) == (
        "# New\n\n## Sleep\n\nnew\n## Journal\n\nmine\n"
    )


@pytest.mark.parametrize("fmt", [ExportFormat.JSON, ExportFormat.CSV, ExportFormat.PROPERTIES])
def test_update_falls_back_to_overwrite_with_warning(fmt):
    with capture_logs() as logs:
        assert resolve_content(EXISTING, NEW, WriteMode.UPDATE, fmt, target="Health/x") == NEW
    assert logs == [
        {
            "event": "update_fallback_overwrite",
            "log_level": "warning",
            "format": fmt.value,
            "target": "Health/x",
        }
    ]


def test_mode_verbs():
    assert WriteMode.OVERWRITE.verb == "Exported to"
    assert WriteMode.APPEND.verb == "Appended to"
    assert WriteMode.UPDATE.verb == "Updated"
