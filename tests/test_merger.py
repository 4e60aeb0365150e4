import pytest

from healthmd.exporters import to_markdown
from healthmd.merger import (
    detect_section_level,
    heading_level,
    merge,
    normalize_heading,
    parse,
    split_lines,
)
from healthmd.models import ActivityData, HealthData, SleepData
from healthmd.preferences import BulletStyle, FormatCustomization, MarkdownTemplate
from healthmd.writer import WriteMode, resolve_content

PLAIN = FormatCustomization(markdown_template=MarkdownTemplate(include_summary=False))

EXISTING_WITH_JOURNAL = (
    "# Health Data — 2026-01-13\n"
    "\n"
    "## Sleep\n"
    "\n"
    "- **Total:** 6h 0m\n"
    "\n"
    "## Journal\n"
    "\n"
    "Felt great today.\n"
    "\n"
    "## Activity\n"
    "\n"
    "- **Steps:** 5,000\n"
)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("## Sleep", "sleep"),
        ("## 😴 Sleep", "sleep"),
        ("## SLEEP\n", "sleep"),
        ("##   Sleep  ", "sleep"),
        ("## ❤️ Heart", "heart"),
        ("### My Custom  Notes", "my custom notes"),
    ],
)
def test_normalize_heading(line, expected):
    assert normalize_heading(line) == expected


def test_heading_level():
    assert heading_level("## Sleep") == 2
    assert heading_level("### 1. Running\n") == 3
    assert heading_level("  # Title") == 1
    assert heading_level("##Sleep") == 0
    assert heading_level("#") == 0
    assert heading_level("# ") == 0
    assert heading_level("plain text") == 0


def test_split_lines_keeps_terminators():
    assert split_lines("a\nb\r\n\nc") == ["a\n", "b\r\n", "\n", "c"]
    assert split_lines("a\n") == ["a\n"]
    assert split_lines("") == []


@pytest.mark.parametrize(
    "text",
    [
        "",
        "no headings at all",
        "---\ndate: 2026-01-13\n---\n\n# Title\n\n## Sleep\n\nx\n## Notes\nno newline",
        "---\nunterminated\n## Sleep\n",
        "## Sleep\r\n\r\nwindows\r\n",
        "#### deep\n## Sleep\n### sub\ntext\n",
    ],
)
def test_parse_is_lossless(text):
    for level in (1, 2, 3):
        assert parse(text, level).text == text


def test_parse_splits_at_exact_level_only():
    doc = parse("# Title\n\n## Sleep\n\n### Detail\n\nx\n\n## Notes\n", 2)
    assert doc.preamble == "# Title\n\n"
    assert [s.key for s in doc.sections] == ["sleep", "notes"]
    assert doc.sections[0].body == "\n### Detail\n\nx\n\n"


def test_unterminated_frontmatter_is_preamble():
    doc = parse("---\nfoo: bar\n", 2)
    assert doc.frontmatter == ""
    assert doc.preamble == "---\nfoo: bar\n"


def test_detect_section_level():
    assert detect_section_level("# Title\n\n### 😴 Sleep\n\nx\n") == 3
    assert detect_section_level("# Activity\n") == 1
    assert detect_section_level("# Title\n\n## Journal\n") == 2
    assert detect_section_level("") == 2


@pytest.mark.parametrize(
    "template",
    [
        MarkdownTemplate(),
        MarkdownTemplate(use_emoji=True, section_header_level=3, bullet_style=BulletStyle.PLUS),
        MarkdownTemplate(section_header_level=1),
    ],
)
def test_merge_with_itself_is_identity(day, template):
    text = to_markdown(day, FormatCustomization(markdown_template=template))
    assert merge(text, text) == text


def test_first_export_is_the_new_content(small_day):
    new = to_markdown(small_day)
    assert merge("", new) == new


def test_re_export_keeps_user_notes_in_place(small_day):
    new = to_markdown(small_day, PLAIN, include_metadata=False)
    assert merge(EXISTING_WITH_JOURNAL, new) == (
        "# Health Data — 2026-01-13\n"
        "\n"
        "## Sleep\n"
        "\n"
        "- **Total:** 7h 30m\n"
        "\n"
        "## Journal\n"
        "\n"
        "Felt great today.\n"
        "\n"
        "## Activity\n"
        "\n"
        "- **Steps:** 8,432\n"
    )


def test_new_category_is_appended(small_day):
    existing = "# Health Data — 2026-01-13\n\n## Sleep\n\n- **Total:** 6h 0m\n"
    new = to_markdown(small_day, PLAIN, include_metadata=False)
    assert merge(existing, new) == new


def test_managed_sections_are_fully_replaced(day, small_day):
    existing = to_markdown(day)
    merged = merge(existing, to_markdown(small_day))
    assert "- **Total:** 7h 30m\n" in merged
    # sections the new export no longer has are left alone
    assert "## Heart\n\n- **Resting HR:** 58 bpm\n" in merged
    assert merged.count("## Sleep") == 1


def test_user_sections_survive_verbatim(day):
    user = "## Journal\n\nLine one.\n\n### Sub heading\n\n- kept bullet\n\n"
    existing = to_markdown(day, PLAIN).replace("## Heart\n", user + "## Heart\n")
    merged = merge(existing, to_markdown(day, PLAIN))
    assert user in merged
    assert merged.index("## Journal") < merged.index("## Heart")


def test_frontmatter_comes_from_new_content():
    existing = "---\ndate: old\n---\n\n# T\n\n## Sleep\n\nold\n\n## Notes\n\nmine\n"
    new = "---\ndate: new\n---\n\n# T\n\n## Sleep\n\nnew\n"
    assert merge(existing, new) == "---\ndate: new\n---\n\n# T\n\n## Sleep\n\nnew\n## Notes\n\nmine\n"


def test_last_section_without_newline_is_terminated():
    existing = "## Sleep\n\nold\n\n## Journal\n\nno newline"
    new = "## Sleep\n\nnew\n\n## Activity\n\nsteps\n"
    assert merge(existing, new) == "## Sleep\n\nnew\n\n## Journal\n\nno newline\n## Activity\n\nsteps\n"


def test_deeper_section_level_is_detected(small_day):
    existing = "# Title\n\n### Sleep\n\nold\n\n### Notes\n\nmine\n"
    custom = FormatCustomization(
        markdown_template=MarkdownTemplate(section_header_level=3, include_summary=False)
    )
    new = to_markdown(small_day, custom, include_metadata=False)
    assert merge(existing, new) == (
        "# Health Data — 2026-01-13\n"
        "\n"
        "### Sleep\n"
        "\n"
        "- **Total:** 7h 30m\n"
        "\n"
        "### Notes\n"
        "\n"
        "mine\n"
        "### Activity\n"
        "\n"
        "- **Steps:** 8,432\n"
    )


def test_repeated_keys_are_all_replaced():
    existing = "## Notes\n\na\n\n## Notes\n\nb\n"
    new = "## Sleep\n\nx\n\n## Notes\n\nc\n"
    assert merge(existing, new) == "## Notes\n\nc\n## Notes\n\nc\n## Sleep\n\nx\n\n"


def test_repeated_new_key_is_appended_once_last_wins():
    assert merge("", "## Notes\n\n1\n\n## Notes\n\n2\n") == "## Notes\n\n2\n"


def test_update_after_append_leaves_no_stale_values(small_day):
    old = HealthData(
        date=small_day.date,
        sleep=SleepData(total_duration=21600),
        activity=ActivityData(steps=5000),
    )
    old_text = to_markdown(old, PLAIN)
    appended = resolve_content(old_text, old_text, WriteMode.APPEND)
    new = to_markdown(small_day, PLAIN)
    merged = resolve_content(appended, new, WriteMode.UPDATE)
    assert "6h 0m" not in merged
    assert "5,000" not in merged
    assert merged.count("- **Total:** 7h 30m\n") == 2
    assert merged.count("- **Steps:** 8,432\n") == 2
    assert merged.startswith(new[: new.index("## Sleep")])
    assert resolve_content(merged, new, WriteMode.UPDATE) == merged


def test_preamble_always_comes_from_new_content():
    assert merge("just some text\n", "## Sleep\n\nx\n") == "## Sleep\n\nx\n"
    assert merge("old title\n\n## Sleep\n\ny\n", "new title\n\n## Sleep\n\nx\n") == (
        "new title\n\n## Sleep\n\nx\n"
    )


def test_merge_converges(day):
    existing = EXISTING_WITH_JOURNAL
    new = to_markdown(day)
    once = merge(existing, new)
    assert merge(once, new) == once
