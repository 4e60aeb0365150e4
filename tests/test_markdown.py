import datetime as dt

from healthmd.exporters import to_markdown
from healthmd.models import HealthData, MindfulnessData, MoodEntry, MoodKind
from healthmd.preferences import (
    BulletStyle,
    FormatCustomization,
    FrontmatterConfig,
    MarkdownTemplate,
)
from healthmd.units import UnitSystem


def test_small_day_exact_output(small_day):
    assert to_markdown(small_day) == (
        "---\n"
        "date: 2026-01-13\n"
        "type: health-data\n"
        "---\n"
        "\n"
        "# Health Data — 2026-01-13\n"
        "\n"
        "7h 30m sleep · 8,432 steps\n"
        "\n"
        "## Sleep\n"
        "\n"
        "- **Total:** 7h 30m\n"
        "\n"
        "## Activity\n"
        "\n"
        "- **Steps:** 8,432\n"
    )


def test_output_is_deterministic(day):
    assert to_markdown(day) == to_markdown(day)


def test_sections_in_fixed_order(day):
    text = to_markdown(day)
    headings = [line for line in text.splitlines() if line.startswith("## ")]
    assert headings == [
        "## Sleep", "## Activity", "## Heart", "## Vitals", "## Body",
        "## Nutrition", "## Mindfulness", "## Mobility", "## Hearing", "## Workouts",
    ]


def test_field_lines(day):
    lines = to_markdown(day).splitlines()
    for expected in (
        "7h 30m sleep · 8,432 steps · 2 workouts · mood 65%",
        "- **In Bed:** 8h 0m",
        "- **Active Calories:** 512 kcal",
        "- **Walking/Running Distance:** 6.23 km",
        "- **Resting HR:** 58 bpm",
        "- **HRV:** 45.3 ms",
        "- **Respiratory Rate:** 14.2 breaths/min",
        "- **SpO2:** 97% (range: 94%–99%)",
        "- **Weight:** 72.4 kg",
        "- **Body Fat:** 18.2%",
        "- **Calories:** 2,151 kcal",
        "- **Protein:** 98.3 g",
        "- **Water:** 2.50 L",
        "- **Walking Speed:** 4.5 km/h",
        "- **Headphone Audio Level:** 72.0 dB",
    ):
        assert expected in lines
    # absent or zero fields produce no line
    assert not any(line.startswith("- **Awake:**") for line in lines)
    assert not any(line.startswith("- **Basal Energy:**") for line in lines)


def test_mindfulness_block(day):
    text = to_markdown(day)
    assert (
        "- **Mindful Minutes:** 15 min\n"
        "\n"
        "- **Average Mood:** 65% (Pleasant)\n"
        "- **Daily Mood Entries:** 1\n"
        "- **Momentary Emotions:** 1\n"
        "- **Emotions/Moods:** Happy, Calm, Tired\n"
        "- **Associated With:** Work, Fitness\n"
        "\n"
        "### Mood Entries\n"
        "\n"
        "- **08:15** (Daily Mood): 75% — Happy, Calm\n"
        "- **18:40** (Momentary Emotion): 55% — Tired\n"
    ) in text


def test_workouts_are_numbered_sub_headings(day):
    assert to_markdown(day).endswith(
        "\n## Workouts\n"
        "\n### 1. Running\n\n"
        "- **Time:** 07:30\n"
        "- **Duration:** 30m\n"
        "- **Distance:** 5.21 km\n"
        "- **Calories:** 320 kcal\n"
        "\n### 2. Strength Training\n\n"
        "- **Time:** 17:00\n"
        "- **Duration:** 45m\n"
    )


def test_template_options(day):
    custom = FormatCustomization(
        markdown_template=MarkdownTemplate(
            section_header_level=3, bullet_style=BulletStyle.ASTERISK, use_emoji=True
        )
    )
    text = to_markdown(day, custom)
    assert "\n### 😴 Sleep\n" in text
    assert "\n### 💪 Workouts\n" in text
    assert "\n#### 1. Running\n" in text
    assert "\n#### Mood Entries\n" in text
    assert "* **Total:** 7h 30m\n" in text
    assert "🙂 mood 65%" in text
    assert "* **08:15** 🙂 (Daily Mood): 75% — Happy, Calm\n" in text


def test_summary_off_hides_mood_entry_list(day):
    custom = FormatCustomization(markdown_template=MarkdownTemplate(include_summary=False))
    text = to_markdown(day, custom)
    assert "mood 65%" not in text
    assert "Mood Entries" not in text
    assert "- **Average Mood:** 65% (Pleasant)" in text


def test_more_than_five_mood_entries_are_not_listed():
    entries = tuple(
        MoodEntry(timestamp=dt.datetime(2026, 1, 13, h), kind=MoodKind.MOMENTARY_EMOTION, valence=0.0)
        for h in range(8, 14)
    )
    data = HealthData(date=dt.date(2026, 1, 13), mindfulness=MindfulnessData(state_of_mind=entries))
    text = to_markdown(data)
    assert "- **Momentary Emotions:** 6" in text
    assert "Mood Entries" not in text


def test_metadata_block_policy(small_day):
    custom = FormatCustomization(
        frontmatter=FrontmatterConfig(
            date_key="day",
            include_type=False,
            custom_fields={"tags": "[health]", "author": "me"},
        )
    )
    assert to_markdown(small_day, custom).startswith(
        "---\nday: 2026-01-13\nauthor: me\ntags: [health]\n---\n\n# Health Data — 2026-01-13\n"
    )
    assert to_markdown(small_day, include_metadata=False).startswith("# Health Data — 2026-01-13\n")


def test_empty_day_renders_title_only():
    text = to_markdown(HealthData(date=dt.date(2026, 1, 13)), include_metadata=False)
    assert text == "# Health Data — 2026-01-13\n"


def test_imperial_units(day):
    text = to_markdown(day, FormatCustomization(unit_system=UnitSystem.IMPERIAL))
    assert "- **Weight:** 159.5 lbs\n" in text
    assert "- **Walking/Running Distance:** 3.87 mi\n" in text
