"""One small note per workout and per mood entry, next to the daily note."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from .models import HealthData, MoodEntry, WorkoutData
from .preferences import FormatCustomization
from .utils import fixed, format_duration, localize, slugify, unique, whole

logger = structlog.get_logger()

WORKOUTS_FOLDER = "workouts"
MOOD_FOLDER = "mood"


@dataclass(frozen=True)
class EntryFile:
    relative_path: str  # relative to the folder of the daily note
    content: str


def _tag_list(values) -> str:
    return "[" + ", ".join(unique(slugify(v) for v in values)) + "]"


def _frontmatter(lines: list[str]) -> str:
    return "---\n" + "".join(f"{line}\n" for line in lines) + "---\n"


def _workout_note(data: HealthData, workout: WorkoutData, customization: FormatCustomization) -> str:
    conv = customization.converter
    bullet = customization.markdown_template.bullet
    date_text = customization.format_date(data.date)
    time_text = customization.format_time(workout.start_time)

    meta = [
        f"date: {date_text}",
        f"time: {time_text}",
        f"category: {WORKOUTS_FOLDER}",
        f"type: {slugify(workout.workout_type_name)}",
        f"duration_minutes: {whole(workout.duration / 60)}",
    ]
    body = [f"{bullet} **Duration:** {format_duration(workout.duration)}"]
    if workout.has_distance:
        meta.append(f"distance_{conv.distance_unit()}: {fixed(conv.convert_distance(workout.distance), 2)}")
        body.append(f"{bullet} **Distance:** {conv.format_distance(workout.distance)}")
    if workout.has_calories:
        meta.append(f"calories: {whole(workout.calories)}")
        body.append(f"{bullet} **Calories:** {whole(workout.calories)} kcal")

    return (
        _frontmatter(meta)
        + f"\n# {workout.workout_type_name} — {date_text} {time_text}\n\n"
        + "".join(f"{line}\n" for line in body)
    )


def _mood_note(data: HealthData, entry: MoodEntry, customization: FormatCustomization) -> str:
    bullet = customization.markdown_template.bullet
    date_text = customization.format_date(data.date)
    time_text = customization.format_time(entry.timestamp)

    meta = [
        f"date: {date_text}",
        f"time: {time_text}",
        f"category: {MOOD_FOLDER}",
        f"type: {slugify(entry.kind.value)}",
        f"valence: {fixed(entry.valence, 2)}",
        f"valence_percent: {entry.valence_percent}",
    ]
    body = [f"{bullet} **Mood:** {entry.valence_percent}% ({entry.valence_description})"]
    if entry.labels:
        meta.append(f"labels: {_tag_list(entry.labels)}")
        body.append(f"{bullet} **Emotions/Moods:** {', '.join(entry.labels)}")
    if entry.associations:
        meta.append(f"associations: {_tag_list(entry.associations)}")
        body.append(f"{bullet} **Associated With:** {', '.join(entry.associations)}")

    return (
        _frontmatter(meta)
        + f"\n# {entry.kind.value} — {date_text} {time_text}\n\n"
        + "".join(f"{line}\n" for line in body)
    )


def _file_name(data: HealthData, instant, slug: str, tz_name: Optional[str]) -> str:
    local = localize(instant, tz_name)
    return f"{data.date.isoformat()}_{local:%H%M}_{slug}"


def build_entries(
    data: HealthData,
    customization: Optional[FormatCustomization] = None,
    folder: str = "entries",
    by_category: bool = True,
) -> list[EntryFile]:
    """Entry files for every workout and mood entry, in snapshot order.

    Two events of the same kind in the same minute get ``-2``, ``-3`` ...
    suffixes so neither overwrites the other.
    """
    config = customization or FormatCustomization()
    out: list[EntryFile] = []
    seen: dict[str, int] = {}

    def place(category: str, stem: str, content: str) -> None:
        parts = [p for p in (folder, category if by_category else "") if p]
        base = "/".join([*parts, stem])
        seen[base] = seen.get(base, 0) + 1
        if seen[base] > 1:
            base = f"{base}-{seen[base]}"
        out.append(EntryFile(relative_path=f"{base}.md", content=content))

    for workout in data.workouts:
        stem = _file_name(data, workout.start_time, slugify(workout.workout_type_name), config.timezone)
        place(WORKOUTS_FOLDER, stem, _workout_note(data, workout, config))

    for entry in data.mindfulness.state_of_mind:
        stem = _file_name(data, entry.timestamp, slugify(entry.kind.value), config.timezone)
        place(MOOD_FOLDER, stem, _mood_note(data, entry, config))

    logger.debug("entries_built", date=data.date.isoformat(), count=len(out))
    return out
