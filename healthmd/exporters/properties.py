"""Metadata-only Markdown: every metric flattened into the frontmatter block.

Meant for Obsidian Bases style queries, so values are bare numbers and list
values are slug tags.
"""
from __future__ import annotations

from typing import Optional

import structlog

from ..models import HealthData, valence_percent
from ..preferences import FormatCustomization
from ..utils import fixed, format_number, percent, slugify, unique, whole

logger = structlog.get_logger()


def _tags(values) -> str:
    return "[" + ", ".join(unique(slugify(v) for v in values)) + "]"


class _Frontmatter:
    def __init__(self, customization: FormatCustomization, date_text: str) -> None:
        self.policy = customization.frontmatter
        self.lines = ["---", *self.policy.header_lines(date_text)]

    def add(self, original_key: str, value: str) -> None:
        key = self.policy.output_key(original_key)
        if key is not None:
            self.lines.append(f"{key}: {value}")

    def close(self) -> str:
        self.lines.append("---")
        return "\n".join(self.lines)


def _sleep(fm: _Frontmatter, data: HealthData) -> None:
    s = data.sleep
    for key, seconds in (
        ("sleep_total_hours", s.total_duration),
        ("sleep_deep_hours", s.deep_sleep),
        ("sleep_rem_hours", s.rem_sleep),
        ("sleep_core_hours", s.core_sleep),
        ("sleep_awake_hours", s.awake_time),
        ("sleep_in_bed_hours", s.in_bed_time),
    ):
        if seconds > 0:
            fm.add(key, fixed(seconds / 3600, 2))


def _activity(fm: _Frontmatter, data: HealthData, customization: FormatCustomization) -> None:
    a = data.activity
    conv = customization.converter
    if a.steps is not None:
        fm.add("steps", str(a.steps))
    if a.active_calories is not None:
        fm.add("active_calories", str(whole(a.active_calories)))
    if a.basal_energy_burned is not None:
        fm.add("basal_calories", str(whole(a.basal_energy_burned)))
    if a.exercise_minutes is not None:
        fm.add("exercise_minutes", str(whole(a.exercise_minutes)))
    if a.stand_hours is not None:
        fm.add("stand_hours", str(a.stand_hours))
    if a.flights_climbed is not None:
        fm.add("flights_climbed", str(a.flights_climbed))
    if a.walking_running_distance is not None:
        fm.add("walking_running_km", fixed(conv.convert_distance(a.walking_running_distance), 2))
    if a.cycling_distance is not None:
        fm.add("cycling_km", fixed(conv.convert_distance(a.cycling_distance), 2))
    if a.swimming_distance is not None:
        fm.add("swimming_m", str(whole(a.swimming_distance)))
    if a.swimming_strokes is not None:
        fm.add("swimming_strokes", str(a.swimming_strokes))
    if a.push_count is not None:
        fm.add("wheelchair_pushes", str(a.push_count))


def _heart(fm: _Frontmatter, data: HealthData) -> None:
    h = data.heart
    for key, bpm in (
        ("resting_heart_rate", h.resting_heart_rate),
        ("walking_heart_rate", h.walking_heart_rate_average),
        ("average_heart_rate", h.average_heart_rate),
        ("heart_rate_min", h.heart_rate_min),
        ("heart_rate_max", h.heart_rate_max),
    ):
        if bpm is not None:
            fm.add(key, str(whole(bpm)))
    if h.hrv is not None:
        fm.add("hrv_ms", fixed(h.hrv, 1))


def _triple(fm: _Frontmatter, key: str, avg, lo, hi, render) -> None:
    # the average is written under the bare key and again as <key>_avg
    if avg is not None:
        fm.add(key, render(avg))
        fm.add(f"{key}_avg", render(avg))
    if lo is not None:
        fm.add(f"{key}_min", render(lo))
    if hi is not None:
        fm.add(f"{key}_max", render(hi))


def _vitals(fm: _Frontmatter, data: HealthData, customization: FormatCustomization) -> None:
    v = data.vitals
    conv = customization.converter
    one = lambda x: fixed(x, 1)  # noqa: E731
    _triple(fm, "respiratory_rate", v.respiratory_rate_avg, v.respiratory_rate_min,
            v.respiratory_rate_max, one)
    _triple(fm, "blood_oxygen", v.blood_oxygen_avg, v.blood_oxygen_min, v.blood_oxygen_max,
            lambda x: fixed(percent(x), 1))
    _triple(fm, "body_temperature", v.body_temperature_avg, v.body_temperature_min,
            v.body_temperature_max, lambda x: fixed(conv.convert_temperature(x), 1))
    _triple(fm, "blood_pressure_systolic", v.blood_pressure_systolic_avg,
            v.blood_pressure_systolic_min, v.blood_pressure_systolic_max, lambda x: str(whole(x)))
    _triple(fm, "blood_pressure_diastolic", v.blood_pressure_diastolic_avg,
            v.blood_pressure_diastolic_min, v.blood_pressure_diastolic_max, lambda x: str(whole(x)))
    _triple(fm, "blood_glucose", v.blood_glucose_avg, v.blood_glucose_min, v.blood_glucose_max, one)


def _body(fm: _Frontmatter, data: HealthData, customization: FormatCustomization) -> None:
    b = data.body
    conv = customization.converter
    if b.weight is not None:
        fm.add("weight_kg", fixed(conv.convert_weight(b.weight), 1))
    if b.height is not None:
        fm.add("height_cm", fixed(conv.convert_height(b.height), 1))
    if b.bmi is not None:
        fm.add("bmi", fixed(b.bmi, 1))
    if b.body_fat_percentage is not None:
        fm.add("body_fat_percent", fixed(percent(b.body_fat_percentage), 1))
    if b.lean_body_mass is not None:
        fm.add("lean_body_mass_kg", fixed(conv.convert_weight(b.lean_body_mass), 1))
    if b.waist_circumference is not None:
        fm.add("waist_circumference_cm", fixed(conv.convert_length(b.waist_circumference), 1))


def _nutrition(fm: _Frontmatter, data: HealthData, customization: FormatCustomization) -> None:
    n = data.nutrition
    if n.dietary_energy is not None:
        fm.add("dietary_calories", str(whole(n.dietary_energy)))
    for key, value in (
        ("protein_g", n.protein),
        ("carbohydrates_g", n.carbohydrates),
        ("fat_g", n.fat),
        ("saturated_fat_g", n.saturated_fat),
        ("fiber_g", n.fiber),
        ("sugar_g", n.sugar),
    ):
        if value is not None:
            fm.add(key, fixed(value, 1))
    if n.sodium is not None:
        fm.add("sodium_mg", str(whole(n.sodium)))
    if n.cholesterol is not None:
        fm.add("cholesterol_mg", fixed(n.cholesterol, 1))
    if n.water is not None:
        fm.add("water_l", fixed(customization.converter.convert_volume(n.water), 2))
    if n.caffeine is not None:
        fm.add("caffeine_mg", fixed(n.caffeine, 1))


def _mindfulness(fm: _Frontmatter, data: HealthData) -> None:
    m = data.mindfulness
    if m.mindful_minutes is not None:
        fm.add("mindful_minutes", str(whole(m.mindful_minutes)))
    if m.mindful_sessions is not None:
        fm.add("mindful_sessions", str(m.mindful_sessions))
    if not m.state_of_mind:
        return

    fm.add("mood_entries", str(len(m.state_of_mind)))
    avg = m.average_valence
    if avg is not None:
        fm.add("average_mood_valence", fixed(avg, 2))
        fm.add("average_mood_percent", str(valence_percent(avg)))
    if m.daily_moods:
        fm.add("daily_mood_count", str(len(m.daily_moods)))
        daily = m.average_daily_mood_valence
        if daily is not None:
            fm.add("daily_mood_percent", str(valence_percent(daily)))
    if m.momentary_emotions:
        fm.add("momentary_emotion_count", str(len(m.momentary_emotions)))
    if m.all_labels:
        fm.add("mood_labels", _tags(m.all_labels))
    if m.all_associations:
        fm.add("mood_associations", _tags(m.all_associations))


def _mobility(fm: _Frontmatter, data: HealthData) -> None:
    m = data.mobility
    if m.walking_speed is not None:
        fm.add("walking_speed", fixed(m.walking_speed, 2))
    if m.walking_step_length is not None:
        fm.add("step_length_cm", fixed(m.walking_step_length * 100, 1))
    if m.walking_double_support_percentage is not None:
        fm.add("double_support_percent", fixed(percent(m.walking_double_support_percentage), 1))
    if m.walking_asymmetry_percentage is not None:
        fm.add("walking_asymmetry_percent", fixed(percent(m.walking_asymmetry_percentage), 1))
    if m.stair_ascent_speed is not None:
        fm.add("stair_ascent_speed", fixed(m.stair_ascent_speed, 2))
    if m.stair_descent_speed is not None:
        fm.add("stair_descent_speed", fixed(m.stair_descent_speed, 2))
    if m.six_minute_walk_distance is not None:
        fm.add("six_min_walk_m", str(whole(m.six_minute_walk_distance)))


def _hearing(fm: _Frontmatter, data: HealthData) -> None:
    h = data.hearing
    if h.headphone_audio_level is not None:
        fm.add("headphone_audio_db", fixed(h.headphone_audio_level, 1))
    if h.environmental_sound_level is not None:
        fm.add("environmental_sound_db", fixed(h.environmental_sound_level, 1))


def _workouts(fm: _Frontmatter, data: HealthData, customization: FormatCustomization) -> None:
    workouts = data.workouts
    fm.add("workout_count", str(len(workouts)))
    fm.add("workout_minutes", str(int(sum(w.duration for w in workouts) // 60)))
    calories = sum(w.calories for w in workouts if w.calories is not None)
    if calories > 0:
        fm.add("workout_calories", str(whole(calories)))
    distance = sum(w.distance for w in workouts if w.distance is not None)
    if distance > 0:
        fm.add("workout_distance_km", fixed(customization.converter.convert_distance(distance), 2))
    fm.add("workouts", _tags(w.workout_type_name for w in workouts))


def _summary_line(data: HealthData) -> str:
    items: list[str] = []
    if data.sleep.total_duration > 0:
        # always hours and minutes here, even under an hour
        total = int(data.sleep.total_duration)
        items.append(f"{total // 3600}h {(total % 3600) // 60}m sleep")
    if data.activity.steps is not None:
        items.append(f"{format_number(data.activity.steps)} steps")
    if data.nutrition.dietary_energy is not None:
        items.append(f"{whole(data.nutrition.dietary_energy)} kcal")
    minutes = data.mindfulness.mindful_minutes
    if minutes is not None and minutes > 0:
        items.append(f"{whole(minutes)} mindful min")
    avg = data.mindfulness.average_valence
    if avg is not None:
        items.append(f"mood: {valence_percent(avg)}%")
    if data.workouts:
        count = len(data.workouts)
        suffix = "s" if count > 1 else ""
        types = unique(w.workout_type_name for w in data.workouts)
        if len(types) == 1:
            items.append(f"{count} {types[0].lower()} workout{suffix}")
        else:
            items.append(f"{count} workout{suffix}")
    return " · ".join(items)


def to_properties(data: HealthData, customization: Optional[FormatCustomization] = None) -> str:
    config = customization or FormatCustomization()
    date_text = config.format_date(data.date)
    fm = _Frontmatter(config, date_text)

    if data.sleep.has_data:
        _sleep(fm, data)
    if data.activity.has_data:
        _activity(fm, data, config)
    if data.heart.has_data:
        _heart(fm, data)
    if data.vitals.has_data:
        _vitals(fm, data, config)
    if data.body.has_data:
        _body(fm, data, config)
    if data.nutrition.has_data:
        _nutrition(fm, data, config)
    if data.mindfulness.has_data:
        _mindfulness(fm, data)
    if data.mobility.has_data:
        _mobility(fm, data)
    if data.hearing.has_data:
        _hearing(fm, data)
    if data.workouts:
        _workouts(fm, data, config)

    body = [f"\n# Health — {date_text}\n"]
    summary = _summary_line(data)
    if summary:
        body.append(f"\n{summary}\n")
    body.append("\n## Notes\n\n")

    text = fm.close() + "".join(body)
    logger.debug("properties_rendered", date=data.date.isoformat(), keys=len(fm.lines) - 2)
    return text
