from __future__ import annotations

from typing import Optional

import structlog

from ..models import HealthData, valence_description, valence_percent
from ..preferences import FormatCustomization
from ..units import UnitConverter
from ..utils import fixed, format_duration, format_number, percent, plural, whole

logger = structlog.get_logger()

SECTION_EMOJI = {
    "sleep": "😴",
    "activity": "🏃",
    "heart": "❤️",
    "vitals": "🩺",
    "body": "📏",
    "nutrition": "🍎",
    "mindfulness": "🧘",
    "mobility": "🚶",
    "hearing": "👂",
    "workouts": "💪",
}

# mood entries are only listed one by one up to this many
MAX_LISTED_MOOD_ENTRIES = 5


def _mood_emoji(avg_valence: float) -> str:
    if avg_valence >= 0.2:
        return "🙂"
    if avg_valence <= -0.2:
        return "😔"
    return "😐"


def _range(lo: Optional[float], hi: Optional[float], fmt) -> str:
    if lo is None or hi is None or lo == hi:
        return ""
    return f" (range: {fmt(lo)}–{fmt(hi)})"


class _Doc:
    """Line buffer for one document; joined once at the end."""

    def __init__(self, customization: FormatCustomization) -> None:
        self.parts: list[str] = []
        self.template = customization.markdown_template
        self.bullet = self.template.bullet

    def add(self, text: str) -> None:
        self.parts.append(text)

    def section(self, key: str, title: str, trailing_blank: bool = True) -> None:
        emoji = f"{SECTION_EMOJI[key]} " if self.template.use_emoji else ""
        self.add(f"\n{self.template.heading()} {emoji}{title}\n")
        if trailing_blank:
            self.add("\n")

    def item(self, label: str, value: str) -> None:
        self.add(f"{self.bullet} **{label}:** {value}\n")

    def text(self) -> str:
        return "".join(self.parts)


# ---------- sections ----------

def _summary(doc: _Doc, data: HealthData, use_emoji: bool) -> None:
    parts: list[str] = []
    if data.sleep.total_duration > 0:
        parts.append(f"{format_duration(data.sleep.total_duration)} sleep")
    if data.activity.steps is not None:
        parts.append(f"{format_number(data.activity.steps)} steps")
    if data.workouts:
        parts.append(plural(len(data.workouts), "workout"))
    avg = data.mindfulness.average_valence
    if avg is not None:
        emoji = f"{_mood_emoji(avg)} " if use_emoji else ""
        parts.append(f"{emoji}mood {valence_percent(avg)}%")
    if parts:
        doc.add("\n" + " · ".join(parts) + "\n")


def _sleep(doc: _Doc, data: HealthData) -> None:
    s = data.sleep
    doc.section("sleep", "Sleep")
    for label, seconds in (
        ("Total", s.total_duration),
        ("In Bed", s.in_bed_time),
        ("Deep", s.deep_sleep),
        ("REM", s.rem_sleep),
        ("Core", s.core_sleep),
        ("Awake", s.awake_time),
    ):
        if seconds > 0:
            doc.item(label, format_duration(seconds))


def _activity(doc: _Doc, data: HealthData, conv: UnitConverter) -> None:
    a = data.activity
    doc.section("activity", "Activity")
    if a.steps is not None:
        doc.item("Steps", format_number(a.steps))
    if a.active_calories is not None:
        doc.item("Active Calories", f"{format_number(whole(a.active_calories))} kcal")
    if a.basal_energy_burned is not None:
        doc.item("Basal Energy", f"{format_number(whole(a.basal_energy_burned))} kcal")
    if a.exercise_minutes is not None:
        doc.item("Exercise", f"{whole(a.exercise_minutes)} min")
    if a.stand_hours is not None:
        doc.item("Stand Hours", str(a.stand_hours))
    if a.flights_climbed is not None:
        doc.item("Flights Climbed", str(a.flights_climbed))
    if a.walking_running_distance is not None:
        doc.item("Walking/Running Distance", conv.format_distance(a.walking_running_distance))
    if a.cycling_distance is not None:
        doc.item("Cycling Distance", conv.format_distance(a.cycling_distance))
    if a.swimming_distance is not None:
        doc.item("Swimming Distance", conv.format_distance(a.swimming_distance))
    if a.swimming_strokes is not None:
        doc.item("Swimming Strokes", format_number(a.swimming_strokes))
    if a.push_count is not None:
        doc.item("Wheelchair Pushes", format_number(a.push_count))


def _heart(doc: _Doc, data: HealthData) -> None:
    h = data.heart
    doc.section("heart", "Heart")
    for label, bpm in (
        ("Resting HR", h.resting_heart_rate),
        ("Walking HR Average", h.walking_heart_rate_average),
        ("Average HR", h.average_heart_rate),
        ("Min HR", h.heart_rate_min),
        ("Max HR", h.heart_rate_max),
    ):
        if bpm is not None:
            doc.item(label, f"{whole(bpm)} bpm")
    if h.hrv is not None:
        doc.item("HRV", f"{fixed(h.hrv, 1)} ms")


def _vitals(doc: _Doc, data: HealthData, conv: UnitConverter) -> None:
    v = data.vitals
    doc.section("vitals", "Vitals")

    if v.respiratory_rate_avg is not None:
        rng = _range(v.respiratory_rate_min, v.respiratory_rate_max, lambda x: fixed(x, 1))
        doc.item("Respiratory Rate", f"{fixed(v.respiratory_rate_avg, 1)} breaths/min{rng}")

    if v.blood_oxygen_avg is not None:
        rng = _range(v.blood_oxygen_min, v.blood_oxygen_max, lambda x: f"{whole(percent(x))}%")
        doc.item("SpO2", f"{whole(percent(v.blood_oxygen_avg))}%{rng}")

    if v.body_temperature_avg is not None:
        rng = _range(v.body_temperature_min, v.body_temperature_max, conv.format_temperature)
        doc.item("Body Temperature", f"{conv.format_temperature(v.body_temperature_avg)}{rng}")

    if v.blood_pressure_systolic_avg is not None and v.blood_pressure_diastolic_avg is not None:
        text = f"{whole(v.blood_pressure_systolic_avg)}/{whole(v.blood_pressure_diastolic_avg)} mmHg"
        bounds = (
            v.blood_pressure_systolic_min, v.blood_pressure_systolic_max,
            v.blood_pressure_diastolic_min, v.blood_pressure_diastolic_max,
        )
        if None not in bounds:
            sys_min, sys_max, dia_min, dia_max = bounds
            if sys_min != sys_max or dia_min != dia_max:
                text += (
                    f" (range: {whole(sys_min)}/{whole(dia_min)}"
                    f"–{whole(sys_max)}/{whole(dia_max)})"
                )
        doc.item("Blood Pressure", text)

    if v.blood_glucose_avg is not None:
        rng = _range(v.blood_glucose_min, v.blood_glucose_max, lambda x: fixed(x, 1))
        doc.item("Blood Glucose", f"{fixed(v.blood_glucose_avg, 1)} mg/dL{rng}")


def _body(doc: _Doc, data: HealthData, conv: UnitConverter) -> None:
    b = data.body
    doc.section("body", "Body")
    if b.weight is not None:
        doc.item("Weight", conv.format_weight(b.weight))
    if b.height is not None:
        doc.item("Height", conv.format_height(b.height))
    if b.bmi is not None:
        doc.item("BMI", fixed(b.bmi, 1))
    if b.body_fat_percentage is not None:
        doc.item("Body Fat", f"{fixed(percent(b.body_fat_percentage), 1)}%")
    if b.lean_body_mass is not None:
        doc.item("Lean Body Mass", conv.format_weight(b.lean_body_mass))
    if b.waist_circumference is not None:
        doc.item("Waist Circumference", conv.format_length(b.waist_circumference))


def _nutrition(doc: _Doc, data: HealthData, conv: UnitConverter) -> None:
    n = data.nutrition
    doc.section("nutrition", "Nutrition")
    if n.dietary_energy is not None:
        doc.item("Calories", f"{format_number(whole(n.dietary_energy))} kcal")
    for label, grams in (
        ("Protein", n.protein),
        ("Carbohydrates", n.carbohydrates),
        ("Fat", n.fat),
        ("Saturated Fat", n.saturated_fat),
        ("Fiber", n.fiber),
        ("Sugar", n.sugar),
    ):
        if grams is not None:
            doc.item(label, f"{fixed(grams, 1)} g")
    if n.sodium is not None:
        doc.item("Sodium", f"{format_number(whole(n.sodium))} mg")
    if n.cholesterol is not None:
        doc.item("Cholesterol", f"{fixed(n.cholesterol, 1)} mg")
    if n.water is not None:
        doc.item("Water", conv.format_volume(n.water))
    if n.caffeine is not None:
        doc.item("Caffeine", f"{fixed(n.caffeine, 1)} mg")


def _mindfulness(doc: _Doc, data: HealthData, customization: FormatCustomization) -> None:
    m = data.mindfulness
    template = customization.markdown_template
    doc.section("mindfulness", "Mindfulness")
    if m.mindful_minutes is not None:
        doc.item("Mindful Minutes", f"{whole(m.mindful_minutes)} min")
    if m.mindful_sessions is not None:
        doc.item("Sessions", str(m.mindful_sessions))

    if not m.state_of_mind:
        return

    doc.add("\n")
    avg = m.average_valence
    if avg is not None:
        doc.item("Average Mood", f"{valence_percent(avg)}% ({valence_description(avg)})")
    if m.daily_moods:
        doc.item("Daily Mood Entries", str(len(m.daily_moods)))
    if m.momentary_emotions:
        doc.item("Momentary Emotions", str(len(m.momentary_emotions)))
    if m.all_labels:
        doc.item("Emotions/Moods", ", ".join(m.all_labels))
    if m.all_associations:
        doc.item("Associated With", ", ".join(m.all_associations))

    if template.include_summary and len(m.state_of_mind) <= MAX_LISTED_MOOD_ENTRIES:
        doc.add(f"\n{template.heading(1)} Mood Entries\n\n")
        for entry in m.state_of_mind:
            emoji = f"{entry.valence_emoji} " if template.use_emoji else ""
            line = (
                f"{doc.bullet} **{customization.format_time(entry.timestamp)}** "
                f"{emoji}({entry.kind.value}): {entry.valence_percent}%"
            )
            if entry.labels:
                line += " — " + ", ".join(entry.labels)
            doc.add(line + "\n")


def _mobility(doc: _Doc, data: HealthData, conv: UnitConverter) -> None:
    m = data.mobility
    doc.section("mobility", "Mobility")
    if m.walking_speed is not None:
        doc.item("Walking Speed", conv.format_speed(m.walking_speed))
    if m.walking_step_length is not None:
        doc.item("Step Length", conv.format_length(m.walking_step_length))
    if m.walking_double_support_percentage is not None:
        doc.item("Double Support", f"{fixed(percent(m.walking_double_support_percentage), 1)}%")
    if m.walking_asymmetry_percentage is not None:
        doc.item("Walking Asymmetry", f"{fixed(percent(m.walking_asymmetry_percentage), 1)}%")
    if m.stair_ascent_speed is not None:
        doc.item("Stair Ascent Speed", conv.format_speed(m.stair_ascent_speed))
    if m.stair_descent_speed is not None:
        doc.item("Stair Descent Speed", conv.format_speed(m.stair_descent_speed))
    if m.six_minute_walk_distance is not None:
        doc.item("6-Min Walk Distance", conv.format_distance(m.six_minute_walk_distance))


def _hearing(doc: _Doc, data: HealthData) -> None:
    h = data.hearing
    doc.section("hearing", "Hearing")
    if h.headphone_audio_level is not None:
        doc.item("Headphone Audio Level", f"{fixed(h.headphone_audio_level, 1)} dB")
    if h.environmental_sound_level is not None:
        doc.item("Environmental Sound Level", f"{fixed(h.environmental_sound_level, 1)} dB")


def _workouts(doc: _Doc, data: HealthData, customization: FormatCustomization) -> None:
    conv = customization.converter
    sub = customization.markdown_template.heading(1)
    doc.section("workouts", "Workouts", trailing_blank=False)
    for index, workout in enumerate(data.workouts, start=1):
        doc.add(f"\n{sub} {index}. {workout.workout_type_name}\n\n")
        doc.item("Time", customization.format_time(workout.start_time))
        doc.item("Duration", format_duration(workout.duration))
        if workout.has_distance:
            doc.item("Distance", conv.format_distance(workout.distance))
        if workout.has_calories:
            doc.item("Calories", f"{whole(workout.calories)} kcal")


# ---------- entry point ----------

def to_markdown(
    data: HealthData,
    customization: Optional[FormatCustomization] = None,
    include_metadata: bool = True,
) -> str:
    """Render one day as a Markdown note.

    Sections appear in a fixed order and only for categories with data, so two
    exports of the same snapshot are byte-identical.
    """
    config = customization or FormatCustomization()
    template = config.markdown_template
    conv = config.converter
    date_text = config.format_date(data.date)
    doc = _Doc(config)

    if include_metadata:
        doc.add("---\n")
        for line in config.frontmatter.header_lines(date_text):
            doc.add(line + "\n")
        doc.add("---\n\n")

    doc.add(f"# Health Data — {date_text}\n")
    if template.include_summary:
        _summary(doc, data, template.use_emoji)

    if data.sleep.has_data:
        _sleep(doc, data)
    if data.activity.has_data:
        _activity(doc, data, conv)
    if data.heart.has_data:
        _heart(doc, data)
    if data.vitals.has_data:
        _vitals(doc, data, conv)
    if data.body.has_data:
        _body(doc, data, conv)
    if data.nutrition.has_data:
        _nutrition(doc, data, conv)
    if data.mindfulness.has_data:
        _mindfulness(doc, data, config)
    if data.mobility.has_data:
        _mobility(doc, data, conv)
    if data.hearing.has_data:
        _hearing(doc, data)
    if data.workouts:
        _workouts(doc, data, config)

    text = doc.text()
    logger.debug("markdown_rendered", date=data.date.isoformat(), chars=len(text))
    return text
