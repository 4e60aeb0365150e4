from __future__ import annotations

import csv
import io
from typing import Optional

import structlog

from .. import CSV_HEADER
from ..models import HealthData, valence_percent
from ..preferences import FormatCustomization
from ..utils import fixed, percent, plain_number

logger = structlog.get_logger()

Row = tuple[str, str, str, str]  # category, metric, value, unit


def _sleep(data: HealthData) -> list[Row]:
    s = data.sleep
    rows: list[Row] = []
    for metric, seconds in (
        ("Total Duration", s.total_duration),
        ("Deep Sleep", s.deep_sleep),
        ("REM Sleep", s.rem_sleep),
        ("Core Sleep", s.core_sleep),
        ("Awake Time", s.awake_time),
        ("In Bed Time", s.in_bed_time),
    ):
        if seconds > 0:
            rows.append(("Sleep", metric, plain_number(seconds), "seconds"))
    return rows


def _plain_rows(category: str, items) -> list[Row]:
    return [
        (category, metric, plain_number(value), unit)
        for metric, value, unit in items
        if value is not None
    ]


def _activity(data: HealthData) -> list[Row]:
    a = data.activity
    return _plain_rows("Activity", (
        ("Steps", a.steps, "count"),
        ("Active Calories", a.active_calories, "kcal"),
        ("Basal Energy", a.basal_energy_burned, "kcal"),
        ("Exercise Minutes", a.exercise_minutes, "minutes"),
        ("Stand Hours", a.stand_hours, "hours"),
        ("Flights Climbed", a.flights_climbed, "count"),
        ("Walking Running Distance", a.walking_running_distance, "meters"),
        ("Cycling Distance", a.cycling_distance, "meters"),
        ("Swimming Distance", a.swimming_distance, "meters"),
        ("Swimming Strokes", a.swimming_strokes, "count"),
        ("Wheelchair Pushes", a.push_count, "count"),
    ))


def _heart(data: HealthData) -> list[Row]:
    h = data.heart
    return _plain_rows("Heart", (
        ("Resting Heart Rate", h.resting_heart_rate, "bpm"),
        ("Walking Heart Rate Average", h.walking_heart_rate_average, "bpm"),
        ("Average Heart Rate", h.average_heart_rate, "bpm"),
        ("Min Heart Rate", h.heart_rate_min, "bpm"),
        ("Max Heart Rate", h.heart_rate_max, "bpm"),
        ("HRV", h.hrv, "ms"),
    ))


def _vitals(data: HealthData, customization: FormatCustomization) -> list[Row]:
    v = data.vitals
    conv = customization.converter
    temp_unit = conv.temperature_unit()
    rows: list[Row] = []

    def triple(name: str, values, unit: str, render=plain_number) -> None:
        for suffix, value in zip(("Avg", "Min", "Max"), values):
            if value is not None:
                rows.append(("Vitals", f"{name} {suffix}", render(value), unit))

    triple("Respiratory Rate",
           (v.respiratory_rate_avg, v.respiratory_rate_min, v.respiratory_rate_max), "breaths/min")
    triple("Blood Oxygen",
           (v.blood_oxygen_avg, v.blood_oxygen_min, v.blood_oxygen_max), "percent",
           lambda x: plain_number(percent(x)))
    triple("Body Temperature",
           (v.body_temperature_avg, v.body_temperature_min, v.body_temperature_max), temp_unit,
           lambda x: fixed(conv.convert_temperature(x), 1))
    triple("Blood Pressure Systolic",
           (v.blood_pressure_systolic_avg, v.blood_pressure_systolic_min, v.blood_pressure_systolic_max),
           "mmHg")
    triple("Blood Pressure Diastolic",
           (v.blood_pressure_diastolic_avg, v.blood_pressure_diastolic_min, v.blood_pressure_diastolic_max),
           "mmHg")
    triple("Blood Glucose",
           (v.blood_glucose_avg, v.blood_glucose_min, v.blood_glucose_max), "mg/dL")
    return rows


def _body(data: HealthData, customization: FormatCustomization) -> list[Row]:
    b = data.body
    conv = customization.converter
    rows: list[Row] = []
    if b.weight is not None:
        rows.append(("Body", "Weight", fixed(conv.convert_weight(b.weight), 1), conv.weight_unit()))
    if b.height is not None:
        rows.append(("Body", "Height", fixed(conv.convert_height(b.height), 1), conv.height_unit()))
    if b.bmi is not None:
        rows.append(("Body", "BMI", plain_number(b.bmi), ""))
    if b.body_fat_percentage is not None:
        rows.append(("Body", "Body Fat Percentage", plain_number(percent(b.body_fat_percentage)), "percent"))
    if b.lean_body_mass is not None:
        rows.append(("Body", "Lean Body Mass", fixed(conv.convert_weight(b.lean_body_mass), 1), conv.weight_unit()))
    if b.waist_circumference is not None:
        rows.append((
            "Body", "Waist Circumference",
            fixed(conv.convert_length(b.waist_circumference), 1), conv.length_unit(),
        ))
    return rows


def _nutrition(data: HealthData) -> list[Row]:
    n = data.nutrition
    return _plain_rows("Nutrition", (
        ("Dietary Energy", n.dietary_energy, "kcal"),
        ("Protein", n.protein, "g"),
        ("Carbohydrates", n.carbohydrates, "g"),
        ("Fat", n.fat, "g"),
        ("Saturated Fat", n.saturated_fat, "g"),
        ("Fiber", n.fiber, "g"),
        ("Sugar", n.sugar, "g"),
        ("Sodium", n.sodium, "mg"),
        ("Cholesterol", n.cholesterol, "mg"),
        ("Water", n.water, "L"),
        ("Caffeine", n.caffeine, "mg"),
    ))


def _mindfulness(data: HealthData, customization: FormatCustomization) -> list[Row]:
    m = data.mindfulness
    rows = _plain_rows("Mindfulness", (
        ("Mindful Minutes", m.mindful_minutes, "minutes"),
        ("Mindful Sessions", m.mindful_sessions, "count"),
    ))
    if not m.state_of_mind:
        return rows

    rows.append(("Mindfulness", "State of Mind Entries", str(len(m.state_of_mind)), "count"))
    avg = m.average_valence
    if avg is not None:
        rows.append(("Mindfulness", "Average Mood Valence", fixed(avg, 2), "scale(-1 to 1)"))
        rows.append(("Mindfulness", "Average Mood Percent", str(valence_percent(avg)), "percent"))
    if m.daily_moods:
        rows.append(("Mindfulness", "Daily Mood Count", str(len(m.daily_moods)), "count"))
    if m.momentary_emotions:
        rows.append(("Mindfulness", "Momentary Emotion Count", str(len(m.momentary_emotions)), "count"))

    for entry in m.state_of_mind:
        at = customization.format_time(entry.timestamp)
        kind = entry.kind.value
        rows.append(("State of Mind", f"{kind} at {at}", fixed(entry.valence, 2), "valence"))
        if entry.labels:
            rows.append(("State of Mind", f"{kind} Labels at {at}", ", ".join(entry.labels), "labels"))
        if entry.associations:
            rows.append((
                "State of Mind", f"{kind} Associations at {at}",
                ", ".join(entry.associations), "associations",
            ))
    return rows


def _mobility(data: HealthData) -> list[Row]:
    m = data.mobility
    rows = _plain_rows("Mobility", (
        ("Walking Speed", m.walking_speed, "m/s"),
        ("Walking Step Length", m.walking_step_length, "meters"),
    ))
    if m.walking_double_support_percentage is not None:
        rows.append(("Mobility", "Double Support Percentage",
                     plain_number(percent(m.walking_double_support_percentage)), "percent"))
    if m.walking_asymmetry_percentage is not None:
        rows.append(("Mobility", "Walking Asymmetry",
                     plain_number(percent(m.walking_asymmetry_percentage)), "percent"))
    rows += _plain_rows("Mobility", (
        ("Stair Ascent Speed", m.stair_ascent_speed, "m/s"),
        ("Stair Descent Speed", m.stair_descent_speed, "m/s"),
        ("Six Minute Walk Distance", m.six_minute_walk_distance, "meters"),
    ))
    return rows


def _hearing(data: HealthData) -> list[Row]:
    h = data.hearing
    return _plain_rows("Hearing", (
        ("Headphone Audio Level", h.headphone_audio_level, "dB"),
        ("Environmental Sound Level", h.environmental_sound_level, "dB"),
    ))


def _workouts(data: HealthData, customization: FormatCustomization) -> list[Row]:
    conv = customization.converter
    rows: list[Row] = []
    for workout in data.workouts:
        name = workout.workout_type_name
        rows.append(("Workouts", f"{name} Start Time", customization.format_time(workout.start_time), "time"))
        rows.append(("Workouts", f"{name} Duration", plain_number(workout.duration), "seconds"))
        if workout.has_distance:
            rows.append((
                "Workouts", f"{name} Distance",
                fixed(conv.convert_distance(workout.distance), 2), conv.distance_unit(),
            ))
        if workout.has_calories:
            rows.append(("Workouts", f"{name} Calories", plain_number(workout.calories), "kcal"))
    return rows


def build_rows(data: HealthData, customization: Optional[FormatCustomization] = None) -> list[Row]:
    config = customization or FormatCustomization()
    rows: list[Row] = []
    if data.sleep.has_data:
        rows += _sleep(data)
    if data.activity.has_data:
        rows += _activity(data)
    if data.heart.has_data:
        rows += _heart(data)
    if data.vitals.has_data:
        rows += _vitals(data, config)
    if data.body.has_data:
        rows += _body(data, config)
    if data.nutrition.has_data:
        rows += _nutrition(data)
    if data.mindfulness.has_data:
        rows += _mindfulness(data, config)
    if data.mobility.has_data:
        rows += _mobility(data)
    if data.hearing.has_data:
        rows += _hearing(data)
    if data.workouts:
        rows += _workouts(data, config)
    return rows


def to_csv(data: HealthData, customization: Optional[FormatCustomization] = None) -> str:
    config = customization or FormatCustomization()
    date_text = config.format_date(data.date)
    rows = build_rows(data, config)

    buf = io.StringIO()
    # the writer quotes any field holding a comma, so label lists stay in one column
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for category, metric, value, unit in rows:
        writer.writerow([date_text, category, metric, value, unit])

    logger.debug("csv_rendered", date=data.date.isoformat(), rows=len(rows))
    return buf.getvalue()
