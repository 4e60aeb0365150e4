from __future__ import annotations

import json
from typing import Any, Optional

import structlog

from ..models import HealthData, valence_percent
from ..preferences import FormatCustomization
from ..utils import format_duration, percent

logger = structlog.get_logger()


def _put(target: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        target[key] = value


def _sleep(data: HealthData) -> dict[str, Any]:
    s = data.sleep
    out: dict[str, Any] = {}
    for key, seconds in (
        ("totalDuration", s.total_duration),
        ("deepSleep", s.deep_sleep),
        ("remSleep", s.rem_sleep),
        ("coreSleep", s.core_sleep),
        ("awakeTime", s.awake_time),
        ("inBedTime", s.in_bed_time),
    ):
        if seconds > 0:
            out[key] = seconds
            out[f"{key}Formatted"] = format_duration(seconds)
    return out


def _activity(data: HealthData) -> dict[str, Any]:
    a = data.activity
    out: dict[str, Any] = {}
    _put(out, "steps", a.steps)
    _put(out, "activeCalories", a.active_calories)
    _put(out, "basalEnergyBurned", a.basal_energy_burned)
    _put(out, "exerciseMinutes", a.exercise_minutes)
    _put(out, "standHours", a.stand_hours)
    _put(out, "flightsClimbed", a.flights_climbed)
    if a.walking_running_distance is not None:
        out["walkingRunningDistance"] = a.walking_running_distance
        out["walkingRunningDistanceKm"] = a.walking_running_distance / 1000
    if a.cycling_distance is not None:
        out["cyclingDistance"] = a.cycling_distance
        out["cyclingDistanceKm"] = a.cycling_distance / 1000
    _put(out, "swimmingDistance", a.swimming_distance)
    _put(out, "swimmingStrokes", a.swimming_strokes)
    _put(out, "pushCount", a.push_count)
    return out


def _heart(data: HealthData) -> dict[str, Any]:
    h = data.heart
    out: dict[str, Any] = {}
    _put(out, "restingHeartRate", h.resting_heart_rate)
    _put(out, "walkingHeartRateAverage", h.walking_heart_rate_average)
    _put(out, "averageHeartRate", h.average_heart_rate)
    _put(out, "heartRateMin", h.heart_rate_min)
    _put(out, "heartRateMax", h.heart_rate_max)
    _put(out, "hrv", h.hrv)
    return out


def _aggregate(out: dict[str, Any], key: str, avg, lo, hi, with_percent: bool = False) -> None:
    # <key> repeats the average for readers of the older flat layout
    if avg is not None:
        out[f"{key}Avg"] = avg
        out[key] = avg
        if with_percent:
            out[f"{key}Percent"] = percent(avg)
    if lo is not None:
        out[f"{key}Min"] = lo
        if with_percent:
            out[f"{key}MinPercent"] = percent(lo)
    if hi is not None:
        out[f"{key}Max"] = hi
        if with_percent:
            out[f"{key}MaxPercent"] = percent(hi)


def _vitals(data: HealthData) -> dict[str, Any]:
    v = data.vitals
    out: dict[str, Any] = {}
    _aggregate(out, "respiratoryRate", v.respiratory_rate_avg, v.respiratory_rate_min, v.respiratory_rate_max)
    _aggregate(out, "bloodOxygen", v.blood_oxygen_avg, v.blood_oxygen_min, v.blood_oxygen_max, with_percent=True)
    _aggregate(out, "bodyTemperature", v.body_temperature_avg, v.body_temperature_min, v.body_temperature_max)
    _aggregate(out, "bloodPressureSystolic", v.blood_pressure_systolic_avg,
               v.blood_pressure_systolic_min, v.blood_pressure_systolic_max)
    _aggregate(out, "bloodPressureDiastolic", v.blood_pressure_diastolic_avg,
               v.blood_pressure_diastolic_min, v.blood_pressure_diastolic_max)
    _aggregate(out, "bloodGlucose", v.blood_glucose_avg, v.blood_glucose_min, v.blood_glucose_max)
    return out


def _body(data: HealthData) -> dict[str, Any]:
    b = data.body
    out: dict[str, Any] = {}
    _put(out, "weight", b.weight)
    _put(out, "height", b.height)
    _put(out, "bmi", b.bmi)
    if b.body_fat_percentage is not None:
        out["bodyFatPercentage"] = b.body_fat_percentage
        out["bodyFatPercent"] = percent(b.body_fat_percentage)
    _put(out, "leanBodyMass", b.lean_body_mass)
    if b.waist_circumference is not None:
        out["waistCircumference"] = b.waist_circumference
        out["waistCircumferenceCm"] = b.waist_circumference * 100
    return out


def _nutrition(data: HealthData) -> dict[str, Any]:
    n = data.nutrition
    out: dict[str, Any] = {}
    _put(out, "dietaryEnergy", n.dietary_energy)
    _put(out, "protein", n.protein)
    _put(out, "carbohydrates", n.carbohydrates)
    _put(out, "fat", n.fat)
    _put(out, "saturatedFat", n.saturated_fat)
    _put(out, "fiber", n.fiber)
    _put(out, "sugar", n.sugar)
    _put(out, "sodium", n.sodium)
    _put(out, "cholesterol", n.cholesterol)
    _put(out, "water", n.water)
    _put(out, "caffeine", n.caffeine)
    return out


def _mindfulness(data: HealthData, customization: FormatCustomization) -> dict[str, Any]:
    m = data.mindfulness
    out: dict[str, Any] = {}
    _put(out, "mindfulMinutes", m.mindful_minutes)
    _put(out, "mindfulSessions", m.mindful_sessions)
    if not m.state_of_mind:
        return out

    out["stateOfMindCount"] = len(m.state_of_mind)
    avg = m.average_valence
    if avg is not None:
        out["averageValence"] = avg
        out["averageValencePercent"] = valence_percent(avg)
    if m.daily_moods:
        out["dailyMoodCount"] = len(m.daily_moods)
        _put(out, "averageDailyMoodValence", m.average_daily_mood_valence)
    if m.momentary_emotions:
        out["momentaryEmotionCount"] = len(m.momentary_emotions)
    if m.all_labels:
        out["emotionLabels"] = m.all_labels
    if m.all_associations:
        out["associations"] = m.all_associations

    entries = []
    for entry in m.state_of_mind:
        item: dict[str, Any] = {
            "timestamp": customization.format_time(entry.timestamp),
            "kind": entry.kind.value,
            "valence": entry.valence,
            "valencePercent": entry.valence_percent,
            "valenceDescription": entry.valence_description,
        }
        if entry.labels:
            item["labels"] = list(entry.labels)
        if entry.associations:
            item["associations"] = list(entry.associations)
        entries.append(item)
    out["stateOfMindEntries"] = entries
    return out


def _mobility(data: HealthData) -> dict[str, Any]:
    m = data.mobility
    out: dict[str, Any] = {}
    _put(out, "walkingSpeed", m.walking_speed)
    _put(out, "walkingStepLength", m.walking_step_length)
    _put(out, "walkingDoubleSupportPercentage", m.walking_double_support_percentage)
    _put(out, "walkingAsymmetryPercentage", m.walking_asymmetry_percentage)
    _put(out, "stairAscentSpeed", m.stair_ascent_speed)
    _put(out, "stairDescentSpeed", m.stair_descent_speed)
    _put(out, "sixMinuteWalkDistance", m.six_minute_walk_distance)
    return out


def _hearing(data: HealthData) -> dict[str, Any]:
    h = data.hearing
    out: dict[str, Any] = {}
    _put(out, "headphoneAudioLevel", h.headphone_audio_level)
    _put(out, "environmentalSoundLevel", h.environmental_sound_level)
    return out


def _workouts(data: HealthData, customization: FormatCustomization) -> list[dict[str, Any]]:
    conv = customization.converter
    out = []
    for workout in data.workouts:
        item: dict[str, Any] = {
            "type": workout.workout_type_name,
            "startTime": customization.format_time(workout.start_time),
            "duration": workout.duration,
            "durationFormatted": format_duration(workout.duration),
        }
        if workout.has_distance:
            item["distance"] = workout.distance
            item["distanceFormatted"] = conv.format_distance(workout.distance)
        if workout.has_calories:
            item["calories"] = workout.calories
        out.append(item)
    return out


def build_document(data: HealthData, customization: Optional[FormatCustomization] = None) -> dict[str, Any]:
    """The JSON export as a plain dict, keys in output order."""
    config = customization or FormatCustomization()
    doc: dict[str, Any] = {
        "date": config.format_date(data.date),
        "type": "health-data",
        "units": config.unit_system.value,
    }
    if data.sleep.has_data:
        doc["sleep"] = _sleep(data)
    if data.activity.has_data:
        doc["activity"] = _activity(data)
    if data.heart.has_data:
        doc["heart"] = _heart(data)
    if data.vitals.has_data:
        doc["vitals"] = _vitals(data)
    if data.body.has_data:
        doc["body"] = _body(data)
    if data.nutrition.has_data:
        doc["nutrition"] = _nutrition(data)
    if data.mindfulness.has_data:
        doc["mindfulness"] = _mindfulness(data, config)
    if data.mobility.has_data:
        doc["mobility"] = _mobility(data)
    if data.hearing.has_data:
        doc["hearing"] = _hearing(data)
    if data.workouts:
        doc["workouts"] = _workouts(data, config)
    return doc


def to_json(data: HealthData, customization: Optional[FormatCustomization] = None) -> str:
    doc = build_document(data, customization)
    logger.debug("json_rendered", date=data.date.isoformat(), categories=len(doc) - 3)
    return json.dumps(doc, ensure_ascii=False, indent=2)
