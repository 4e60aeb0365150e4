"""Export format preferences: date/time patterns, metadata-block policy, Markdown template."""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .units import UnitConverter, UnitSystem
from .utils import localize


class DateFormat(str, Enum):
    ISO8601 = "iso8601"        # 2026-01-13
    US_SHORT = "us_short"      # 01/13/2026
    US_LONG = "us_long"        # January 13, 2026
    EU_SHORT = "eu_short"      # 13/01/2026
    EU_LONG = "eu_long"        # 13 January 2026
    COMPACT = "compact"        # 20260113
    FRIENDLY = "friendly"      # Mon, Jan 13, 2026

    def render(self, d: dt.date) -> str:
        if self is DateFormat.US_SHORT:
            return f"{d:%m/%d/%Y}"
        if self is DateFormat.US_LONG:
            return f"{d:%B} {d.day}, {d.year}"
        if self is DateFormat.EU_SHORT:
            return f"{d:%d/%m/%Y}"
        if self is DateFormat.EU_LONG:
            return f"{d.day} {d:%B} {d.year}"
        if self is DateFormat.COMPACT:
            return f"{d:%Y%m%d}"
        if self is DateFormat.FRIENDLY:
            return f"{d:%a, %b} {d.day}, {d.year}"
        return d.isoformat()


class TimeFormat(str, Enum):
    HOUR24 = "hour24"                      # 14:30
    HOUR24_SECONDS = "hour24_seconds"      # 14:30:45
    HOUR12 = "hour12"                      # 2:30 PM
    HOUR12_SECONDS = "hour12_seconds"      # 2:30:45 PM

    def render(self, t: dt.datetime | dt.time) -> str:
        seconds = self in (TimeFormat.HOUR24_SECONDS, TimeFormat.HOUR12_SECONDS)
        if self in (TimeFormat.HOUR24, TimeFormat.HOUR24_SECONDS):
            text = f"{t.hour:02d}:{t.minute:02d}"
            return f"{text}:{t.second:02d}" if seconds else text
        hour = t.hour % 12 or 12
        text = f"{hour}:{t.minute:02d}"
        if seconds:
            text += f":{t.second:02d}"
        return f"{text} {'AM' if t.hour < 12 else 'PM'}"


class BulletStyle(str, Enum):
    DASH = "-"
    ASTERISK = "*"
    PLUS = "+"


class TemplateStyle(str, Enum):
    STANDARD = "standard"
    COMPACT = "compact"
    DETAILED = "detailed"
    CUSTOM = "custom"


class FrontmatterField(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_key: str
    custom_key: str = ""
    enabled: bool = True

    @property
    def output_key(self) -> str:
        return self.custom_key or self.original_key


DEFAULT_FIELD_KEYS: tuple[str, ...] = (
    # sleep
    "sleep_total_hours", "sleep_in_bed_hours", "sleep_deep_hours", "sleep_rem_hours",
    "sleep_core_hours", "sleep_awake_hours",
    # activity
    "steps", "active_calories", "basal_calories", "exercise_minutes", "stand_hours",
    "flights_climbed", "walking_running_km", "cycling_km", "swimming_m", "swimming_strokes",
    "wheelchair_pushes",
    # heart
    "resting_heart_rate", "walking_heart_rate", "average_heart_rate", "heart_rate_min",
    "heart_rate_max", "hrv_ms",
    # vitals
    "respiratory_rate", "respiratory_rate_min", "respiratory_rate_max",
    "blood_oxygen", "blood_oxygen_min", "blood_oxygen_max",
    "body_temperature", "body_temperature_min", "body_temperature_max",
    "blood_pressure_systolic", "blood_pressure_systolic_min", "blood_pressure_systolic_max",
    "blood_pressure_diastolic", "blood_pressure_diastolic_min", "blood_pressure_diastolic_max",
    "blood_glucose", "blood_glucose_min", "blood_glucose_max",
    # body
    "weight_kg", "height_cm", "bmi", "body_fat_percent", "lean_body_mass_kg",
    "waist_circumference_cm",
    # nutrition
    "dietary_calories", "protein_g", "carbohydrates_g", "fat_g", "saturated_fat_g", "fiber_g",
    "sugar_g", "sodium_mg", "cholesterol_mg", "water_l", "caffeine_mg",
    # mindfulness
    "mindful_minutes", "mindful_sessions", "mood_entries", "average_mood_valence",
    "average_mood_percent", "daily_mood_count", "daily_mood_percent", "momentary_emotion_count",
    "mood_labels", "mood_associations",
    # mobility
    "walking_speed", "step_length_cm", "double_support_percent", "walking_asymmetry_percent",
    "stair_ascent_speed", "stair_descent_speed", "six_min_walk_m",
    # hearing
    "headphone_audio_db", "environmental_sound_db",
    # workouts
    "workout_count", "workout_minutes", "workout_calories", "workout_distance_km", "workouts",
)

DEFAULT_FIELDS: tuple[FrontmatterField, ...] = tuple(
    FrontmatterField(original_key=key) for key in DEFAULT_FIELD_KEYS
)


class FrontmatterConfig(BaseModel):
    """Which metadata-block keys are written and under what names."""

    model_config = ConfigDict(frozen=True)

    metric_fields: tuple[FrontmatterField, ...] = DEFAULT_FIELDS
    custom_fields: dict[str, str] = Field(default_factory=dict)
    include_date: bool = True
    include_type: bool = True
    date_key: str = "date"
    type_key: str = "type"
    type_value: str = "health-data"

    def output_key(self, original_key: str) -> Optional[str]:
        """Key to write for ``original_key``, or None when the field is disabled.

        Keys missing from ``metric_fields`` are written under their own name.
        """
        for f in self.metric_fields:
            if f.original_key == original_key:
                return f.output_key if f.enabled else None
        return original_key

    def header_lines(self, date_text: str) -> list[str]:
        lines: list[str] = []
        if self.include_date:
            lines.append(f"{self.date_key}: {date_text}")
        if self.include_type:
            lines.append(f"{self.type_key}: {self.type_value}")
        for key, value in sorted(self.custom_fields.items()):
            lines.append(f"{key}: {value}")
        return lines


class MarkdownTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: TemplateStyle = TemplateStyle.STANDARD
    section_header_level: int = Field(default=2, ge=1, le=3)
    use_emoji: bool = False
    include_summary: bool = True
    bullet_style: BulletStyle = BulletStyle.DASH

    @property
    def bullet(self) -> str:
        return self.bullet_style.value

    def heading(self, depth_offset: int = 0) -> str:
        return "#" * (self.section_header_level + depth_offset)


class FormatCustomization(BaseModel):
    """Everything a serializer needs besides the snapshot itself."""

    model_config = ConfigDict(frozen=True)

    date_format: DateFormat = DateFormat.ISO8601
    time_format: TimeFormat = TimeFormat.HOUR24
    unit_system: UnitSystem = UnitSystem.METRIC
    frontmatter: FrontmatterConfig = Field(default_factory=FrontmatterConfig)
    markdown_template: MarkdownTemplate = Field(default_factory=MarkdownTemplate)
    timezone: Optional[str] = None

    @property
    def converter(self) -> UnitConverter:
        return UnitConverter(self.unit_system)

    def format_date(self, d: dt.date) -> str:
        return self.date_format.render(d)

    def format_time(self, instant: dt.datetime) -> str:
        return self.time_format.render(localize(instant, self.timezone))
