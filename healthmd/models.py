from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from statistics import fmean
from typing import Optional

from . import KNOWN_SECTION_KEYS
from .utils import unique, whole

# one flag per category, in Markdown section order
CATEGORY_NAMES: tuple[str, ...] = KNOWN_SECTION_KEYS


def _any_present(record: object) -> bool:
    return any(getattr(record, f.name) is not None for f in fields(record))  # type: ignore[arg-type]


@dataclass(frozen=True)
class SleepData:
    # seconds; 0 means "no data" for every phase
    total_duration: float = 0
    in_bed_time: float = 0
    deep_sleep: float = 0
    rem_sleep: float = 0
    core_sleep: float = 0
    awake_time: float = 0

    @property
    def has_data(self) -> bool:
        return any(getattr(self, f.name) > 0 for f in fields(self))


@dataclass(frozen=True)
class ActivityData:
    steps: Optional[int] = None
    active_calories: Optional[float] = None
    basal_energy_burned: Optional[float] = None
    exercise_minutes: Optional[float] = None
    stand_hours: Optional[int] = None
    flights_climbed: Optional[int] = None
    walking_running_distance: Optional[float] = None  # meters
    cycling_distance: Optional[float] = None  # meters
    swimming_distance: Optional[float] = None  # meters
    swimming_strokes: Optional[int] = None
    push_count: Optional[int] = None

    @property
    def has_data(self) -> bool:
        return _any_present(self)


@dataclass(frozen=True)
class HeartData:
    resting_heart_rate: Optional[float] = None
    walking_heart_rate_average: Optional[float] = None
    average_heart_rate: Optional[float] = None
    heart_rate_min: Optional[float] = None
    heart_rate_max: Optional[float] = None
    hrv: Optional[float] = None  # ms

    @property
    def has_data(self) -> bool:
        return _any_present(self)


@dataclass(frozen=True)
class VitalsData:
    respiratory_rate_avg: Optional[float] = None
    respiratory_rate_min: Optional[float] = None
    respiratory_rate_max: Optional[float] = None
    # fractions 0-1
    blood_oxygen_avg: Optional[float] = None
    blood_oxygen_min: Optional[float] = None
    blood_oxygen_max: Optional[float] = None
    # Celsius
    body_temperature_avg: Optional[float] = None
    body_temperature_min: Optional[float] = None
    body_temperature_max: Optional[float] = None
    blood_pressure_systolic_avg: Optional[float] = None
    blood_pressure_systolic_min: Optional[float] = None
    blood_pressure_systolic_max: Optional[float] = None
    blood_pressure_diastolic_avg: Optional[float] = None
    blood_pressure_diastolic_min: Optional[float] = None
    blood_pressure_diastolic_max: Optional[float] = None
    # mg/dL
    blood_glucose_avg: Optional[float] = None
    blood_glucose_min: Optional[float] = None
    blood_glucose_max: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return _any_present(self)


@dataclass(frozen=True)
class BodyData:
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # m
    bmi: Optional[float] = None
    body_fat_percentage: Optional[float] = None  # fraction 0-1
    lean_body_mass: Optional[float] = None  # kg
    waist_circumference: Optional[float] = None  # m

    @property
    def has_data(self) -> bool:
        return _any_present(self)


@dataclass(frozen=True)
class NutritionData:
    dietary_energy: Optional[float] = None  # kcal
    protein: Optional[float] = None  # g
    carbohydrates: Optional[float] = None
    fat: Optional[float] = None
    saturated_fat: Optional[float] = None
    fiber: Optional[float] = None
    sugar: Optional[float] = None
    sodium: Optional[float] = None  # mg
    cholesterol: Optional[float] = None  # mg
    water: Optional[float] = None  # L
    caffeine: Optional[float] = None  # mg

    @property
    def has_data(self) -> bool:
        return _any_present(self)


class MoodKind(str, Enum):
    DAILY_MOOD = "Daily Mood"
    MOMENTARY_EMOTION = "Momentary Emotion"

    @classmethod
    def from_name(cls, value: str) -> "MoodKind":
        """``"Daily Mood"``, ``"daily_mood"`` and ``"dailyMood"`` all work."""
        wanted = "".join(ch for ch in value.lower() if ch.isalnum())
        for member in cls:
            if "".join(member.value.lower().split()) == wanted:
                return member
        raise ValueError(f"Unknown mood kind: {value!r}")


# (upper bound exclusive, description, emoji); the last bucket closes at 1.0
VALENCE_BUCKETS: tuple[tuple[float, str, str], ...] = (
    (-0.6, "Very Unpleasant", "😢"),
    (-0.2, "Unpleasant", "😕"),
    (0.2, "Neutral", "😐"),
    (0.6, "Pleasant", "🙂"),
    (float("inf"), "Very Pleasant", "😄"),
)


def valence_percent(valence: float) -> int:
    return whole((valence + 1.0) / 2.0 * 100)


def _bucket(valence: float) -> tuple[float, str, str]:
    for bucket in VALENCE_BUCKETS:
        if valence < bucket[0]:
            return bucket
    return VALENCE_BUCKETS[-1]


def valence_description(valence: float) -> str:
    return _bucket(valence)[1]


@dataclass(frozen=True)
class MoodEntry:
    timestamp: dt.datetime
    kind: MoodKind
    valence: float  # -1.0 .. 1.0
    labels: tuple[str, ...] = ()
    associations: tuple[str, ...] = ()

    @property
    def valence_percent(self) -> int:
        return valence_percent(self.valence)

    @property
    def valence_description(self) -> str:
        return valence_description(self.valence)

    @property
    def valence_emoji(self) -> str:
        return _bucket(self.valence)[2]


@dataclass(frozen=True)
class MindfulnessData:
    mindful_minutes: Optional[float] = None
    mindful_sessions: Optional[int] = None
    state_of_mind: tuple[MoodEntry, ...] = ()

    @property
    def has_data(self) -> bool:
        return self.mindful_minutes is not None or self.mindful_sessions is not None or bool(self.state_of_mind)

    @property
    def daily_moods(self) -> list[MoodEntry]:
        return [e for e in self.state_of_mind if e.kind == MoodKind.DAILY_MOOD]

    @property
    def momentary_emotions(self) -> list[MoodEntry]:
        return [e for e in self.state_of_mind if e.kind == MoodKind.MOMENTARY_EMOTION]

    @property
    def average_valence(self) -> Optional[float]:
        if not self.state_of_mind:
            return None
        return fmean(e.valence for e in self.state_of_mind)

    @property
    def average_daily_mood_valence(self) -> Optional[float]:
        daily = self.daily_moods
        if not daily:
            return None
        return fmean(e.valence for e in daily)

    @property
    def all_labels(self) -> list[str]:
        return unique(label for e in self.state_of_mind for label in e.labels)

    @property
    def all_associations(self) -> list[str]:
        return unique(a for e in self.state_of_mind for a in e.associations)


@dataclass(frozen=True)
class MobilityData:
    walking_speed: Optional[float] = None  # m/s
    walking_step_length: Optional[float] = None  # m
    walking_double_support_percentage: Optional[float] = None  # fraction
    walking_asymmetry_percentage: Optional[float] = None  # fraction
    stair_ascent_speed: Optional[float] = None  # m/s
    stair_descent_speed: Optional[float] = None  # m/s
    six_minute_walk_distance: Optional[float] = None  # m

    @property
    def has_data(self) -> bool:
        return _any_present(self)


@dataclass(frozen=True)
class HearingData:
    headphone_audio_level: Optional[float] = None  # dB
    environmental_sound_level: Optional[float] = None  # dB

    @property
    def has_data(self) -> bool:
        return _any_present(self)


class WorkoutType(str, Enum):
    RUNNING = "running"
    WALKING = "walking"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    HIKING = "hiking"
    YOGA = "yoga"
    FUNCTIONAL_STRENGTH_TRAINING = "functionalStrengthTraining"
    TRADITIONAL_STRENGTH_TRAINING = "traditionalStrengthTraining"
    CORE_TRAINING = "coreTraining"
    HIIT = "highIntensityIntervalTraining"
    ELLIPTICAL = "elliptical"
    ROWING = "rowing"
    STAIR_CLIMBING = "stairClimbing"
    PILATES = "pilates"
    DANCE = "dance"
    COOLDOWN = "cooldown"
    MIXED_CARDIO = "mixedCardio"
    SOCIAL_DANCE = "socialDance"
    PICKLEBALL = "pickleball"
    TENNIS = "tennis"
    BADMINTON = "badminton"
    TABLE_TENNIS = "tableTennis"
    GOLF = "golf"
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    BASEBALL = "baseball"
    SOFTBALL = "softball"
    VOLLEYBALL = "volleyball"
    AMERICAN_FOOTBALL = "americanFootball"
    RUGBY = "rugby"
    HOCKEY = "hockey"
    LACROSSE = "lacrosse"
    SKATING = "skatingSports"
    SNOW_SPORTS = "snowSports"
    WATER_SPORTS = "waterSports"
    MARTIAL_ARTS = "martialArts"
    BOXING = "boxing"
    KICKBOXING = "kickboxing"
    WRESTLING = "wrestling"
    CLIMBING = "climbing"
    JUMP_ROPE = "jumpRope"
    MIND_AND_BODY = "mindAndBody"
    FLEXIBILITY = "flexibility"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return WORKOUT_DISPLAY_NAMES.get(self, self.value[:1].upper() + self.value[1:])

    @classmethod
    def from_name(cls, value: str) -> "WorkoutType":
        """Accept either the identifier (``traditionalStrengthTraining``) or a display name."""
        try:
            return cls(value)
        except ValueError:
            pass
        wanted = value.strip().lower()
        for member in cls:
            if member.display_name.lower() == wanted or member.value.lower() == wanted:
                return member
        return cls.OTHER


WORKOUT_DISPLAY_NAMES: dict[WorkoutType, str] = {
    WorkoutType.FUNCTIONAL_STRENGTH_TRAINING: "Strength Training",
    WorkoutType.TRADITIONAL_STRENGTH_TRAINING: "Strength Training",
    WorkoutType.CORE_TRAINING: "Core Training",
    WorkoutType.HIIT: "HIIT",
    WorkoutType.STAIR_CLIMBING: "Stair Climbing",
    WorkoutType.MIXED_CARDIO: "Mixed Cardio",
    WorkoutType.SOCIAL_DANCE: "Social Dance",
    WorkoutType.TABLE_TENNIS: "Table Tennis",
    WorkoutType.AMERICAN_FOOTBALL: "American Football",
    WorkoutType.SKATING: "Skating",
    WorkoutType.SNOW_SPORTS: "Snow Sports",
    WorkoutType.WATER_SPORTS: "Water Sports",
    WorkoutType.MARTIAL_ARTS: "Martial Arts",
    WorkoutType.JUMP_ROPE: "Jump Rope",
    WorkoutType.MIND_AND_BODY: "Mind & Body",
}


@dataclass(frozen=True)
class WorkoutData:
    workout_type: WorkoutType
    start_time: dt.datetime
    duration: float  # seconds
    calories: Optional[float] = None  # kcal
    distance: Optional[float] = None  # meters

    @property
    def workout_type_name(self) -> str:
        return self.workout_type.display_name

    @property
    def has_distance(self) -> bool:
        return self.distance is not None and self.distance > 0

    @property
    def has_calories(self) -> bool:
        return self.calories is not None and self.calories > 0


@dataclass(frozen=True)
class CategorySelection:
    sleep: bool = True
    activity: bool = True
    heart: bool = True
    vitals: bool = True
    body: bool = True
    nutrition: bool = True
    mindfulness: bool = True
    mobility: bool = True
    hearing: bool = True
    workouts: bool = True

    @classmethod
    def none(cls) -> "CategorySelection":
        return cls(**{name: False for name in CATEGORY_NAMES})

    @classmethod
    def parse(cls, value: str) -> "CategorySelection":
        """``"all"`` or a comma-separated list such as ``"sleep,activity"``."""
        names = {s.strip().lower() for s in value.split(",") if s.strip()}
        if not names or "all" in names:
            return cls()
        unknown = names - set(CATEGORY_NAMES)
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(sorted(unknown))}")
        return cls(**{name: name in names for name in CATEGORY_NAMES})

    @property
    def has_any_selected(self) -> bool:
        return any(getattr(self, name) for name in CATEGORY_NAMES)


@dataclass(frozen=True)
class HealthData:
    """One calendar day of health data, canonical units throughout."""

    date: dt.date
    sleep: SleepData = field(default_factory=SleepData)
    activity: ActivityData = field(default_factory=ActivityData)
    heart: HeartData = field(default_factory=HeartData)
    vitals: VitalsData = field(default_factory=VitalsData)
    body: BodyData = field(default_factory=BodyData)
    nutrition: NutritionData = field(default_factory=NutritionData)
    mindfulness: MindfulnessData = field(default_factory=MindfulnessData)
    mobility: MobilityData = field(default_factory=MobilityData)
    hearing: HearingData = field(default_factory=HearingData)
    workouts: tuple[WorkoutData, ...] = ()

    def category_has_data(self, name: str) -> bool:
        if name == "workouts":
            return bool(self.workouts)
        return getattr(self, name).has_data

    @property
    def has_any_data(self) -> bool:
        return any(self.category_has_data(name) for name in CATEGORY_NAMES)

    def filtered(self, selection: CategorySelection) -> "HealthData":
        """Reset every category not in ``selection`` to its empty state."""
        changes: dict[str, object] = {}
        for name in CATEGORY_NAMES:
            if getattr(selection, name):
                continue
            if name == "workouts":
                changes[name] = ()
            else:
                changes[name] = type(getattr(self, name))()
        return replace(self, **changes) if changes else self


def filter_snapshot(data: HealthData, selection: CategorySelection) -> HealthData:
    return data.filtered(selection)
