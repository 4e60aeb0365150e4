import datetime as dt
import json

import pytest
import structlog

from healthmd.models import (
    ActivityData,
    BodyData,
    HealthData,
    HearingData,
    HeartData,
    MindfulnessData,
    MobilityData,
    MoodEntry,
    MoodKind,
    NutritionData,
    SleepData,
    VitalsData,
    WorkoutData,
    WorkoutType,
)

DAY = dt.date(2026, 1, 13)

ENV_VARS = (
    "TZ", "VAULT_PATH", "HEALTH_SUBFOLDER", "FILENAME_FORMAT", "FOLDER_STRUCTURE",
    "EXPORT_FORMAT", "WRITE_MODE", "INCLUDE_METADATA", "EXPORT_CATEGORIES", "DATE_FORMAT",
    "TIME_FORMAT", "UNIT_SYSTEM", "FORMAT_CONFIG_FILE", "INDIVIDUAL_ENTRIES", "ENTRIES_FOLDER",
    "ENTRIES_BY_CATEGORY", "WRITE_RETRIES",
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No settings from the outer environment or a stray .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def day():
    return HealthData(
        date=DAY,
        sleep=SleepData(
            total_duration=27000,
            in_bed_time=28800,
            deep_sleep=5400,
            rem_sleep=6300,
            core_sleep=15300,
        ),
        activity=ActivityData(
            steps=8432,
            active_calories=512.4,
            exercise_minutes=42,
            walking_running_distance=6234.5,
        ),
        heart=HeartData(resting_heart_rate=58, hrv=45.25),
        vitals=VitalsData(
            respiratory_rate_avg=14.2,
            blood_oxygen_avg=0.965,
            blood_oxygen_min=0.94,
            blood_oxygen_max=0.99,
        ),
        body=BodyData(weight=72.35, body_fat_percentage=0.182),
        nutrition=NutritionData(dietary_energy=2150.6, protein=98.25, water=2.5),
        mindfulness=MindfulnessData(
            mindful_minutes=15,
            state_of_mind=(
                MoodEntry(
                    timestamp=dt.datetime(2026, 1, 13, 8, 15),
                    kind=MoodKind.DAILY_MOOD,
                    valence=0.5,
                    labels=("Happy", "Calm"),
                    associations=("Work",),
                ),
                MoodEntry(
                    timestamp=dt.datetime(2026, 1, 13, 18, 40),
                    kind=MoodKind.MOMENTARY_EMOTION,
                    valence=0.1,
                    labels=("Tired",),
                    associations=("Fitness", "Work"),
                ),
            ),
        ),
        mobility=MobilityData(walking_speed=1.25),
        hearing=HearingData(headphone_audio_level=72.0),
        workouts=(
            WorkoutData(
                workout_type=WorkoutType.RUNNING,
                start_time=dt.datetime(2026, 1, 13, 7, 30),
                duration=1845,
                calories=320.4,
                distance=5210,
            ),
            WorkoutData(
                workout_type=WorkoutType.TRADITIONAL_STRENGTH_TRAINING,
                start_time=dt.datetime(2026, 1, 13, 17, 0),
                duration=2700,
            ),
        ),
    )


@pytest.fixture
def small_day():
    return HealthData(
        date=DAY,
        sleep=SleepData(total_duration=27000),
        activity=ActivityData(steps=8432),
    )


@pytest.fixture
def snapshot_file(tmp_path):
    raw = {
        "date": "2026-01-13",
        "sleep": {"total_duration": 27000, "deep_sleep": 5400},
        "activity": {"steps": 8432, "walking_running_distance": 6234.5},
        "vitals": {"blood_oxygen_avg": 0.965},
        "mindfulness": {
            "mindful_minutes": 10,
            "state_of_mind": [
                {
                    "timestamp": "2026-01-13T08:15:00",
                    "kind": "daily_mood",
                    "valence": 0.5,
                    "labels": ["Happy"],
                }
            ],
        },
        "workouts": [
            {
                "type": "Strength Training",
                "start_time": "2026-01-13T17:00:00",
                "duration": 2700,
                "calories": 250,
            },
            {
                "workout_type": "running",
                "start_time": "2026-01-13T07:30:00",
                "duration": 1845,
                "distance": 5210,
            },
        ],
    }
    path = tmp_path / "2026-01-13.json"
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path
