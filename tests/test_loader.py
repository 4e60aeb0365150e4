import datetime as dt
import json

import pytest
from pydantic import ValidationError

from healthmd.loader import SnapshotLoadError, load_snapshot, snapshot_from_dict
from healthmd.models import MoodKind, WorkoutType


def test_load_snapshot(snapshot_file):
    data = load_snapshot(snapshot_file)
    assert data.date == dt.date(2026, 1, 13)
    assert data.sleep.total_duration == 27000
    assert data.activity.steps == 8432
    assert data.vitals.blood_oxygen_avg == 0.965
    assert [w.workout_type_name for w in data.workouts] == ["Strength Training", "Running"]
    assert data.workouts[1].workout_type is WorkoutType.RUNNING
    entry = data.mindfulness.state_of_mind[0]
    assert entry.kind is MoodKind.DAILY_MOOD
    assert entry.labels == ("Happy",)
    assert entry.timestamp == dt.datetime(2026, 1, 13, 8, 15)


def test_unknown_workout_type_becomes_other():
    data = snapshot_from_dict({
        "date": "2026-01-13",
        "workouts": [{"type": "quidditch", "start_time": "2026-01-13T10:00:00", "duration": 60}],
    })
    assert data.workouts[0].workout_type is WorkoutType.OTHER


def test_aware_timestamps_are_kept():
    data = snapshot_from_dict({
        "date": "2026-01-13",
        "workouts": [{"type": "walking", "start_time": "2026-01-13T06:30:00Z", "duration": 60}],
    })
    assert data.workouts[0].start_time.utcoffset() == dt.timedelta(0)


def test_unknown_mood_kind_is_a_validation_error():
    with pytest.raises(ValidationError):
        snapshot_from_dict({
            "date": "2026-01-13",
            "mindfulness": {"state_of_mind": [
                {"timestamp": "2026-01-13T08:00:00", "kind": "grumpy", "valence": 0}
            ]},
        })


def test_missing_file(tmp_path):
    with pytest.raises(SnapshotLoadError, match="file not found") as info:
        load_snapshot(tmp_path / "nope.json")
    assert info.value.path.endswith("nope.json")


@pytest.mark.parametrize(
    "content, reason",
    [
        ("{not json", "invalid JSON"),
        (json.dumps([1, 2]), "top level must be an object"),
        (json.dumps({"date": "someday"}), "validation error"),
    ],
)
def test_bad_files(tmp_path, content, reason):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(SnapshotLoadError, match=reason):
        load_snapshot(path)
