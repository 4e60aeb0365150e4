"""Read a day snapshot from a JSON file into the immutable model."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from .models import HealthData, MoodKind, WorkoutType

logger = structlog.get_logger()

_adapter = TypeAdapter(HealthData)


class SnapshotLoadError(ValueError):
    def __init__(self, path: Union[str, Path], reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    # enum names in snapshot files are loose: display names, snake_case, camelCase
    data = dict(raw)
    workouts = []
    for item in data.get("workouts") or []:
        item = dict(item)
        kind = item.pop("type", None) or item.get("workout_type")
        if isinstance(kind, str):
            item["workout_type"] = WorkoutType.from_name(kind)
        workouts.append(item)
    if workouts:
        data["workouts"] = workouts

    mindfulness = data.get("mindfulness")
    if isinstance(mindfulness, dict) and mindfulness.get("state_of_mind"):
        mindfulness = dict(mindfulness)
        entries = []
        for entry in mindfulness["state_of_mind"]:
            entry = dict(entry)
            if isinstance(entry.get("kind"), str):
                try:
                    entry["kind"] = MoodKind.from_name(entry["kind"])
                except ValueError:
                    pass  # left as is; validation reports it with its location
            entries.append(entry)
        mindfulness["state_of_mind"] = entries
        data["mindfulness"] = mindfulness
    return data


def snapshot_from_dict(raw: dict[str, Any]) -> HealthData:
    """Validate a decoded snapshot. Raises ``pydantic.ValidationError``."""
    return _adapter.validate_python(_normalize(raw))


def load_snapshot(path: Union[str, Path]) -> HealthData:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise SnapshotLoadError(p, "file not found") from None
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(p, f"invalid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise SnapshotLoadError(p, "top level must be an object")
    try:
        data = snapshot_from_dict(raw)
    except ValidationError as e:
        raise SnapshotLoadError(p, f"{e.error_count()} validation error(s)\n{e}") from e

    logger.debug("snapshot_loaded", path=str(p), date=data.date.isoformat(), workouts=len(data.workouts))
    return data
