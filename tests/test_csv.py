import csv
import datetime as dt
import io

from healthmd.exporters import to_csv
from healthmd.models import HealthData
from healthmd.preferences import FormatCustomization
from healthmd.units import UnitSystem


def test_header_only_for_empty_day():
    assert to_csv(HealthData(date=dt.date(2026, 1, 13))) == "Date,Category,Metric,Value,Unit\n"


def test_rows(day):
    lines = to_csv(day).splitlines()
    assert lines[0] == "Date,Category,Metric,Value,Unit"
    for expected in (
        "2026-01-13,Sleep,Total Duration,27000,seconds",
        "2026-01-13,Activity,Steps,8432,count",
        "2026-01-13,Activity,Walking Running Distance,6234.5,meters",
        "2026-01-13,Heart,HRV,45.25,ms",
        "2026-01-13,Vitals,Blood Oxygen Avg,96.5,percent",
        "2026-01-13,Vitals,Blood Oxygen Min,94,percent",
        "2026-01-13,Body,Weight,72.4,kg",
        "2026-01-13,Body,Body Fat Percentage,18.2,percent",
        "2026-01-13,Mindfulness,Average Mood Valence,0.30,scale(-1 to 1)",
        "2026-01-13,State of Mind,Daily Mood at 08:15,0.50,valence",
        "2026-01-13,Workouts,Running Start Time,07:30,time",
        "2026-01-13,Workouts,Running Distance,5.21,km",
        "2026-01-13,Workouts,Running Calories,320.4,kcal",
        "2026-01-13,Workouts,Strength Training Duration,2700,seconds",
    ):
        assert expected in lines


def test_lists_are_quoted_into_one_column(day):
    text = to_csv(day)
    assert '2026-01-13,State of Mind,Daily Mood Labels at 08:15,"Happy, Calm",labels\n' in text
    rows = list(csv.reader(io.StringIO(text)))
    assert all(len(row) == 5 for row in rows)
    assert ["2026-01-13", "State of Mind", "Momentary Emotion Associations at 18:40",
            "Fitness, Work", "associations"] in rows


def test_imperial_units(day):
    lines = to_csv(day, FormatCustomization(unit_system=UnitSystem.IMPERIAL)).splitlines()
    assert "2026-01-13,Body,Weight,159.5,lbs" in lines
    assert "2026-01-13,Workouts,Running Distance,3.24,mi" in lines
