from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .utils import fixed

METERS_PER_MILE = 1609.344
FEET_PER_METER = 3.28084
INCHES_PER_METER = 39.3701
POUNDS_PER_KG = 2.20462
FL_OZ_PER_LITER = 33.814
KMH_PER_MPS = 3.6
MPH_PER_MPS = 2.23694


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


@dataclass(frozen=True)
class UnitConverter:
    """Canonical (SI) values to display strings for one unit system."""

    system: UnitSystem = UnitSystem.METRIC

    @property
    def imperial(self) -> bool:
        return self.system == UnitSystem.IMPERIAL

    # distance

    def format_distance(self, meters: float) -> str:
        if self.imperial:
            miles = meters / METERS_PER_MILE
            if miles >= 0.1:
                return f"{fixed(miles, 2)} mi"
            return f"{int(meters * FEET_PER_METER)} ft"
        if meters >= 1000:
            return f"{fixed(meters / 1000, 2)} km"
        return f"{int(meters)} m"

    def distance_unit(self, large: bool = True) -> str:
        if self.imperial:
            return "mi" if large else "ft"
        return "km" if large else "m"

    def convert_distance(self, meters: float, large: bool = True) -> float:
        if self.imperial:
            return meters / METERS_PER_MILE if large else meters * FEET_PER_METER
        return meters / 1000 if large else meters

    # weight

    def format_weight(self, kg: float) -> str:
        return f"{fixed(self.convert_weight(kg), 1)} {self.weight_unit()}"

    def weight_unit(self) -> str:
        return "lbs" if self.imperial else "kg"

    def convert_weight(self, kg: float) -> float:
        return kg * POUNDS_PER_KG if self.imperial else kg

    # height

    def format_height(self, meters: float) -> str:
        if self.imperial:
            total_inches = meters * INCHES_PER_METER
            feet = int(total_inches // 12)
            inches = int(total_inches % 12)
            return f"{feet}'{inches}\""
        return f"{fixed(meters * 100, 1)} cm"

    def height_unit(self) -> str:
        return "ft/in" if self.imperial else "cm"

    def convert_height(self, meters: float) -> float:
        return meters * INCHES_PER_METER if self.imperial else meters * 100

    # length (waist, step length)

    def format_length(self, meters: float) -> str:
        return f"{fixed(self.convert_length(meters), 1)} {self.length_unit()}"

    def length_unit(self) -> str:
        return "in" if self.imperial else "cm"

    def convert_length(self, meters: float) -> float:
        return meters * INCHES_PER_METER if self.imperial else meters * 100

    # temperature

    def format_temperature(self, celsius: float) -> str:
        return f"{fixed(self.convert_temperature(celsius), 1)}{self.temperature_unit()}"

    def temperature_unit(self) -> str:
        return "°F" if self.imperial else "°C"

    def convert_temperature(self, celsius: float) -> float:
        return celsius * 9 / 5 + 32 if self.imperial else celsius

    # volume

    def format_volume(self, liters: float) -> str:
        if self.imperial:
            return f"{fixed(self.convert_volume(liters), 1)} fl oz"
        return f"{fixed(liters, 2)} L"

    def volume_unit(self) -> str:
        return "fl oz" if self.imperial else "L"

    def convert_volume(self, liters: float) -> float:
        return liters * FL_OZ_PER_LITER if self.imperial else liters

    # speed

    def format_speed(self, meters_per_second: float) -> str:
        return f"{fixed(self.convert_speed(meters_per_second), 1)} {self.speed_unit()}"

    def speed_unit(self) -> str:
        return "mph" if self.imperial else "km/h"

    def convert_speed(self, meters_per_second: float) -> float:
        return meters_per_second * MPH_PER_MPS if self.imperial else meters_per_second * KMH_PER_MPS
