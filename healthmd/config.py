from __future__ import annotations
from dotenv import load_dotenv, find_dotenv; load_dotenv(find_dotenv(usecwd=True), override=False)

import datetime as dt
import json
from pathlib import Path
from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exporters import ExportFormat
from .models import CategorySelection
from .preferences import DateFormat, FormatCustomization, TimeFormat
from .units import UnitSystem
from .utils import get_tz
from .writer import WriteMode


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General
    TZ: Optional[str] = Field(default=None, description="IANA timezone used for times of day")

    # Vault layout
    VAULT_PATH: Optional[Path] = Field(default=None, description="Root folder of the Obsidian vault")
    HEALTH_SUBFOLDER: str = Field(default="Health")
    FILENAME_FORMAT: str = Field(
        default="{date}",
        description="Placeholders: {date} {year} {month} {day} {weekday} {monthName}",
    )
    FOLDER_STRUCTURE: str = Field(default="", description="e.g. {year}/{month}; empty for flat")

    # Export
    EXPORT_FORMAT: ExportFormat = ExportFormat.MARKDOWN
    WRITE_MODE: WriteMode = WriteMode.OVERWRITE
    INCLUDE_METADATA: bool = True
    EXPORT_CATEGORIES: str = Field(default="all", description="Comma-separated categories or 'all'")
    DATE_FORMAT: DateFormat = DateFormat.ISO8601
    TIME_FORMAT: TimeFormat = TimeFormat.HOUR24
    UNIT_SYSTEM: UnitSystem = UnitSystem.METRIC
    FORMAT_CONFIG_FILE: Optional[Path] = Field(
        default=None,
        description="JSON file with a full FormatCustomization; overrides the three options above",
    )

    # Individual entry files
    INDIVIDUAL_ENTRIES: bool = False
    ENTRIES_FOLDER: str = Field(default="entries")
    ENTRIES_BY_CATEGORY: bool = True

    WRITE_RETRIES: int = Field(default=3, ge=1, description="Attempts per file write")

    @field_validator("TZ")
    @classmethod
    def check_tz(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                get_tz(value)
            except pytz.UnknownTimeZoneError:
                raise ValueError(f"unknown timezone: {value}") from None
        return value or None

    @field_validator("EXPORT_CATEGORIES")
    @classmethod
    def check_categories(cls, value: str) -> str:
        CategorySelection.parse(value)
        return value

    @property
    def categories(self) -> CategorySelection:
        return CategorySelection.parse(self.EXPORT_CATEGORIES)

    def customization(self) -> FormatCustomization:
        if self.FORMAT_CONFIG_FILE is not None:
            with open(self.FORMAT_CONFIG_FILE, "r", encoding="utf-8") as f:
                custom = FormatCustomization.model_validate(json.load(f))
            if custom.timezone is None and self.TZ:
                custom = custom.model_copy(update={"timezone": self.TZ})
            return custom
        return FormatCustomization(
            date_format=self.DATE_FORMAT,
            time_format=self.TIME_FORMAT,
            unit_system=self.UNIT_SYSTEM,
            timezone=self.TZ,
        )


def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def expand_placeholders(template: str, day: dt.date) -> str:
    """Fill ``{date}`` style placeholders used in file and folder names."""
    values = {
        "{date}": day.isoformat(),
        "{year}": f"{day.year:04d}",
        "{month}": f"{day.month:02d}",
        "{day}": f"{day.day:02d}",
        "{weekday}": f"{day:%A}",
        "{monthName}": f"{day:%B}",
    }
    out = template
    for key, value in values.items():
        out = out.replace(key, value)
    return out
