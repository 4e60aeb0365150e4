from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import structlog

from .config import Settings, expand_placeholders
from .entries import build_entries
from .exporters import ExportFormat, serialize
from .models import CategorySelection, HealthData
from .preferences import FormatCustomization
from .utils import retry_backoff
from .writer import WriteMode, resolve_content

logger = structlog.get_logger()


class ExportError(RuntimeError):
    pass


class VaultNotConfiguredError(ExportError):
    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        if path is None:
            msg = "No vault folder configured. Set VAULT_PATH or pass --vault."
        else:
            msg = f"Vault folder does not exist: {path}"
        super().__init__(msg)
        self.path = path


class NoHealthDataError(ExportError):
    def __init__(self, day: dt.date) -> None:
        super().__init__(f"No health data available for {day.isoformat()}")
        self.day = day


@dataclass(frozen=True)
class ExportResult:
    path: Path
    relative_path: str
    action: str
    entry_paths: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        text = f"{self.action} {self.relative_path}"
        n = len(self.entry_paths)
        if n:
            text += f" + {n} individual entr{'y' if n == 1 else 'ies'}"
        return text


def _action(existing: Optional[str], mode: WriteMode, fmt: ExportFormat) -> str:
    if existing is None or mode is WriteMode.OVERWRITE:
        return WriteMode.OVERWRITE.verb
    if mode is WriteMode.UPDATE and not fmt.supports_merge:
        return WriteMode.OVERWRITE.verb
    return mode.verb


class VaultWriter:
    """Places exports inside a vault: ``<vault>/<subfolder>/<folder structure>/<file>``."""

    def __init__(
        self,
        vault_path: Optional[Union[str, Path]],
        health_subfolder: str = "Health",
        folder_structure: str = "",
        filename_format: str = "{date}",
        retries: int = 3,
        backoff: float = 0.5,
    ) -> None:
        self.vault_path = Path(vault_path) if vault_path else None
        self.health_subfolder = health_subfolder.strip("/")
        self.folder_structure = folder_structure.strip("/")
        self.filename_format = filename_format or "{date}"
        self.retries = retries
        self.backoff = backoff

    @classmethod
    def from_settings(cls, settings: Settings, vault_path: Optional[Path] = None) -> "VaultWriter":
        return cls(
            vault_path or settings.VAULT_PATH,
            health_subfolder=settings.HEALTH_SUBFOLDER,
            folder_structure=settings.FOLDER_STRUCTURE,
            filename_format=settings.FILENAME_FORMAT,
            retries=settings.WRITE_RETRIES,
        )

    # ---------- paths ----------

    def relative_folder(self, day: dt.date) -> str:
        parts = [self.health_subfolder, expand_placeholders(self.folder_structure, day).strip("/")]
        return "/".join(p for p in parts if p)

    def relative_path(self, day: dt.date, fmt: ExportFormat) -> str:
        name = f"{expand_placeholders(self.filename_format, day)}.{fmt.file_extension}"
        folder = self.relative_folder(day)
        return f"{folder}/{name}" if folder else name

    def _root(self) -> Path:
        if self.vault_path is None:
            raise VaultNotConfiguredError()
        if not self.vault_path.is_dir():
            raise VaultNotConfiguredError(self.vault_path)
        return self.vault_path

    def target_path(self, day: dt.date, fmt: ExportFormat) -> Path:
        return self._root() / self.relative_path(day, fmt)

    # ---------- io ----------

    @staticmethod
    def read_existing(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as f:
            return f.read()

    def write_text(self, path: Path, content: str) -> None:
        retry_backoff(max_attempts=self.retries, base=self.backoff)(self._write_once)(path, content)

    @staticmethod
    def _write_once(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    # ---------- pipeline ----------

    def export(
        self,
        data: HealthData,
        fmt: ExportFormat = ExportFormat.MARKDOWN,
        mode: WriteMode = WriteMode.OVERWRITE,
        customization: Optional[FormatCustomization] = None,
        include_metadata: bool = True,
        categories: Optional[CategorySelection] = None,
        individual_entries: bool = False,
        entries_folder: str = "entries",
        entries_by_category: bool = True,
    ) -> ExportResult:
        root = self._root()
        if categories is not None:
            data = data.filtered(categories)
        if not data.has_any_data:
            raise NoHealthDataError(data.date)

        rel = self.relative_path(data.date, fmt)
        path = root / rel
        new = serialize(data, fmt, customization, include_metadata=include_metadata)
        existing = self.read_existing(path)
        final = resolve_content(existing, new, mode, fmt, target=rel)
        self.write_text(path, final)
        logger.info("export_written", path=str(path), format=fmt.value, mode=mode.value, existed=existing is not None)

        entry_paths: list[Path] = []
        if individual_entries:
            # entries have no section structure, so Update behaves like Overwrite
            entry_mode = WriteMode.APPEND if mode is WriteMode.APPEND else WriteMode.OVERWRITE
            folder = path.parent
            for entry in build_entries(data, customization, entries_folder, entries_by_category):
                entry_path = folder / entry.relative_path
                content = resolve_content(self.read_existing(entry_path), entry.content, entry_mode)
                self.write_text(entry_path, content)
                entry_paths.append(entry_path)
            if entry_paths:
                logger.info("entries_written", folder=str(folder), count=len(entry_paths))

        return ExportResult(
            path=path,
            relative_path=rel,
            action=_action(existing, mode, fmt),
            entry_paths=tuple(entry_paths),
        )
