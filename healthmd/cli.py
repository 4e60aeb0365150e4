# healthmd/cli.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from pydantic import ValidationError

from .config import Settings, get_settings
from .exporters import ExportFormat, serialize
from .loader import SnapshotLoadError, load_snapshot
from .merger import merge as merge_documents
from .models import CategorySelection, HealthData
from .preferences import FormatCustomization
from .vault import ExportError, VaultWriter
from .writer import WriteMode

app = typer.Typer(no_args_is_help=True, help="healthmd: daily health data to Markdown/JSON/CSV notes")
log = structlog.get_logger()


# ---------- helpers ----------

def _configure_logging(verbose: bool) -> None:
    # logs go to stderr so preview and merge output can be piped
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        # looked up per call so a swapped sys.stderr is honoured
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
    )


def _settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid configuration:\n{e}") from e


def _customization(settings: Settings) -> FormatCustomization:
    try:
        return settings.customization()
    except (OSError, ValueError) as e:
        raise typer.BadParameter(str(e), param_hint="FORMAT_CONFIG_FILE") from e


def _snapshot(path: Path) -> HealthData:
    try:
        return load_snapshot(path)
    except SnapshotLoadError as e:
        raise typer.BadParameter(str(e), param_hint="SNAPSHOT") from e


def _categories(value: Optional[str], settings: Settings) -> CategorySelection:
    if value is None:
        return settings.categories
    try:
        return CategorySelection.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--categories") from e


def _read(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise typer.BadParameter(f"{path}: {e.strerror or e}") from e


# ---------- commands ----------

@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    _configure_logging(verbose)


@app.command("diag")
def diag() -> None:
    """Show the resolved settings (.env + environment)."""
    settings = _settings()
    for name, value in settings.model_dump().items():
        if hasattr(value, "value"):
            value = value.value
        typer.echo(f"{name}: {value}")
    vault = settings.VAULT_PATH
    typer.echo(f"vault exists: {bool(vault and vault.is_dir())}")


@app.command()
def export(
    snapshot: Path = typer.Argument(..., help="Snapshot JSON file for one day"),
    vault: Optional[Path] = typer.Option(None, help="Vault folder (defaults to VAULT_PATH)"),
    fmt: Optional[ExportFormat] = typer.Option(None, "--format", help="Output format"),
    mode: Optional[WriteMode] = typer.Option(None, help="What to do when the file already exists"),
    categories: Optional[str] = typer.Option(None, help="Comma-separated categories or 'all'"),
    entries: Optional[bool] = typer.Option(
        None, "--entries/--no-entries", help="Also write one file per workout and mood entry"
    ),
) -> None:
    """Write one day into the vault."""
    settings = _settings()
    data = _snapshot(snapshot)
    selection = _categories(categories, settings)
    customization = _customization(settings)
    writer = VaultWriter.from_settings(settings, vault_path=vault)

    try:
        result = writer.export(
            data,
            fmt=fmt or settings.EXPORT_FORMAT,
            mode=mode or settings.WRITE_MODE,
            customization=customization,
            include_metadata=settings.INCLUDE_METADATA,
            categories=selection,
            individual_entries=settings.INDIVIDUAL_ENTRIES if entries is None else entries,
            entries_folder=settings.ENTRIES_FOLDER,
            entries_by_category=settings.ENTRIES_BY_CATEGORY,
        )
    except ExportError as e:
        log.error("export_failed", snapshot=str(snapshot), error=str(e))
        typer.echo(f"[ERR] {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(result.message)


@app.command()
def preview(
    snapshot: Path = typer.Argument(..., help="Snapshot JSON file for one day"),
    fmt: Optional[ExportFormat] = typer.Option(None, "--format", help="Output format"),
    categories: Optional[str] = typer.Option(None, help="Comma-separated categories or 'all'"),
) -> None:
    """Print the export to stdout without touching the vault."""
    settings = _settings()
    data = _snapshot(snapshot).filtered(_categories(categories, settings))
    text = serialize(
        data,
        fmt or settings.EXPORT_FORMAT,
        _customization(settings),
        include_metadata=settings.INCLUDE_METADATA,
    )
    typer.echo(text, nl=False)


@app.command("merge")
def merge_cmd(
    existing: Path = typer.Argument(..., help="Note as it is now"),
    new: Path = typer.Argument(..., help="Freshly generated note"),
) -> None:
    """Print EXISTING with its managed sections replaced from NEW."""
    typer.echo(merge_documents(_read(existing), _read(new)), nl=False)


if __name__ == "__main__":
    app()
