"""CLI entry point for designdiff -- design-document version diffing."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import BaseModel, TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .models import DesignDiffConfig, DocumentSnapshot, Ticket, VersionInfo
from .project import ConfigError

app = typer.Typer(
    name="designdiff",
    help="Compare design-document versions and summarise the work they contain.",
    add_completion=False,
)

console = Console()

_TICKET_LIST = TypeAdapter(list[Ticket])


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code=1)


def _read_snapshot(path: Path) -> DocumentSnapshot:
    try:
        return DocumentSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail(f"Cannot read snapshot {path}: {escape(str(exc))}")
    except ValidationError as exc:
        raise _fail(f"Invalid snapshot {path}:\n{escape(str(exc))}")


def _read_version(path: Path | None, snapshot: DocumentSnapshot, fallback: str) -> VersionInfo:
    """Version metadata from *path*, else derived from the snapshot itself."""
    if path is None:
        return VersionInfo(
            id=snapshot.version or fallback,
            created_at=snapshot.last_modified or "",
        )
    try:
        return VersionInfo.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail(f"Cannot read version file {path}: {escape(str(exc))}")
    except ValidationError as exc:
        raise _fail(f"Invalid version file {path}:\n{escape(str(exc))}")


def _read_tickets(path: Path) -> list[Ticket]:
    try:
        return _TICKET_LIST.validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail(f"Cannot read tickets {path}: {escape(str(exc))}")
    except ValidationError as exc:
        raise _fail(f"Invalid tickets file {path}:\n{escape(str(exc))}")


def _load_settings(config_path: Path | None) -> DesignDiffConfig:
    from .project import resolve_config

    try:
        return resolve_config(config_path=config_path)
    except ConfigError as exc:
        raise _fail(escape(str(exc)))


def _write_json(model: BaseModel, output: Path, indent: int) -> None:
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(model.model_dump_json(indent=indent), encoding="utf-8")
    except OSError as exc:
        raise _fail(f"Cannot write {output}: {escape(str(exc))}")
    console.print(f"[green]Wrote[/green] {output}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def diff(
    old: Path = typer.Argument(..., help="Snapshot JSON of the older version."),
    new: Path = typer.Argument(..., help="Snapshot JSON of the newer version."),
    from_version: Optional[Path] = typer.Option(None, "--from-version", help="Version metadata JSON for OLD."),
    to_version: Optional[Path] = typer.Option(None, "--to-version", help="Version metadata JSON for NEW."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the diff as JSON."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Explicit config.toml."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """Show the structural changes between two snapshots."""
    from .diff import diff_snapshots

    _setup_logging(verbose)
    cfg = _load_settings(config_path)

    old_snap = _read_snapshot(old)
    new_snap = _read_snapshot(new)
    result = diff_snapshots(
        old_snap,
        new_snap,
        _read_version(from_version, old_snap, "old"),
        _read_version(to_version, new_snap, "new"),
    )

    summary = result.summary
    console.print(
        f"[bold]{result.file_name or new.name}[/bold]: "
        f"{result.from_version.id} -> {result.to_version.id}"
    )
    console.print(f"  total changes:  {summary.total_changes}")
    console.print(
        f"  nodes:          +{summary.nodes_added} -{summary.nodes_removed} "
        f"~{summary.nodes_modified} renamed {summary.nodes_renamed} moved {summary.nodes_moved}"
    )
    console.print(f"  components:     {summary.components_changed}")
    console.print(f"  styles:         {summary.styles_changed}")

    if output is not None:
        _write_json(result, output, cfg.indent)


@app.command()
def analyze(
    old: Path = typer.Argument(..., help="Snapshot JSON of the older version."),
    new: Path = typer.Argument(..., help="Snapshot JSON of the newer version."),
    from_version: Optional[Path] = typer.Option(None, "--from-version", help="Version metadata JSON for OLD."),
    to_version: Optional[Path] = typer.Option(None, "--to-version", help="Version metadata JSON for NEW."),
    tickets: Optional[Path] = typer.Option(None, "--tickets", "-t", help="JSON list of tickets to match."),
    file_key: Optional[str] = typer.Option(None, "--file-key", help="Design file key tickets should link to."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the full report as JSON."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Explicit config.toml."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """Group changes into features, score readiness and match tickets."""
    from .analysis.readiness import readiness_status
    from .analysis.tickets import match_summary_lines
    from .pipeline import run_pipeline

    _setup_logging(verbose)
    cfg = _load_settings(config_path)

    old_snap = _read_snapshot(old)
    new_snap = _read_snapshot(new)
    ticket_list = _read_tickets(tickets) if tickets is not None else None

    report = run_pipeline(
        old_snap,
        new_snap,
        _read_version(from_version, old_snap, "old"),
        _read_version(to_version, new_snap, "new"),
        tickets=ticket_list,
        file_key=file_key or cfg.file_key,
        rules=cfg.readiness,
    )

    ticket_for: dict[str, str] = {}
    if report.matches is not None:
        for match in report.matches.matches:
            if match.ticket is not None:
                ticket_for[match.feature.name] = (
                    f"{match.ticket.identifier or match.ticket.id} ({match.confidence})"
                )

    table = Table(title=f"{len(report.semantic.features)} features worked on")
    table.add_column("Feature")
    table.add_column("Change")
    table.add_column("Category")
    table.add_column("Readiness", justify="right")
    table.add_column("Ticket")
    for feature in report.semantic.features:
        assessment = report.readiness[feature.name]
        status = readiness_status(assessment.score)
        table.add_row(
            feature.name,
            feature.change_type,
            feature.category,
            f"{assessment.score} {status.label}",
            ticket_for.get(feature.name, "-"),
        )
    console.print(table)

    summary = report.readiness_summary
    console.print(
        f"Average readiness [bold]{summary.average_readiness}[/bold] "
        f"({summary.ready_count} ready, {summary.in_progress_count} in progress, "
        f"{summary.needs_work_count} need work)"
    )
    if report.semantic.ungrouped_changes:
        console.print(f"[dim]{len(report.semantic.ungrouped_changes)} ungrouped changes[/dim]")
    if report.matches is not None:
        for line in match_summary_lines(report.matches):
            console.print(line)

    if output is not None:
        _write_json(report, output, cfg.indent)


@app.command()
def config(
    key: Optional[str] = typer.Argument(None, help="Config key to get or set."),
    value: Optional[str] = typer.Argument(None, help="New value (omit to read)."),
    path: Optional[Path] = typer.Option(None, "--path", help="Project path."),
) -> None:
    """View or modify .designdiff/config.toml settings."""
    from .project import PROJECT_DIR, find_project_root, load_config, save_config

    start = Path(path).resolve() if path else Path.cwd()
    root = find_project_root(start)
    project_dir = (root or start) / PROJECT_DIR

    try:
        cfg = load_config(project_dir)
    except ConfigError as exc:
        raise _fail(escape(str(exc)))

    fields = DesignDiffConfig.model_fields

    if key is None:
        console.print("[bold]designdiff config:[/bold]")
        for field_name in fields:
            console.print(f"  {field_name} = {getattr(cfg, field_name)!r}")
        return

    if key not in fields:
        raise _fail(
            f"Unknown config key [bold]{key}[/bold].\n"
            f"  Valid keys: {', '.join(fields)}"
        )

    if value is None:
        console.print(f"{key} = {getattr(cfg, key)!r}")
        return

    if key == "readiness":
        raise _fail("readiness is a table; edit config.toml to change it.")

    # Set value -- coerce to the correct type.
    field_type = fields[key].annotation
    try:
        if field_type is int or field_type == (int | None):
            coerced = int(value)
        else:
            coerced = value
    except (ValueError, TypeError):
        raise _fail(f"Cannot convert {value!r} to {field_type}")

    setattr(cfg, key, coerced)
    save_config(project_dir, cfg)
    console.print(f"[green]Updated:[/green] {key} = {coerced!r}")


if __name__ == "__main__":
    app()
