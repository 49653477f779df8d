"""
Command-line interface for Repo Grader.

Provides commands for:
- analyze: Grade a repository directory or snapshot
- detect: List detected cloud services, packages and tooling
- snapshot: Save a directory snapshot as JSON
- show: Re-display a saved report
- config: Manage configuration
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from repo_grader import __version__
from repo_grader.config import RepoGraderConfig, load_config, save_default_config
from repo_grader.engine import analyze_snapshot, load_report, save_report
from repo_grader.errors import ConfigError, RepoGraderError
from repo_grader.repo_scanner import load_snapshot, save_snapshot, scan_directory
from repo_grader.schemas import Report, RepoMetadata, RepoSnapshot
from repo_grader.tech_detect import detect_tech

# Configure logging
logging.basicConfig(
    level=logging.INFO if not os.environ.get("REPO_GRADER_DEBUG") else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="repo-grader",
    help="Grade repository health from its files and detect its technology stack",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Global config (loaded once)
_config: RepoGraderConfig | None = None

GRADE_STYLES = {"A": "bold green", "B": "green", "C": "yellow", "D": "red", "F": "bold red"}

ECOSYSTEM_LABELS = [
    ("aws", "AWS"),
    ("azure", "Azure"),
    ("gcp", "GCP"),
    ("python", "Python"),
    ("node", "Node"),
    ("go", "Go"),
    ("java", "Java"),
    ("php", "PHP"),
    ("rust", "Rust"),
    ("ruby", "Ruby"),
    ("frameworks", "Frameworks"),
    ("databases", "Databases"),
    ("cicd", "CI/CD"),
    ("testing", "Testing"),
]


def get_config(config_path: Path | None = None) -> RepoGraderConfig:
    """Get or load configuration."""
    global _config
    if _config is None or config_path is not None:
        try:
            _config = load_config(config_path)
        except ConfigError as e:
            if config_path is not None:
                raise
            console.print(f"[yellow]Warning:[/yellow] {e.message}")
            _config = RepoGraderConfig.default()
    return _config


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]repo-grader[/bold] version {__version__}")
        raise typer.Exit()


def fail(error: RepoGraderError) -> None:
    """Print a domain error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error.message}")
    if error.suggestion:
        console.print(f"[dim]{error.suggestion}[/dim]")
    logger.debug(f"{error!r}")
    raise typer.Exit(1)


def resolve_snapshot(path: Path, license_id: str | None = None) -> RepoSnapshot:
    """A directory is scanned; any other path is read as snapshot JSON."""
    path = path.resolve()
    if path.is_dir():
        snapshot = scan_directory(path, get_config())
    else:
        snapshot = load_snapshot(path)

    if license_id:
        metadata = snapshot.metadata or RepoMetadata()
        snapshot = snapshot.model_copy(update={"metadata": metadata.model_copy(update={"license": license_id})})
    return snapshot


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True,
                     help="Show version and exit"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file"),
    ] = None,
) -> None:
    """Repo Grader - score repository health signals."""
    if config:
        try:
            get_config(config)
        except RepoGraderError as e:
            fail(e)


def print_report(report: Report, show_signals: bool = False) -> None:
    """Render a report with rich."""
    style = GRADE_STYLES.get(report.grade, "bold")
    console.print(Panel(
        f"[{style}]Grade {report.grade}[/{style}]  "
        f"[bold]{report.overall_score}[/bold]/100\n"
        f"Files read: {report.file_count}  Tree entries: {report.tree_entry_count}",
        title="Repo Grader",
    ))

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Signals", justify="right")
    for cat in report.categories:
        found = sum(1 for s in cat.signals if s.found)
        table.add_row(cat.label, str(cat.score), f"{cat.weight:.2f}", f"{found}/{len(cat.signals)}")
    console.print(table)

    if show_signals:
        for cat in report.categories:
            console.print()
            console.print(f"[bold]{cat.label}[/bold]")
            for s in cat.signals:
                mark = "[green]✓[/green]" if s.found else "[red]✗[/red]"
                details = f" [dim]({s.details})[/dim]" if s.details else ""
                console.print(f"  {mark} {s.name}{details}")

    if report.tech_stack:
        console.print()
        console.print(f"[bold]Tech stack:[/bold] {', '.join(t.name for t in report.tech_stack)}")

    for title, items, color in (
        ("Strengths", report.strengths, "green"),
        ("Risks", report.risks, "red"),
        ("Next steps", report.next_steps, "yellow"),
    ):
        if items:
            console.print()
            console.print(f"[{color}]{title}:[/{color}]")
            for item in items:
                console.print(f"  • {item}")

    if report.contributor:
        console.print()
        console.print(f"[bold]Contributor friendliness:[/bold] {report.contributor.score}/100")
        for item in report.contributor.readiness_checklist:
            mark = "[green]✓[/green]" if item.passed else "[dim]○[/dim]"
            console.print(f"  {mark} {item.label}")


@app.command()
def analyze(
    path: Annotated[Path, typer.Argument(help="Repository directory or snapshot JSON file")] = Path("."),
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write the report JSON here")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Print the report as JSON")] = False,
    license_id: Annotated[
        Optional[str],
        typer.Option("--license", "-l", help="SPDX license id to use for the license checks"),
    ] = None,
    signals: Annotated[bool, typer.Option("--signals", "-s", help="Show every signal")] = False,
) -> None:
    """
    Grade a repository.

    Scores documentation, security, CI/CD, dependencies, code quality,
    license, community and OpenSSF-style checks.
    """
    cfg = get_config()
    try:
        snapshot = resolve_snapshot(path, license_id)
    except RepoGraderError as e:
        fail(e)

    report = analyze_snapshot(snapshot, cfg)

    if out:
        saved = save_report(report, out, pretty=cfg.output.pretty_json)
        if not json_output:
            console.print(f"[dim]Report saved to:[/dim] {saved}")

    if json_output:
        typer.echo(report.model_dump_json(by_alias=True, indent=2))
        return

    print_report(report, show_signals=signals or cfg.output.show_signals)


@app.command()
def detect(
    path: Annotated[Path, typer.Argument(help="Repository directory or snapshot JSON file")] = Path("."),
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write detections JSON here")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Print detections as JSON")] = False,
) -> None:
    """
    Detect cloud services, packages and tooling.

    Only manifest, infrastructure and CI files plus a bounded sample of
    source files are examined.
    """
    cfg = get_config()
    try:
        snapshot = resolve_snapshot(path)
    except RepoGraderError as e:
        fail(e)

    result = detect_tech(snapshot.tree, snapshot.files, cfg.selector)

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            f.write(result.model_dump_json(by_alias=True, indent=2 if cfg.output.pretty_json else None))
        if not json_output:
            console.print(f"[dim]Detections saved to:[/dim] {out}")

    if json_output:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        return

    console.print(Panel(
        f"[bold]Candidate files:[/bold] {len(result.manifest_files)}",
        title="Repo Grader",
    ))

    any_found = False
    for field_name, label in ECOSYSTEM_LABELS:
        detections = getattr(result, field_name)
        if not detections:
            continue
        any_found = True
        table = Table(title=label)
        table.add_column("Name", style="cyan")
        table.add_column("Version / Package")
        table.add_column("Source", style="dim")
        table.add_column("Via", style="dim")
        for d in detections:
            name = getattr(d, "service", None) or getattr(d, "name", "")
            extra = getattr(d, "sdk_package", None) or getattr(d, "version", None) or ""
            table.add_row(name, extra, d.source, d.via)
        console.print(table)

    if not any_found:
        console.print("[yellow]No technologies detected.[/yellow]")


@app.command()
def snapshot(
    path: Annotated[Path, typer.Argument(help="Repository directory")] = Path("."),
    out: Annotated[Path, typer.Option("--out", "-o", help="Snapshot JSON file")] = Path("snapshot.json"),
) -> None:
    """Save a directory as a snapshot JSON file for later grading."""
    cfg = get_config()
    try:
        snap = scan_directory(path, cfg)
    except RepoGraderError as e:
        fail(e)

    saved = save_snapshot(snap, out)
    console.print(f"[green]✓[/green] {len(snap.tree)} tree entries, {len(snap.files)} files")
    console.print(f"[dim]Snapshot saved to:[/dim] {saved}")


@app.command()
def show(
    report_path: Annotated[Path, typer.Argument(help="Saved report JSON file")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    signals: Annotated[bool, typer.Option("--signals", "-s", help="Show every signal")] = False,
) -> None:
    """Re-display a saved report."""
    try:
        report = load_report(report_path)
    except RepoGraderError as e:
        fail(e)

    if json_output:
        typer.echo(report.model_dump_json(by_alias=True, indent=2))
        return

    print_report(report, show_signals=signals)


@app.command("config")
def config_cmd(
    init_config: Annotated[bool, typer.Option("--init", help="Create default config file")] = False,
    show_config: Annotated[bool, typer.Option("--show", help="Show current configuration")] = False,
    path: Annotated[Optional[Path], typer.Option("--path", help="Config file path for --init")] = None,
) -> None:
    """
    Manage configuration.

    Create or view configuration files.
    """
    if init_config:
        config_path = save_default_config(path)
        console.print(f"[green]✓[/green] Created config file: {config_path}")
        console.print("[dim]Edit this file to customize settings.[/dim]")
        return

    if show_config:
        cfg = get_config()
        console.print("[bold]Current Configuration[/bold]")
        console.print()
        console.print(cfg.model_dump_json(indent=2))
        return

    # Default: show help
    console.print("Use --init to create a config file or --show to view current config.")
    console.print()
    console.print("Example config file location: ./repo-grader.toml")
    console.print()
    console.print("[dim]Config is searched in:[/dim]")
    console.print("  • ./repo-grader.toml")
    console.print("  • ./.repo-grader.toml")
    console.print("  • ./pyproject.toml [tool.repo-grader]")


if __name__ == "__main__":
    app()
