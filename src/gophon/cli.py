"""CLI entry point for gophon -- per-symbol indexes of Go source trees."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .errors import ScanError
from .models import PackageResult, ScanProgress

app = typer.Typer(
    name="gophon",
    help="Index Go source code into one file per top-level symbol.",
    add_completion=False,
)

console = Console()

_MODULE_RE = re.compile(r"^module\s+(\S+)", re.MULTILINE)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _module_path(source: Path, base_module: str | None) -> str:
    """Use *base_module* when given, otherwise the ``module`` line of go.mod."""
    if base_module:
        return base_module
    go_mod = source / "go.mod"
    if go_mod.is_file():
        match = _MODULE_RE.search(go_mod.read_text(encoding="utf-8"))
        if match:
            return match.group(1)
    console.print(
        "[red]Error:[/red] No go.mod module found. Pass [bold]--base-module[/bold]."
    )
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def index(
    source: Path = typer.Argument(Path("."), help="Go module root (default: current directory)."),
    dest: Path = typer.Option(..., "--dest", "-d", help="Destination folder for .goindex files."),
    base_module: Optional[str] = typer.Option(None, "--base-module", "-m", help="Module path (default: read go.mod)."),
    path: str = typer.Option("", "--path", "-p", help="Package directory to start from, relative to SOURCE."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Write one .goindex artifact per top-level declaration."""
    from .emitter import index_source_code

    _setup_logging(verbose)
    source = source.resolve()
    module = _module_path(source, base_module)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Indexing packages", total=None)

        def _on_progress(p: ScanProgress) -> None:
            progress.update(
                task,
                total=p.total,
                completed=p.completed,
                description=f"Indexing {p.current_package or module}",
            )

        try:
            summary = index_source_code(
                path, module, str(dest.resolve()), _on_progress, source_root=str(source),
            )
        except ScanError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(code=1)

    console.print(
        f"[green]Indexed[/green] {summary.packages} package(s): "
        f"{summary.written} artifact(s) written to {dest}"
    )
    if summary.skipped:
        console.print(f"  [yellow]{summary.skipped} artifact(s) could not be written.[/yellow]")


@app.command()
def scan(
    source: Path = typer.Argument(Path("."), help="Go module root (default: current directory)."),
    base_module: Optional[str] = typer.Option(None, "--base-module", "-m", help="Module path (default: read go.mod)."),
    path: str = typer.Option("", "--path", "-p", help="Package directory to start from, relative to SOURCE."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """List discovered packages and their symbol counts without writing anything."""
    from .orchestrator import scan_packages_recursively

    _setup_logging(verbose)
    source = source.resolve()
    module = _module_path(source, base_module)
    rows: list[tuple[str, PackageResult]] = []

    def _on_package(result: PackageResult, package_url: str) -> None:
        rows.append((package_url, result))

    try:
        scan_packages_recursively(path, module, _on_package, source_root=str(source))
    except ScanError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    table = Table(title=f"Packages under {module}")
    table.add_column("Package")
    for header in ("Files", "Consts", "Vars", "Types", "Funcs"):
        table.add_column(header, justify="right")
    for package_url, result in sorted(rows, key=lambda r: r[0]):
        if result.is_empty:
            continue
        table.add_row(
            package_url,
            str(len(result.files)),
            str(len(result.constants)),
            str(len(result.variables)),
            str(len(result.types)),
            str(len(result.functions)),
        )
    console.print(table)
