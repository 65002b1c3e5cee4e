import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lx.config import ConfigError, load_config
from lx.core.languages import GrammarDefinitionError, GrammarRegistry
from lx.core.postprocess import no_post_processing, run_formatters
from lx.core.rewrite import run_directory
from lx.models import FileStatus, RunSummary
from lx.oracle import create_oracle

console = Console()

_STATUS_STYLES = {
    FileStatus.WRITTEN: "green",
    FileStatus.NO_DIRECTIVES: "dim",
    FileStatus.PARSE_ERROR: "yellow",
    FileStatus.ALL_FAILED: "red",
    FileStatus.WRITE_FAILED: "red",
    FileStatus.FAILED: "red",
}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _render_summary(summary: RunSummary) -> None:
    touched = [outcome for outcome in summary.outcomes if outcome.status is not FileStatus.NO_DIRECTIVES]
    if touched:
        table = Table(show_lines=False)
        for header in ("file", "language", "status", "directives", "failed", "dependencies"):
            table.add_column(header)
        for outcome in touched:
            style = _STATUS_STYLES[outcome.status]
            table.add_row(
                outcome.path,
                outcome.language or "",
                f"[{style}]{outcome.status.value}[/{style}]",
                str(outcome.directives),
                str(outcome.failed),
                ", ".join(outcome.dependencies),
            )
        console.print(table)
    console.print(
        f"Scanned {summary.files_processed} file(s): "
        f"{summary.count(FileStatus.WRITTEN)} rewritten, "
        f"{summary.directives - summary.failed_directives} of {summary.directives} directive(s) generated"
    )
    if summary.failed_directives:
        console.print("[yellow]Some directives failed; see the log for details.[/yellow]")


def run_generate(target_dir: Path, verbose: bool = False, format_files: bool = True) -> RunSummary:
    """Load configuration and grammars, then rewrite every directive under ``target_dir``."""
    configure_logging(verbose)
    try:
        config = load_config()
        registry = GrammarRegistry.from_specs()
        oracle = create_oracle(config)
    except (ConfigError, GrammarDefinitionError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[{target_dir}] scanning...", markup=False)
    summary = run_directory(
        target_dir,
        registry,
        oracle,
        post_process=run_formatters if format_files else no_post_processing,
    )
    _render_summary(summary)
    return summary
