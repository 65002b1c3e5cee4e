from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version
from pathlib import Path
from typing import Annotated

import typer

from lx.cli.run import console, run_generate

DISTRIBUTION_NAME = "lx-codegen"


def resolve_version() -> str:
    try:
        return _distribution_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "dev"


def create_app(version: str) -> typer.Typer:
    app = typer.Typer(
        name="lx",
        help="lx — replace functions carrying an lx directive with generated code.",
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )

    def _show_version(value: bool) -> None:
        if value:
            console.print(f"lx {version}")
            raise typer.Exit()

    @app.command()
    def generate(
        target_dir: Annotated[
            Path,
            typer.Argument(exists=True, help="Directory (or single file) to scan for directives."),
        ] = Path("."),
        show_version: Annotated[
            bool,
            typer.Option("--version", callback=_show_version, is_eager=True, help="Show the version and exit."),
        ] = False,
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
        no_format: Annotated[bool, typer.Option("--no-format", help="Do not run formatters on rewritten files.")] = False,
    ) -> None:
        """Scan TARGET_DIR and rewrite every function that contains a directive."""
        run_generate(target_dir, verbose=verbose, format_files=not no_format)

    return app


app = create_app(resolve_version())


def main() -> None:
    app()
