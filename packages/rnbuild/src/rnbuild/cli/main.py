"""rnbuild CLI - build React Native native modules."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from rnbuild.cli.build import build_app

app = typer.Typer(
    name="rnbuild",
    help="Build React Native native modules for android & iOS",
    no_args_is_help=True,
)

# Add command groups
app.add_typer(build_app, name="build")


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich; stdout stays clean."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Build React Native native modules for android & iOS."""
    configure_logging(verbose)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
