"""Build commands for android and iOS."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from rnbuild.builders import AndroidBuild, IosBuild
from rnbuild.config import settings
from rnbuild.patching import PatchError
from rnbuild.proc import CommandError
from rnbuild.progress import ProgressError
from rnbuild.project import ProjectConfig, ProjectError

build_app = typer.Typer(help="Build for android & iOS", no_args_is_help=True)

console = Console(stderr=True)

BUILD_ERRORS = (CommandError, PatchError, ProgressError, ProjectError, FileNotFoundError)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


@build_app.command()
def android(
    project: Optional[Path] = typer.Option(
        None, "--project", help="React Native project root", file_okay=False
    ),
    force: bool = typer.Option(False, "--force", help="Run even if not in a react native project"),
    unpatch_cpp: bool = typer.Option(
        False,
        "--unpatch-cpp",
        help="Leave cpp-adapter.cpp as generated (pre RN 0.80 install body)",
    ),
    unpatch_ubrn: bool = typer.Option(
        False,
        "--unpatch-ubrn",
        help="Build through `yarn ubrn` (formats codegen, passes --no-strip to cargo-ndk)",
    ),
    unpatch_cmake: bool = typer.Option(
        False,
        "--unpatch-cmake",
        help="Leave backslash paths in CMakeLists.txt",
    ),
    crate: str = typer.Option(settings.crate, "--crate", help="Rust crate directory name"),
) -> None:
    """Build for android."""
    build = AndroidBuild(
        project=ProjectConfig(root=project, force=force),
        unpatch_cpp=unpatch_cpp,
        unpatch_ubrn=unpatch_ubrn,
        unpatch_cmake=unpatch_cmake,
        crate=crate,
    )
    try:
        build.build()
    except BUILD_ERRORS as e:
        _fail(e)

    console.print("[green]done building android![/green]")


@build_app.command()
def ios(
    project: Optional[Path] = typer.Option(
        None, "--project", help="React Native project root", file_okay=False
    ),
    force: bool = typer.Option(False, "--force", help="Run even if not in a react native project"),
) -> None:
    """Build for iOS."""
    try:
        built = IosBuild(project=ProjectConfig(root=project, force=force)).build()
    except BUILD_ERRORS as e:
        _fail(e)

    if not built:
        console.print("[yellow]iOS builds are not implemented yet[/yellow]")
