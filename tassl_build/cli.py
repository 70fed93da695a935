"""Thin CLI wrapper for tassl_build.

This module provides the command-line interface using Typer.
All build logic is delegated to tassl_build.builds.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from tassl_build import __version__
from tassl_build.config import Settings, get_settings, print_settings_json

app = typer.Typer(
    name="tassl-build",
    help="TASSL build helper - build the vendored TASSL tree and report its artifacts",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"tassl-build version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """TASSL build helper - build the vendored TASSL tree and report its artifacts."""


@app.command()
def build(
    source_dir: Annotated[
        Path | None,
        typer.Option("--source-dir", "-s", help="Vendored TASSL source tree"),
    ] = None,
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", "-o", help="Output root for build and install"),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="Target triple"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Host triple"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Rebuild even if already installed"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    cargo: Annotated[
        bool,
        typer.Option("--cargo", help="Print Cargo link directives"),
    ] = False,
) -> None:
    """Build TASSL and report the installed artifacts."""
    from tassl_build.builds.service import Builder
    from tassl_build.errors import BuildFailure, TasslBuildError

    settings = get_settings()
    overrides = {
        "source_dir": source_dir,
        "out_dir": out_dir,
        "target": target,
        "host": host,
    }
    update = {k: v for k, v in overrides.items() if v is not None}
    if force:
        update["force"] = True
    settings = settings.model_copy(update=update)
    configure_logging(settings.log_level)

    try:
        artifacts = Builder.from_settings(settings).build()
    except TasslBuildError as e:
        if json_output:
            error: dict[str, object] = {"code": e.code, "message": str(e)}
            if isinstance(e, BuildFailure):
                error["step"] = e.step
                error["command"] = e.command
                error["exit_code"] = e.exit_code
            console.print_json(json.dumps({"error": error}))
        else:
            err_console.print(str(e), style="red", markup=False, highlight=False)
        raise typer.Exit(code=1) from None

    if cargo:
        # Plain print; rich would wrap long paths.
        for line in artifacts.link_metadata():
            print(line)
    elif json_output:
        console.print_json(json.dumps(artifacts.to_dict()))
    else:
        console.print(f"[bold]TASSL installed for {settings.target}:[/bold]")
        console.print(f"  Include directory: {artifacts.include_dir}")
        console.print(f"  Library directory: {artifacts.lib_dir}")
        console.print(f"  Binary directory:  {artifacts.bin_dir}")
        console.print(f"  Libraries:         {', '.join(artifacts.libs)}")


@app.command()
def targets(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List supported target triples."""
    from tassl_build.builds.targets import CONFIGURE_TARGETS

    if json_output:
        console.print_json(json.dumps(CONFIGURE_TARGETS))
        return

    console.print(f"[bold]{len(CONFIGURE_TARGETS)} supported target(s):[/bold]")
    width = max(len(t) for t in CONFIGURE_TARGETS)
    for triple, platform_id in CONFIGURE_TARGETS.items():
        console.print(f"  {triple:<{width}}  {platform_id}")


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings: Settings = get_settings()
    if json_output:
        console.print_json(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Source directory:    {settings.source_dir}")
    console.print(f"  Output directory:    {settings.out_dir}")
    console.print()
    console.print("[bold]Platforms:[/bold]")
    console.print(f"  Target:              {settings.target}")
    console.print(f"  Host:                {settings.host}")
    console.print()
    console.print("[bold]Toolchain:[/bold]")
    console.print(f"  Perl:                {settings.perl}")
    console.print(f"  MAKEFLAGS:           {settings.makeflags or '(not set)'}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Force rebuild:       {settings.force}")
    console.print(f"  Log level:           {settings.log_level}")


if __name__ == "__main__":
    app()
