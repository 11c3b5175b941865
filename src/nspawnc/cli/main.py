"""Main CLI implementation using Typer."""

import os
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.console import Console

from nspawnc.cli.commands import compile_containers, show_containers, validate_definitions
from nspawnc.config import ConfigManager
from nspawnc.errors import CompilerError
from nspawnc.utils.logging import setup_logging


DEFAULT_CONFIG_DIR = "./configs"

# Create Typer app
app = typer.Typer(
    name="nspawnc",
    help="nspawnc - compile container definitions into systemd-nspawn host artifacts",
    add_completion=False,
)

# Errors go to stderr so --json output stays parseable
console = Console(stderr=True)


def _config_dir(config_dir: Optional[Path]) -> Path:
    if config_dir is not None:
        return config_dir
    return Path(os.environ.get("NSPAWNC_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _run_cli_command(
    handler: Callable[..., Any],
    config_dir: Optional[Path],
    log_level: Optional[str] = None,
    **kwargs: Any
):
    """Helper to load configuration and run a command with error handling."""
    try:
        manager = ConfigManager(_config_dir(config_dir))
        manager.load()
        setup_logging(log_level or manager.config.compiler.log_level)
        handler(manager, **kwargs)
    except CompilerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command("compile")
def compile_command(
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", "-c", help="Configuration directory"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Root directory to write generated files to"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the artifact set as JSON"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List generated files without writing"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the log level"),
):
    """Resolve all containers and generate host artifacts."""
    _run_cli_command(
        compile_containers,
        config_dir,
        log_level=log_level,
        output=output,
        as_json=as_json,
        dry_run=dry_run,
    )


@app.command("show")
def show_command(
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", "-c", help="Configuration directory"
    ),
):
    """Show interfaces and sources of all containers."""
    _run_cli_command(show_containers, config_dir)


@app.command("validate")
def validate_command(
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", "-c", help="Configuration directory"
    ),
):
    """Validate container definitions without evaluating them."""
    _run_cli_command(validate_definitions, config_dir)


def main():
    """Main entry point for CLI."""
    app()
