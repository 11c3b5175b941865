"""Command implementations for CLI."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from nspawnc.compiler.engine import Compiler
from nspawnc.config import ConfigManager
from nspawnc.evaluators.nix import NixEvaluator
from nspawnc.render import render_artifacts, write_artifacts


console = Console()
stderr_console = Console(stderr=True)


def _compiler(manager: ConfigManager) -> Compiler:
    config = manager.config
    return Compiler(
        config=config,
        evaluator=NixEvaluator(config.evaluator, base_dir=manager.config_dir),
    )


def compile_containers(
    manager: ConfigManager,
    output: Optional[Path] = None,
    as_json: bool = False,
    dry_run: bool = False,
):
    """Compile all definitions and write or print the result."""
    compiler = _compiler(manager)
    with stderr_console.status("Resolving containers..."):
        artifacts = asyncio.run(compiler.compile(manager.containers, manager.overlays))

    if as_json:
        sys.stdout.write(artifacts.to_json())
        return

    files = render_artifacts(artifacts, manager.config)
    if dry_run or output is None:
        table = Table(title="Generated files")
        table.add_column("Path", style="cyan")
        table.add_column("Size", justify="right")
        for path, content in sorted(files.items()):
            table.add_row(f"/{path}", str(len(content)))
        console.print(table)
        return

    written = asyncio.run(write_artifacts(files, output))
    console.print(f"[green]✓[/green] Wrote {len(written)} files to {output}")


def show_containers(manager: ConfigManager):
    """Show how each container resolves, without inline evaluation."""
    validated = _compiler(manager).validate(manager.containers)

    table = Table(title="Containers")
    table.add_column("Name", style="cyan")
    table.add_column("Interface", style="magenta")
    table.add_column("Kind")
    table.add_column("Source")
    table.add_column("Auto-start")
    table.add_column("Restart")
    table.add_column("Binds", justify="right")

    for name, item in validated.items():
        definition = item.definition
        interface = item.interface
        table.add_row(
            name,
            interface.if_name if interface else "-",
            interface.kind.value if interface else "disabled",
            "inline" if definition.is_inline else definition.path,
            "✓" if definition.auto_start else "✗",
            "✓" if definition.restart_if_changed else "✗",
            str(len(item.binds.read_write) + len(item.binds.read_only)),
        )

    console.print(table)


def validate_definitions(manager: ConfigManager):
    """Validate definitions, skipping inline evaluation."""
    validated = _compiler(manager).validate(manager.containers)
    inline = sum(1 for item in validated.values() if item.definition.is_inline)
    console.print(
        f"[green]✓[/green] {len(validated)} containers valid "
        f"({inline} need inline evaluation)"
    )
