"""CLI main entry point."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.markup import escape

from .config import load_settings
from .errors import ExplorerModuleError
from .lifecycle import ExplorerModule
from .shared.logging import configure_logging
from .shared.paths import ensure_dirs, get_log_file

T = TypeVar("T")

console = Console()


def _run(coro: Awaitable[T]) -> T:
    """Run a lifecycle coroutine, turning module and OS errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except ExplorerModuleError as e:
        console.print(f"[red]✗[/red] {e.message}")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)


def _module(ctx: click.Context) -> ExplorerModule:
    return ctx.obj["module"]


def _print_progress(indexed: int, target: int) -> None:
    console.print(f"[dim]Indexing blocks: {indexed}/{target}[/dim]")


@click.group()
@click.option("-c", "--config", "settings_path", type=click.Path(), help="Settings file path")
@click.option("--log-level", default="warning", help="Log level (debug, info, warning, ...)")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.option("--log-to-file", is_flag=True, help="Write logs to ~/.explorer-module/explorer.log")
@click.pass_context
def cli(
    ctx: click.Context,
    settings_path: str | None,
    log_level: str,
    json_logs: bool,
    log_to_file: bool,
) -> None:
    """Manage a local Block Explorer stack."""
    log_file = None
    if log_to_file:
        ensure_dirs()
        log_file = get_log_file()
    configure_logging(log_level, log_file=log_file, json_output=json_logs)
    settings = load_settings(Path(settings_path) if settings_path else None)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    if "module" not in ctx.obj:
        ctx.obj["module"] = ExplorerModule.from_settings(settings)


@cli.command()
@click.option(
    "--from-source", is_flag=True, help="Clone the upstream repository and build images from it"
)
@click.pass_context
def install(ctx: click.Context, from_source: bool) -> None:
    """Provision and create the explorer stack."""
    module = _module(ctx)
    version = _run(module.install(from_source=from_source))
    console.print(f"[green]✓[/green] {module.name} {version} installed.")


@cli.command()
@click.option("--wait", is_flag=True, help="Wait until the explorer is in sync")
@click.pass_context
def start(ctx: click.Context, wait: bool) -> None:
    """Start the explorer stack."""
    module = _module(ctx)

    async def _start() -> None:
        await module.start()
        if wait:
            console.print("Waiting for the explorer to index the chain...")
            await module.wait_for_sync(on_progress=_print_progress)

    _run(_start())
    console.print(f"[green]✓[/green] {module.name} started.")
    for line in module.get_startup_info():
        console.print(f"  {line}")


@cli.command()
@click.pass_context
def wait(ctx: click.Context) -> None:
    """Wait until the explorer has indexed the latest block."""
    result = _run(_module(ctx).wait_for_sync(on_progress=_print_progress))
    console.print(f"[green]✓[/green] In sync at block {result.target_height}.")


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the explorer stack."""
    _run(_module(ctx).stop())
    console.print("[green]✓[/green] Stack stopped.")


@cli.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Remove the explorer stack's containers."""
    _run(_module(ctx).clean())
    console.print("[green]✓[/green] Stack removed.")


@cli.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Reinstall the stack with the latest release."""
    module = _module(ctx)
    version = _run(module.update())
    console.print(f"[green]✓[/green] {module.name} updated to {version}.")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show installation and running state."""
    module = _module(ctx)

    async def _status() -> tuple[bool, bool]:
        return await module.is_installed(), await module.is_running()

    installed, running = _run(_status())
    console.print(f"Installed: {'yes' if installed else 'no'}")
    if module.version:
        console.print(f"Version:   {module.version}")
    console.print(f"Running:   {'yes' if running else 'no'}")


@cli.command()
@click.pass_context
def logs(ctx: click.Context) -> None:
    """Show stack logs."""
    for line in _run(_module(ctx).get_logs()):
        click.echo(line)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show exposed endpoints."""
    for line in _module(ctx).get_startup_info():
        console.print(line)


@cli.group()
def config() -> None:
    """Inspect module settings."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show effective settings and where each value came from."""
    settings = ctx.obj["settings"]
    values: dict[str, Any] = settings.as_dict()
    for key, value in values.items():
        console.print(f"{key:<22} {value!s:<40} [dim]({settings.get_source(key)})[/dim]")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
