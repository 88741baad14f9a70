"""CLI interface for anycli."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from anycli import __version__
from anycli.config import AnycliConfig, load_config, load_default_config
from anycli.models import CommandCache, CommandNode, count_commands
from anycli.output import render_tools_table, render_tree, tools_to_json
from anycli.server import ToolServer, serve_stdio
from anycli.storage import CacheStorage, get_cache_file_name, is_cache_file_name
from anycli.tools.base import CacheError, ToolNotFoundError
from anycli.tools.cli import CLITool
from anycli.tools.discovery import DiscoveryEngine
from anycli.tools.synthesis import convert_command_to_tools

app = typer.Typer(
    name="anycli",
    help="Expose any command-line program as a catalog of callable tools.",
    no_args_is_help=True,
)

console = Console()
# stdout belongs to the MCP transport while serving
err_console = Console(stderr=True)

logger = logging.getLogger("anycli")


def configure_logging(verbose: bool = False) -> None:
    """Send anycli logs to stderr through rich."""
    handler = RichHandler(console=err_console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"anycli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on stderr"),
    ] = False,
) -> None:
    """anycli: turn CLI help output into callable tools."""
    configure_logging(verbose)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]{message}[/red]")
    return typer.Exit(1)


def _load_settings(config_path: Path | None) -> AnycliConfig:
    """Load settings from --config, or the default config file."""
    try:
        if config_path is not None:
            if not config_path.exists():
                raise _fail(f"Config file not found: {config_path}")
            return load_config(config_path)
        return load_default_config()
    except (OSError, ValueError, ValidationError) as e:
        # tomllib.TOMLDecodeError is a ValueError
        raise _fail(f"Failed to load config: {e}") from None


def _storage(settings: AnycliConfig) -> CacheStorage:
    return CacheStorage(Path(settings.cache_dir).expanduser() if settings.cache_dir else None)


def _ensure_command(command: str) -> None:
    try:
        CLITool(command).ensure_exists()
    except ToolNotFoundError as e:
        raise _fail(str(e)) from None


async def _discover(
    command: str,
    settings: AnycliConfig,
    max_depth: int,
    progress: Progress | None = None,
) -> CommandNode:
    """Run discovery with the configured help args, timeout and batch size."""
    discovery = settings.discovery
    task_id = progress.add_task(f"Discovering {command}...", total=None) if progress else None

    def on_progress(count: int) -> None:
        if progress is not None and task_id is not None:
            progress.update(task_id, description=f"Discovering {command}: {count} commands...")

    engine = DiscoveryEngine(
        command,
        help_provider=CLITool(
            command, help_args=discovery.help_args, timeout=discovery.timeout
        ),
        batch_size=discovery.batch_size,
        progress_interval=discovery.progress_interval,
        on_progress=on_progress,
    )
    return await engine.discover(max_depth)


def _resolve_target(
    target: str | None, cache_file: Path | None, settings: AnycliConfig
) -> tuple[str, Path | None, CommandCache | None]:
    """Work out the base command and cache file from the arguments.

    A target ending in ``_cache.json`` is treated as a cache file and the
    command is read from it. The loaded cache is returned with it.
    """
    if target and is_cache_file_name(target) and cache_file is None:
        cache = _storage(settings).load_snapshot(target)
        if cache is None:
            raise _fail(f"Could not load cache file: {target}")
        logger.info("Using command '%s' from cache file", cache.command)
        return cache.command, Path(target), cache

    if cache_file is None and settings.cache_file:
        cache_file = Path(settings.cache_file)

    command = target or settings.command
    if not command:
        raise _fail("A command or cache file is required")
    return command, cache_file, None


async def _load_tree(
    command: str,
    cache_file: Path | None,
    settings: AnycliConfig,
    max_depth: int,
    cache: CommandCache | None = None,
) -> CommandNode:
    """Use a matching cache when given, otherwise discover."""
    if cache_file is not None:
        if cache is None:
            logger.info("Loading cached commands from %s...", cache_file)
            cache = _storage(settings).load_snapshot(cache_file)
        if cache is not None and cache.command == command:
            logger.info("Using cached commands for %s", command)
            return cache.data
        logger.info("Cache mismatch or invalid, falling back to discovery...")

    _ensure_command(command)
    logger.info("Discovering commands for %s...", command)
    return await _discover(command, settings, max_depth)


@app.command()
def serve(
    target: Annotated[
        str | None,
        typer.Argument(help="Command to wrap, or a *_cache.json file"),
    ] = None,
    cache_file: Annotated[
        Path | None,
        typer.Option("--cache-file", "-c", help="Cache file to load the command tree from"),
    ] = None,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Discovery depth (default: 1)", min=0),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to a TOML config file"),
    ] = None,
) -> None:
    """Serve the command's tools over MCP on stdio."""
    settings = _load_settings(config)
    command, cache_path, cache = _resolve_target(target, cache_file, settings)
    _ensure_command(command)
    max_depth = depth if depth is not None else settings.discovery.max_depth

    asyncio.run(_serve_impl(command, cache_path, settings, max_depth, cache))


async def _serve_impl(
    command: str,
    cache_file: Path | None,
    settings: AnycliConfig,
    max_depth: int,
    cache: CommandCache | None = None,
) -> None:
    """Implementation of the serve command."""
    root = await _load_tree(command, cache_file, settings, max_depth, cache)
    tool_server = ToolServer(command, root, config=settings.server)
    await serve_stdio(tool_server)


@app.command("build-cache")
def build_cache(
    command: Annotated[str, typer.Argument(help="Command to discover")],
    cache_file: Annotated[
        Path | None,
        typer.Option("--cache-file", "-c", help="Output file (default: <command>_cache.json)"),
    ] = None,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Discovery depth (default: 3)", min=0),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to a TOML config file"),
    ] = None,
) -> None:
    """Discover a command tree and save it to a cache file."""
    settings = _load_settings(config)
    _ensure_command(command)
    max_depth = depth if depth is not None else settings.discovery.build_depth
    output = cache_file or Path(get_cache_file_name(command))

    console.print(f"Building cache for [cyan]{command}[/cyan] (depth {max_depth})...")
    start_time = time.perf_counter()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        root = asyncio.run(_discover(command, settings, max_depth, progress))

    duration = time.perf_counter() - start_time

    try:
        path = _storage(settings).save_snapshot(command, root, output)
    except CacheError as e:
        raise _fail(str(e)) from None

    console.print(
        f"[green]✓[/green] Cache built in {duration:.1f}s: {path} "
        f"({count_commands(root)} commands)"
    )


@app.command("tools")
def list_tools(
    target: Annotated[str, typer.Argument(help="Command to wrap, or a *_cache.json file")],
    cache_file: Annotated[
        Path | None,
        typer.Option("--cache-file", "-c", help="Cache file to load the command tree from"),
    ] = None,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Discovery depth (default: 1)", min=0),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print tool definitions as JSON"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to a TOML config file"),
    ] = None,
) -> None:
    """List the tools synthesized for a command."""
    settings = _load_settings(config)
    command, cache_path, cache = _resolve_target(target, cache_file, settings)
    max_depth = depth if depth is not None else settings.discovery.max_depth

    root = asyncio.run(_load_tree(command, cache_path, settings, max_depth, cache))
    tools = convert_command_to_tools(root, command)

    if json_output:
        console.print_json(tools_to_json(tools))
    else:
        console.print(render_tools_table(tools, title=f"Tools for {command}"))


@app.command("tree")
def show_tree(
    target: Annotated[str, typer.Argument(help="Command to wrap, or a *_cache.json file")],
    cache_file: Annotated[
        Path | None,
        typer.Option("--cache-file", "-c", help="Cache file to load the command tree from"),
    ] = None,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Discovery depth (default: 1)", min=0),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to a TOML config file"),
    ] = None,
) -> None:
    """Show the discovered command tree."""
    settings = _load_settings(config)
    command, cache_path, cache = _resolve_target(target, cache_file, settings)
    max_depth = depth if depth is not None else settings.discovery.max_depth

    root = asyncio.run(_load_tree(command, cache_path, settings, max_depth, cache))
    console.print(render_tree(root))


if __name__ == "__main__":
    app()
