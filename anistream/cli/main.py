"""
CLI Main Application - Typer app entry point.

This module provides the ``anistream`` command: application startup
(configuration, logging, tracebacks) and the resolve, episodes and
providers commands.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.traceback import install as install_rich_traceback

from anistream import __version__
from anistream.core import ConfigManager, create_default_config_files
from anistream.core.exceptions import AniStreamError, ConfigurationError
from anistream.core.resolver import ResolutionPipeline
from anistream.ui import get_console, handle_error
from anistream.cli.context import get_config_manager, set_config_manager, is_debug, set_debug
from anistream.cli.display import ResultDisplay


logger = logging.getLogger(__name__)

# Create main Typer application
app = typer.Typer(
    name="anistream",
    help="Resolve anime episodes to playable streaming sources",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console = get_console()
        console.print(f"[bold blue]AniStream[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version information and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory path",
        exists=False,
        file_okay=False,
        dir_okay=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed logging",
    ),
) -> None:
    """
    AniStream - Find a playable stream for any anime episode.

    Providers are queried in priority order; when none of them can deliver a
    stream, links to well-known watch sites are offered instead.
    """
    try:
        _initialize_application(config_dir=config_dir, debug=debug)
    except Exception as e:
        if isinstance(e, AniStreamError):
            handle_error(e, "During application initialization")
        else:
            handle_error(e, "Unexpected error during startup", show_traceback=debug)
        raise typer.Exit(1)


def _initialize_application(config_dir: Optional[Path] = None, debug: bool = False) -> None:
    """
    Initialize the application with configuration and logging.

    Args:
        config_dir: Configuration directory override
        debug: Enable debug mode
    """
    set_debug(debug)

    # Install rich traceback handler
    install_rich_traceback(show_locals=debug)

    if config_dir is None:
        config_dir = Path("config")

    if not config_dir.exists():
        create_default_config_files(config_dir)

    try:
        config_manager = ConfigManager(config_dir)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}", str(config_dir))

    set_config_manager(config_manager)
    _setup_logging(debug, config_manager.settings.logging.level)


def _setup_logging(debug: bool = False, level_name: str = "INFO") -> None:
    """
    Set up application logging.

    Args:
        debug: Enable debug logging, overriding the configured level
        level_name: Configured logging level
    """
    level = logging.DEBUG if debug else getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )
    logging.getLogger().setLevel(level)

    # Reduce noise from third-party libraries
    if not debug:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _create_pipeline() -> ResolutionPipeline:
    return ResolutionPipeline.from_settings(get_config_manager().settings)


async def _resolve(episode_id: str, title: Optional[str]):
    async with _create_pipeline() as pipeline:
        return await pipeline.resolve(episode_id, anime_title=title)


async def _lookup(title_or_id: str):
    async with _create_pipeline() as pipeline:
        return await pipeline.lookup_episodes(title_or_id)


@app.command(name="resolve")
def resolve_episode(
    episode_id: str = typer.Argument(..., help="Provider episode id, e.g. one-piece-episode-1"),
    title: Optional[str] = typer.Option(
        None,
        "--title",
        "-t",
        help="Anime title, used for fallback links when no provider succeeds"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """
    Resolve an episode to streaming sources.

    Examples:

        anistream resolve one-piece-episode-1

        anistream resolve one-piece-episode-1 --title "One Piece" --json
    """
    try:
        result = asyncio.run(_resolve(episode_id, title))
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Resolution cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"While resolving episode '{episode_id}'", show_traceback=is_debug())
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_wire(), indent=2, ensure_ascii=False))
    else:
        ResultDisplay().show_result(result)


@app.command(name="episodes")
def list_episodes(
    title_or_id: str = typer.Argument(..., help="Anime id or title to look up"),
    as_json: bool = typer.Option(False, "--json", help="Print the episode list as JSON"),
) -> None:
    """
    List an anime's episodes and their ids.

    Examples:

        anistream episodes one-piece

        anistream episodes "Attack on Titan" --json
    """
    try:
        info = asyncio.run(_lookup(title_or_id))
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Episode lookup cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"While looking up '{title_or_id}'", show_traceback=is_debug())
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(info.model_dump(exclude_none=True), indent=2, ensure_ascii=False))
    else:
        ResultDisplay().show_anime_info(info)


@app.command(name="providers")
def list_providers() -> None:
    """List providers in priority order with their rate-limit settings."""
    ResultDisplay().show_providers(get_config_manager().settings)


def cli_main() -> None:
    """
    Main CLI entry point for the anistream command.

    This function is called when the user runs 'anistream' from the command line.
    """
    try:
        app()
    except KeyboardInterrupt:
        console = get_console()
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        handle_error(e, "Unexpected error in CLI")
        sys.exit(1)


# Export main components
__all__ = [
    "app",
    "cli_main",
]
