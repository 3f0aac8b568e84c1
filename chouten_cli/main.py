"""Main CLI entry point for Chouten."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from chouten_cli import __app_name__, __version__
from chouten_cli.cli.error_handler import ArgumentError, handle_errors
from chouten_cli.cli.exit_codes import ExitCode
from chouten_cli.cli.output import print_result, print_unresolved
from chouten_cli.config import config_to_dict, ensure_valid, load_config
from chouten_cli.js_runtime import Params, UnresolvedResultError, Verb, run_plugin

# Create the main Typer app
app = typer.Typer(
    name=__app_name__,
    help="Chouten - run a JavaScript content-extraction plugin and print its result.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Console for CLI output
console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"{__app_name__} v{__version__}")
        raise typer.Exit(code=ExitCode.SUCCESS)


def _setup_logging(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
    default_level: str = "WARNING",
) -> None:
    """Set up logging configuration based on CLI options.

    Args:
        verbose: Enable INFO level logging
        debug: Enable DEBUG level logging
        quiet: Suppress non-error output (ERROR and above)
        log_file: Optional log file path
        default_level: Level used when no flag is given
    """
    # Determine log level
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.getLevelName(default_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    # Configure format
    if debug:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = []

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        handlers.append(file_handler)

    # Console handler unless quiet mode
    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        handlers.append(console_handler)
    elif not log_file:
        # In quiet mode without log file, add null handler to prevent warnings
        handlers.append(logging.NullHandler())

    root_level = logging.DEBUG if log_file else level
    logging.basicConfig(
        level=root_level,
        format=format_str,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    logger.debug(f"Logging configured: level={logging.getLevelName(level)}, debug={debug}")


@app.command(
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
@handle_errors
def main(
    ctx: typer.Context,
    filename: Optional[Path] = typer.Argument(
        None,
        help="Path to the plugin script.",
        show_default=False,
    ),
    url: Optional[str] = typer.Argument(
        None,
        help="URL handed to the selected entry point (all but --discover).",
        show_default=False,
    ),
    discover: bool = typer.Option(False, "--discover", help="Run discover()."),
    search: bool = typer.Option(False, "--search", help="Run search(url)."),
    info: bool = typer.Option(False, "--info", help="Run info(url)."),
    media: bool = typer.Option(False, "--media", help="Run media(url)."),
    servers: bool = typer.Option(False, "--servers", help="Run servers(url)."),
    sources: bool = typer.Option(False, "--sources", help="Run sources(url)."),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default: ~/.config/chouten/config.toml).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output (INFO level logging).",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode (DEBUG level logging).",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output, including plugin console output.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log to file (logs DEBUG level regardless of console settings).",
    ),
) -> None:
    """Run one entry point of a plugin and print the JSON it resolves to.

    [bold]Usage:[/bold]

        chouten <filename> <option> <url?>

    [bold]Examples:[/bold]

        chouten plugin.js --discover
        chouten plugin.js --search https://example.com/search?q=term
        chouten plugin.js --info https://example.com/show/1
    """
    if quiet and verbose:
        raise ArgumentError("--quiet and --verbose are mutually exclusive")
    if quiet and debug:
        raise ArgumentError("--quiet and --debug are mutually exclusive")

    _setup_logging(verbose=verbose, debug=debug, quiet=quiet, log_file=log_file)

    selected = [
        verb
        for verb, enabled in (
            (Verb.DISCOVER, discover),
            (Verb.SEARCH, search),
            (Verb.INFO, info),
            (Verb.MEDIA, media),
            (Verb.SERVERS, servers),
            (Verb.SOURCES, sources),
        )
        if enabled
    ]
    params = Params.from_cli(filename, selected, url, ctx.args)

    config = load_config(config_file)
    warnings = ensure_valid(config)
    if config.logging.file or config.logging.level.upper() != "WARNING":
        _setup_logging(
            verbose=verbose,
            debug=debug,
            quiet=quiet,
            log_file=log_file or config.logging.file,
            default_level=config.logging.level,
        )
    for warning in warnings:
        logger.warning(str(warning))
    if quiet:
        config.runtime.console_output = False

    logger.debug(f"{__app_name__} v{__version__} starting")
    logger.debug(f"Configuration: {config_to_dict(config)}")

    try:
        result = run_plugin(params, config)
    except UnresolvedResultError as e:
        logger.warning(f"No result: {e.reason}")
        print_unresolved()
        return

    print_result(result)


if __name__ == "__main__":
    app()
