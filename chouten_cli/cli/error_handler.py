"""Global exception handling for Chouten CLI.

This module provides centralized error handling through custom exception
classes and a decorator that ensures consistent error reporting and
exit codes for the CLI command.
"""

from functools import wraps
from typing import Callable, TypeVar, Any
import logging

import typer
from rich.console import Console
from rich.markup import escape

from chouten_cli.cli.exit_codes import ExitCode

# Console for error output (stderr)
console = Console(stderr=True)

# Logger for error logging
logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class ChoutenError(Exception):
    """Base exception for Chouten CLI.

    All custom exceptions in Chouten CLI should inherit from this class
    to ensure proper error handling and exit codes.

    Attributes:
        message: Error message
        exit_code: Exit code to use when exiting
        details: Optional dictionary of additional error details
    """

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            exit_code: Optional override for exit code
            details: Optional dictionary of additional error details
        """
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ArgumentError(ChoutenError):
    """Invalid command-line arguments.

    Examples:
        - Missing plugin filename
        - Missing or unknown verb option
        - Missing URL for a verb that needs one
    """

    exit_code = ExitCode.USAGE_ERROR


class FileReadError(ChoutenError):
    """The plugin source file could not be read."""

    exit_code = ExitCode.USAGE_ERROR


class ConfigurationError(ChoutenError):
    """Configuration-related error.

    Raised when there's an issue with configuration files,
    environment variables, or config validation.
    """

    exit_code = ExitCode.CONFIGURATION_ERROR


class PluginError(ChoutenError):
    """Plugin-related error.

    Raised when the plugin script fails to compile, its top-level code
    throws, or its default export cannot be instantiated.
    """

    exit_code = ExitCode.PLUGIN_ERROR


def _report(error: ChoutenError) -> None:
    logger.error(
        f"{type(error).__name__} ({ExitCode.get_name(error.exit_code)}): {error.message}",
        extra={"exit_code": error.exit_code, "details": error.details},
    )

    console.print(f"[red]Error:[/red] {escape(error.message)}")

    if error.details:
        for key, value in error.details.items():
            console.print(f"  [dim]{key}:[/dim] {escape(str(value))}")


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling across CLI commands.

    This decorator catches all exceptions and converts them to appropriate
    error messages and exit codes. It handles:

    - ChoutenError subclasses: Display error message with appropriate exit code
    - KeyboardInterrupt: Show cancellation message with exit code 130
    - Other exceptions: Show generic error with option for verbose details

    Args:
        func: The function to wrap

    Returns:
        Wrapped function with error handling

    Example:
        @app.command()
        @handle_errors
        def my_command():
            raise ConfigurationError("Invalid config")
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ChoutenError as e:
            _report(e)
            raise typer.Exit(code=e.exit_code)

        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user.[/yellow]")
            logger.info("Operation cancelled by user (KeyboardInterrupt)")
            raise typer.Exit(code=ExitCode.CANCELLED)

        except typer.Exit:
            # Re-raise typer.Exit as-is
            raise

        except Exception as e:
            # Log full exception for debugging
            logger.exception("Unexpected error occurred")

            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            console.print("[dim]Run with --debug for more details[/dim]")

            raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]
