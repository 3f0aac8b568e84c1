"""CLI support modules for Chouten.

This package contains exit codes, error handling and output helpers used by
the `chouten` command.
"""

from chouten_cli.cli.exit_codes import ExitCode
from chouten_cli.cli.error_handler import (
    ChoutenError,
    ArgumentError,
    FileReadError,
    ConfigurationError,
    PluginError,
    handle_errors,
)
from chouten_cli.cli.output import UNRESOLVED_MESSAGE, print_result, print_unresolved

__all__ = [
    # Exit codes
    "ExitCode",
    # Error handling
    "ChoutenError",
    "ArgumentError",
    "FileReadError",
    "ConfigurationError",
    "PluginError",
    "handle_errors",
    # Output
    "UNRESOLVED_MESSAGE",
    "print_result",
    "print_unresolved",
]
