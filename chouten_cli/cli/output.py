"""Output helpers for Chouten CLI.

Standard output carries exactly one line per run: the plugin result or the
unresolved-result diagnostic. Everything else goes to stderr.
"""

import typer

UNRESOLVED_MESSAGE = "Promise did not resolve to a value."


def print_result(text: str) -> None:
    """Print the plugin's JSON result unmodified."""
    typer.echo(text)


def print_unresolved() -> None:
    """Print the diagnostic used when no JSON value could be extracted."""
    typer.echo(UNRESOLVED_MESSAGE)
