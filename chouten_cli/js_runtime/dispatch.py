"""
Verb Dispatcher.

Maps the CLI verb (and URL, when the verb takes one) to the plugin method
call the invocation engine performs. The URL travels as a bound argument;
it is never spliced into script source.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from chouten_cli.cli.error_handler import ArgumentError

logger = logging.getLogger(__name__)

USAGE = "usage: chouten <filename> <option> <url?>"


class Verb(str, Enum):
    """The fixed plugin entry points selectable from the CLI."""

    DISCOVER = "discover"
    SEARCH = "search"
    INFO = "info"
    MEDIA = "media"
    SERVERS = "servers"
    SOURCES = "sources"

    @property
    def flag(self) -> str:
        """Command-line option selecting this verb."""
        return f"--{self.value}"

    @property
    def requires_url(self) -> bool:
        return self is not Verb.DISCOVER


@dataclass(frozen=True)
class Params:
    """Validated command-line intent for one run."""

    filename: Path
    verb: Verb
    url: Optional[str] = None

    @classmethod
    def from_cli(
        cls,
        filename: Optional[Path],
        verbs: Iterable[Verb],
        url: Optional[str] = None,
        extra_args: Iterable[str] = (),
    ) -> "Params":
        """
        Validate raw CLI values.

        Args:
            filename: Plugin path, None if not given
            verbs: Every verb option that was set
            url: Optional URL argument
            extra_args: Arguments left over after parsing

        Raises:
            ArgumentError: On missing filename, stray arguments, a missing,
                unknown or repeated verb, or a missing URL
        """
        # Unknown options land in the positional slots
        extra = [
            str(value)
            for value in (filename, url)
            if value is not None and str(value).startswith("--")
        ]
        extra += list(extra_args)

        if filename is None:
            raise ArgumentError(USAGE)
        if extra:
            raise ArgumentError(USAGE, details={"unexpected": " ".join(extra)})

        selected = list(dict.fromkeys(verbs))
        if not selected:
            raise ArgumentError("No option found.")
        if len(selected) > 1:
            flags = ", ".join(verb.flag for verb in selected)
            raise ArgumentError(f"Only one option may be given, got: {flags}")

        verb = selected[0]
        if verb.requires_url and url is None:
            raise ArgumentError(f"URL is required for {verb.flag} option.")
        if not verb.requires_url and url is not None:
            logger.debug(f"Ignoring URL argument for {verb.flag}")
            url = None

        return cls(filename=filename, verb=verb, url=url)


@dataclass(frozen=True)
class Invocation:
    """A single plugin method call: method name plus optional URL argument."""

    method: str
    argument: Optional[str] = None

    @property
    def expression(self) -> str:
        """Human-readable rendering of the call, for diagnostics only."""
        if self.argument is None:
            return f"{self.method}()"
        return f"{self.method}({json.dumps(self.argument, ensure_ascii=False)})"


def dispatch(params: Params) -> Invocation:
    """Build the plugin call for validated params."""
    if params.verb.requires_url:
        invocation = Invocation(method=params.verb.value, argument=params.url)
    else:
        invocation = Invocation(method=params.verb.value)

    logger.debug(f"Dispatching {params.verb.flag} as {invocation.expression}")
    return invocation
