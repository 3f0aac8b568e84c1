"""
Plugin Loader.

Plugins are bundled scripts that define a global `source` whose `default`
export is the plugin class. Loading runs the whole script once, then
creates the single plugin instance the rest of the run talks to.
"""

from __future__ import annotations

import logging
from pathlib import Path

import quickjs

from chouten_cli.cli.error_handler import FileReadError
from .exceptions import ScriptCompileError, ScriptExecutionError
from .session import HostSession, SessionState

logger = logging.getLogger(__name__)

# Global identifier the plugin instance is bound to
PLUGIN_BINDING = "__chouten_plugin"

INSTANTIATE = f"globalThis.{PLUGIN_BINDING} = new source.default();"


def read_plugin_source(path: Path) -> str:
    """
    Read the plugin script.

    Raises:
        FileReadError: If the file is missing or unreadable
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(
            "File could not be read.",
            details={"path": str(path), "reason": str(e)},
        ) from e


def _is_syntax_error(error: quickjs.JSException) -> bool:
    return str(error).startswith("SyntaxError")


def load_plugin(session: HostSession, source: str, filename: str = "<plugin>") -> None:
    """
    Run the plugin script and instantiate its default export.

    Args:
        session: Session with capabilities already installed
        source: Full plugin source text
        filename: Name used in diagnostics

    Raises:
        ScriptCompileError: If the source is not valid JavaScript
        ScriptExecutionError: If top-level code or the constructor throws
    """
    if session.state is not SessionState.CAPABILITIES_INJECTED:
        raise RuntimeError(f"Cannot load plugin in state: {session.state.name}")

    logger.debug(f"Evaluating plugin {filename} ({len(source)} chars)")
    try:
        session.evaluate(source)
    except quickjs.JSException as e:
        if _is_syntax_error(e):
            raise ScriptCompileError(
                f"Plugin failed to compile: {e}",
                details={"file": filename},
            ) from e
        raise ScriptExecutionError(
            f"Plugin failed to run: {e}",
            details={"file": filename},
        ) from e

    try:
        session.evaluate(INSTANTIATE)
    except quickjs.JSException as e:
        raise ScriptExecutionError(
            f"Plugin could not be instantiated: {e}",
            details={"file": filename},
        ) from e

    session.advance(SessionState.PLUGIN_LOADED)
    logger.info(f"Plugin loaded from {filename}")
