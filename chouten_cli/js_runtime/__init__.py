"""Script host bridge.

Embeds a QuickJS runtime, injects the host capabilities plugins rely on
(console and a blocking request function), loads a plugin bundle and
resolves one of its verbs to JSON text.
"""

from chouten_cli.js_runtime.capabilities import HostCapabilities, inject_capabilities
from chouten_cli.js_runtime.dispatch import Invocation, Params, Verb, dispatch
from chouten_cli.js_runtime.engine import invoke
from chouten_cli.js_runtime.exceptions import (
    RuntimeBootstrapError,
    ScriptCompileError,
    ScriptExecutionError,
    UnresolvedResultError,
    UnsupportedHostMethodError,
)
from chouten_cli.js_runtime.http import HostEffectBridge, HostResponse
from chouten_cli.js_runtime.loader import load_plugin, read_plugin_source
from chouten_cli.js_runtime.runner import run_plugin
from chouten_cli.js_runtime.session import HostSession, SessionState, bootstrap

__all__ = [
    # Session
    "HostSession",
    "SessionState",
    "bootstrap",
    # Capabilities
    "HostCapabilities",
    "inject_capabilities",
    # Host effects
    "HostEffectBridge",
    "HostResponse",
    # Plugin
    "load_plugin",
    "read_plugin_source",
    # Dispatch and invocation
    "Invocation",
    "Params",
    "Verb",
    "dispatch",
    "invoke",
    "run_plugin",
    # Errors
    "RuntimeBootstrapError",
    "ScriptCompileError",
    "ScriptExecutionError",
    "UnresolvedResultError",
    "UnsupportedHostMethodError",
]
