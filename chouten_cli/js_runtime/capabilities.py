"""
Capability Injector.

Installs the host-backed globals plugins may use: console.* for
diagnostics and request() for blocking HTTP. Values cross the boundary as
strings only; the JS prelude below shapes them into the objects plugins see.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import quickjs
from rich.console import Console
from rich.text import Text

from chouten_cli.cli.error_handler import ChoutenError
from .exceptions import RuntimeBootstrapError
from .http import HostResponse
from .session import HostSession, SessionState

logger = logging.getLogger(__name__)

# Plugin diagnostics go to stderr so stdout carries only the result line
console = Console(stderr=True)

LOG_CALLABLE = "__chouten_log"
REQUEST_CALLABLE = "__chouten_request"

CONSOLE_LEVELS = ("log", "info", "warn", "error", "debug")

PRELUDE = """
(function () {
  const hostLog = globalThis.%(log)s;
  const hostRequest = globalThis.%(request)s;

  function toText(value) {
    try {
      return String(value);
    } catch (e) {
      return Object.prototype.toString.call(value);
    }
  }

  function writer(level) {
    return function (...values) {
      hostLog(level, values.map(toText).join(" "));
    };
  }

  const hostConsole = {};
  for (const level of %(levels)s) {
    hostConsole[level] = writer(level);
  }
  globalThis.console = hostConsole;

  globalThis.request = function (url, method, headers, body) {
    const reply = JSON.parse(hostRequest(
      toText(url),
      method === undefined ? "GET" : toText(method),
      JSON.stringify(headers || {}),
      body === undefined || body === null ? null : toText(body)
    ));
    if (reply.fatal !== undefined) {
      throw new Error(reply.fatal);
    }
    return reply.response;
  };
})();
""" % {
    "log": LOG_CALLABLE,
    "request": REQUEST_CALLABLE,
    "levels": json.dumps(list(CONSOLE_LEVELS)),
}


class HostCapabilities:
    """Python side of the console and request globals."""

    def __init__(self, session: HostSession):
        self._session = session

    def log(self, level: str, text: str) -> None:
        """Write one console.* call to the diagnostic stream."""
        logger.debug(f"console.{level}: {text}")
        if self._session.config.runtime.console_output:
            console.print(
                f"[dim]JavaScript console.{level}:[/dim]",
                Text(text),
                soft_wrap=True,
            )

    def request(
        self,
        url: str,
        method: str,
        headers_json: str,
        body: Optional[str],
    ) -> str:
        """
        Perform a blocking request for the script.

        Returns:
            JSON text holding either {"response": ...} or {"fatal": message}
        """
        fatal = self._session.fatal_error
        if fatal is not None:
            return json.dumps({"fatal": fatal.message})

        try:
            response = self._session.bridge.send(
                url,
                method,
                headers=_parse_headers(headers_json),
                body=body,
            )
        except ChoutenError as e:
            self._session.record_fatal(e)
            return json.dumps({"fatal": e.message})
        except Exception as e:
            # Nothing may propagate through the quickjs binding
            logger.warning(f"Request failed unexpectedly: {method} {url}: {e!r}")
            response = HostResponse.degraded()

        return json.dumps({"response": response.to_script()})


def _parse_headers(headers_json: str) -> dict[str, str]:
    try:
        data = json.loads(headers_json)
    except (TypeError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(name): str(value) for name, value in data.items()}


def inject_capabilities(session: HostSession) -> HostCapabilities:
    """
    Install console and request into the session's global namespace.

    Must run before the plugin source is evaluated.

    Raises:
        RuntimeBootstrapError: If the prelude fails to install
    """
    capabilities = HostCapabilities(session)
    session.context.add_callable(LOG_CALLABLE, capabilities.log)
    session.context.add_callable(REQUEST_CALLABLE, capabilities.request)

    try:
        session.evaluate(PRELUDE)
    except quickjs.JSException as e:
        raise RuntimeBootstrapError(f"Failed to install host capabilities: {e}") from e

    session.advance(SessionState.CAPABILITIES_INJECTED)
    logger.debug("Host capabilities installed: console, request")
    return capabilities
