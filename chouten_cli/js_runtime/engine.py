"""
Invocation & Resolution Engine.

Calls the dispatched plugin method, treats its return value as a promise,
and drives the runtime's job queue until that promise settles. The
fulfilled value comes back to the host as a JSON string.
"""

from __future__ import annotations

import logging

import quickjs

from .dispatch import Invocation
from .exceptions import ScriptExecutionError, UnresolvedResultError
from .loader import PLUGIN_BINDING
from .session import HostSession, SessionState

logger = logging.getLogger(__name__)

OUTCOME_BINDING = "__chouten_outcome"

# Promise.resolve().then(...) turns a synchronous throw or a plain return
# value into the same settled-promise shape as an async method.
INVOKER = """
(function (method, url) {
  const plugin = globalThis.%(plugin)s;
  const outcome = { state: "pending", value: undefined, reason: undefined };
  globalThis.%(outcome)s = outcome;

  function describe(error) {
    try {
      if (error instanceof Error) {
        return error.name + ": " + error.message;
      }
      return String(error);
    } catch (e) {
      return Object.prototype.toString.call(error);
    }
  }

  Promise.resolve()
    .then(() => (url === null ? plugin[method]() : plugin[method](url)))
    .then(
      (data) => {
        try {
          outcome.value = JSON.stringify(data);
          outcome.state = "fulfilled";
        } catch (error) {
          outcome.reason = "result is not JSON-serializable: " + describe(error);
          outcome.state = "rejected";
        }
      },
      (error) => {
        outcome.reason = describe(error);
        outcome.state = "rejected";
      }
    );
})
""" % {"plugin": PLUGIN_BINDING, "outcome": OUTCOME_BINDING}


def invoke(session: HostSession, invocation: Invocation) -> str:
    """
    Call a plugin method and return its resolved value as JSON text.

    Args:
        session: Session with the plugin loaded
        invocation: The method call to perform

    Returns:
        JSON.stringify() of the value the method's promise resolved to

    Raises:
        UnresolvedResultError: If the promise rejects, never settles, or
            resolves to something JSON cannot represent
        ScriptExecutionError: If the runtime itself throws while invoking
    """
    if session.state is not SessionState.PLUGIN_LOADED:
        raise RuntimeError(f"Cannot invoke plugin in state: {session.state.name}")

    session.advance(SessionState.DISPATCHED)
    logger.info(f"Invoking plugin method {invocation.expression}")

    try:
        invoker = session.evaluate(INVOKER)
        session.call(invoker, invocation.method, invocation.argument)
        session.drain_jobs()

        state = session.evaluate(f"globalThis.{OUTCOME_BINDING}.state")
        value = session.evaluate(f"globalThis.{OUTCOME_BINDING}.value")
        reason = session.evaluate(f"globalThis.{OUTCOME_BINDING}.reason")
    except quickjs.JSException as e:
        raise ScriptExecutionError(
            f"Plugin invocation failed: {e}",
            details={"call": invocation.expression},
        ) from e

    logger.debug(f"{invocation.expression} settled as {state}")

    if state == "rejected":
        raise UnresolvedResultError(f"{invocation.method}() rejected: {reason}")
    if state != "fulfilled":
        raise UnresolvedResultError(f"{invocation.method}() never settled")
    if not isinstance(value, str):
        raise UnresolvedResultError(
            f"{invocation.method}() resolved to a value JSON cannot represent"
        )

    session.advance(SessionState.RESOLVED)
    return value
