"""
Runtime Bootstrap.

Owns the embedded QuickJS context used for a whole run. The HostSession
holds the context, the host effect bridge and the run's state; every later
stage receives it by reference.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Optional

import httpx
import quickjs

from chouten_cli.config import ChoutenConfig
from chouten_cli.cli.error_handler import ChoutenError
from .exceptions import RuntimeBootstrapError
from .http import HostEffectBridge

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Progress of a single run through the host."""

    UNINITIALIZED = auto()
    BOOTSTRAPPED = auto()
    CAPABILITIES_INJECTED = auto()
    PLUGIN_LOADED = auto()
    DISPATCHED = auto()
    RESOLVED = auto()
    FAILED = auto()


# Allowed forward transitions; FAILED is reachable from any live state
_NEXT_STATE = {
    SessionState.UNINITIALIZED: SessionState.BOOTSTRAPPED,
    SessionState.BOOTSTRAPPED: SessionState.CAPABILITIES_INJECTED,
    SessionState.CAPABILITIES_INJECTED: SessionState.PLUGIN_LOADED,
    SessionState.PLUGIN_LOADED: SessionState.DISPATCHED,
    SessionState.DISPATCHED: SessionState.RESOLVED,
}


class HostSession:
    """
    The single live script environment of a run.

    Host-side fatal errors raised inside capabilities are recorded here and
    re-raised after every evaluation or job step, so plugin code cannot
    swallow them with try/catch.

    Example:
        with bootstrap(config) as session:
            inject_capabilities(session)
            load_plugin(session, source)
    """

    def __init__(
        self,
        context: quickjs.Context,
        bridge: HostEffectBridge,
        config: Optional[ChoutenConfig] = None,
    ):
        self._context = context
        self._bridge = bridge
        self._config = config or ChoutenConfig()
        self._state = SessionState.UNINITIALIZED
        self._fatal_error: Optional[ChoutenError] = None

    @property
    def state(self) -> SessionState:
        """Get the current session state."""
        return self._state

    @property
    def context(self) -> quickjs.Context:
        return self._context

    @property
    def bridge(self) -> HostEffectBridge:
        return self._bridge

    @property
    def config(self) -> ChoutenConfig:
        return self._config

    @property
    def fatal_error(self) -> Optional[ChoutenError]:
        return self._fatal_error

    def advance(self, state: SessionState) -> None:
        """
        Move to the next state.

        Raises:
            RuntimeError: If the transition skips or repeats a stage
        """
        if state is SessionState.FAILED:
            if self._state in (SessionState.RESOLVED, SessionState.FAILED):
                raise RuntimeError(f"Cannot fail session in state: {self._state}")
        elif _NEXT_STATE.get(self._state) is not state:
            raise RuntimeError(
                f"Cannot move session from {self._state.name} to {state.name}"
            )

        logger.debug(f"Session state: {self._state.name} -> {state.name}")
        self._state = state

    def fail(self) -> None:
        """Mark the session failed unless it already finished."""
        if self._state not in (SessionState.RESOLVED, SessionState.FAILED):
            self.advance(SessionState.FAILED)

    def record_fatal(self, error: ChoutenError) -> None:
        """Remember a host-side fatal error; the first one wins."""
        if self._fatal_error is None:
            logger.debug(f"Fatal host error recorded: {error}")
            self._fatal_error = error

    def raise_if_fatal(self) -> None:
        """Re-raise a recorded fatal error."""
        if self._fatal_error is not None:
            raise self._fatal_error

    def evaluate(self, source: str) -> Any:
        """
        Evaluate JavaScript source in the session context.

        Raises:
            ChoutenError: A fatal error recorded while the code ran
            quickjs.JSException: If the code throws
        """
        try:
            result = self._context.eval(source)
        except quickjs.JSException:
            self.raise_if_fatal()
            raise
        self.raise_if_fatal()
        return result

    def call(self, function: quickjs.Object, *args: Any) -> Any:
        """Call a JavaScript function object with bound arguments."""
        try:
            result = function(*args)
        except quickjs.JSException:
            self.raise_if_fatal()
            raise
        self.raise_if_fatal()
        return result

    def drain_jobs(self) -> int:
        """
        Run pending promise jobs until the queue is empty.

        Stops early once runtime.max_pending_jobs jobs ran, when that limit
        is set.

        Returns:
            Number of jobs executed
        """
        limit = self._config.runtime.max_pending_jobs
        executed = 0

        while True:
            try:
                ran = self._context.execute_pending_job()
            except quickjs.JSException:
                self.raise_if_fatal()
                raise
            self.raise_if_fatal()

            if not ran:
                break

            executed += 1
            if limit and executed >= limit:
                logger.warning(f"Stopped draining promise jobs after {executed} jobs")
                break

        logger.debug(f"Drained {executed} pending job(s)")
        return executed

    def close(self) -> None:
        """Release host resources held by the session."""
        self._bridge.close()

    def __enter__(self) -> "HostSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.fail()
        self.close()


def bootstrap(
    config: Optional[ChoutenConfig] = None,
    client: Optional[httpx.Client] = None,
) -> HostSession:
    """
    Create the JavaScript context and host bridge for a run.

    Args:
        config: Loaded configuration (defaults if None)
        client: Optional preconfigured httpx client (used by tests)

    Returns:
        A session in the BOOTSTRAPPED state

    Raises:
        RuntimeBootstrapError: If the runtime cannot be created
    """
    config = config or ChoutenConfig()

    try:
        context = quickjs.Context()
    except Exception as e:
        raise RuntimeBootstrapError(f"Failed to initialize JavaScript runtime: {e}") from e

    session = HostSession(context, HostEffectBridge(config.http, client), config)
    session.advance(SessionState.BOOTSTRAPPED)
    logger.info("JavaScript runtime initialized")
    return session
