"""Runs one plugin verb end to end inside a fresh host session."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from chouten_cli.config import ChoutenConfig
from .capabilities import inject_capabilities
from .dispatch import Params, dispatch
from .engine import invoke
from .loader import load_plugin, read_plugin_source
from .session import bootstrap

logger = logging.getLogger(__name__)


def run_plugin(
    params: Params,
    config: Optional[ChoutenConfig] = None,
    client: Optional[httpx.Client] = None,
) -> str:
    """
    Load the plugin named by params and run its selected verb.

    Args:
        params: Validated command-line intent
        config: Loaded configuration (defaults if None)
        client: Optional httpx client for the request() capability

    Returns:
        The JSON text the plugin method resolved to

    Raises:
        FileReadError: If the plugin file cannot be read
        RuntimeBootstrapError: If the runtime cannot start
        PluginError: If the plugin fails to compile, run or instantiate
        UnsupportedHostMethodError: If the plugin requests an unsupported method
        UnresolvedResultError: If the method yields no JSON value
    """
    source = read_plugin_source(params.filename)

    with bootstrap(config, client) as session:
        inject_capabilities(session)
        load_plugin(session, source, str(params.filename))
        invocation = dispatch(params)
        result = invoke(session, invocation)
        logger.debug(f"Bridge made {session.bridge.request_count} request(s)")
        return result
