"""Exceptions raised by the script host bridge."""

from chouten_cli.cli.error_handler import ChoutenError, PluginError
from chouten_cli.cli.exit_codes import ExitCode


class RuntimeBootstrapError(ChoutenError):
    """Raised when the JavaScript runtime cannot be initialized."""

    exit_code = ExitCode.RUNTIME_ERROR


class ScriptCompileError(PluginError):
    """Raised when the plugin source is not valid JavaScript."""
    pass


class ScriptExecutionError(PluginError):
    """Raised when plugin top-level code or instantiation throws."""
    pass


class UnsupportedHostMethodError(ChoutenError):
    """Raised when a plugin asks the host for a transport method it does not offer.

    This is a host invariant violation rather than a request failure, so it
    aborts the run instead of degrading into a response object.
    """

    exit_code = ExitCode.HOST_ERROR

    def __init__(self, method: str) -> None:
        super().__init__(
            f"Unsupported method: {method}",
            details={"method": method},
        )
        self.method = method


class UnresolvedResultError(ChoutenError):
    """Raised when the invoked plugin method does not yield a JSON string.

    The CLI reports this as a diagnostic line and still exits successfully.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
