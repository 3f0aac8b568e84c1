"""Standard exit codes for Chouten CLI.

This module defines the exit codes used across the Chouten CLI
for consistent error reporting and scripting support.
"""


class ExitCode:
    """Standard exit codes for Chouten CLI.

    Chouten-specific codes:
    - 1: Usage error (arguments, plugin file)
    - 2: Configuration error
    - 3: Plugin error
    - 4: Runtime bootstrap error
    - 5: Host invariant violated by the plugin
    - 6: Unexpected error
    """

    # Standard success
    SUCCESS = 0

    # Bad invocation
    USAGE_ERROR = 1

    # Chouten-specific errors (2-6)
    CONFIGURATION_ERROR = 2
    PLUGIN_ERROR = 3
    RUNTIME_ERROR = 4
    HOST_ERROR = 5
    GENERAL_ERROR = 6

    # Signal-based exits (128 + signal number)
    CANCELLED = 130  # Ctrl+C (SIGINT = 2)

    @classmethod
    def get_name(cls, code: int) -> str:
        """Get the name of an exit code.

        Args:
            code: The exit code value

        Returns:
            Human-readable name for the exit code
        """
        names = {
            cls.SUCCESS: "SUCCESS",
            cls.USAGE_ERROR: "USAGE_ERROR",
            cls.CONFIGURATION_ERROR: "CONFIGURATION_ERROR",
            cls.PLUGIN_ERROR: "PLUGIN_ERROR",
            cls.RUNTIME_ERROR: "RUNTIME_ERROR",
            cls.HOST_ERROR: "HOST_ERROR",
            cls.GENERAL_ERROR: "GENERAL_ERROR",
            cls.CANCELLED: "CANCELLED",
        }
        return names.get(code, f"UNKNOWN({code})")

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get the description of an exit code.

        Args:
            code: The exit code value

        Returns:
            Human-readable description for the exit code
        """
        descriptions = {
            cls.SUCCESS: "Operation completed successfully",
            cls.USAGE_ERROR: "Invalid command-line arguments or unreadable plugin file",
            cls.CONFIGURATION_ERROR: "Configuration error or invalid config file",
            cls.PLUGIN_ERROR: "Plugin failed to compile, run or instantiate",
            cls.RUNTIME_ERROR: "JavaScript runtime failed to initialize",
            cls.HOST_ERROR: "Plugin violated a host invariant",
            cls.GENERAL_ERROR: "An unexpected error occurred",
            cls.CANCELLED: "Operation cancelled by user",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
