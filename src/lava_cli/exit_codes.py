"""Exit codes for agent-friendly error handling.

These codes allow autonomous agents to programmatically determine
the category of failure without parsing error messages.
"""

from __future__ import annotations

from lava_cli.errors import KIND_LOCAL, KIND_REMOTE, KIND_TRANSPORT

# Success
SUCCESS = 0

# Lava API unreachable (connection refused, DNS, timeout)
TRANSPORT_ERROR = 1

# Lava answered with {"status": "error"}
REMOTE_ERROR = 2

# Invalid parameters or an undecodable response
LOCAL_ERROR = 3

# Missing or invalid configuration (no API key, bad timeout)
CONFIG_ERROR = 4


ERROR_KIND_MAP: dict[str, int] = {
    KIND_TRANSPORT: TRANSPORT_ERROR,
    KIND_REMOTE: REMOTE_ERROR,
    KIND_LOCAL: LOCAL_ERROR,
    "config": CONFIG_ERROR,
}


def exit_code_for(kind: str) -> int:
    """Map an error kind string to a CLI exit code."""
    return ERROR_KIND_MAP.get(kind, LOCAL_ERROR)
