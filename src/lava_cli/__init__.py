"""lava-cli - Python client and agent-friendly CLI for the Lava payment API."""

from __future__ import annotations

from lava_cli.client import LavaClient
from lava_cli.errors import LavaError

__version__ = "0.1.0"

__all__ = ["LavaClient", "LavaError", "__version__"]
