"""The single error type raised by the Lava client."""

from __future__ import annotations

from typing import Any

# Error originated from a ``{"status": "error"}`` payload returned by Lava.
KIND_REMOTE = "remote"

# The HTTP call itself failed (connection refused, DNS, timeout, ...).
KIND_TRANSPORT = "transport"

# Something failed locally (invalid parameters, undecodable response body).
KIND_LOCAL = "local"

KINDS = (KIND_REMOTE, KIND_TRANSPORT, KIND_LOCAL)


class LavaError(Exception):
    """Exception raised for every failed Lava API call.

    Callers only need to catch this one type.  The origin of the failure is
    available through :attr:`kind` for those that need to branch on it.

    :param message: Human-readable error description.  For remote errors
        this is ``"<code>: <message>"`` exactly as built from the payload.
    :param kind: One of ``"remote"``, ``"transport"`` or ``"local"``.
    :param code: The ``code`` field of a remote error payload, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str = KIND_LOCAL,
        code: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dictionary."""
        return {"code": self.code, "kind": self.kind, "message": self.message}
