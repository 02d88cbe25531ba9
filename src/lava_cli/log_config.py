"""Log rotation and credential scrubbing for lava-cli.

Provides a logging filter that redacts API keys and secret keys from log
output, and a helper to configure a rotating file handler with the scrub
filter installed.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


_DEFAULT_LOG_DIR = os.path.join(str(Path.home()), ".lava-cli", "logs")

_REDACTED = r"\1***REDACTED***"

# Patterns that match sensitive values in log messages.  Lava takes the raw
# key in the Authorization header, so that header is matched with or
# without a scheme.
_SCRUB_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r'(api_key["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     _REDACTED),
    (re.compile(r'(Authorization["\x27]?\s*[:=]\s*["\x27]?(?:Bearer\s+|Basic\s+)?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     _REDACTED),
    (re.compile(r'(secret_key["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     _REDACTED),
    (re.compile(r'(secret["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     _REDACTED),
]


class ScrubFilter(logging.Filter):
    """Logging filter that redacts credentials from log messages.

    Matches ``api_key=...``, ``Authorization: ...`` and secret-key
    assignments and replaces their values with ``***REDACTED***``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            # Scrub the merged message: a pattern may span msg and args.
            try:
                message = record.getMessage()
            except (TypeError, ValueError):
                return True
            record.msg = _scrub(message)
            record.args = None
        elif record.msg and isinstance(record.msg, str):
            record.msg = _scrub(record.msg)
        return True


def _scrub(text: str) -> str:
    """Apply all scrub patterns to *text*."""
    for pattern, replacement in _SCRUB_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def configure_logging(
    log_dir: Optional[str] = None,
    *,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
    level: Optional[str] = None,
) -> Path:
    """Configure logging with rotation and credential scrubbing.

    :param log_dir: Directory for log files.  Reads ``LAVA_LOG_DIR`` env
        var, then falls back to ``~/.lava-cli/logs/``.
    :param max_bytes: Maximum log file size before rotation (default 5 MB).
    :param backup_count: Number of rotated log files to keep (default 3).
    :param level: Log level string.  Reads ``LAVA_LOG_LEVEL`` env var,
        then falls back to ``"INFO"``.
    :returns: Path of the active log file.
    """
    log_dir = log_dir or os.environ.get("LAVA_LOG_DIR", _DEFAULT_LOG_DIR)
    level = level or os.environ.get("LAVA_LOG_LEVEL", "INFO")

    os.makedirs(log_dir, exist_ok=True)
    log_path = Path(log_dir) / "lava-cli.log"

    log_level = getattr(logging, level.upper(), logging.INFO)

    scrub_filter = ScrubFilter()

    root = logging.getLogger()
    root.setLevel(log_level)

    has_rotating = any(
        isinstance(h, RotatingFileHandler) for h in root.handlers
    )
    if not has_rotating:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(file_handler)

    # Install scrub filter on all existing handlers.
    for handler in root.handlers:
        if not any(isinstance(f, ScrubFilter) for f in handler.filters):
            handler.addFilter(scrub_filter)

    return log_path
