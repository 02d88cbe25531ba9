from __future__ import annotations

import contextlib
import logging
import os
import stat
import sys
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, object] = {
    "api_key": "",
    "timeout": None,
}


def get_default_config_path() -> Path:
    """Return the default path to the CLI config file (~/.lava-cli/config.yaml)."""
    return Path.home() / ".lava-cli" / "config.yaml"


def _parse_timeout(value: object) -> float | None:
    """Coerce a timeout setting to seconds, treating blanks and ``0`` as unset."""
    if value is None or value == "":
        return None
    seconds = float(value)  # type: ignore[arg-type]
    return seconds if seconds > 0 else None


def _load_config_file(config_path: Path) -> dict[str, object]:
    """Read and parse a YAML config file, returning an empty dict on any failure."""
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if isinstance(data, dict):
            return data
        return {}
    except (yaml.YAMLError, OSError):
        return {}


def load_config(
    api_key: str | None = None,
    timeout: float | None = None,
    config_path: str | None = None,
) -> dict[str, object]:
    """Resolve configuration using a three-tier precedence hierarchy.

    Priority (highest first):
        1. Explicit parameters (*api_key*, *timeout*) passed directly (e.g. from CLI flags).
        2. Environment variables ``LAVA_API_KEY`` and ``LAVA_TIMEOUT``.
        3. Values read from the YAML config file at *config_path* (or the default location).

    Returns a dict with keys ``api_key`` and ``timeout``.  A ``timeout`` of
    ``None`` means no client-imposed timeout.

    Raises:
        ValueError: If a timeout value cannot be read as a number.
    """
    config: dict[str, object] = dict(DEFAULTS)

    path = Path(config_path) if config_path else get_default_config_path()
    file_values = _load_config_file(path)
    for key in ("api_key", "timeout"):
        if key in file_values and file_values[key] is not None:
            config[key] = file_values[key]

    env_api_key = os.environ.get("LAVA_API_KEY")
    if env_api_key:
        config["api_key"] = env_api_key

    env_timeout = os.environ.get("LAVA_TIMEOUT")
    if env_timeout:
        config["timeout"] = env_timeout

    if api_key is not None:
        config["api_key"] = api_key

    if timeout is not None:
        config["timeout"] = timeout

    config["api_key"] = str(config["api_key"]).strip()
    config["timeout"] = _parse_timeout(config["timeout"])

    return config


def init_config(api_key: str, timeout: float | None = None, config_path: str | None = None) -> Path:
    """Create the config directory and write an initial config file.

    Returns the :class:`~pathlib.Path` to the newly created config file.
    """
    path = Path(config_path) if config_path else get_default_config_path()

    data = {
        "api_key": api_key.strip(),
        "timeout": timeout,
    }

    _write_config_file(path, data)
    return path


def _check_dir_permissions(dir_path: Path) -> None:
    """Restrict the config directory to its owner, warning if it was open to others.

    Skipped on Windows where POSIX permission semantics do not apply.
    """
    if sys.platform == "win32":
        return
    with contextlib.suppress(OSError):
        dir_mode = stat.S_IMODE(dir_path.stat().st_mode)
        if dir_mode & 0o077:
            logger.warning(
                "Config directory %s has overly permissive permissions (mode %04o); restricting to 0700.",
                dir_path,
                dir_mode,
            )
        dir_path.chmod(0o700)


def _write_config_file(path: Path, data: dict[str, object]) -> None:
    """Write *data* to the YAML config file, creating dirs as needed.

    Sets file permissions to ``0600`` (owner read/write only) since the
    config holds the Lava API key.  Also enforces ``0700`` on the parent
    directory.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    _check_dir_permissions(path.parent)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)
    if sys.platform != "win32":
        with contextlib.suppress(OSError):
            path.chmod(0o600)


def validate_config(config: dict[str, object]) -> tuple[bool, str | None]:
    """Validate a resolved configuration dict.

    Returns ``(True, None)`` when the config is valid, or
    ``(False, error_message)`` describing the first problem found.
    """
    api_key = config.get("api_key", "")
    if not isinstance(api_key, str) or not api_key.strip():
        return False, "api_key is required and must be non-empty"

    timeout = config.get("timeout")
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        return False, "timeout must be a positive number of seconds"

    return True, None
