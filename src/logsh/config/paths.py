"""Configuration file location."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from logsh.exceptions import ConfigWriteError, InvalidConfigPathError, NoHomeError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "LOGSH_CONFIG_PATH"
CONFIG_DIR_NAME = ".logsh"
CONFIG_FILE_NAME = "config.json"


def resolve_path(environ: Mapping[str, str] | None = None, home: Path | None = None) -> Path:
    """Resolve the configuration file path.

    ``LOGSH_CONFIG_PATH`` wins when set and non-empty; it must point to an
    existing path. Otherwise ``~/.logsh/config.json`` is used and the
    ``~/.logsh`` directory is created if needed.

    Args:
        environ: Environment to read (defaults to ``os.environ``).
        home: Home directory override (defaults to ``Path.home()``).

    Returns:
        Absolute configuration file path.

    Raises:
        InvalidConfigPathError: If ``LOGSH_CONFIG_PATH`` names a missing path.
        NoHomeError: If the home directory cannot be determined.
        ConfigWriteError: If the config directory cannot be created.
    """
    env = os.environ if environ is None else environ
    override = (env.get(CONFIG_PATH_ENV) or "").strip()
    if override:
        path = Path(override).expanduser()
        if not path.exists():
            raise InvalidConfigPathError(override)
        logger.debug("Using configuration path from %s: %s", CONFIG_PATH_ENV, path)
        return path.resolve()

    if home is None:
        try:
            home = Path.home()
        except (RuntimeError, KeyError) as exc:
            raise NoHomeError() from exc

    config_dir = home / CONFIG_DIR_NAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigWriteError(
            f"Unable to create configuration directory: {exc}", details={"path": str(config_dir)}
        ) from exc
    return config_dir / CONFIG_FILE_NAME


__all__ = [
    "CONFIG_DIR_NAME",
    "CONFIG_FILE_NAME",
    "CONFIG_PATH_ENV",
    "resolve_path",
]
