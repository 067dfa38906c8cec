"""Environment loading helpers.

Credentials and defaults can be kept in .env files instead of the shell:

  os.environ (pre-existing) > <folder>/.env > ~/.config/prmerge/.env

A .env file never overrides a variable already exported in the shell, and
the project .env cannot set PRMERGE_AUTH or PRMERGE_API_URL.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_PREFIX = "PRMERGE_"
USER_ONLY_VARS = frozenset({ENV_PREFIX + "AUTH", ENV_PREFIX + "API_URL"})


def get_user_config_dir() -> Path:
    """Return ~/.config/prmerge, honoring XDG_CONFIG_HOME."""
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home) / "prmerge"
    return Path.home() / ".config" / "prmerge"


def read_env_file(path: Path) -> dict[str, str]:
    """Read a .env file, skipping keys without a value."""
    if not path.is_file():
        return {}
    return {str(k): str(v) for k, v in dotenv_values(path).items() if k is not None and v is not None}


def load_layered_env(
    *,
    project_dir: Path | None = None,
    env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """Load variables from the user and project .env files into os.environ.

    Args:
        project_dir: folder holding the project .env (defaults to cwd)
        env_paths: explicit files, lowest precedence first; all of them
            may set every variable

    Returns:
        Names of the variables that were set
    """
    if env_paths is None:
        sources = [
            (get_user_config_dir() / ".env", False),
            ((project_dir or Path.cwd()) / ".env", True),
        ]
    else:
        sources = [(Path(path), False) for path in env_paths]

    preexisting = set(os.environ)
    loaded: dict[str, str] = {}
    for path, in_checkout in sources:
        values = read_env_file(path)
        if in_checkout:
            for key in sorted(USER_ONLY_VARS & set(values)):
                logger.warning("Ignoring %s from %s", key, path)
                del values[key]
        loaded.update(values)

    applied: list[str] = []
    for key, value in loaded.items():
        if key in preexisting:
            continue
        os.environ[key] = value
        applied.append(key)
    return applied
