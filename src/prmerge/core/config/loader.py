"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars < command line

The result is a frozen RunConfig that the rest of the program receives
explicitly; nothing is cached in module state.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from prmerge.core.errors import ConfigurationError

from .env import ENV_PREFIX, get_user_config_dir
from .models import RunConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".prmerge.json"

# Settings that may come from config files or the environment. The folder
# and branch are always given on the command line.
FILE_KEYS = frozenset(
    {
        "auth",
        "remote",
        "base",
        "api_url",
        "max_pages",
        "label",
        "trusted_only",
        "continue_on_failure",
        "http_timeout",
        "git_timeout",
        "quiet",
    }
)

# Read from the user config, the environment and the command line only,
# never from files inside the checkout.
USER_ONLY_KEYS = frozenset({"auth", "api_url"})

ENV_STRING_KEYS = ("auth", "remote", "base", "api_url", "label")
ENV_BOOL_KEYS = ("trusted_only", "continue_on_failure", "quiet")
ENV_INT_KEYS = ("max_pages",)
ENV_FLOAT_KEYS = ("http_timeout", "git_timeout")


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/prmerge/config.json (or XDG equivalent)
    """
    return get_user_config_dir() / "config.json"


def get_project_config_path(project_dir: Path) -> Path:
    """Get path to the .prmerge.json inside the checkout."""
    return project_dir / PROJECT_CONFIG_NAME


def load_json_file(path: Path) -> dict[str, Any]:
    """
    Load the recognised settings from a JSON config file.

    A missing file yields an empty dict. Unknown keys are dropped with a
    warning.

    Raises:
        ConfigurationError: If the file exists but is not a JSON object
    """
    if not path.is_file():
        return {}

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"Failed to parse config at {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config at {path} must be a JSON object", path=str(path))

    unknown = sorted(set(data) - FILE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in FILE_KEYS}


def load_project_file(path: Path) -> dict[str, Any]:
    """
    Load a project config file, dropping the user-only settings.

    Args:
        path: Path to the .prmerge.json inside the checkout

    Returns:
        Recognised settings other than auth and api_url
    """
    data = load_json_file(path)
    ignored = sorted(USER_ONLY_KEYS & set(data))
    if ignored:
        logger.warning(
            "Ignoring %s in %s; set it in the user config, the environment or on the command line",
            ", ".join(ignored),
            path,
        )
    return {k: v for k, v in data.items() if k not in USER_ONLY_KEYS}


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Collect PRMERGE_* environment variables.

    Supported env vars:
        PRMERGE_AUTH, PRMERGE_REMOTE, PRMERGE_BASE, PRMERGE_API_URL,
        PRMERGE_LABEL, PRMERGE_TRUSTED_ONLY, PRMERGE_CONTINUE_ON_FAILURE,
        PRMERGE_QUIET, PRMERGE_MAX_PAGES, PRMERGE_HTTP_TIMEOUT,
        PRMERGE_GIT_TIMEOUT

    Unparseable numbers are ignored with a warning.
    """
    if environ is None:
        environ = dict(os.environ)

    result: dict[str, Any] = {}

    for key in ENV_STRING_KEYS:
        if value := environ.get(ENV_PREFIX + key.upper()):
            result[key] = value

    for key in ENV_BOOL_KEYS:
        if value := environ.get(ENV_PREFIX + key.upper()):
            result[key] = value.lower() not in ("false", "0", "no", "")

    for key in ENV_INT_KEYS + ENV_FLOAT_KEYS:
        name = ENV_PREFIX + key.upper()
        if not (value := environ.get(name)):
            continue
        try:
            result[key] = int(value) if key in ENV_INT_KEYS else float(value)
        except ValueError:
            logger.warning("Invalid %s value '%s', ignoring", name, value)

    return result


def load_config(
    folder: Path,
    branch: str,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> RunConfig:
    """
    Build the run configuration.

    Configuration precedence (highest to lowest):
        1. Explicit overrides (command-line flags; None values are skipped)
        2. Environment variables (PRMERGE_*)
        3. Project config (<folder>/.prmerge.json), never auth or api_url
        4. User config (~/.config/prmerge/config.json)
        5. RunConfig defaults

    Args:
        folder: Local checkout folder
        branch: Name of the branch to create
        overrides: Values given on the command line
        environ: Environment to read (defaults to os.environ)

    Returns:
        Validated, frozen RunConfig

    Raises:
        ConfigurationError: If a config file is malformed or the merged
            values fail validation
    """
    merged: dict[str, Any] = {}
    merged.update(load_json_file(get_user_config_path()))
    merged.update(load_project_file(get_project_config_path(folder)))
    merged.update(env_overrides(environ))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    merged["folder"] = folder
    merged["branch"] = branch

    try:
        return RunConfig(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
