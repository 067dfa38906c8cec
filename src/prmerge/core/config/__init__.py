"""
Configuration for prmerge.

Layered loading (defaults < user config < project config < env < flags)
into an immutable RunConfig.
"""

from .env import get_user_config_dir, load_layered_env
from .loader import env_overrides, load_config
from .models import RunConfig

__all__ = [
    "RunConfig",
    "env_overrides",
    "get_user_config_dir",
    "load_config",
    "load_layered_env",
]
