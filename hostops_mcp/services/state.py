"""Process-wide configuration holder.

Tools read configuration through get_config() so tests can swap it with
set_config() and clear it with reset_state().
"""

from hostops_mcp.config import Config

_config: Config | None = None


def get_config() -> Config:
    """Return the active config, loading it from the environment once."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config) -> None:
    global _config
    _config = config


def reset_state() -> None:
    """Forget the active config; the next get_config() re-reads the environment."""
    global _config
    _config = None
