"""League configuration management."""

from functools import lru_cache
from pathlib import Path

from .constants import RankingView
from .schemas import LeagueConfig
from .utils import load_json

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'league_config.json'


def load_config(path: Path | str) -> LeagueConfig:
    """
    Load league configuration from an explicit file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has an invalid structure
    """
    return load_json(path, schema=LeagueConfig)


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration from data/league_config.json.

    Configuration is cached after first load.

    Returns:
        LeagueConfig object with validated settings

    Example:
        from fpl_live.config import get_config
        config = get_config()
        print(f"Default view: {config.default_view}")
    """
    return load_config(DEFAULT_CONFIG_PATH)


def get_default_view() -> RankingView:
    """Get the default leaderboard view from config."""
    return RankingView(get_config().default_view)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime.
    """
    get_config.cache_clear()
