from functools import lru_cache

from .base import ChainSQLSettings


@lru_cache(maxsize=1)
def get_settings() -> ChainSQLSettings:
    """Return the process-wide settings instance.

    Settings are read once from the environment (``CHAINSQL_*`` variables and
    an optional ``.env`` file) and cached. Table handles never read them
    directly; they only seed defaults in :class:`chainsql.api.client.Client`.
    """
    return ChainSQLSettings()


def reload_settings() -> ChainSQLSettings:
    """Drop the cached instance and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
