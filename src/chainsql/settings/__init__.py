"""Settings module providing configuration management for chainsql.

Built on Pydantic Settings. Values come from, in order of precedence:

    1. Environment variables prefixed with ``CHAINSQL_`` (highest priority)
    2. A ``.env`` file in the working directory
    3. Default values in code (lowest priority)

Quick Start:
    >>> from chainsql.settings import get_settings
    >>> settings = get_settings()
    >>> settings.database_url
    'postgresql+psycopg://app@localhost/app'
"""

from .base import ChainSQLSettings
from .main import get_settings, reload_settings

__all__ = [
    "ChainSQLSettings",
    "get_settings",
    "reload_settings",
]
