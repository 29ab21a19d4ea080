"""Agregador de settings do núcleo de sessão.

Re-exporta todas as settings e funções de cada módulo.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    get_base_settings,
)

# Wiki alvo
from config.settings.wiki import (
    DEFAULT_API_HOST,
    DEFAULT_MAX_CONCURRENT_OPERATIONS,
    WikiSettings,
    get_wiki_settings,
)

__all__ = [
    # Constants
    "DEFAULT_API_HOST",
    "DEFAULT_MAX_CONCURRENT_OPERATIONS",
    "VALID_LOG_LEVELS",
    # Base
    "BaseSettings",
    "Environment",
    # Wiki
    "WikiSettings",
    "get_base_settings",
    "get_wiki_settings",
]
