"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    get_base_settings,
)

__all__ = [
    "VALID_LOG_LEVELS",
    "BaseSettings",
    "Environment",
    "get_base_settings",
]
