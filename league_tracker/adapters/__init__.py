"""
Provider adapters. Importing this package registers both concrete adapters
so ``get_adapter`` can select one by its ``LeagueSource`` tag.
"""

from .base import AdapterResult, LeagueAdapter, get_adapter, is_placeholder_name, resolve_display_name
from .espn import EspnAdapter
from .sleeper import SleeperAdapter

__all__ = [
    "AdapterResult",
    "EspnAdapter",
    "LeagueAdapter",
    "SleeperAdapter",
    "get_adapter",
    "is_placeholder_name",
    "resolve_display_name",
]
