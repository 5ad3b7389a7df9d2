"""
Search platform adapters.

Components:
- SearchPlatform / QueryResponse: the contract the engine drives (base.py)
- InMemoryPlatform: reference adapter for local runs and tests (memory.py)
- platform_for(): name registry
"""

from typing import Callable, Dict

from ..errors import ConfigurationError
from .base import QueryResponse, SearchPlatform
from .memory import InMemoryPlatform

PLATFORMS: Dict[str, Callable[[], SearchPlatform]] = {
    "memory": InMemoryPlatform,
}


def platform_for(name: str) -> SearchPlatform:
    """Create the platform registered under name."""
    if name not in PLATFORMS:
        known = ", ".join(sorted(PLATFORMS))
        raise ConfigurationError(f"Unknown search platform {name!r}. Known platforms: [{known}]")
    return PLATFORMS[name]()


__all__ = [
    "InMemoryPlatform",
    "PLATFORMS",
    "QueryResponse",
    "SearchPlatform",
    "platform_for",
]
