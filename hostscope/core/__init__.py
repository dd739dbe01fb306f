from hostscope.core.config import (
    DohProvider,
    ResolverSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "DohProvider",
    "ResolverSettings",
    "get_settings",
    "load_settings",
]
