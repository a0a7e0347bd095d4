from .entry import EntryPoint, make_handler
from .warm import WarmInstanceCache, get_default_cache

__all__ = ["EntryPoint", "WarmInstanceCache", "get_default_cache", "make_handler"]
