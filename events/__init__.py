# Events module
# Lets tag writers notify the tag cache without importing it.

from .cache_events import (
    register_cache_invalidation_callback,
    unregister_cache_invalidation_callback,
    trigger_cache_invalidation
)

__all__ = [
    'register_cache_invalidation_callback',
    'unregister_cache_invalidation_callback',
    'trigger_cache_invalidation'
]
