"""
Cache Events Module

Publish-subscribe for "tags changed" notifications. Code that writes tags
(the legacy URI migration in core.tag_cache) triggers an event instead of
importing the tag cache scheduler directly. The scheduler
subscribes while running and reloads the affected views.

Usage:
    # In the scheduler:
    from events.cache_events import register_cache_invalidation_callback
    register_cache_invalidation_callback(scheduler.request_reload)

    # After writing tags:
    from events.cache_events import trigger_cache_invalidation
    trigger_cache_invalidation(['new_tags', 'icon_tags'])  # None means every view
"""

from typing import Callable, Iterable, Optional

from utils.logging_config import get_logger

logger = get_logger('CacheEvents')

# Global list of cache invalidation callbacks
_cache_invalidation_callbacks = []


def register_cache_invalidation_callback(callback: Callable):
    """
    Register a callback to run when tag data changes.

    Args:
        callback: Called with one argument, the collection names to reload
                  (or None for all of them).
    """
    if callback not in _cache_invalidation_callbacks:
        _cache_invalidation_callbacks.append(callback)


def unregister_cache_invalidation_callback(callback: Callable):
    if callback in _cache_invalidation_callbacks:
        _cache_invalidation_callbacks.remove(callback)


def trigger_cache_invalidation(collections: Optional[Iterable[str]] = None):
    """
    Run every registered callback.

    A failing callback is logged and does not stop the others.
    """
    names = list(collections) if collections is not None else None
    for callback in list(_cache_invalidation_callbacks):
        try:
            callback(names)
        except Exception:
            logger.warning(f"Cache invalidation callback {callback!r} failed", exc_info=True)


def clear_all_callbacks():
    """
    Clear all registered callbacks. Primarily for testing purposes.
    """
    global _cache_invalidation_callbacks
    _cache_invalidation_callbacks = []
