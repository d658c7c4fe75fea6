"""
Services package.

- short_link_service: resolves " [title] " tag short-links in markdown
- tag_cache_scheduler: background and on-demand reloading of the tag cache

Note: We intentionally keep imports minimal at the package level to avoid
circular dependency issues. Service modules should be imported directly
where needed, e.g., `from services import tag_cache_scheduler`
"""

__all__ = [
    'short_link_service',
    'tag_cache_scheduler',
]
