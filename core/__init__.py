"""
Core Module

This module contains the in-memory tag cache.
"""

from .tag_cache import (
    TagCache,
    LoadResult,
    LoadStatus,
    NEW_TAGS,
    ICON_TAGS,
    ALL_TAGS,
    get_tag_cache,
    reset_tag_cache,
)

__all__ = [
    'TagCache',
    'LoadResult',
    'LoadStatus',
    'NEW_TAGS',
    'ICON_TAGS',
    'ALL_TAGS',
    'get_tag_cache',
    'reset_tag_cache',
]
