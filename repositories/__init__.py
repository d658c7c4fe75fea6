"""
Repository modules for the data access layer.
"""

from .query import (
    FilterOperator,
    CompositeFilterOperator,
    SortDirection,
    PropertyFilter,
    CompositeFilter,
    Query,
)
from .tag_repository import TagRepository, build_select

__all__ = [
    'FilterOperator',
    'CompositeFilterOperator',
    'SortDirection',
    'PropertyFilter',
    'CompositeFilter',
    'Query',
    'TagRepository',
    'build_select',
]
