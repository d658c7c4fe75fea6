"""
Query objects for the tag repository.

A Query is a filter tree plus sort order and paging. The repository turns it
into a parameterized SQL statement; nothing here touches the database.
"""

from enum import Enum
from typing import Any, List, Optional, Tuple, Union


class FilterOperator(str, Enum):
    EQUAL = '='
    NOT_EQUAL = '!='
    GREATER_THAN = '>'
    GREATER_THAN_OR_EQUAL = '>='
    LESS_THAN = '<'
    LESS_THAN_OR_EQUAL = '<='


class CompositeFilterOperator(str, Enum):
    AND = 'AND'
    OR = 'OR'


class SortDirection(str, Enum):
    ASCENDING = 'ASC'
    DESCENDING = 'DESC'


class PropertyFilter:
    """Compare a single column against a value."""

    def __init__(self, key: str, operator: FilterOperator, value: Any):
        self.key = key
        self.operator = operator
        self.value = value

    def __repr__(self):
        return f"PropertyFilter({self.key!r} {self.operator.value} {self.value!r})"


class CompositeFilter:
    """Combine several filters with AND / OR."""

    def __init__(self, operator: CompositeFilterOperator, sub_filters: List['Filter']):
        if not sub_filters:
            raise ValueError("A composite filter needs at least one sub filter")
        self.operator = operator
        self.sub_filters = list(sub_filters)

    @classmethod
    def and_(cls, *sub_filters: 'Filter') -> 'CompositeFilter':
        return cls(CompositeFilterOperator.AND, list(sub_filters))

    @classmethod
    def or_(cls, *sub_filters: 'Filter') -> 'CompositeFilter':
        return cls(CompositeFilterOperator.OR, list(sub_filters))

    def __repr__(self):
        return f"CompositeFilter({self.operator.value}, {self.sub_filters!r})"


Filter = Union[PropertyFilter, CompositeFilter]


class Query:
    """
    Filter, sort and paging for a repository read.

    page_size=None means unbounded: every match is returned in one page.
    Setters return self so a query can be built in one expression:

        Query().set_filter(f).add_sort('id', SortDirection.DESCENDING).set_page_size(10)
    """

    def __init__(self):
        self.filter: Optional[Filter] = None
        self.sorts: List[Tuple[str, SortDirection]] = []
        self.current_page_num = 1
        self.page_size: Optional[int] = None
        self.page_count: Optional[int] = None

    def set_filter(self, query_filter: Filter) -> 'Query':
        self.filter = query_filter
        return self

    def add_sort(self, key: str, direction: SortDirection = SortDirection.ASCENDING) -> 'Query':
        self.sorts.append((key, direction))
        return self

    def set_current_page_num(self, page_num: int) -> 'Query':
        if page_num < 1:
            raise ValueError(f"Page number must be >= 1, got {page_num}")
        self.current_page_num = page_num
        return self

    def set_page_size(self, page_size: Optional[int]) -> 'Query':
        if page_size is not None and page_size < 0:
            raise ValueError(f"Page size must be >= 0, got {page_size}")
        self.page_size = page_size
        return self

    def set_page_count(self, page_count: Optional[int]) -> 'Query':
        self.page_count = page_count
        return self

    def __repr__(self):
        return (f"Query(filter={self.filter!r}, sorts={self.sorts!r}, "
                f"page={self.current_page_num}, page_size={self.page_size}, "
                f"page_count={self.page_count})")
