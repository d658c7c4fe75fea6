"""
Database Module

sqlite connection handling, schema setup, the Tag model and transactions.
"""

from .core import (
    get_db_connection,
    get_db_connection_direct,
    initialize_database,
    TAG_COLUMNS,
    RepositoryError,
)
from .models import Tag, TAG_STATUS_VALID, TAG_STATUS_INVALID
from .transaction_helpers import Transaction, TransactionError, current_transaction

__all__ = [
    'get_db_connection',
    'get_db_connection_direct',
    'initialize_database',
    'TAG_COLUMNS',
    'RepositoryError',
    'Tag',
    'TAG_STATUS_VALID',
    'TAG_STATUS_INVALID',
    'Transaction',
    'TransactionError',
    'current_transaction',
]
