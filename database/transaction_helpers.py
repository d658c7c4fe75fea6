"""
Database transaction helpers.

A Transaction owns one direct (autocommit) connection and opens an explicit
BEGIN on it. Every write issued through the repository while the transaction
is active on the current thread goes through that connection, so a batch of
updates either commits together or rolls back together.
"""

import sqlite3
import threading
from typing import Optional

from database.core import RepositoryError, get_db_connection_direct

_local = threading.local()


class TransactionError(RepositoryError):
    """Raised when a transaction cannot be started, committed or rolled back."""


class Transaction:
    """An explicit sqlite transaction bound to the thread that began it."""

    def __init__(self):
        self._conn: Optional[sqlite3.Connection] = None
        self._active = False

    def begin(self) -> 'Transaction':
        if current_transaction() is not None:
            raise TransactionError("A transaction is already active on this thread")

        try:
            self._conn = get_db_connection_direct()
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            self._close()
            raise TransactionError(f"Failed to begin transaction: {e}") from e

        self._active = True
        _local.transaction = self
        return self

    @property
    def connection(self) -> sqlite3.Connection:
        if not self._active:
            raise TransactionError("Transaction is not active")
        return self._conn

    def is_active(self) -> bool:
        return self._active

    def commit(self):
        if not self._active:
            raise TransactionError("Cannot commit an inactive transaction")
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to commit transaction: {e}") from e
        self._finish()

    def rollback(self):
        if not self._active:
            raise TransactionError("Cannot roll back an inactive transaction")
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to roll back transaction: {e}") from e
        finally:
            self._finish()

    def _finish(self):
        self._active = False
        if getattr(_local, 'transaction', None) is self:
            _local.transaction = None
        self._close()

    def _close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        if not self._active:
            self.begin()
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._active:
            return False
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False


def current_transaction() -> Optional[Transaction]:
    """Return the transaction active on the calling thread, if any."""
    transaction = getattr(_local, 'transaction', None)
    if transaction is not None and transaction.is_active():
        return transaction
    return None
