"""
Database access wrapper for moderation operations.

Every core operation runs inside ``store_access()``: one atomic block, an
optional per-statement timeout on PostgreSQL, and translation of database
failures into the moderation exception hierarchy.
"""
import logging
from contextlib import contextmanager

from django.db import DatabaseError, OperationalError, connection, transaction

from .conf import moderation_settings
from .exceptions import StoreError, StoreTimeout

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

# Fragments of driver messages that mean the statement ran out of time
TIMEOUT_MARKERS = (
    'statement timeout',
    'canceling statement due to statement timeout',
    'lock timeout',
    'database is locked',
)


def is_timeout_error(exc) -> bool:
    """Return True when a database error was caused by a timeout."""
    if not isinstance(exc, OperationalError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in TIMEOUT_MARKERS)


def _apply_statement_timeout():
    timeout = moderation_settings.STORE_TIMEOUT_MS
    if not timeout or connection.vendor != 'postgresql':
        return
    with connection.cursor() as cursor:
        # SET LOCAL only lasts until the surrounding transaction ends
        cursor.execute(f'SET LOCAL statement_timeout = {int(timeout)}')


@contextmanager
def store_access(operation):
    """
    Run a block of store access atomically.

    Raises StoreTimeout when the database reports a timeout and StoreError for
    any other database failure. Moderation errors raised inside the block
    propagate unchanged after the transaction is rolled back.
    """
    try:
        with transaction.atomic():
            _apply_statement_timeout()
            yield
    except DatabaseError as e:
        if is_timeout_error(e):
            logger.error(f"Store timeout during {operation}: {e}")
            raise StoreTimeout() from e
        logger.exception(f"Store failure during {operation}: {e}")
        raise StoreError() from e
