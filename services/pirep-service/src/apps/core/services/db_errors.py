# services/pirep-service/src/apps/core/services/db_errors.py
"""
Database error normalisation.

Turns driver/ORM failures into PirepPersistenceError with a readable message.
Nothing is retried.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Optional

from django.db import DatabaseError

from .exceptions import PirepPersistenceError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES: Dict[str, str] = {
    'unique': 'Record already exists',
    'constraint': 'Violates a database constraint',
    'reference': 'Violates a database reference/dependency',
    'not_null': 'Required information is missing',
    'fallback': 'Database operation failed',
}


def classify_db_error(exc: BaseException) -> str:
    """Bucket a database error by the wording of its message."""
    msg = str(exc).lower()
    cause = exc.__cause__
    cause_msg = str(cause).lower() if cause else ''
    combined = f"{msg} {cause_msg}"

    if 'unique' in combined or 'duplicate' in combined:
        return 'unique'
    if 'foreign key' in combined or 'constraint' in combined:
        return 'constraint'
    if 'reference' in combined or 'dependent' in combined:
        return 'reference'
    if 'not null' in combined:
        return 'not_null'
    return 'fallback'


def friendly_db_message(exc: BaseException, overrides: Optional[Dict[str, str]] = None) -> str:
    messages = {**DEFAULT_MESSAGES, **(overrides or {})}
    return messages[classify_db_error(exc)]


@contextmanager
def wrap_db_errors(operation: str, overrides: Optional[Dict[str, str]] = None):
    """Re-raise DatabaseError as PirepPersistenceError."""
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Database error during {operation}: {e}", exc_info=True)
        raise PirepPersistenceError(
            message=friendly_db_message(e, overrides),
            operation=operation,
            details={'kind': classify_db_error(e)}
        ) from e
