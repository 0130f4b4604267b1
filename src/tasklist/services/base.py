"""Store-boundary error translation.

Learn: Transport-level database failures (connection refused, dropped
connection, pool exhausted) are not authentication failures and must not
look like one. Every store call runs inside store_errors(), which turns
them into StoreUnavailableError (503). Retrying is the caller's policy.
"""

from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from tasklist.errors import StoreUnavailableError

logger = structlog.get_logger()

TRANSPORT_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


@asynccontextmanager
async def store_errors(operation: str):
    try:
        yield
    except TRANSPORT_ERRORS as e:
        logger.error("store.unavailable", operation=operation, error=str(e))
        raise StoreUnavailableError() from e
