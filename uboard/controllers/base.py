"""Helpers shared by the domain controllers."""
import logging
from contextlib import contextmanager
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from uboard.core.errors import NotFoundError, StoreFailure

logger = logging.getLogger(__name__)

# The maximum number of results to return from a list endpoint.
MAX_RESULTS = 50


def page_size(limit: int) -> int:
    return min(limit, MAX_RESULTS)


def parse_id(value: str | UUID, kind: str) -> UUID:
    """Parse an id from the request. Malformed ids resolve to nothing."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{kind} {value} could not be found") from None


@contextmanager
def store_guard(operation: str, ident):
    """Turn a failing database call into a logged StoreFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure during %s for %s", operation, ident)
        raise StoreFailure(f"Could not {operation}: {ident}") from exc
