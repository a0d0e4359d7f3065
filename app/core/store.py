"""Translation of persistence failures into StoreUnavailableError."""

from contextlib import contextmanager
from typing import Iterator

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from app.core.exceptions import StoreUnavailableError
from app.core.logging import get_logger

log = get_logger(__name__)


@contextmanager
def store_errors(operation: str | None = None) -> Iterator[None]:
    """Re-raise driver errors raised inside the block as StoreUnavailableError.

    Callers that expect a specific driver error (e.g. DuplicateKeyError) must catch it inside the block.
    """
    try:
        yield
    except PyMongoError as e:
        log.error("store_unavailable", operation=operation, error=str(e))
        raise StoreUnavailableError() from e


def parse_object_id(value: str | PydanticObjectId | None) -> PydanticObjectId | None:
    """Return ObjectId for value, or None when it is not a valid id."""
    if value is None:
        return None
    if isinstance(value, PydanticObjectId):
        return value
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError):
        return None
