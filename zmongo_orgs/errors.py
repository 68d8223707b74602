# zmongo_orgs/errors.py
from typing import Any, List, Optional


class ZMongoError(Exception):
    pass


class ValidationError(ZMongoError):
    """A record or identifier was missing a required field or was malformed."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(ZMongoError):
    def __init__(self, collection: str, record_id: Any, message: Optional[str] = None) -> None:
        super().__init__(message or f"No record in '{collection}' with _id {record_id}")
        self.collection = collection
        self.record_id = str(record_id)


class StoreError(ZMongoError):
    """The store could not be reached or rejected the operation."""
