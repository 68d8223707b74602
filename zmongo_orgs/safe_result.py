# zmongo_orgs/safe_result.py
import json
import logging
from typing import Any, Dict, Optional

from bson.objectid import ObjectId
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class SafeResult:
    """
    Wraps every store and service outcome in a predictable, serializable object.

      - .success: True/False
      - .data: main result (model, dict, list or primitive)
      - .error: error string or None
      - .error_type: class name of the typed exception on failure
      - .unwrap(): the data, or raise the typed exception
      - .model_dump(): JSON-friendly dict output
    """

    def __init__(self, data: Any = None, *, success: bool, error: Optional[str] = None,
                 original_exc: Optional[Exception] = None):
        self.success = success
        self.error = error
        self.data = self._convert_bson(data)
        self._original_exc = original_exc

    @staticmethod
    def _convert_bson(obj: Any) -> Any:
        if isinstance(obj, ObjectId): return str(obj)
        if isinstance(obj, dict): return {k: SafeResult._convert_bson(v) for k, v in obj.items()}
        if isinstance(obj, list): return [SafeResult._convert_bson(x) for x in obj]
        return obj

    @classmethod
    def ok(cls, data: Any = None) -> 'SafeResult':
        return cls(data=data, success=True)

    @classmethod
    def fail(cls, error: str, data: Any = None, exc: Optional[Exception] = None) -> 'SafeResult':
        return cls(data=data, success=False, error=error, original_exc=exc)

    @classmethod
    def from_exception(cls, exc: Exception) -> 'SafeResult':
        return cls.fail(str(exc), exc=exc)

    @property
    def exc(self) -> Optional[Exception]:
        return self._original_exc

    @property
    def error_type(self) -> Optional[str]:
        if self.success:
            return None
        if self._original_exc is None:
            return "Error"
        return type(self._original_exc).__name__

    def is_error(self, exc_type: type) -> bool:
        return not self.success and isinstance(self._original_exc, exc_type)

    def unwrap(self, *, quiet: bool = False) -> Any:
        """
        Return the data on success. On failure raise the typed exception, or
        log the error and return None when quiet=True.
        """
        if self.success:
            return self.data
        if quiet:
            logger.info("Operation failed (%s): %s", self.error_type, self.error)
            return None
        if self._original_exc is not None:
            raise self._original_exc
        raise RuntimeError(self.error)

    @staticmethod
    def _dump(obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        if isinstance(obj, list):
            return [SafeResult._dump(x) for x in obj]
        if isinstance(obj, dict):
            return {k: SafeResult._dump(v) for k, v in obj.items()}
        return obj

    def model_dump(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type,
            "data": self._dump(self.data),
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.model_dump(), indent=indent, default=str)

    def __repr__(self):
        return f"SafeResult(success={self.success}, error={self.error!r}, data={str(self.data)[:300]})"
