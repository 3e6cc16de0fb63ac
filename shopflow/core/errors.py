# file: shopflow/core/errors.py
"""
Error types for the job-line / quote pipeline.

Three kinds of failures exist:

- validation  : missing or empty required input (complaint, job_type,
                work_order_id ...). Raised before anything is written.
- dependency  : the store or the AI service failed. AI failures are
                absorbed by the callers (fallback to defaults); store
                failures propagate as one error for the whole batch.
- not_found   : a referenced row (inspection, work-order line) is missing.

Unknown job types and vehicle types are NOT errors: they fall through to
documented defaults (lowest priority, heavy-duty axle formula).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DEPENDENCY = "dependency"
    NOT_FOUND = "not_found"


class ShopflowError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.kind.value, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(ShopflowError):
    kind = ErrorKind.VALIDATION


class DependencyError(ShopflowError):
    kind = ErrorKind.DEPENDENCY


class PersistenceError(DependencyError):
    """The store rejected a write. Always refers to the whole batch."""


class NotFoundError(ShopflowError):
    kind = ErrorKind.NOT_FOUND
