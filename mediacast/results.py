"""Uniform success/failure envelope returned by every operation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ErrorKind


@dataclass(frozen=True)
class ResultEnvelope:
    success: bool
    message: Optional[str] = None
    data: Any = None
    kind: Optional[ErrorKind] = field(default=None, compare=False)

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ResultEnvelope":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, kind: ErrorKind = ErrorKind.UNEXPECTED) -> "ResultEnvelope":
        return cls(success=False, message=message, kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message, "data": self.data}
