"""Response envelope shared by every endpoint."""

from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class ApiResponse(BaseModel, Generic[T]):
    """``{message, status, errors, data}`` wrapper."""

    message: str
    status: ApiStatus
    errors: Optional[List[str]] = None
    data: Optional[T] = None

    @classmethod
    def success(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(message=message, status=ApiStatus.SUCCESS, errors=None, data=data)

    @classmethod
    def failure(cls, message: str, errors: Optional[List[str]] = None) -> "ApiResponse":
        return cls(message=message, status=ApiStatus.FAILURE, errors=errors, data=None)
