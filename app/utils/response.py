# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

T = TypeVar("T")


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: str
    details: Optional[Any] = None


# shared OpenAPI docs for lifecycle write endpoints
LIFECYCLE_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Quote not found"},
    409: {"model": ErrorResponse, "description": "Transition not permitted or version conflict"},
}
