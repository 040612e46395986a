"""Common response schemas."""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base for payloads exchanged with the mobile client (camelCase JSON)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Standard success envelope read by the client as ``res.data.data``."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class SuccessResponse(BaseModel):
    """Standard success response without payload."""
    success: bool = True
    message: Optional[str] = None


class ErrorDetail(BaseModel):
    """Error detail structure."""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response for documentation."""
    success: bool = False
    message: str
    error: ErrorDetail
