# medbook/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Optional

TIME_PATTERN = r"^([0-1]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[Any] = None
    error: str

class MessageResponse(BaseModel):
    message: str

class Pagination(BaseModel):
    page: int
    limit: int
    totalItems: int
    totalPages: int
