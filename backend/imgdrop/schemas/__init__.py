"""
Pydantic schemas for API request/response validation.
"""
from imgdrop.schemas.upload import (
    ErrorResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)

__all__ = [
    "ErrorResponse",
    "UploadUrlRequest",
    "UploadUrlResponse",
]
