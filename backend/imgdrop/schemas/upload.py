"""
Pydantic schemas for the negotiation exchange.

Field names on the wire are camelCase (fileName, uploadUrl, ...) to match
the browser clients; Python code uses the snake_case attributes.
"""
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from imgdrop.models.upload import Credential


class UploadUrlRequest(BaseModel):
    """Request schema for presigned URL generation."""
    file_name: str = Field(..., alias="fileName", min_length=1, description="Name of the file to upload")
    file_type: str = Field(
        ...,
        alias="fileType",
        min_length=1,
        pattern=r"^[\w.+-]+/[\w.+-]+$",
        description="MIME type (e.g., 'image/png')"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "fileName": "photo.png",
                "fileType": "image/png"
            }
        }
    )


class UploadUrlResponse(BaseModel):
    """Response schema for a presigned upload URL."""
    upload_url: str = Field(..., alias="uploadUrl", description="Presigned PUT URL for direct upload")
    file_url: str = Field(..., alias="fileUrl", description="URL the object will be readable at")
    object_key: str = Field("", alias="objectKey", description="Object key in the bucket")
    expires_at: int = Field(0, alias="expiresAt", description="Epoch seconds when uploadUrl expires")
    upload_headers: Dict[str, str] = Field(
        default_factory=dict,
        alias="uploadHeaders",
        description="Headers the PUT must carry"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "uploadUrl": "https://bucket.s3.us-east-1.amazonaws.com/1700000000000-photo.png?X-Amz-...",
                "fileUrl": "https://bucket.s3.us-east-1.amazonaws.com/1700000000000-photo.png",
                "objectKey": "1700000000000-photo.png",
                "expiresAt": 1700000300,
                "uploadHeaders": {"Content-Type": "image/png", "x-amz-acl": "private"}
            }
        }
    )

    @classmethod
    def from_credential(cls, credential: Credential) -> "UploadUrlResponse":
        return cls(
            upload_url=credential.write_url,
            file_url=credential.read_url,
            object_key=credential.object_key,
            expires_at=credential.expires_at,
            upload_headers=credential.headers,
        )

    def to_credential(self) -> Credential:
        return Credential(
            write_url=self.upload_url,
            read_url=self.file_url,
            object_key=self.object_key,
            expires_at=self.expires_at,
            headers=dict(self.upload_headers),
        )


class ErrorResponse(BaseModel):
    """Error body returned by the negotiation endpoint."""
    error: str
