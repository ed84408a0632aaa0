"""
Storage module for S3-compatible object storage.

Clients upload directly to the bucket with presigned URLs.
The backend NEVER receives file bytes.
"""
from imgdrop.storage.s3_client import S3Client
from imgdrop.storage.presign import CredentialIssuer

__all__ = ["S3Client", "CredentialIssuer"]
