"""
Upload data model package.
"""
from imgdrop.models.upload import Credential, SelectedFile, UploadRequest

__all__ = [
    "Credential",
    "SelectedFile",
    "UploadRequest",
]
