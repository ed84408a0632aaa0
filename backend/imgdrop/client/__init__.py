"""
Client side of the presigned upload flow.

The orchestrator validates a file, asks the upload server for a credential,
PUTs the bytes straight to the store and exposes the result as a single
UploadState.
"""
from imgdrop.client.credentials import CredentialClient
from imgdrop.client.orchestrator import UploadOrchestrator, percent_complete
from imgdrop.client.state import (
    Failed,
    FileSelected,
    Idle,
    Invalid,
    RequestingCredential,
    Succeeded,
    Transferring,
    UploadState,
    Validating,
)
from imgdrop.client.transfer import HttpTransferExecutor, TransferExecutor
from imgdrop.client.validation import ALLOWED_FILE_TYPES, MAX_FILE_SIZE, validate_file

__all__ = [
    "ALLOWED_FILE_TYPES",
    "MAX_FILE_SIZE",
    "CredentialClient",
    "Failed",
    "FileSelected",
    "HttpTransferExecutor",
    "Idle",
    "Invalid",
    "RequestingCredential",
    "Succeeded",
    "TransferExecutor",
    "Transferring",
    "UploadOrchestrator",
    "UploadState",
    "Validating",
    "percent_complete",
    "validate_file",
]
