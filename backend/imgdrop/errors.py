"""
Error taxonomy for the upload flow.

Per-request errors (validation, credential issuance, transfer) are caught
where they happen and turned into a Failed/Invalid client state or a JSON
error response. ConfigurationError is the only one that stops the server
from starting.
"""
from typing import Optional


class UploadError(Exception):
    """Base class for all upload errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(UploadError):
    """
    A selected file was rejected locally before any network call.

    Attributes:
        code: Machine-readable reason (missing_file, unsupported_type, size_exceeds_limit)
        message: Human-readable reason shown to the user
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class CredentialIssuanceError(UploadError):
    """The negotiation exchange could not produce a presigned URL."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransferError(UploadError):
    """
    The store rejected or did not complete the write.

    Attributes:
        status_code: HTTP status returned by the store (None on transport errors)
        response_body: Body returned by the store, kept for diagnostics
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ConfigurationError(UploadError):
    """Required store configuration is missing at startup."""

    def __init__(self, missing: list[str]):
        super().__init__(
            "Storage not configured. Missing: " + ", ".join(missing)
        )
        self.missing = missing


class StateTransitionError(UploadError):
    """An orchestrator operation was called from a state that does not allow it."""
