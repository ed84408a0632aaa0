"""
Client upload state.

UploadState is a tagged union: exactly one of the dataclasses below is the
current state. A UI renders from it instead of juggling separate loading,
error and status flags.
"""
from dataclasses import dataclass
from typing import Union

from imgdrop.models.upload import UploadRequest


@dataclass(frozen=True)
class Idle:
    """Nothing selected yet."""


@dataclass(frozen=True)
class Validating:
    """A file was chosen and is being checked (transient)."""


@dataclass(frozen=True)
class FileSelected:
    request: UploadRequest


@dataclass(frozen=True)
class Invalid:
    reason: str
    code: str = "invalid"


@dataclass(frozen=True)
class RequestingCredential:
    """Waiting for the server to sign a URL."""


@dataclass(frozen=True)
class Transferring:
    progress: int = 0


@dataclass(frozen=True)
class Succeeded:
    read_url: str


@dataclass(frozen=True)
class Failed:
    """
    An attempt failed.

    Attributes:
        error_class: Name of the error class (CredentialIssuanceError, TransferError)
        message: Human-readable message, including store status/body for transfers
    """
    error_class: str
    message: str


UploadState = Union[
    Idle,
    Validating,
    FileSelected,
    Invalid,
    RequestingCredential,
    Transferring,
    Succeeded,
    Failed,
]

TERMINAL_STATES = (Succeeded, Failed, Invalid)
BUSY_STATES = (RequestingCredential, Transferring)


def is_terminal(state: UploadState) -> bool:
    return isinstance(state, TERMINAL_STATES)


def is_busy(state: UploadState) -> bool:
    return isinstance(state, BUSY_STATES)


def describe(state: UploadState) -> str:
    """One-line status text for a state, as a UI would show it."""
    if isinstance(state, Idle):
        return "Select an image"
    if isinstance(state, Validating):
        return "Checking file..."
    if isinstance(state, FileSelected):
        return f"Ready to upload {state.request.file_name}"
    if isinstance(state, Invalid):
        return state.reason
    if isinstance(state, RequestingCredential):
        return "Getting upload URL..."
    if isinstance(state, Transferring):
        return f"Uploading... {state.progress}%"
    if isinstance(state, Succeeded):
        return "Upload successful!"
    if isinstance(state, Failed):
        if state.message.startswith("Upload failed"):
            return state.message
        return f"Upload failed: {state.message}"
    raise TypeError(f"Unknown upload state: {state!r}")
