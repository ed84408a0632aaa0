"""
Upload orchestrator: the client-side state machine.

Owns one upload attempt at a time:

    Idle/terminal --initiate--> Validating --> FileSelected | Invalid
    FileSelected --execute--> RequestingCredential --> Transferring(p)* --> Succeeded | Failed

Per-request errors never escape execute(); they end up in a Failed or
Invalid state carrying a readable message. Only calling an operation from a
state that does not allow it raises (StateTransitionError).
"""
import asyncio
import logging
import time
from typing import Callable, Iterable, List, Optional, Protocol

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
    is_busy,
)
from imgdrop.client.transfer import TransferExecutor
from imgdrop.client.validation import ALLOWED_FILE_TYPES, MAX_FILE_SIZE, validate_file
from imgdrop.errors import (
    CredentialIssuanceError,
    StateTransitionError,
    TransferError,
    ValidationError,
)
from imgdrop.models.upload import Credential, SelectedFile, UploadRequest
from imgdrop.utils.logging import log_upload_completed, log_upload_failed

logger = logging.getLogger(__name__)

StateListener = Callable[[UploadState], None]

CANCELLED_MESSAGE = "Upload cancelled"


class CredentialSource(Protocol):
    """Anything that can hand out upload credentials (see CredentialClient)."""

    async def request_credential(self, request: UploadRequest) -> Credential:
        ...


def percent_complete(bytes_sent: int, total_bytes: int) -> int:
    """Whole percent of bytes sent, halves rounded up. An empty file is 100%."""
    if total_bytes <= 0:
        return 100
    bytes_sent = max(0, min(bytes_sent, total_bytes))
    return (bytes_sent * 200 + total_bytes) // (2 * total_bytes)


class UploadOrchestrator:
    """
    Drives one file from selection to a readable URL.

    The orchestrator is the only thing that mutates the upload state.
    Listeners registered with subscribe() are told about every transition.
    """

    def __init__(
        self,
        credentials: CredentialSource,
        executor: TransferExecutor,
        allowed_types: Iterable[str] = ALLOWED_FILE_TYPES,
        max_size: int = MAX_FILE_SIZE
    ):
        self._credentials = credentials
        self._executor = executor
        self._allowed_types = tuple(allowed_types)
        self._max_size = max_size

        self._state: UploadState = Idle()
        self._file: Optional[SelectedFile] = None
        self._request: Optional[UploadRequest] = None
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def progress(self) -> int:
        """Current progress percent (100 once succeeded, 0 outside a transfer)."""
        if isinstance(self._state, Transferring):
            return self._state.progress
        if isinstance(self._state, Succeeded):
            return 100
        return 0

    @property
    def read_url(self) -> Optional[str]:
        """Public URL of the uploaded object; only exposed once the write succeeded."""
        if isinstance(self._state, Succeeded):
            return self._state.read_url
        return None

    @property
    def error(self) -> Optional[str]:
        """Message to show for an Invalid or Failed state."""
        if isinstance(self._state, Invalid):
            return self._state.reason
        if isinstance(self._state, Failed):
            return self._state.message
        return None

    @property
    def is_busy(self) -> bool:
        """True while a credential request or transfer is in flight."""
        return is_busy(self._state)

    @property
    def request(self) -> Optional[UploadRequest]:
        return self._request

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener for state transitions.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, state: UploadState) -> None:
        logger.debug(f"Upload state: {type(self._state).__name__} -> {type(state).__name__}")
        self._state = state
        for listener in self._listeners[:]:
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Error in upload state listener: {e}")

    def initiate(self, file: Optional[SelectedFile]) -> UploadState:
        """
        Select a file and validate it.

        Clears any previous result, error and progress first.

        Args:
            file: The chosen file, or None if the picker was cleared

        Returns:
            FileSelected or Invalid

        Raises:
            StateTransitionError: If an upload is in flight
        """
        if self.is_busy:
            raise StateTransitionError("Cannot select a file while an upload is in progress")

        self._file = None
        self._request = None
        self._transition(Validating())

        try:
            validate_file(file, self._allowed_types, self._max_size)
        except ValidationError as e:
            logger.info(f"File rejected: {e.code}")
            self._transition(Invalid(reason=e.message, code=e.code))
            return self._state

        self._file = file
        self._request = UploadRequest.for_file(file)
        self._transition(FileSelected(self._request))
        return self._state

    async def execute(self) -> Optional[str]:
        """
        Upload the selected file.

        Requests a fresh credential, transfers the bytes and settles into
        Succeeded or Failed. Nothing is retried automatically.

        Returns:
            The read URL on success, None on failure

        Raises:
            StateTransitionError: If no validated file is selected
        """
        if not isinstance(self._state, FileSelected) or self._file is None:
            raise StateTransitionError(
                f"Cannot start an upload from state {type(self._state).__name__}"
            )

        file = self._file
        request = self._request

        self._transition(RequestingCredential())
        try:
            credential = await self._credentials.request_credential(request)
        except CredentialIssuanceError as e:
            log_upload_failed(logger, "CredentialIssuanceError", e.message, status_code=e.status_code)
            self._transition(Failed("CredentialIssuanceError", e.message))
            return None
        except asyncio.CancelledError:
            self._transition(Failed("Cancelled", CANCELLED_MESSAGE))
            raise
        except Exception as e:
            self._transition(Failed(type(e).__name__, str(e)))
            raise

        self._transition(Transferring(0))
        start_time = time.time()
        try:
            await self._executor.put(
                credential.write_url,
                file.data,
                request.content_type,
                on_progress=self._on_progress,
                headers=credential.headers
            )
        except TransferError as e:
            log_upload_failed(
                logger,
                "TransferError",
                e.message,
                status_code=e.status_code,
                response_body=e.response_body
            )
            self._transition(Failed("TransferError", e.message))
            return None
        except asyncio.CancelledError:
            logger.warning("Upload cancelled during transfer")
            self._transition(Failed("Cancelled", CANCELLED_MESSAGE))
            raise
        except Exception as e:
            self._transition(Failed(type(e).__name__, str(e)))
            raise

        log_upload_completed(
            logger,
            object_key=credential.object_key,
            size_bytes=request.size_bytes,
            duration_ms=(time.time() - start_time) * 1000
        )
        self._file = None
        self._request = None
        self._transition(Succeeded(credential.read_url))
        return credential.read_url

    def _on_progress(self, bytes_sent: int, total_bytes: int) -> None:
        if not isinstance(self._state, Transferring):
            logger.debug("Ignoring progress notification outside of a transfer")
            return
        percent = percent_complete(bytes_sent, total_bytes)
        if percent != self._state.progress:
            self._transition(Transferring(percent))

    async def retry(self) -> Optional[str]:
        """
        Re-run a failed attempt with the same file and a new credential.

        Raises:
            StateTransitionError: If the current state is not Failed
        """
        if not isinstance(self._state, Failed) or self._file is None:
            raise StateTransitionError("Only a failed upload can be retried")

        self.initiate(self._file)
        if not isinstance(self._state, FileSelected):
            return None
        return await self.execute()

    def reset(self) -> None:
        """
        Go back to Idle, dropping the selected file and any result.

        Raises:
            StateTransitionError: If an upload is in flight
        """
        if self.is_busy:
            raise StateTransitionError("Cannot reset while an upload is in progress")
        self._file = None
        self._request = None
        self._transition(Idle())
