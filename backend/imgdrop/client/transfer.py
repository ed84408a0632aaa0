"""
Transfer executors: the byte-level PUT to a presigned URL.

Contract for every executor:
- zero or more progress notifications, in non-decreasing byte order
- then exactly one terminal outcome: put() returns (success) or raises
  TransferError (failure)
- no notifications after the terminal outcome
"""
import logging
from typing import AsyncIterator, Callable, Mapping, Optional, Protocol, runtime_checkable

import httpx

from imgdrop.errors import TransferError

logger = logging.getLogger(__name__)

# Called with (bytes_sent, total_bytes)
ProgressCallback = Callable[[int, int], None]

DEFAULT_CHUNK_SIZE = 64 * 1024


@runtime_checkable
class TransferExecutor(Protocol):
    """Interface for writing bytes to a presigned URL."""

    async def put(
        self,
        url: str,
        data: bytes,
        content_type: str,
        on_progress: Optional[ProgressCallback] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> None:
        """Upload data to url, raising TransferError on failure."""
        ...


class HttpTransferExecutor:
    """
    PUTs a file to a presigned URL with httpx, streaming it in chunks.

    Progress is reported as chunks are handed to the transport. The final
    notification (all bytes) is held back until the store answered 2xx, so
    a rejected upload never reports 100%.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float = 300.0
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpTransferExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _stream(self, data: bytes, on_progress: Optional[ProgressCallback]) -> AsyncIterator[bytes]:
        total = len(data)
        sent = 0
        for offset in range(0, total, self.chunk_size):
            chunk = data[offset:offset + self.chunk_size]
            yield chunk
            sent += len(chunk)
            if on_progress and sent < total:
                on_progress(sent, total)

    async def put(
        self,
        url: str,
        data: bytes,
        content_type: str,
        on_progress: Optional[ProgressCallback] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> None:
        """
        Upload data to a presigned URL.

        Args:
            url: Presigned PUT URL
            data: Raw file bytes
            content_type: Declared MIME type; must match what was signed
            on_progress: Progress callback
            headers: Extra headers the signature requires (e.g. x-amz-acl)

        Raises:
            TransferError: On transport errors or a non-2xx status
        """
        total = len(data)
        request_headers = httpx.Headers(headers or {})
        request_headers["Content-Type"] = content_type
        # Presigned PUTs do not accept chunked transfer encoding
        request_headers["Content-Length"] = str(total)

        try:
            response = await self._http.put(
                url,
                content=self._stream(data, on_progress),
                headers=request_headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Upload failed: {e}")
            raise TransferError(f"Upload failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(
                f"Upload failed: status={response.status_code}, "
                f"status_text={response.reason_phrase}, response={body}"
            )
            raise TransferError(
                f"Upload failed with status: {response.status_code}. Response: {body}",
                status_code=response.status_code,
                response_body=body
            )

        if on_progress:
            on_progress(total, total)
