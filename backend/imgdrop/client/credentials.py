"""
HTTP client for the negotiation exchange.

Posts {fileName, fileType} to the upload server and turns the answer into
a Credential. Every failure mode (network error, non-2xx status, malformed
body) surfaces as CredentialIssuanceError.
"""
import logging
from typing import Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from imgdrop.errors import CredentialIssuanceError
from imgdrop.models.upload import Credential, UploadRequest
from imgdrop.schemas.upload import UploadUrlRequest, UploadUrlResponse

logger = logging.getLogger(__name__)

UPLOAD_URL_PATH = "/get-upload-url"


class CredentialClient:
    """Requests presigned upload credentials from the upload server."""

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        """
        Args:
            base_url: Upload server address (e.g. http://localhost:3000)
            http_client: Shared client; one is created (and owned) when omitted
            timeout: Request timeout in seconds for an owned client
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "CredentialClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def request_credential(self, request: UploadRequest) -> Credential:
        """
        Ask the server to sign an upload for one file.

        Args:
            request: Validated upload request

        Returns:
            Fresh single-use credential

        Raises:
            CredentialIssuanceError: On network error, non-2xx status or malformed response
        """
        payload = UploadUrlRequest(
            file_name=request.file_name,
            file_type=request.content_type,
        ).model_dump(by_alias=True)

        try:
            response = await self._http.post(f"{self.base_url}{UPLOAD_URL_PATH}", json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Upload URL request failed: {e}")
            raise CredentialIssuanceError(f"Failed to get upload URL: {e}") from e

        if not response.is_success:
            raise CredentialIssuanceError(
                f"Failed to get upload URL: {self._error_detail(response)}",
                status_code=response.status_code
            )

        try:
            body = UploadUrlResponse.model_validate(response.json())
        except (ValueError, SchemaValidationError) as e:
            logger.warning(f"Malformed upload URL response: {e}")
            raise CredentialIssuanceError(
                "Failed to get upload URL: malformed response from server",
                status_code=response.status_code
            ) from e

        return body.to_credential()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            error = response.json().get("error")
        except (ValueError, AttributeError):
            error = None
        return error or response.reason_phrase or f"HTTP {response.status_code}"
