"""
Tests for the httpx transfer executor.
"""
import httpx
import pytest

from imgdrop.client.transfer import HttpTransferExecutor, TransferExecutor
from imgdrop.errors import TransferError

SIGNED_URL = "https://test-bucket.s3.amazonaws.com/1-photo.png?X-Amz-Signature=abc"


def make_executor(handler, chunk_size=1024) -> HttpTransferExecutor:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTransferExecutor(http_client=http, chunk_size=chunk_size)


class TestHttpTransferExecutor:
    """Tests for HttpTransferExecutor.put."""

    def test_satisfies_protocol(self):
        assert isinstance(HttpTransferExecutor(http_client=httpx.AsyncClient()), TransferExecutor)

    def test_rejects_bad_chunk_size(self):
        with pytest.raises(ValueError):
            HttpTransferExecutor(http_client=httpx.AsyncClient(), chunk_size=0)

    @pytest.mark.asyncio
    async def test_put_sends_bytes_and_headers(self):
        """Test the PUT carries the raw bytes and the signed headers."""
        data = bytes(range(256)) * 10
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content"] = request.content
            seen["headers"] = request.headers
            return httpx.Response(200)

        executor = make_executor(handler)
        await executor.put(SIGNED_URL, data, "image/png", headers={"x-amz-acl": "private"})

        assert seen["method"] == "PUT"
        assert seen["url"] == SIGNED_URL
        assert seen["content"] == data
        assert seen["headers"]["content-type"] == "image/png"
        assert seen["headers"]["content-length"] == str(len(data))
        assert seen["headers"]["x-amz-acl"] == "private"
        assert "transfer-encoding" not in seen["headers"]

    @pytest.mark.asyncio
    async def test_progress_is_non_decreasing_and_ends_at_total(self):
        """Test progress notifications climb to the full size on success."""
        data = b"x" * 10_000
        events = []

        executor = make_executor(lambda request: httpx.Response(200), chunk_size=1024)
        await executor.put(SIGNED_URL, data, "image/png", on_progress=lambda s, t: events.append((s, t)))

        sent = [s for s, _ in events]
        assert sent == sorted(sent)
        assert events[-1] == (10_000, 10_000)
        assert all(t == 10_000 for _, t in events)
        assert len(events) == 10

    @pytest.mark.asyncio
    async def test_rejected_upload_raises_with_detail(self):
        """Test a non-2xx status raises TransferError with status and body."""
        body = "<Error><Code>SignatureDoesNotMatch</Code></Error>"
        events = []

        executor = make_executor(lambda request: httpx.Response(403, text=body))

        with pytest.raises(TransferError) as exc_info:
            await executor.put(SIGNED_URL, b"x" * 4096, "image/png",
                               on_progress=lambda s, t: events.append((s, t)))

        assert exc_info.value.status_code == 403
        assert exc_info.value.response_body == body
        assert "403" in exc_info.value.message
        assert "SignatureDoesNotMatch" in exc_info.value.message
        # the final notification is only sent once the store accepted the write
        assert all(s < t for s, t in events)

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection reset", request=request)

        executor = make_executor(handler)

        with pytest.raises(TransferError) as exc_info:
            await executor.put(SIGNED_URL, b"x", "image/png")

        assert exc_info.value.status_code is None
        assert "connection reset" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_file(self):
        events = []
        executor = make_executor(lambda request: httpx.Response(200))

        await executor.put(SIGNED_URL, b"", "image/png", on_progress=lambda s, t: events.append((s, t)))

        assert events == [(0, 0)]
