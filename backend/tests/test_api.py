"""
Tests for API endpoints.
Uses httpx AsyncClient for testing FastAPI routes.
"""
from unittest.mock import MagicMock, patch

import pytest
from httpx import AsyncClient, ASGITransport

from imgdrop.config import Settings
from imgdrop.errors import ConfigurationError, CredentialIssuanceError
from imgdrop.main import create_app
from imgdrop.utils.metrics import upload_credentials_issued_total


class TestRootEndpoint:
    """Tests for root endpoint."""

    @pytest.mark.asyncio
    async def test_root_returns_info(self, client: AsyncClient):
        """Test root endpoint returns service info."""
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "imgdrop"
        assert data["environment"] == "test"
        assert "version" in data


class TestGetUploadUrl:
    """Tests for POST /get-upload-url."""

    @pytest.mark.asyncio
    async def test_returns_upload_and_file_url(self, client: AsyncClient):
        """Test a valid request returns camelCase URLs."""
        response = await client.post(
            "/get-upload-url",
            json={"fileName": "photo.png", "fileType": "image/png"}
        )

        assert response.status_code == 200
        data = response.json()
        assert "X-Amz-Signature=" in data["uploadUrl"]
        assert data["fileUrl"] == "https://test-bucket.s3.us-east-1.amazonaws.com/1700000000000-photo.png"
        assert data["objectKey"] == "1700000000000-photo.png"
        assert data["expiresAt"] == 1700000300
        assert data["uploadHeaders"] == {"Content-Type": "image/png", "x-amz-acl": "private"}

    @pytest.mark.asyncio
    async def test_same_name_twice_gives_distinct_keys(self, client: AsyncClient):
        """Test two requests for one name never share an object key."""
        body = {"fileName": "photo.png", "fileType": "image/png"}
        first = (await client.post("/get-upload-url", json=body)).json()
        second = (await client.post("/get-upload-url", json=body)).json()

        assert first["objectKey"] != second["objectKey"]
        assert first["fileUrl"] != second["fileUrl"]

    @pytest.mark.asyncio
    async def test_missing_file_name(self, client: AsyncClient):
        """Test a missing fileName is a 400 with an error body."""
        response = await client.post("/get-upload-url", json={"fileType": "image/png"})

        assert response.status_code == 400
        assert "fileName" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_empty_file_type(self, client: AsyncClient):
        """Test an empty fileType is rejected."""
        response = await client.post("/get-upload-url", json={"fileName": "a.png", "fileType": ""})

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_unusable_file_name(self, client: AsyncClient):
        """Test a name that sanitizes to nothing is a 400."""
        response = await client.post("/get-upload-url", json={"fileName": "../", "fileType": "image/png"})

        assert response.status_code == 400
        assert "Invalid file name" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_issuance_failure_is_500(self, settings: Settings):
        """Test a store rejection surfaces as 500 with a generic error."""
        issuer = MagicMock()
        issuer.issue_upload_credential.side_effect = CredentialIssuanceError("denied")
        app = create_app(settings, issuer=issuer)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post(
                "/get-upload-url",
                json={"fileName": "photo.png", "fileType": "image/png"}
            )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate upload URL"}

    @pytest.mark.asyncio
    async def test_header_injection_in_file_type(self, client: AsyncClient):
        """Test a fileType carrying CR/LF never gets signed."""
        response = await client.post(
            "/get-upload-url",
            json={"fileName": "a.png", "fileType": "image/png\r\nX-Evil: 1"}
        )

        assert response.status_code == 400
        assert "fileType" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_unknown_types_share_one_metric_series(self, client: AsyncClient):
        """Test arbitrary fileType values do not create new metric series."""
        for i in range(5):
            response = await client.post(
                "/get-upload-url",
                json={"fileName": "a.bin", "fileType": f"x/unknown-{i}"}
            )
            assert response.status_code == 200

        labels = {
            sample.labels["content_type"]
            for metric in upload_credentials_issued_total.collect()
            for sample in metric.samples
        }
        assert "other" in labels
        assert not any(label.startswith("x/") for label in labels)


class TestHealthEndpoint:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_healthy_with_issuer(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "storage": "configured"}

    @pytest.mark.asyncio
    async def test_unhealthy_without_issuer(self, settings: Settings):
        app = create_app(settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/health")

        assert response.status_code == 503
        assert response.json()["detail"]["status"] == "unhealthy"


class TestMetricsEndpoint:
    """Tests for GET /metrics."""

    @pytest.mark.asyncio
    async def test_metrics_exposes_issuance_counter(self, client: AsyncClient):
        await client.post("/get-upload-url", json={"fileName": "photo.png", "fileType": "image/png"})
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "upload_credentials_issued_total" in response.text
        assert "http_requests_total" in response.text


class TestLifespan:
    """Tests for startup behavior."""

    @pytest.mark.asyncio
    async def test_missing_storage_config_prevents_startup(self):
        """Test startup fails fast when the store is not configured."""
        app = create_app(Settings(_env_file=None))

        with patch("imgdrop.main.configure_logging"):
            with pytest.raises(ConfigurationError):
                async with app.router.lifespan_context(app):
                    pass

    @pytest.mark.asyncio
    async def test_startup_builds_issuer(self, settings: Settings):
        """Test startup builds the issuer from settings."""
        app = create_app(settings)

        with patch("imgdrop.main.configure_logging"):
            async with app.router.lifespan_context(app):
                assert app.state.issuer is not None
