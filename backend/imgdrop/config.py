"""
Application configuration using Pydantic Settings.

Settings are built once at process entry (see imgdrop.main.create_app and
imgdrop.client.cli) and handed to the components that need them. Nothing
reads the environment while a request is being handled.
"""
from dataclasses import dataclass
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from imgdrop.errors import ConfigurationError


@dataclass(frozen=True)
class StorageConfig:
    """Everything the credential issuer needs to talk to the object store."""
    bucket: str
    region: str
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None
    public_base_url: Optional[str] = None
    acl: Optional[str] = "private"
    presign_expiration: int = 300


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # S3-compatible storage (required for the server)
    aws_region: Optional[str] = None
    aws_bucket_name: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_endpoint_url: Optional[str] = None  # e.g. https://<account_id>.r2.cloudflarestorage.com

    # Read URLs are built from this when set (CDN, custom domain)
    public_base_url: Optional[str] = None

    # ACL signed into the PUT; empty string disables it
    upload_acl: str = "private"
    presign_expiration: int = 300  # 5 minutes

    # Server
    environment: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # Client
    upload_server_url: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def storage_config(self) -> StorageConfig:
        """
        Build the storage configuration for the credential issuer.

        Raises:
            ConfigurationError: If bucket, region or credentials are missing
        """
        required = {
            "AWS_BUCKET_NAME": self.aws_bucket_name,
            "AWS_REGION": self.aws_region,
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(missing)

        return StorageConfig(
            bucket=self.aws_bucket_name,
            region=self.aws_region,
            access_key_id=self.aws_access_key_id,
            secret_access_key=self.aws_secret_access_key,
            endpoint_url=self.aws_endpoint_url or None,
            public_base_url=self.public_base_url or None,
            acl=self.upload_acl or None,
            presign_expiration=self.presign_expiration,
        )
