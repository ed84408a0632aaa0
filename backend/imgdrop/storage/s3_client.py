"""
S3-compatible storage client.

Uses boto3 to sign PUT requests so clients can upload directly to the
bucket. Works against AWS S3 and any S3-compatible store (R2, MinIO) when an
endpoint URL is configured.

The backend never touches file bytes; it only signs URLs.
"""
import logging
from typing import Dict, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from imgdrop.config import StorageConfig
from imgdrop.errors import CredentialIssuanceError

logger = logging.getLogger(__name__)


class S3Client:
    """
    Thin wrapper around a boto3 S3 client for presigned uploads.

    Provides presigned PUT generation and the public address of an object.
    """

    def __init__(self, config: StorageConfig, client=None):
        """
        Initialize the boto3 client from an explicit storage configuration.

        Args:
            config: Validated storage configuration
            client: Pre-built boto3 client (tests inject stubs here)
        """
        self._config = config

        if client is None:
            s3_options = {}
            if config.endpoint_url:
                # S3-compatible stores generally want path-style addressing
                s3_options['addressing_style'] = 'path'

            client = boto3.client(
                's3',
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=config.region,
                config=Config(signature_version='s3v4', s3=s3_options)
            )

        self._client = client
        logger.info(f"S3 client initialized for bucket: {config.bucket}")

    @property
    def bucket(self) -> str:
        """Get configured bucket name."""
        return self._config.bucket

    def upload_headers(self, content_type: str) -> Dict[str, str]:
        """
        Headers a client must send with the PUT.

        Content-Type and the ACL are part of the signature, so the upload
        fails with 403 unless they are sent exactly as signed.
        """
        headers = {'Content-Type': content_type}
        if self._config.acl:
            headers['x-amz-acl'] = self._config.acl
        return headers

    def generate_presigned_upload_url(
        self,
        object_key: str,
        content_type: str,
        expiration: Optional[int] = None
    ) -> str:
        """
        Generate a presigned PUT URL for direct upload.

        Args:
            object_key: The S3 object key (path in bucket)
            content_type: MIME type of the file (e.g., image/png)
            expiration: URL expiration in seconds (default from config)

        Returns:
            Presigned URL string

        Raises:
            CredentialIssuanceError: If the SDK refuses to sign the request
        """
        if expiration is None:
            expiration = self._config.presign_expiration

        params = {
            'Bucket': self.bucket,
            'Key': object_key,
            'ContentType': content_type,
        }
        if self._config.acl:
            params['ACL'] = self._config.acl

        try:
            url = self._client.generate_presigned_url(
                ClientMethod='put_object',
                Params=params,
                ExpiresIn=expiration
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate presigned URL for {object_key}: {e}")
            raise CredentialIssuanceError("Failed to generate upload URL") from e

        logger.debug(f"Generated presigned URL for {object_key}")
        return url

    def public_url(self, object_key: str) -> str:
        """
        Address the object will be readable at, if bucket policy allows it.

        Nothing is checked against the store; the URL is derived from the
        configuration and the key alone.
        """
        key = quote(object_key, safe='/')

        if self._config.public_base_url:
            return f"{self._config.public_base_url.rstrip('/')}/{key}"
        if self._config.endpoint_url:
            return f"{self._config.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self._config.region}.amazonaws.com/{key}"
