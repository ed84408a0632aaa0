"""
Presigned upload credential issuance.

Turns a file name and content type into a time-limited PUT URL for a fresh
object key plus the URL the object will be readable at.

Flow:
1. Client posts fileName/fileType to /get-upload-url
2. Issuer derives a unique object key and signs a PUT for it
3. Client uploads directly to the store using the signed URL
4. Client shows the read URL once the PUT succeeded
"""
import logging
import threading
import time
from pathlib import PurePosixPath
from typing import Callable, Optional

from imgdrop.config import StorageConfig
from imgdrop.models.upload import Credential
from imgdrop.storage.s3_client import S3Client

logger = logging.getLogger(__name__)


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce an untrusted file name to its last path component.

    Keeps keys flat so a name like "../../x.png" cannot escape the prefix.

    Returns:
        The sanitized name, or "" if nothing usable is left
    """
    name = PurePosixPath(file_name.replace('\\', '/')).name.strip()
    if name in ('.', '..'):
        return ''
    return name


class CredentialIssuer:
    """
    Issues presigned write credentials for single objects.

    Object keys are "<epoch-ms>-<fileName>". The millisecond stamp is kept
    strictly increasing per issuer, so two requests for the same name never
    get the same key from one process.
    """

    def __init__(
        self,
        config: StorageConfig,
        client: Optional[S3Client] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            config: Storage configuration built at startup
            client: Storage client (built from config when omitted)
            clock: Returns the current time in epoch seconds
        """
        self._config = config
        self._client = client or S3Client(config)
        self._clock = clock
        self._last_stamp = 0
        self._lock = threading.Lock()

    @property
    def expiration(self) -> int:
        return self._config.presign_expiration

    def _next_stamp(self) -> int:
        with self._lock:
            stamp = int(self._clock() * 1000)
            if stamp <= self._last_stamp:
                stamp = self._last_stamp + 1
            self._last_stamp = stamp
            return stamp

    def generate_object_key(self, file_name: str) -> str:
        """
        Generate a unique object key for the upload.

        Args:
            file_name: Untrusted name chosen by the user

        Returns:
            Object key string

        Raises:
            ValueError: If the name has no usable final component
        """
        name = sanitize_file_name(file_name)
        if not name:
            raise ValueError(f"Invalid file name: {file_name!r}")
        return f"{self._next_stamp()}-{name}"

    def issue_upload_credential(self, file_name: str, content_type: str) -> Credential:
        """
        Create a presigned upload credential for a new object.

        Args:
            file_name: Name of the file being uploaded
            content_type: Declared MIME type; signed into the URL

        Returns:
            Credential with write URL, read URL, key and expiry

        Raises:
            ValueError: If file_name is unusable
            CredentialIssuanceError: If the store refuses to sign
        """
        object_key = self.generate_object_key(file_name)
        issued_at = int(self._clock())

        upload_url = self._client.generate_presigned_upload_url(
            object_key,
            content_type,
            expiration=self.expiration
        )

        credential = Credential(
            write_url=upload_url,
            read_url=self._client.public_url(object_key),
            object_key=object_key,
            expires_at=issued_at + self.expiration,
            headers=self._client.upload_headers(content_type),
        )

        logger.info(
            f"Issued upload credential: key={object_key}, "
            f"content_type={content_type}, expires_in={self.expiration}s"
        )
        return credential
