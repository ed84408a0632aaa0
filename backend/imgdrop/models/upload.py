"""
Upload data model shared by the credential issuer and the client.

Nothing here is persisted. A SelectedFile lives until the user picks another
file; a Credential is minted for one transfer attempt and then dropped.
"""
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class SelectedFile:
    """
    A file picked by the user, held in memory.

    Attributes:
        name: File name as declared by the user's system
        content_type: Declared MIME type (may be empty if unknown)
        data: Raw file bytes
    """
    name: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "SelectedFile":
        """
        Read a local file, guessing its content type from the extension.

        Args:
            path: Path to the file
            content_type: Explicit MIME type, overrides the guess

        Returns:
            SelectedFile with the file's bytes loaded
        """
        path = Path(path)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "",
            data=path.read_bytes(),
        )


@dataclass(frozen=True)
class UploadRequest:
    """What the client knows about a file once it passed validation."""
    file_name: str
    content_type: str
    size_bytes: int

    @classmethod
    def for_file(cls, file: SelectedFile) -> "UploadRequest":
        return cls(
            file_name=file.name,
            content_type=file.content_type,
            size_bytes=file.size,
        )


@dataclass(frozen=True)
class Credential:
    """
    A presigned write authorization for exactly one object key.

    Attributes:
        write_url: Presigned PUT URL
        read_url: Address the object will be readable at once written
        object_key: Key in the bucket
        expires_at: Epoch seconds after which write_url stops working
        headers: Headers the PUT must carry for the signature to match
    """
    write_url: str
    read_url: str
    object_key: str
    expires_at: int
    headers: Dict[str, str] = field(default_factory=dict)
