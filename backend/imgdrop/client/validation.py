"""
Local file validation.

Runs synchronously before any network call. There is no soft mode: a file
either passes every check or is rejected with a ValidationError.
"""
from typing import Iterable, Optional

from imgdrop.errors import ValidationError
from imgdrop.models.upload import SelectedFile

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
ALLOWED_FILE_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp')


def validate_file(
    file: Optional[SelectedFile],
    allowed_types: Iterable[str] = ALLOWED_FILE_TYPES,
    max_size: int = MAX_FILE_SIZE
) -> SelectedFile:
    """
    Check a selected file against the upload policy.

    Args:
        file: The selected file, or None if nothing was picked
        allowed_types: Accepted MIME types
        max_size: Largest accepted size in bytes (inclusive)

    Returns:
        The same file, when it passes

    Raises:
        ValidationError: With code missing_file, unsupported_type or size_exceeds_limit
    """
    if file is None:
        raise ValidationError("missing_file", "Please select a file.")

    if file.content_type not in tuple(allowed_types):
        raise ValidationError(
            "unsupported_type",
            "Invalid file type. Please upload a JPEG, PNG, GIF, or WebP image."
        )

    if file.size > max_size:
        raise ValidationError(
            "size_exceeds_limit",
            f"File size exceeds {_format_size(max_size)} limit."
        )

    return file


def _format_size(size: int) -> str:
    if size % (1024 * 1024) == 0:
        return f"{size // (1024 * 1024)}MB"
    if size % 1024 == 0:
        return f"{size // 1024}KB"
    return f"{size} bytes"
