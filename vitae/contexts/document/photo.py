"""Profile photo ingestion: validate an image and encode it as a data URI."""

import base64
import mimetypes
from pathlib import Path
from typing import Optional

from vitae.exceptions import ValidationError

MAX_PHOTO_BYTES = 2 * 1024 * 1024
PHOTO_FIELD = "profile.photo"


def ingest_photo(data: bytes, mime_type: Optional[str], max_bytes: int = MAX_PHOTO_BYTES) -> str:
    """
    Validate raw image bytes and return them as a data URI.

    Args:
        data: Image file content
        mime_type: MIME type reported for the file (must be image/*)
        max_bytes: Size limit in bytes

    Returns:
        'data:<mime>;base64,<payload>' string for profile.photo

    Raises:
        ValidationError: If the type is not an image or the file is too large
    """
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(f"Photo must be an image file (got {mime_type or 'unknown type'})", field=PHOTO_FIELD)

    if len(data) > max_bytes:
        raise ValidationError(
            f"Photo must not exceed {max_bytes // (1024 * 1024)}MB ({len(data)} bytes given)",
            field=PHOTO_FIELD,
        )

    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def ingest_photo_file(path: Path, max_bytes: int = MAX_PHOTO_BYTES) -> str:
    """Read an image file and ingest it, guessing the MIME type from its name."""
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(f"Photo must be an image file: {path.name}", field=PHOTO_FIELD)

    # Check size before reading the whole file into memory
    size = path.stat().st_size
    if size > max_bytes:
        raise ValidationError(
            f"Photo must not exceed {max_bytes // (1024 * 1024)}MB ({size} bytes given)",
            field=PHOTO_FIELD,
        )

    return ingest_photo(path.read_bytes(), mime_type, max_bytes=max_bytes)
