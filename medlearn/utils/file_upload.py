"""
Image upload utilities.
"""
import os
import uuid
from typing import Tuple

import magic
from fastapi import UploadFile

from medlearn.core.config import settings

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def detect_content_type(file_bytes: bytes) -> str:
    """
    Detect a file's MIME type from its content.

    The client's Content-Type header and filename are never trusted.

    Args:
        file_bytes: Raw file content

    Returns:
        MIME type reported by libmagic
    """
    return magic.from_buffer(file_bytes, mime=True)


def is_allowed_content_type(content_type: str) -> bool:
    """
    Check if a detected MIME type is an accepted image type.

    Args:
        content_type: MIME type detected for the upload

    Returns:
        True if the type is allowed, False otherwise
    """
    return content_type in settings.ALLOWED_IMAGE_TYPES and content_type in CONTENT_TYPE_EXTENSIONS


def generate_unique_filename(content_type: str) -> str:
    """Generate a UUID filename whose extension matches the detected type."""
    return f"{uuid.uuid4()}.{CONTENT_TYPE_EXTENSIONS[content_type]}"


async def save_upload_file(upload_file: UploadFile) -> Tuple[str, str, int]:
    """
    Save uploaded image to disk.

    Args:
        upload_file: Uploaded file

    Returns:
        Tuple of (file_path, filename, file_size)

    Raises:
        ValueError: If file type is not allowed or the file is too large
    """
    content = await upload_file.read()
    file_size = len(content)

    if file_size > settings.MAX_UPLOAD_SIZE:
        max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValueError(f"File size exceeds the {max_mb}MB limit.")

    content_type = detect_content_type(content)
    if not is_allowed_content_type(content_type):
        raise ValueError("Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.")

    # Create upload directory if it doesn't exist
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    unique_filename = generate_unique_filename(content_type)
    file_path = os.path.join(settings.UPLOAD_DIR, unique_filename)

    with open(file_path, "wb") as f:
        f.write(content)

    return file_path, unique_filename, file_size
