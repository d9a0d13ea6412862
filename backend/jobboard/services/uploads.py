"""
Upload handling.

Stores a single uploaded file per request under the upload directory and
returns the name to persist. Names are ``<epoch-millis>-<original name>``;
two uploads of the same file within one millisecond collide. No
content-type or size validation is done here.
"""

import os
import time
from typing import Optional

from fastapi import UploadFile

from jobboard.core.config import settings
from jobboard.core.logging import get_logger

logger = get_logger("uploads")


def build_storage_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """Timestamp-prefixed storage name; directory parts of the client name are dropped."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base_name = os.path.basename(original_name.replace("\\", "/")) or "upload"
    return f"{now_ms}-{base_name}"


async def save_upload(upload: Optional[UploadFile], directory: Optional[str] = None) -> Optional[str]:
    """
    Persist an uploaded file.

    Args:
        upload: The file from the multipart form, or None when absent
        directory: Target directory, defaults to ``settings.UPLOAD_DIR``

    Returns:
        The stored file name, or None if no file was sent
    """
    if upload is None or not upload.filename:
        return None

    directory = directory or settings.UPLOAD_DIR
    os.makedirs(directory, exist_ok=True)

    stored_name = build_storage_name(upload.filename)
    content = await upload.read()
    with open(os.path.join(directory, stored_name), "wb") as out_file:
        out_file.write(content)

    logger.info(f"Stored upload {upload.filename!r} as {stored_name} ({len(content)} bytes)")
    return stored_name
