"""
Payload validation and log sanitization utilities.

Media kind comes from the data-URL MIME type first, then the advisory
filename. Unknown kinds are treated as images: any payload gets a
best-effort verdict rather than a rejection.
"""

import os
import re
import logging
from typing import Optional

from app.config import settings
from app.detection.errors import MalformedInput

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.webp', '.gif', '.heic', '.heif', '.tiff', '.tif', '.bmp']
VIDEO_EXTENSIONS = ['.mp4', '.webm', '.mov', '.avi', '.mkv']


def media_kind(mime_type: Optional[str], filename: Optional[str], has_frames: bool = False) -> str:
    """Return "video" or "image"."""
    if has_frames:
        return "video"
    if mime_type:
        if mime_type.lower().startswith("video/"):
            return "video"
        if mime_type.lower().startswith("image/"):
            return "image"
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in VIDEO_EXTENSIONS:
        return "video"
    return "image"


def validate_payload(kind: str, filesize: int) -> bool:
    """Reject empty payloads and payloads above the configured size limits."""
    if filesize <= 0:
        raise MalformedInput("No image data provided")

    if kind == "video":
        if filesize > settings.max_video_upload_bytes:
            raise MalformedInput(
                f"Video too large. Max {settings.max_video_upload_bytes // 1024 // 1024}MB allowed.",
                status_code=413,
            )
    elif filesize > settings.max_image_upload_bytes:
        raise MalformedInput(
            f"Image too large. Max {settings.max_image_upload_bytes // 1024 // 1024}MB allowed.",
            status_code=413,
        )

    return True


def sanitize_log_message(message: str) -> str:
    """Strip sensitive file paths from log messages."""
    msg = re.sub(r'\/[^\s]+\/tmp[a-zA-Z0-9_]+', '[TEMP_FILE]', message)
    msg = re.sub(r'\/[^\s]+\/([^\/\s]+)', r'.../\1', msg)
    return msg
