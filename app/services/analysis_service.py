"""
Analysis request helpers: data-URL decoding, file suffix guessing,
and memory usage logging.
"""

import base64
import binascii
import logging
import os
from typing import Optional

import psutil

from app.detection.errors import MalformedInput, UndecodablePayload

logger = logging.getLogger(__name__)

MIME_SUFFIXES = {
    "png": ".png",
    "jpeg": ".jpg",
    "jpg": ".jpg",
    "webp": ".webp",
    "gif": ".gif",
    "heic": ".heic",
    "heif": ".heif",
    "tiff": ".tiff",
    "bmp": ".bmp",
    "mp4": ".mp4",
    "webm": ".webm",
    "quicktime": ".mov",
    "x-msvideo": ".avi",
    "x-matroska": ".mkv",
}


def log_memory(stage: str) -> None:
    """Log current process and system memory usage. Only runs when DEBUG logging is active."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    sys_mem = psutil.virtual_memory()
    logger.debug(
        f"[MEMORY] {stage} | "
        f"PID: {os.getpid()} | "
        f"Process RSS: {mem_info.rss / 1024 / 1024:.2f} MB | "
        f"System Available: {sys_mem.available / 1024 / 1024:.2f} MB / {sys_mem.total / 1024 / 1024:.2f} MB"
    )


def decode_data_url(data_url: str) -> tuple[bytes, Optional[str]]:
    """
    Decode `data:<mime>;base64,<payload>` (or a bare base64 string).
    Returns (content, mime_type); mime_type is None for bare base64.

    Raises MalformedInput when there is nothing to decode, and
    UndecodablePayload when data is present but unusable.
    """
    if not data_url or not data_url.strip():
        raise MalformedInput("No image data provided")

    mime_type = None
    data_str = data_url.strip()
    if data_str.startswith("data:"):
        header, sep, data_str = data_str.partition(",")
        mime_type = header[len("data:"):].split(";")[0] or None
        if not sep:
            raise UndecodablePayload("Invalid data URL: missing payload", mime_type)
        if ";base64" not in header:
            raise UndecodablePayload("Only base64 data URLs are supported", mime_type)

    try:
        content = base64.b64decode(data_str, validate=False)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Error decoding data URL: {e}")
        raise UndecodablePayload("Invalid base64 payload", mime_type)

    if not content:
        raise MalformedInput("No image data provided")
    return content, mime_type


def suffix_for(mime_type: Optional[str], filename: Optional[str], default: str = ".jpg") -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext:
        return ext
    if mime_type:
        subtype = mime_type.split("/")[-1].lower()
        return MIME_SUFFIXES.get(subtype, default)
    return default
