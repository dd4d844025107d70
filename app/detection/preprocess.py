"""
Image preparation before upload to a remote classifier.

Large images are downscaled and re-encoded as RGB JPEG to keep request
bodies small. Bytes Pillow cannot decode are sent unchanged; the remote
classifier decides what to do with them.
"""

import io
import logging

from PIL import Image, UnidentifiedImageError

from app.config import settings

logger = logging.getLogger(__name__)


def prepare_image(image_bytes: bytes, max_side: int = None) -> bytes:
    if max_side is None:
        max_side = settings.max_upload_side

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size
            if max(width, height) <= max_side and img.format == "JPEG" and img.mode == "RGB":
                return image_bytes

            working = img
            if max(width, height) > max_side:
                working = img.copy()
                working.thumbnail((max_side, max_side))
            if working.mode != "RGB":
                working = working.convert("RGB")

            buffer = io.BytesIO()
            working.save(buffer, format="JPEG", quality=settings.upload_jpeg_quality)
            logger.debug(f"[PREPARE] {width}x{height} -> {working.size[0]}x{working.size[1]} JPEG")
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"[PREPARE] Could not decode image, sending raw bytes: {e}")
        return image_bytes
