"""
Server-side frame sampling for raw video payloads.

Used only when the client did not send pre-extracted frames. Frames are
taken at evenly spaced points across the duration (never the very first or
last frame), dark or blurry ones are dropped, and the rest are JPEG-encoded.
"""

import logging
import os
import tempfile

import cv2
import numpy as np

from app.config import settings

logger = logging.getLogger(__name__)


def is_frame_quality_ok(
    frame: np.ndarray,
    min_brightness: float = settings.frame_min_brightness,
    min_sharpness: float = settings.frame_min_sharpness
) -> tuple:
    """
    Check if frame is not too dark or blurry to classify.
    Returns (is_ok, brightness, sharpness).
    """
    try:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

        brightness = float(np.mean(gray))
        if brightness < min_brightness:
            return False, brightness, 0.0

        h, w = gray.shape
        center_crop = gray[h//4:3*h//4, w//4:3*w//4]
        laplacian_var = float(cv2.Laplacian(center_crop, cv2.CV_64F).var())
        if laplacian_var < min_sharpness:
            return False, brightness, laplacian_var

        return True, brightness, laplacian_var
    except cv2.error:
        return True, 128.0, 100.0


def sample_positions(total_frames: int, frame_count: int) -> list:
    """Frame indices at duration * i / (frame_count + 1), i = 1..frame_count."""
    positions = []
    for i in range(1, frame_count + 1):
        pos = int(total_frames * i / (frame_count + 1))
        positions.append(min(max(pos, 0), total_frames - 1))
    return positions


def _encode(frame: np.ndarray) -> bytes:
    encode_param = [int(cv2.IMWRITE_JPEG_QUALITY), settings.video_jpeg_quality]
    success, encoded_image = cv2.imencode('.jpg', frame, encode_param)
    return encoded_image.tobytes() if success else b""


def sample_video_frames(video_bytes: bytes, suffix: str = ".mp4", frame_count: int = None) -> list:
    """
    Decode a video payload and return up to `frame_count` JPEG frames.
    Returns [] when the container cannot be opened or read.
    """
    if frame_count is None:
        frame_count = settings.sampled_video_frames

    frames = []
    quality_rejected = 0

    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp_file:
        tmp_file.write(video_bytes)
        temp_path = tmp_file.name

    cap = None
    try:
        cap = cv2.VideoCapture(temp_path)
        if not cap.isOpened():
            logger.warning("[SAMPLER] Could not open video stream")
            return []

        total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        if total_frames <= 0:
            logger.warning("[SAMPLER] Video reports no frames")
            return []

        positions = sample_positions(total_frames, frame_count)
        for pos in positions:
            cap.set(cv2.CAP_PROP_POS_FRAMES, pos)
            ret, frame = cap.read()
            if not ret:
                continue
            is_ok, _, _ = is_frame_quality_ok(frame)
            if not is_ok:
                quality_rejected += 1
                continue
            encoded = _encode(frame)
            if encoded:
                frames.append(encoded)

        # Every sample rejected: fall back to the middle frame regardless of quality
        if not frames:
            cap.set(cv2.CAP_PROP_POS_FRAMES, total_frames // 2)
            ret, frame = cap.read()
            if ret:
                encoded = _encode(frame)
                if encoded:
                    frames.append(encoded)

        if quality_rejected:
            logger.info(f"[SAMPLER] Skipped {quality_rejected} low-quality frames (dark/blurry)")
        logger.info(f"[SAMPLER] Sampled {len(frames)} of {total_frames} frames")
    except cv2.error as e:
        logger.error(f"[SAMPLER] Error extracting video frames: {e}")
        return []
    finally:
        if cap is not None:
            cap.release()
        if os.path.exists(temp_path):
            os.remove(temp_path)

    return frames
