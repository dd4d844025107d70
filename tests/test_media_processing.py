"""
Unit tests for app/detection/preprocess.py and app/detection/video_sampler.py.

Images are generated in memory with Pillow; OpenCV capture is mocked so no
video codec is needed in CI.
"""

import io
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
from PIL import Image

from app.detection.preprocess import prepare_image
from app.detection.video_sampler import is_frame_quality_ok, sample_positions, sample_video_frames

from tests.conftest import make_tiny_jpeg


# ---------------------------------------------------------------------------
# prepare_image
# ---------------------------------------------------------------------------


def _png(size, mode="RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size).save(buf, format="PNG")
    return buf.getvalue()


def test_small_rgb_jpeg_is_passed_through():
    jpeg = make_tiny_jpeg()
    assert prepare_image(jpeg) is jpeg


def test_large_image_is_downscaled_to_jpeg():
    out = prepare_image(_png((2000, 1000)), max_side=512)
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.mode == "RGB"
        assert max(img.size) == 512


def test_small_png_is_converted_to_rgb_jpeg():
    out = prepare_image(_png((20, 20)))
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.size == (20, 20)


def test_undecodable_bytes_are_passed_through():
    junk = b"definitely not an image"
    assert prepare_image(junk) == junk


# ---------------------------------------------------------------------------
# video sampling
# ---------------------------------------------------------------------------


def test_sample_positions_are_evenly_spaced_inside_clip():
    assert sample_positions(70, 6) == [10, 20, 30, 40, 50, 60]


def test_sample_positions_short_clip_stays_in_range():
    positions = sample_positions(2, 6)
    assert all(0 <= p <= 1 for p in positions)
    assert len(positions) == 6


def _noisy_frame() -> np.ndarray:
    rng = np.random.default_rng(0)
    return rng.integers(0, 255, size=(64, 64, 3), dtype=np.uint8)


def test_quality_check_rejects_dark_and_flat_frames():
    assert is_frame_quality_ok(np.zeros((32, 32, 3), dtype=np.uint8))[0] is False
    assert is_frame_quality_ok(np.full((32, 32, 3), 128, dtype=np.uint8))[0] is False
    assert is_frame_quality_ok(_noisy_frame())[0] is True


def _mock_capture(frame, total=60):
    cap = MagicMock()
    cap.isOpened.return_value = True
    cap.get.return_value = total
    cap.read.return_value = (True, frame)
    return cap


def test_sample_video_frames_encodes_good_frames():
    cap = _mock_capture(_noisy_frame())
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        frames = sample_video_frames(b"video-bytes", ".mp4", frame_count=4)

    assert len(frames) == 4
    assert all(f.startswith(b"\xff\xd8") for f in frames)
    cap.release.assert_called_once()


def test_sample_video_frames_falls_back_to_middle_frame():
    cap = _mock_capture(np.zeros((32, 32, 3), dtype=np.uint8))
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        frames = sample_video_frames(b"video-bytes", ".mp4", frame_count=4)

    assert len(frames) == 1


def test_sample_video_frames_unopenable_returns_empty():
    cap = MagicMock()
    cap.isOpened.return_value = False
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        assert sample_video_frames(b"garbage", ".mp4") == []


def test_sample_video_frames_zero_length_returns_empty():
    cap = _mock_capture(_noisy_frame(), total=0)
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        assert sample_video_frames(b"garbage", ".mp4") == []


def test_unopenable_capture_is_still_released():
    cap = MagicMock()
    cap.isOpened.return_value = False
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        sample_video_frames(b"garbage", ".mp4")

    cap.release.assert_called_once()


def test_capture_released_when_decoder_raises():
    cap = _mock_capture(_noisy_frame())
    cap.read.side_effect = cv2.error("decoder failure")
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        assert sample_video_frames(b"video-bytes", ".mp4") == []

    cap.release.assert_called_once()


def test_zero_length_capture_is_released():
    cap = _mock_capture(_noisy_frame(), total=0)
    with patch("app.detection.video_sampler.cv2.VideoCapture", return_value=cap):
        sample_video_frames(b"video-bytes", ".mp4")

    cap.release.assert_called_once()
