"""
Pure unit tests for app/detection/heuristic.py and app/detection/features.py.

Feature jitter is exercised with seeded random.Random instances; the
synthetic/authentic decision must never depend on it.
"""

import random

import pytest

from app.config import settings
from app.detection import heuristic
from app.detection.features import build_features, clamp_confidence, fixed_features


# ---------------------------------------------------------------------------
# estimate()
# ---------------------------------------------------------------------------


def test_fake_marker_in_filename_is_synthetic():
    verdict = heuristic.estimate(5_000, "my_deepfake_clip.mp4")
    assert verdict.is_synthetic is True
    assert verdict.confidence == 78.0
    assert verdict.fake_probability == heuristic.FAKE_NAME_PROBABILITY


@pytest.mark.parametrize("name", ["synthetic-face.png", "FAKE.jpg", "DeepFake.webp"])
def test_fake_markers_any_case(name):
    assert heuristic.estimate(100, name).is_synthetic is True


def test_webcam_marker_overrides_fake_marker():
    verdict = heuristic.estimate(5_000, "webcam-capture-deepfake.jpg")
    assert verdict.is_synthetic is False
    assert verdict.confidence == 92.0
    assert verdict.fake_probability == 0.0


def test_default_small_file_without_hints():
    verdict = heuristic.estimate(10_000, "holiday.jpg")
    assert verdict.is_synthetic is False
    # (70 + 75 + 82) / 3
    assert verdict.confidence == pytest.approx(75.7)


def test_default_large_portrait():
    verdict = heuristic.estimate(250_000, "portrait_of_me.jpg")
    assert verdict.is_synthetic is False
    # (85 + 80 + 82) / 3
    assert verdict.confidence == pytest.approx(82.3)


def test_missing_filename_defaults_to_authentic():
    verdict = heuristic.estimate(0, None)
    assert verdict.is_synthetic is False
    assert settings.confidence_floor <= verdict.confidence <= settings.confidence_ceiling


def test_verdict_boolean_independent_of_rng():
    outcomes = {
        heuristic.estimate(1_000, "fake.png", random.Random(seed)).is_synthetic
        for seed in range(20)
    }
    assert outcomes == {True}


def test_is_webcam_capture():
    assert heuristic.is_webcam_capture("webcam-capture-1.jpg") is True
    assert heuristic.is_webcam_capture("My_Webcam.png") is True
    assert heuristic.is_webcam_capture("camera.jpg") is False
    assert heuristic.is_webcam_capture(None) is False


# ---------------------------------------------------------------------------
# features
# ---------------------------------------------------------------------------


def test_build_features_synthetic_without_jitter():
    f = build_features(True, 90.0, 0.0, jitter=0)
    assert (f.artificial_patterns, f.natural_features, f.texture_consistency, f.lighting) == (
        90.0, 10.0, 8.5, 8.0,
    )


def test_build_features_authentic_without_jitter():
    f = build_features(False, 0.0, 80.0, jitter=0)
    assert (f.artificial_patterns, f.natural_features, f.texture_consistency, f.lighting) == (
        20.0, 80.0, 72.0, 70.4,
    )


def test_seeded_jitter_is_reproducible():
    a = build_features(False, 0.0, 80.0, random.Random(7), jitter=3)
    b = build_features(False, 0.0, 80.0, random.Random(7), jitter=3)
    assert a == b


def test_jitter_stays_within_bounds():
    for seed in range(50):
        f = fixed_features(99, 1, 50, 50, random.Random(seed), jitter=5)
        for value in f.as_dict().values():
            assert 0.0 <= value <= 100.0


@pytest.mark.parametrize("raw,expected", [(0, 60.0), (59.9, 60.0), (75.24, 75.2), (99.9, 98.0), (100, 98.0)])
def test_clamp_confidence(raw, expected):
    assert clamp_confidence(raw) == pytest.approx(expected)
