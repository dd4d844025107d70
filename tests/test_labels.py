"""Pure unit tests for app/detection/labels.py — normalize_labels()."""

from app.detection.labels import LabelScore, normalize_labels
from app.detection.sources import DEFAULT_FAKE_MARKERS, DEFAULT_REAL_MARKERS


def _normalize(labels):
    return normalize_labels(labels, DEFAULT_FAKE_MARKERS, DEFAULT_REAL_MARKERS)


def test_simple_fake_real_pair():
    scores = _normalize([LabelScore("Fake", 0.8), LabelScore("Real", 0.2)])
    assert scores.fake == 0.8
    assert scores.real == 0.2
    assert scores.inconclusive is False


def test_match_is_case_insensitive_substring():
    scores = _normalize([LabelScore("DEEPFAKE_FACE", 0.7), LabelScore("Genuine Photo", 0.3)])
    assert scores.fake == 0.7
    assert scores.real == 0.3


def test_max_scoring_label_wins_per_bucket():
    scores = _normalize([
        LabelScore("synthetic", 0.2),
        LabelScore("manipulated", 0.6),
        LabelScore("authentic", 0.1),
        LabelScore("real", 0.15),
    ])
    assert scores.fake == 0.6
    assert scores.real == 0.15


def test_unmatched_bucket_defaults_to_zero():
    scores = _normalize([LabelScore("Fake", 0.4)])
    assert scores.fake == 0.4
    assert scores.real == 0.0
    assert scores.inconclusive is False


def test_no_recognizable_label_is_inconclusive():
    scores = _normalize([LabelScore("cat", 0.9), LabelScore("dog", 0.1)])
    assert scores.fake == 0.0
    assert scores.real == 0.0
    assert scores.inconclusive is True


def test_empty_label_set_is_inconclusive():
    assert _normalize([]).inconclusive is True


def test_fake_marker_takes_precedence_within_one_label():
    scores = _normalize([LabelScore("fake_not_real", 0.55)])
    assert scores.fake == 0.55
    assert scores.real == 0.0


def test_scores_are_clamped_to_unit_interval():
    scores = _normalize([LabelScore("Fake", 1.7), LabelScore("Real", -0.2)])
    assert scores.fake == 1.0
    assert scores.real == 0.0


def test_source_specific_vocabulary():
    scores = normalize_labels(
        [LabelScore("artificial", 0.9), LabelScore("human", 0.1)],
        ("artificial",),
        ("human",),
    )
    assert scores.fake == 0.9
    assert scores.real == 0.1
