import numpy as np
import pytest

from neurospell.services.models import CentroidDetector, SymbolClassifier, window_features


def _window(level: float, rows: int = 32, channels: int = 4) -> np.ndarray:
    ramp = np.linspace(-1.0, 1.0, rows)[:, None]
    return np.repeat(ramp, channels, axis=1) + level


def test_window_features_are_mean_and_std_per_channel():
    features = window_features(_window(3.0, channels=2))
    assert features.shape == (4,)
    assert features[:2] == pytest.approx([3.0, 3.0])


def test_window_features_reject_flat_input():
    with pytest.raises(ValueError):
        window_features(np.zeros(8))


def test_symbol_classifier_prefers_closest_label():
    model = SymbolClassifier.fit("abc", {"a": [_window(0.0)], "c": [_window(10.0), _window(12.0)]})
    proba = model.predict_proba(_window(10.5))

    assert model.labels == ["a", "c"]
    assert proba.shape == (3,)
    assert proba.sum() == pytest.approx(1.0)
    assert proba[1] == 0.0
    assert int(np.argmax(proba)) == 2


def test_symbol_classifier_with_single_label():
    model = SymbolClassifier.fit("xyz", {"y": [_window(1.0)]})
    np.testing.assert_allclose(model.predict_proba(_window(50.0)), [0.0, 1.0, 0.0])


def test_symbol_classifier_rejects_foreign_labels():
    with pytest.raises(ValueError):
        SymbolClassifier.fit("ab", {"z": [_window(0.0)]})


def test_symbol_classifier_rejects_channel_mismatch():
    model = SymbolClassifier.fit("ab", {"a": [_window(0.0)], "b": [_window(5.0)]})
    with pytest.raises(ValueError):
        model.predict_proba(_window(1.0, channels=6))


def test_detector_scores_decay_with_distance():
    detector = CentroidDetector.fit([_window(1.0), _window(2.0), _window(3.0)])
    near = detector.probability(_window(2.0))
    edge = detector.probability(_window(3.0))
    far = detector.probability(_window(9.0))

    assert near == pytest.approx(1.0)
    assert near > edge > far
    assert far < 0.7
    assert detector.examples == 3


def test_detector_needs_examples():
    with pytest.raises(ValueError):
        CentroidDetector.fit([])
