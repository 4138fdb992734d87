import math

import numpy as np
import pytest

from logitagg.core.errors import EmptyTrainingSetError
from logitagg.core.strategies import LABEL_SCALINGS, UPDATE_RULES
from logitagg.core.types import TrainingConfig
from logitagg.training.trainer import Trainer


def _fit(features, labels, maxy, seed=5, **config):
    params = {"rate": 0.1, "ntrains": 1}
    params.update(config)
    trainer = Trainer(TrainingConfig(**params), np.random.default_rng(seed))
    return trainer.fit(np.asarray(features, dtype=float), np.asarray(labels, dtype=float), maxy)


def test_max_plus_one_rescales_labels():
    targets, scale = LABEL_SCALINGS.get("max_plus_one")(np.array([0.0, 1.0]), 1.0)
    assert targets.tolist() == [0.0, 0.5]
    assert scale == 2.0


def test_binary_scaling_maps_positive_labels_to_one():
    targets, scale = LABEL_SCALINGS.get("binary")(np.array([0.0, 2.0, 5.0, -1.0]), 5.0)
    assert targets.tolist() == [0.0, 1.0, 1.0, 0.0]
    assert scale == 1.0


def test_unknown_strategy_names_raise():
    with pytest.raises(KeyError):
        UPDATE_RULES.get("adam")
    with pytest.raises(KeyError):
        Trainer(TrainingConfig(rate=0.1, ntrains=1, labels="softmax"), np.random.default_rng(0))


def test_zero_epochs_returns_initial_weights():
    model = _fit([[1.0, 2.0, 3.0]], [4.0], 4.0, seed=3, ntrains=0)
    expected = np.random.default_rng(3).random(3)
    assert np.array_equal(model.weights, expected)
    assert model.scale == 5.0


def test_single_row_step_matches_hand_computation():
    x = np.array([1.0, 2.0, -1.0])
    w = np.random.default_rng(5).random(3)
    target = 3.0 / 4.0
    pred = 1.0 / (1.0 + math.exp(-float(np.dot(w, x))))
    step = 0.1 * (target - pred) * pred * (1 - pred)
    expected = w.copy()
    for _ in range(3):
        expected += step * x

    model = _fit([x], [3.0], 3.0, seed=5)
    assert np.allclose(model.weights, expected, rtol=1e-12, atol=0.0)
    assert model.scale == 4.0


def test_per_dimension_update_multiplies_step_by_dimensionality():
    # Likely defect carried over from the legacy trainer: each row's step is
    # applied once per feature.  Stored models were trained this way, so it
    # stays the default and "single" is the corrected rule.
    features = [[0.5, -1.0, 2.0, 1.0]]
    initial = np.random.default_rng(8).random(4)
    legacy = _fit(features, [1.0], 1.0, seed=8, update="per_dimension")
    fixed = _fit(features, [1.0], 1.0, seed=8, update="single")
    assert np.allclose(legacy.weights - initial, 4 * (fixed.weights - initial))
    assert not np.allclose(legacy.weights, fixed.weights)


def test_rows_are_visited_in_order():
    features = [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    labels = [0.0, 1.0, 2.0]
    forward = _fit(features, labels, 2.0, seed=2, ntrains=4)
    reverse = _fit(features[::-1], labels[::-1], 2.0, seed=2, ntrains=4)
    assert not np.array_equal(forward.weights, reverse.weights)


def test_callbacks_receive_epoch_loss():
    history = []

    class Capture:
        def on_epoch(self, epoch, metrics):
            history.append((epoch, metrics["loss"]))

    calls = []
    trainer = Trainer(
        TrainingConfig(rate=0.1, ntrains=5),
        np.random.default_rng(0),
        callbacks=[Capture(), lambda epoch, metrics: calls.append(epoch)],
    )
    trainer.fit(np.array([[1.0, 1.0], [-1.0, -1.0]]), np.array([0.0, 1.0]), 1.0)
    assert [epoch for epoch, _ in history] == [1, 2, 3, 4, 5]
    assert all(loss >= 0.0 for _, loss in history)
    assert calls == [1, 2, 3, 4, 5]


def test_nan_inputs_propagate_into_weights():
    model = _fit([[float("nan"), 1.0]], [1.0], 1.0)
    assert np.isnan(model.weights).all()


def test_empty_feature_matrix_is_rejected():
    trainer = Trainer(TrainingConfig(rate=0.1, ntrains=1), np.random.default_rng(0))
    with pytest.raises(EmptyTrainingSetError):
        trainer.fit(np.empty((0, 2)), np.empty(0), 0.0)
