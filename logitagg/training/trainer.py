"""Per-row gradient descent over an accumulated training set."""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np
from loguru import logger

from ..core.activations import linear_score
from ..core.errors import DimensionMismatchError, EmptyTrainingSetError
from ..core.strategies import LABEL_SCALINGS, UPDATE_RULES
from ..core.types import Array, Model, TrainingConfig


class Trainer:
    """Fit a logistic weight vector with one pass per epoch over the rows.

    Rows are visited in accumulation order and never shuffled.  Each row
    contributes ``rate * perr * pred * (1 - pred) * x`` where
    ``pred = sigmoid(w . x)`` and ``perr = y - pred``; how that step is
    applied to the weights is decided by the configured update rule.
    """

    def __init__(
        self,
        config: TrainingConfig,
        rng: np.random.Generator,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.callbacks = list(callbacks or [])
        self.label_scaling = LABEL_SCALINGS.get(config.labels)
        self.update_rule = UPDATE_RULES.get(config.update)

    def fit(self, features: Array, labels: Array, maxy: float) -> Model:
        features = np.asarray(features, dtype=np.float64)
        labels = np.asarray(labels, dtype=np.float64).reshape(-1)
        if features.ndim != 2 or features.shape[0] == 0:
            raise EmptyTrainingSetError("Cannot finalise a training run without rows")
        if features.shape[0] != labels.shape[0]:
            raise DimensionMismatchError(
                f"Got {features.shape[0]} feature rows but {labels.shape[0]} labels"
            )

        rows, dim = features.shape
        weights = self.rng.random(dim)
        targets, scale = self.label_scaling(labels, float(maxy))
        rate = self.config.rate
        logger.info(
            "Training on {} rows x {} features for {} epochs (rate={}, labels={}, update={})",
            rows,
            dim,
            self.config.ntrains,
            rate,
            self.label_scaling.name,
            self.update_rule.name,
        )

        for epoch in range(1, self.config.ntrains + 1):
            sq_err = 0.0
            for x, y in zip(features, targets):
                pred = linear_score(weights, x)
                perr = y - pred
                sq_err += perr * perr
                step = rate * perr * pred * (1 - pred)
                dx = step * x
                self.update_rule(weights, dx)
            metrics = {"loss": float(sq_err / rows)}
            logger.debug("epoch {} loss={:.6f}", epoch, metrics["loss"])
            self._emit_epoch(epoch, metrics)

        logger.info("Finished training; model scale={}", scale)
        return Model(weights=weights, scale=scale)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer"]
