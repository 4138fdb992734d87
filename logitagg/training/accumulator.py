"""Stateful accumulate-then-finalize training aggregator."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
from loguru import logger

from ..core.codec import encode_model, parse_config
from ..core.errors import (
    AccumulatorConsumedError,
    DimensionMismatchError,
    EmptyTrainingSetError,
)
from ..core.ingest import split_row
from ..core.types import FeatureVector, Model, TrainingConfig
from .trainer import Trainer


class Accumulator:
    """Buffer labeled rows for one training invocation.

    The configuration blob is parsed on the first :meth:`accumulate` call
    only; later blobs are ignored.  :meth:`finalize` consumes the buffers
    exactly once.

    The generator used for weight initialisation is resolved at
    finalisation time from, in order: ``rng``, ``seed``, the ``seed`` field
    of the configuration blob, fresh OS entropy.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self._seed = seed
        self._rng = rng
        self._callbacks = list(callbacks or [])
        self._config: TrainingConfig | None = None
        self._features: list[FeatureVector] = []
        self._labels: list[float] = []
        self._maxy: float | None = None
        self._consumed = False

    @property
    def config(self) -> TrainingConfig | None:
        return self._config

    @property
    def features(self) -> tuple[FeatureVector, ...]:
        return tuple(self._features)

    @property
    def labels(self) -> tuple[float, ...]:
        return tuple(self._labels)

    @property
    def maxy(self) -> float | None:
        return self._maxy

    @property
    def rows(self) -> int:
        return len(self._labels)

    def accumulate(self, config_blob: str | bytes | None, row: Iterable[object]) -> None:
        """Buffer one row; its last value is the label."""

        if self._consumed:
            raise AccumulatorConsumedError("Accumulator has already been finalised")
        x, y = split_row(row)

        if self._config is None:
            self._config = parse_config(config_blob)  # type: ignore[arg-type]
            self._maxy = y
            logger.debug("Started training invocation with {}", self._config)
        else:
            expected = self._features[0].shape[0]
            if x.shape[0] != expected:
                raise DimensionMismatchError(
                    f"Row {len(self._features)} has {x.shape[0]} features, expected {expected}"
                )
            if y > self._maxy:  # type: ignore[operator]
                self._maxy = y

        self._features.append(x)
        self._labels.append(y)

    def finalize(self) -> Model:
        """Train on the buffered rows and return the model."""

        if self._consumed:
            raise AccumulatorConsumedError("Accumulator has already been finalised")
        if self._config is None or not self._features:
            raise EmptyTrainingSetError("Cannot finalise a training run without rows")
        self._consumed = True

        features = np.vstack(self._features)
        labels = np.asarray(self._labels, dtype=np.float64)
        maxy = float(self._maxy)  # type: ignore[arg-type]
        self._features, self._labels = [], []

        trainer = Trainer(self._config, self._resolve_rng(), callbacks=self._callbacks)
        return trainer.fit(features, labels, maxy)

    def _resolve_rng(self) -> np.random.Generator:
        if self._rng is not None:
            return self._rng
        seed = self._seed if self._seed is not None else self._config.seed  # type: ignore[union-attr]
        return np.random.default_rng(seed)


def train(
    rows: Iterable[Iterable[object]],
    config_blob: str | bytes,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    callbacks: Sequence[object] | None = None,
) -> Model:
    """Accumulate every row of ``rows`` and finalise."""

    accumulator = Accumulator(seed=seed, rng=rng, callbacks=callbacks)
    for row in rows:
        accumulator.accumulate(config_blob, row)
    return accumulator.finalize()


def train_blob(
    rows: Iterable[Iterable[object]],
    config_blob: str | bytes,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> str:
    """Like :func:`train` but return the encoded model blob."""

    return encode_model(train(rows, config_blob, seed=seed, rng=rng))


__all__ = ["Accumulator", "train", "train_blob"]
