"""Core typing contracts for logitagg."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

Array = np.ndarray
FeatureVector = np.ndarray


def frozen_vector(values: Sequence[float] | Array) -> Array:
    """Return ``values`` as a read-only float64 vector."""

    out = np.array(values, dtype=np.float64).reshape(-1)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class TrainingConfig:
    """Tuning surface of one training invocation.

    Attributes
    ----------
    rate:
        Learning rate, strictly positive.
    ntrains:
        Number of full passes over the accumulated rows.
    name:
        Advisory label carried by the configuration blob; never read by the
        algorithm.
    labels:
        Name of the label scaling registered in
        :mod:`logitagg.core.strategies`.
    update:
        Name of the weight update rule registered in
        :mod:`logitagg.core.strategies`.
    seed:
        Optional seed for weight initialisation when the caller does not
        inject a generator.
    """

    rate: float
    ntrains: int
    name: str = ""
    labels: str = "max_plus_one"
    update: str = "per_dimension"
    seed: int | None = None


@dataclass(frozen=True, eq=False)
class Model:
    """Trained weight vector plus the label scale used at prediction time."""

    weights: Array
    scale: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", frozen_vector(self.weights))
        object.__setattr__(self, "scale", float(self.scale))

    @property
    def dim(self) -> int:
        return int(self.weights.shape[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self.scale == other.scale and np.array_equal(self.weights, other.weights)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`logitagg.training.pipelines.run_pipeline`."""

    rows: int
    epochs: int
    model_path: str
    metrics_path: str
    manifest_path: str
