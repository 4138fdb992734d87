"""Activation utilities for logitagg."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(v: float) -> float:
    """Return the logistic function ``1 / (1 + exp(-v))`` of a scalar.

    Large negative inputs saturate to ``0.0`` instead of overflowing; NaN
    propagates.
    """

    with np.errstate(over="ignore"):
        return float(1.0 / (1.0 + np.exp(-np.float64(v))))


def linear_score(weights: Array, x: Array) -> float:
    """Return ``sigmoid(dot(weights, x))``."""

    return sigmoid(float(np.dot(weights, x)))
