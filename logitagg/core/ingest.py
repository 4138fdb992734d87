"""Row value ingestion: widen heterogeneous numbers to float64."""

from __future__ import annotations

import numbers
from typing import Iterable

import numpy as np

from .errors import DimensionMismatchError, FeatureTypeError
from .types import FeatureVector, frozen_vector


def to_float(value: object) -> float:
    """Widen a real number of any width to a Python float.

    Accepts Python ``int``/``float``/``bool`` and every numpy integer and
    floating scalar.  Anything else raises :class:`FeatureTypeError`.
    """

    if isinstance(value, (numbers.Real, np.integer, np.floating)):
        return float(value)
    raise FeatureTypeError(
        f"Expected a real number, got {type(value).__name__}: {value!r}"
    )


def to_floats(values: Iterable[object]) -> list[float]:
    return [to_float(v) for v in values]


def to_vector(values: Iterable[object]) -> FeatureVector:
    """Return ``values`` as a read-only float64 feature vector."""

    return frozen_vector(to_floats(values))


def split_row(row: Iterable[object]) -> tuple[FeatureVector, float]:
    """Split a training row into its features and trailing label."""

    values = to_floats(row)
    if len(values) < 2:
        raise DimensionMismatchError(
            f"A training row needs at least one feature and a label, got {len(values)} value(s)"
        )
    return frozen_vector(values[:-1]), values[-1]


__all__ = ["to_float", "to_floats", "to_vector", "split_row"]
