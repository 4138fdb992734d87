"""Label scalings and weight update rules used by the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, TypeVar

import numpy as np

from .types import Array

# labels, maxy -> (targets, model scale)
LabelScaleFn = Callable[[Array, float], tuple[Array, float]]
# weights (updated in place), step
UpdateFn = Callable[[Array, Array], None]

F = TypeVar("F")


@dataclass(frozen=True)
class LabelScaling:
    """Map raw labels to training targets and the scale stored on the model."""

    name: str
    fn: LabelScaleFn

    def __call__(self, labels: Array, maxy: float) -> tuple[Array, float]:
        return self.fn(labels, maxy)


@dataclass(frozen=True)
class UpdateRule:
    """Apply one row's step ``dx`` to the weight vector in place."""

    name: str
    fn: UpdateFn

    def __call__(self, weights: Array, dx: Array) -> None:
        self.fn(weights, dx)


class StrategyRegistry(Generic[F]):
    """Name -> strategy lookup with a readable error for unknown names."""

    def __init__(self, kind: str, wrapper: Callable[[str, Callable], F]) -> None:
        self.kind = kind
        self._wrapper = wrapper
        self._registry: Dict[str, F] = {}

    def register(self, name: str, fn: Callable) -> None:
        self._registry[name] = self._wrapper(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def get(self, name: str) -> F:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown {self.kind} {name!r}. Available: {available}")
        return self._registry[name]


LABEL_SCALINGS: StrategyRegistry[LabelScaling] = StrategyRegistry("label scaling", LabelScaling)
UPDATE_RULES: StrategyRegistry[UpdateRule] = StrategyRegistry("update rule", UpdateRule)


def _max_plus_one(labels: Array, maxy: float) -> tuple[Array, float]:
    # Lossy: the largest label maps just below 1.
    scale = maxy + 1
    return labels / scale, scale


def _binary(labels: Array, maxy: float) -> tuple[Array, float]:
    return (labels > 0).astype(np.float64), 1.0


def _per_dimension(weights: Array, dx: Array) -> None:
    # Legacy rule: the step is added once per feature dimension.
    for _ in range(dx.shape[0]):
        weights += dx


def _single(weights: Array, dx: Array) -> None:
    weights += dx


LABEL_SCALINGS.register("max_plus_one", _max_plus_one)
LABEL_SCALINGS.register("binary", _binary)
UPDATE_RULES.register("per_dimension", _per_dimension)
UPDATE_RULES.register("single", _single)

__all__ = [
    "LabelScaling",
    "UpdateRule",
    "StrategyRegistry",
    "LABEL_SCALINGS",
    "UPDATE_RULES",
]
