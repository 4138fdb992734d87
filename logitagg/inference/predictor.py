"""Score feature vectors against stored models."""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from ..core.activations import linear_score
from ..core.codec import decode_model
from ..core.errors import DimensionMismatchError
from ..core.ingest import to_vector
from ..core.types import Model
from .stores import ModelStore


def score(model: Model, features: Iterable[object]) -> float:
    """Return ``sigmoid(dot(w, x)) * scale`` for one feature vector."""

    x = to_vector(features)
    if x.shape[0] != model.dim:
        raise DimensionMismatchError(
            f"Model expects {model.dim} features, got {x.shape[0]}"
        )
    return linear_score(model.weights, x) * model.scale


class Predictor:
    """Resolve a model by name through ``store`` and score features.

    Nothing is cached between calls: every prediction reads and decodes the
    stored blob again, so concurrent callers never share state.
    """

    def __init__(self, store: ModelStore) -> None:
        self.store = store

    def load(self, name: str) -> Model:
        blob = self.store.load(name)
        return decode_model(blob)

    def predict(self, name: str, features: Iterable[object]) -> float:
        model = self.load(name)
        value = score(model, features)
        logger.debug("predict {} -> {}", name, value)
        return value


__all__ = ["Predictor", "score"]
