"""Training aggregation, gradient descent and pipelines."""

from .accumulator import Accumulator, train, train_blob
from .trainer import Trainer

__all__ = ["Accumulator", "Trainer", "train", "train_blob"]
