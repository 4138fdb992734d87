"""Stateless scoring against stored models."""

from .predictor import Predictor, score
from .stores import DirectoryModelStore, InMemoryModelStore, ModelStore, SqliteModelStore

__all__ = [
    "Predictor",
    "score",
    "ModelStore",
    "InMemoryModelStore",
    "DirectoryModelStore",
    "SqliteModelStore",
]
