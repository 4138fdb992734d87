"""logitagg public API."""

from loguru import logger

from .core import activations, codec, errors, types  # noqa: F401
from .core.codec import decode_model, encode_config, encode_model, parse_config
from .core.errors import (
    AccumulatorConsumedError,
    ConfigParseError,
    DimensionMismatchError,
    EmptyTrainingSetError,
    FeatureTypeError,
    LogitAggError,
    ModelDecodeError,
    ModelLookupError,
)
from .core.types import Model, TrainingConfig
from .inference import DirectoryModelStore, InMemoryModelStore, Predictor, SqliteModelStore, score
from .training import Accumulator, Trainer, train, train_blob
from .training.pipelines import load_preset, presets, run_pipeline

logger.disable("logitagg")

__all__ = [
    "Accumulator",
    "Trainer",
    "Predictor",
    "Model",
    "TrainingConfig",
    "train",
    "train_blob",
    "score",
    "parse_config",
    "encode_config",
    "encode_model",
    "decode_model",
    "InMemoryModelStore",
    "DirectoryModelStore",
    "SqliteModelStore",
    "LogitAggError",
    "ConfigParseError",
    "ModelDecodeError",
    "ModelLookupError",
    "DimensionMismatchError",
    "EmptyTrainingSetError",
    "FeatureTypeError",
    "AccumulatorConsumedError",
    "load_preset",
    "presets",
    "run_pipeline",
]
