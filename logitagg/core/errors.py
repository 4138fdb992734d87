"""Exception taxonomy shared by training and prediction."""

from __future__ import annotations


class LogitAggError(Exception):
    """Base class for every error raised by logitagg."""


class ConfigParseError(LogitAggError, ValueError):
    """The training configuration blob could not be parsed or validated."""


class ModelDecodeError(LogitAggError, ValueError):
    """A stored model blob is malformed."""


class ModelLookupError(LogitAggError, KeyError):
    """No stored model exists for the requested name."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class DimensionMismatchError(LogitAggError, ValueError):
    """A feature vector does not have the expected number of values."""


class EmptyTrainingSetError(LogitAggError, ValueError):
    """Finalisation was requested before any row was accumulated."""


class FeatureTypeError(LogitAggError, TypeError):
    """A row value is not a real number."""


class AccumulatorConsumedError(LogitAggError, RuntimeError):
    """The accumulator was used after it had been finalised."""


__all__ = [
    "LogitAggError",
    "ConfigParseError",
    "ModelDecodeError",
    "ModelLookupError",
    "DimensionMismatchError",
    "EmptyTrainingSetError",
    "FeatureTypeError",
    "AccumulatorConsumedError",
]
