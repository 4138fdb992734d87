"""Expose training and prediction as SQLite user functions.

After :func:`register`::

    insert into model
    select logistic_regression_train('{"rate": 0.1, "ntrains": 5000}',
                                     sepal_length, sepal_width, class)
    from train;

    select logistic_regression_predict('model', sepal_length, sepal_width)
    from test;

The sqlite3 module reports exceptions raised inside user functions as
``sqlite3.OperationalError``; the typed error is logged before it is
re-raised.
"""

from __future__ import annotations

import sqlite3
from typing import Callable

from loguru import logger

from .core.codec import encode_model
from .core.errors import LogitAggError
from .inference.predictor import Predictor
from .inference.stores import ModelStore, SqliteModelStore
from .training.accumulator import Accumulator

TRAIN_FUNCTION = "logistic_regression_train"
PREDICT_FUNCTION = "logistic_regression_predict"


def _aggregate_factory(seed: int | None) -> type:
    class TrainAggregate:
        """One instance per aggregate invocation, so state is never shared."""

        def __init__(self) -> None:
            self._accumulator = Accumulator(seed=seed)

        def step(self, config, *args) -> None:
            try:
                self._accumulator.accumulate(config, args)
            except LogitAggError as exc:
                logger.error("{} step failed: {}", TRAIN_FUNCTION, exc)
                raise

        def finalize(self) -> str:
            try:
                return encode_model(self._accumulator.finalize())
            except LogitAggError as exc:
                logger.error("{} finalize failed: {}", TRAIN_FUNCTION, exc)
                raise

    return TrainAggregate


def _predict_function(predictor: Predictor) -> Callable[..., float]:
    def predict(name: str, *args) -> float:
        try:
            return predictor.predict(name, args)
        except LogitAggError as exc:
            logger.error("{}({!r}) failed: {}", PREDICT_FUNCTION, name, exc)
            raise

    return predict


def register(
    conn: sqlite3.Connection,
    *,
    seed: int | None = None,
    store: ModelStore | None = None,
) -> None:
    """Register both functions on ``conn``.

    ``seed`` fixes weight initialisation for every training invocation on the
    connection; by default each invocation draws fresh entropy.  ``store``
    defaults to reading model tables from ``conn`` itself.
    """

    conn.create_aggregate(TRAIN_FUNCTION, -1, _aggregate_factory(seed))
    predictor = Predictor(store or SqliteModelStore(conn))
    conn.create_function(PREDICT_FUNCTION, -1, _predict_function(predictor))


def connect(database: str = ":memory:", **kwargs) -> sqlite3.Connection:
    """Open a connection with both functions registered."""

    seed = kwargs.pop("seed", None)
    conn = sqlite3.connect(database, **kwargs)
    register(conn, seed=seed)
    return conn


__all__ = ["TRAIN_FUNCTION", "PREDICT_FUNCTION", "register", "connect"]
