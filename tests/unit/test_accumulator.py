import numpy as np
import pytest

from logitagg.core.errors import (
    AccumulatorConsumedError,
    ConfigParseError,
    DimensionMismatchError,
    EmptyTrainingSetError,
    FeatureTypeError,
)
from logitagg.training.accumulator import Accumulator, train

CONFIG = '{"rate": 0.1, "ntrains": 3}'


def test_rows_are_buffered_in_call_order_and_later_configs_ignored():
    rows = [(1, 2, 0), (3, 4, 1), (5, 6, 0), (7, 8, 2)]
    acc = Accumulator(seed=0)
    acc.accumulate(CONFIG, rows[0])
    for row in rows[1:]:
        # Only the first blob is parsed.
        acc.accumulate("this is not json", row)
    assert acc.rows == 4
    assert [x.tolist() for x in acc.features] == [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0], [7.0, 8.0]]
    assert acc.labels == (0.0, 1.0, 0.0, 2.0)
    assert acc.config.rate == 0.1 and acc.config.ntrains == 3


def test_running_maximum_label():
    acc = Accumulator(seed=0)
    for label in [2, 7, 3, 7]:
        acc.accumulate(CONFIG, (1.0, label))
    assert acc.maxy == 7.0


def test_first_label_seeds_maximum_even_when_negative():
    acc = Accumulator(seed=0)
    acc.accumulate(CONFIG, (1.0, -5))
    acc.accumulate(CONFIG, (1.0, -7))
    assert acc.maxy == -5.0


def test_bad_first_config_leaves_no_state():
    acc = Accumulator(seed=0)
    with pytest.raises(ConfigParseError):
        acc.accumulate("{rate: fast}", (1.0, 2.0, 1.0))
    assert acc.rows == 0
    assert acc.config is None
    assert acc.maxy is None

    acc.accumulate(CONFIG, (1.0, 2.0, 4.0))
    assert acc.rows == 1
    assert acc.maxy == 4.0


def test_dimension_mismatch_is_rejected_without_mutation():
    acc = Accumulator(seed=0)
    acc.accumulate(CONFIG, (1.0, 2.0, 1.0))
    with pytest.raises(DimensionMismatchError):
        acc.accumulate(CONFIG, (1.0, 2.0, 3.0, 1.0))
    assert acc.rows == 1


def test_rows_need_a_feature_and_a_label():
    acc = Accumulator(seed=0)
    with pytest.raises(DimensionMismatchError):
        acc.accumulate(CONFIG, (1.0,))
    assert acc.config is None


def test_non_numeric_row_values_are_rejected():
    acc = Accumulator(seed=0)
    with pytest.raises(FeatureTypeError):
        acc.accumulate(CONFIG, (1.0, "two", 1.0))
    assert acc.rows == 0


def test_finalize_without_rows_fails():
    with pytest.raises(EmptyTrainingSetError):
        Accumulator(seed=0).finalize()


def test_accumulator_is_consumed_by_finalize():
    acc = Accumulator(seed=0)
    acc.accumulate(CONFIG, (1.0, 2.0, 1.0))
    model = acc.finalize()
    assert model.dim == 2
    with pytest.raises(AccumulatorConsumedError):
        acc.finalize()
    with pytest.raises(AccumulatorConsumedError):
        acc.accumulate(CONFIG, (1.0, 2.0, 1.0))


def test_seed_sources_are_reproducible():
    rows = [(1.0, -1.0, 0.0), (-1.0, 1.0, 1.0)]
    first = train(rows, CONFIG, seed=11)
    second = train(rows, CONFIG, seed=11)
    assert first == second

    from_config = train(rows, '{"rate": 0.1, "ntrains": 3, "seed": 11}')
    assert from_config == first

    injected = train(rows, CONFIG, rng=np.random.default_rng(11))
    assert injected == first

    other = train(rows, CONFIG, seed=12)
    assert other != first


def test_explicit_seed_wins_over_config_seed():
    rows = [(1.0, -1.0, 0.0), (-1.0, 1.0, 1.0)]
    blob = '{"rate": 0.1, "ntrains": 3, "seed": 99}'
    assert train(rows, blob, seed=1) == train(rows, CONFIG, seed=1)
