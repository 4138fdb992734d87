import math
import sqlite3

import numpy as np
import pytest

from logitagg.core.codec import encode_model
from logitagg.core.errors import DimensionMismatchError, ModelDecodeError, ModelLookupError
from logitagg.core.types import Model
from logitagg.inference import (
    DirectoryModelStore,
    InMemoryModelStore,
    Predictor,
    SqliteModelStore,
    score,
)

MODEL = Model(weights=[0.5, -1.5, 2.0], scale=3.0)


def test_score_is_scaled_sigmoid_of_dot_product():
    value = score(MODEL, [1, 2, np.float32(0.5)])
    expected = 3.0 / (1.0 + math.exp(-(0.5 - 3.0 + 1.0)))
    assert value == pytest.approx(expected, rel=1e-12)


def test_score_is_bit_identical_across_calls():
    features = [0.1, 0.2, 0.3]
    assert score(MODEL, features) == score(MODEL, features)


def test_score_saturates_instead_of_overflowing():
    assert score(Model(weights=[1.0], scale=2.0), [-1e6]) == 0.0
    assert score(Model(weights=[1.0], scale=2.0), [1e6]) == 2.0


@pytest.mark.parametrize("features", [[1.0, 2.0], [1.0, 2.0, 3.0, 4.0], []])
def test_dimension_mismatch_is_explicit(features):
    with pytest.raises(DimensionMismatchError):
        score(MODEL, features)


def test_predictor_reads_store_on_every_call():
    store = InMemoryModelStore()
    store.save("m", encode_model(MODEL))
    predictor = Predictor(store)
    first = predictor.predict("m", [1.0, 1.0, 1.0])
    assert predictor.predict("m", [1.0, 1.0, 1.0]) == first

    store.save("m", encode_model(Model(weights=[0.0, 0.0, 0.0], scale=1.0)))
    assert predictor.predict("m", [1.0, 1.0, 1.0]) == 0.5


def test_missing_model_is_a_lookup_error():
    predictor = Predictor(InMemoryModelStore())
    with pytest.raises(ModelLookupError) as excinfo:
        predictor.predict("absent", [1.0])
    assert "absent" in str(excinfo.value)


def test_corrupt_model_is_a_decode_error():
    predictor = Predictor(InMemoryModelStore({"broken": '{"w": [1, 2]'}))
    with pytest.raises(ModelDecodeError):
        predictor.predict("broken", [1.0, 2.0])


def test_directory_store_round_trip(tmp_path):
    store = DirectoryModelStore(tmp_path / "models")
    path = store.save("iris", encode_model(MODEL))
    assert path == tmp_path / "models" / "iris.json"
    assert Predictor(store).load("iris") == MODEL
    with pytest.raises(ModelLookupError):
        store.load("other")
    with pytest.raises(ModelLookupError):
        store.load("../iris")


@pytest.mark.parametrize("name", ["", ".", "..", "../escape", "nested/model"])
def test_directory_store_rejects_unsafe_names_on_save(tmp_path, name):
    store = DirectoryModelStore(tmp_path / "models")
    with pytest.raises(ValueError, match="Invalid model name"):
        store.save(name, encode_model(MODEL))
    assert not (tmp_path / "models").exists()


def test_sqlite_store_round_trip():
    conn = sqlite3.connect(":memory:")
    store = SqliteModelStore(conn)
    store.save("model", encode_model(MODEL))
    assert Predictor(store).load("model") == MODEL
    store.save("model", encode_model(Model(weights=[1.0], scale=1.0)))
    assert conn.execute("select count(*) from model").fetchone()[0] == 1


def test_sqlite_store_lookup_failures():
    conn = sqlite3.connect(":memory:")
    store = SqliteModelStore(conn)
    with pytest.raises(ModelLookupError):
        store.load("missing")
    conn.execute("create table empty(config text)")
    with pytest.raises(ModelLookupError):
        store.load("empty")
    with pytest.raises(ModelLookupError):
        store.load("model; drop table empty")
    assert conn.execute("select count(*) from empty").fetchone()[0] == 0


def test_sqlite_store_reads_attached_schemas(tmp_path):
    conn = sqlite3.connect(":memory:")
    conn.execute(f"attach database '{tmp_path / 'iris.sqlite'}' as iris")
    store = SqliteModelStore(conn)
    store.save("iris.model", encode_model(MODEL))
    assert Predictor(store).predict("iris.model", [0.0, 0.0, 0.0]) == 1.5
