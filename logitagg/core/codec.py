"""Text codecs for the two blobs exchanged with the host.

Configuration blob (first training row only)::

    {"name": "iris", "rate": 0.1, "ntrains": 5000}

optionally with ``"labels"``, ``"update"`` and ``"seed"``.

Model blob (persisted by the host)::

    {"w": [0.12, -0.7, ...], "m": 3.0}
"""

from __future__ import annotations

import json
import numbers
from dataclasses import asdict
from typing import Any, Mapping

from .errors import ConfigParseError, ModelDecodeError
from .strategies import LABEL_SCALINGS, UPDATE_RULES
from .types import Model, TrainingConfig


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _load_object(blob: str | bytes, error: type[Exception], what: str) -> Mapping[str, Any]:
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise error(f"Malformed {what} blob: {exc}") from exc
    if not isinstance(data, Mapping):
        raise error(f"{what.capitalize()} blob must decode to an object, got {type(data).__name__}")
    return data


def parse_config(blob: str | bytes) -> TrainingConfig:
    """Parse and validate a configuration blob."""

    data = _load_object(blob, ConfigParseError, "configuration")

    rate = data.get("rate")
    if not _is_number(rate) or not rate > 0:
        raise ConfigParseError(f"'rate' must be a positive number, got {rate!r}")
    ntrains = data.get("ntrains")
    if not isinstance(ntrains, int) or isinstance(ntrains, bool) or ntrains < 0:
        raise ConfigParseError(f"'ntrains' must be a non-negative integer, got {ntrains!r}")

    name = data.get("name", "")
    if not isinstance(name, str):
        raise ConfigParseError(f"'name' must be a string, got {name!r}")
    labels = data.get("labels", "max_plus_one")
    if labels not in LABEL_SCALINGS:
        available = ", ".join(LABEL_SCALINGS.names())
        raise ConfigParseError(f"Unknown label scaling {labels!r}. Available: {available}")
    update = data.get("update", "per_dimension")
    if update not in UPDATE_RULES:
        available = ", ".join(UPDATE_RULES.names())
        raise ConfigParseError(f"Unknown update rule {update!r}. Available: {available}")
    seed = data.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool) or seed < 0):
        raise ConfigParseError(f"'seed' must be a non-negative integer, got {seed!r}")

    try:
        rate = float(rate)
    except OverflowError as exc:
        raise ConfigParseError(f"'rate' does not fit in a float: {exc}") from exc

    return TrainingConfig(
        rate=rate,
        ntrains=ntrains,
        name=name,
        labels=labels,
        update=update,
        seed=seed,
    )


def encode_config(config: TrainingConfig) -> str:
    payload = asdict(config)
    if payload["seed"] is None:
        payload.pop("seed")
    return json.dumps(payload)


def encode_model(model: Model) -> str:
    """Serialise ``model`` as ``{"w": [...], "m": scale}``."""

    return json.dumps({"w": [float(v) for v in model.weights], "m": float(model.scale)})


def decode_model(blob: str | bytes) -> Model:
    """Inverse of :func:`encode_model`; never substitutes defaults."""

    data = _load_object(blob, ModelDecodeError, "model")
    if "w" not in data or "m" not in data:
        missing = ", ".join(key for key in ("w", "m") if key not in data)
        raise ModelDecodeError(f"Model blob is missing field(s): {missing}")
    weights = data["w"]
    if not isinstance(weights, list):
        raise ModelDecodeError(f"Model field 'w' must be a list, got {type(weights).__name__}")
    for idx, value in enumerate(weights):
        if not _is_number(value):
            raise ModelDecodeError(f"Model weight {idx} is not a number: {value!r}")
    scale = data["m"]
    if not _is_number(scale):
        raise ModelDecodeError(f"Model field 'm' must be a number, got {scale!r}")
    try:
        return Model(weights=weights, scale=scale)
    except (OverflowError, ValueError) as exc:
        raise ModelDecodeError(f"Model blob holds a value that does not fit in a float: {exc}") from exc


__all__ = ["parse_config", "encode_config", "encode_model", "decode_model"]
