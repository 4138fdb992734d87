"""Core numerical primitives for logitagg."""

from . import activations, codec, errors, ingest, strategies, types

__all__ = ["activations", "codec", "errors", "ingest", "strategies", "types"]
