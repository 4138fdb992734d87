"""Reporting utilities for logitagg training runs."""

from .artifacts import model_summary, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = ["write_manifest", "model_summary", "JsonlSink", "CsvSink", "PlotAdapter"]
