"""Row sources for training and prediction."""

from .rows import FIXTURE_DIR, RowFrame, fixture_path, load_frame

__all__ = ["FIXTURE_DIR", "RowFrame", "fixture_path", "load_frame"]
