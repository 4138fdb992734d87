"""CSV row sources feeding the accumulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

FIXTURE_DIR = Path(__file__).resolve().parent / "_fixtures"


def fixture_path(name: str) -> Path:
    return FIXTURE_DIR / name


@dataclass(frozen=True)
class RowFrame:
    """A numeric frame whose last column is the label."""

    frame: pd.DataFrame
    feature_cols: list[str]
    label_col: str | None
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return int(self.frame.shape[0])

    def iter_rows(self) -> Iterator[tuple[float, ...]]:
        """Yield each row as plain floats in column order."""

        values = self.frame.to_numpy(dtype=np.float64)
        for row in values:
            yield tuple(float(v) for v in row)


def load_frame(
    csv_path: str | Path,
    *,
    label_col: str | None = "label",
    features: Sequence[str] | None = None,
    encode_labels: bool = False,
) -> RowFrame:
    """Read ``csv_path`` and order its columns as ``features + [label_col]``.

    ``label_col=None`` selects feature columns only (prediction input).
    ``features`` defaults to every other column in file order.  String labels
    require ``encode_labels=True``, which maps them to ``0..k-1`` with
    :class:`sklearn.preprocessing.LabelEncoder`.
    """

    path = Path(csv_path)
    df = pd.read_csv(path)
    if label_col is not None and label_col not in df.columns:
        raise KeyError(f"Label column {label_col!r} not found in CSV")
    if features is None:
        feature_cols = [c for c in df.columns if c != label_col]
    else:
        feature_cols = list(features)
        missing = [c for c in feature_cols if c not in df.columns]
        if missing:
            raise KeyError(f"Feature column(s) not found in CSV: {', '.join(missing)}")

    provenance: Dict[str, Any] = {
        "path": str(path),
        "label_col": label_col,
        "features": feature_cols,
    }
    frame = df[feature_cols].astype(np.float64)
    if label_col is not None:
        labels = df[label_col]
        if encode_labels:
            encoder = LabelEncoder()
            labels = pd.Series(encoder.fit_transform(labels), index=df.index)
            provenance["classes"] = [str(c) for c in encoder.classes_]
        frame = frame.assign(**{label_col: labels.astype(np.float64)})
    return RowFrame(frame=frame, feature_cols=feature_cols, label_col=label_col, provenance=provenance)


__all__ = ["RowFrame", "load_frame", "fixture_path", "FIXTURE_DIR"]
