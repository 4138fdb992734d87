"""Run manifest describing how a model blob was produced."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Any, Dict, Mapping

import numpy as np

from ..core.types import Model, TrainingConfig


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def model_summary(name: str, model: Model, path: str | Path | None = None) -> Dict[str, Any]:
    """Describe a trained model: its weights and the score range it predicts in."""

    weights = model.weights
    return {
        "name": name,
        "path": None if path is None else str(path),
        "dim": model.dim,
        "scale": model.scale,
        "score_range": [0.0, model.scale],
        "weights": [float(w) for w in weights],
        "weight_norm": float(np.linalg.norm(weights)) if weights.size else 0.0,
    }


def write_manifest(
    path: str | Path,
    *,
    config: TrainingConfig,
    model: Mapping[str, Any],
    rows: int,
    data_provenance: Mapping[str, object],
    final_loss: float | None = None,
) -> str:
    """Write ``manifest.json`` for one training invocation.

    The manifest records the validated :class:`TrainingConfig` rather than the
    raw preset, so ``strategies`` always names the label scaling and update
    rule that actually ran.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "training": {
            "rate": config.rate,
            "ntrains": config.ntrains,
            "seed": config.seed,
            "rows": int(rows),
            "final_loss": final_loss,
        },
        "strategies": {"labels": config.labels, "update": config.update},
        "model": dict(model),
        "data": dict(data_provenance),
        "environment": {"python": platform.python_version(), "numpy": np.__version__},
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["git_sha", "model_summary", "write_manifest"]
