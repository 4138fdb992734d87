"""Pipeline assembly: CSV rows -> accumulator -> model blob plus run artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

import yaml
from loguru import logger

from ..core.codec import encode_config, encode_model, parse_config
from ..core.types import RunResult, TrainingConfig
from ..data.rows import fixture_path, load_frame
from ..inference.stores import DirectoryModelStore
from ..reporting.artifacts import model_summary, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .accumulator import Accumulator

_PRESETS: Dict[str, Mapping[str, object]] = {
    "quadrants": {
        "data": {"fixture": "quadrants.csv", "label_col": "label"},
        "model": {"name": "quadrants"},
        "train": {
            "rate": 0.1,
            "ntrains": 50,
            "seed": 0,
            "run_dir": "runs/quadrants",
            "enable_plots": False,
        },
    },
    "flowers-legacy": {
        "data": {
            "fixture": "flowers.csv",
            "label_col": "species",
            "encode_labels": True,
        },
        "model": {"name": "flowers"},
        "train": {
            "rate": 0.1,
            "ntrains": 200,
            "seed": 7,
            "labels": "max_plus_one",
            "update": "per_dimension",
            "run_dir": "runs/flowers-legacy",
            "enable_plots": False,
        },
    },
    "flowers-binary": {
        "data": {
            "fixture": "flowers.csv",
            "label_col": "species",
            "encode_labels": True,
        },
        "model": {"name": "flowers"},
        "train": {
            "rate": 0.1,
            "ntrains": 200,
            "seed": 7,
            "labels": "binary",
            "update": "single",
            "run_dir": "runs/flowers-binary",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def training_config(train_cfg: Mapping[str, object], name: str = "") -> TrainingConfig:
    """Build and validate a :class:`TrainingConfig` from a ``train`` section."""

    blob = json.dumps(
        {
            "name": name,
            "rate": train_cfg.get("rate"),
            "ntrains": train_cfg.get("ntrains"),
            "labels": train_cfg.get("labels", "max_plus_one"),
            "update": train_cfg.get("update", "per_dimension"),
            "seed": train_cfg.get("seed"),
        }
    )
    return parse_config(blob)


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train one model from a CSV and write it with its run artifacts."""

    data_cfg = dict(config.get("data", {}))  # type: ignore[arg-type]
    model_cfg = dict(config.get("model", {}))  # type: ignore[arg-type]
    train_cfg = dict(config.get("train", {}))  # type: ignore[arg-type]

    name = str(model_cfg.get("name", "model"))
    train_config = training_config(train_cfg, name=name)
    config_blob = encode_config(train_config)

    csv_path = data_cfg.get("csv_path") or fixture_path(str(data_cfg.get("fixture", "quadrants.csv")))
    frame = load_frame(
        csv_path,  # type: ignore[arg-type]
        label_col=str(data_cfg.get("label_col", "label")),
        features=data_cfg.get("features"),  # type: ignore[arg-type]
        encode_labels=bool(data_cfg.get("encode_labels", False)),
    )

    run_dir = _resolve_run_dir(train_cfg, name)
    run_dir.mkdir(parents=True, exist_ok=True)
    _log_startup_summary(name, frame.feature_cols, len(frame), train_config)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=train_config.seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        feature_names=frame.feature_cols,
    )

    accumulator = Accumulator(callbacks=[jsonl, csv_sink, plots])
    for row in frame.iter_rows():
        accumulator.accumulate(config_blob, row)
    rows = accumulator.rows
    model = accumulator.finalize()
    plots.close(model)

    model_path = DirectoryModelStore(run_dir).save(name, encode_model(model))
    resolved = _safe_config(config)
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=train_config,
        model=model_summary(name, model, model_path),
        rows=rows,
        data_provenance=frame.provenance,
        final_loss=plots.final_loss,
    )
    logger.info("Wrote model {} to {}", name, model_path)

    return RunResult(
        rows=rows,
        epochs=train_config.ntrains,
        model_path=str(model_path),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], name: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / name


def _safe_config(config: Mapping[str, object]) -> Mapping[str, object]:
    return json.loads(json.dumps(config, default=str))


def _log_startup_summary(
    name: str,
    feature_cols: list[str],
    rows: int,
    config: TrainingConfig,
) -> None:
    logger.info("=== logitagg run ===")
    logger.info("Model         : {}", name)
    logger.info("Features      : {}", feature_cols)
    logger.info("Rows          : {}", rows)
    logger.info("Rate / epochs : {} / {}", config.rate, config.ntrains)
    logger.info("Labels        : {}", config.labels)
    logger.info("Update        : {}", config.update)


__all__ = ["run_pipeline", "load_preset", "presets", "read_config_file", "training_config"]
