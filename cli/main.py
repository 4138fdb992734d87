"""Command line entry point for logitagg training and prediction."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Iterable

from loguru import logger

from logitagg.core.errors import LogitAggError
from logitagg.data.rows import load_frame
from logitagg.inference import DirectoryModelStore, Predictor
from logitagg.logger import configure_logging
from logitagg.training import pipelines


def _format_result(result) -> str:
    payload = {
        "rows": result.rows,
        "epochs": result.epochs,
        "model": result.model_path,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOGITAGG_LOG_LEVEL", "WARNING"),
        help="Log level for stderr output (env: LOGITAGG_LOG_LEVEL)",
    )
    parser.add_argument("--log-dir", type=Path, help="Also write daily log files here")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    sub = parser.add_subparsers(dest="command")

    train = sub.add_parser("train", help="Train a model and write run artifacts")
    train.add_argument(
        "--preset",
        choices=preset_names,
        default="quadrants",
        help="Preset configuration to execute",
    )
    train.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    train.add_argument("--csv-path", help="CSV file with feature columns and a label column")
    train.add_argument("--label-col", help="Label column name")
    train.add_argument("--features", help="Comma separated feature columns (default: all others)")
    train.add_argument(
        "--encode-labels",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Map string labels to 0..k-1",
    )
    train.add_argument("--name", help="Model name (file stem of the written model)")
    train.add_argument("--rate", type=float, help="Learning rate")
    train.add_argument("--ntrains", type=int, help="Number of epochs")
    train.add_argument("--seed", type=int, help="Seed for weight initialisation")
    train.add_argument("--labels", help="Label scaling (max_plus_one, binary)")
    train.add_argument("--update", help="Update rule (per_dimension, single)")
    train.add_argument("--run-dir", help="Directory receiving the model and artifacts")
    train.add_argument(
        "--enable-plots", action="store_true", help="Write the loss curve and final weights to loss.png"
    )
    train.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )

    predict = sub.add_parser("predict", help="Score every row of a CSV against a model file")
    predict.add_argument("--model", type=Path, required=True, help="Model JSON file")
    predict.add_argument("--csv-path", required=True, help="CSV file with feature columns")
    predict.add_argument("--features", help="Comma separated feature columns (default: all others)")
    predict.add_argument("--label-col", help="Column echoed next to each score, not scored")
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _split_names(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def resolve_train_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    data_cfg = config.setdefault("data", {})
    if args.csv_path:
        data_cfg.pop("fixture", None)
        data_cfg["csv_path"] = args.csv_path
    if args.label_col:
        data_cfg["label_col"] = args.label_col
    if args.features:
        data_cfg["features"] = _split_names(args.features)
    if args.encode_labels is not None:
        data_cfg["encode_labels"] = bool(args.encode_labels)

    if args.name:
        config.setdefault("model", {})["name"] = args.name

    train_cfg = config.setdefault("train", {})
    for key in ("rate", "ntrains", "seed", "labels", "update", "run_dir"):
        value = getattr(args, key)
        if value is not None:
            train_cfg[key] = value
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def _run_train(args: argparse.Namespace) -> None:
    config = resolve_train_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))
    result = pipelines.run_pipeline(config)
    print(_format_result(result))


def _run_predict(args: argparse.Namespace) -> None:
    predictor = Predictor(DirectoryModelStore(args.model.parent))
    model_name = args.model.stem
    frame = load_frame(args.csv_path, label_col=args.label_col, features=_split_names(args.features))
    n_features = len(frame.feature_cols)
    for idx, row in enumerate(frame.iter_rows()):
        payload = {"row": idx, "score": predictor.predict(model_name, row[:n_features])}
        if args.label_col:
            payload["label"] = row[-1]
        print(json.dumps(payload))


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_dir)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.command is None:
        raise SystemExit("error: choose a command: train or predict")

    try:
        if args.command == "predict":
            _run_predict(args)
        else:
            _run_train(args)
    except LogitAggError as exc:
        logger.error("{}: {}", type(exc).__name__, exc)
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
