"""Training curve and learned-weight figure for a run."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Sequence, Tuple

from ..core.types import Model


class PlotAdapter:
    """Track per-epoch loss; on close, optionally draw it beside the final weights."""

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        feature_names: Sequence[str] | None = None,
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.feature_names = list(feature_names or [])
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if "loss" in metrics:
            self._history.append((int(epoch), float(metrics["loss"])))

    __call__ = on_epoch

    @property
    def final_loss(self) -> float | None:
        return self._history[-1][1] if self._history else None

    def close(self, model: Model | None = None) -> Path | None:
        """Write ``loss.png``; with ``model`` a second panel shows its weights."""

        if not self.enable_plots or (not self._history and model is None):
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        panels = 2 if model is not None else 1
        fig, axes = plt.subplots(1, panels, figsize=(5 * panels, 4), squeeze=False)
        loss_ax = axes[0][0]
        if self._history:
            epochs, losses = zip(*self._history)
            loss_ax.plot(epochs, losses)
            if min(losses) > 0:
                loss_ax.set_yscale("log")
        loss_ax.set_xlabel("Epoch")
        loss_ax.set_ylabel("Mean squared error (scaled targets)")
        loss_ax.set_title("Training Curve")

        if model is not None:
            weight_ax = axes[0][1]
            names = self.feature_names
            if len(names) != model.dim:
                names = [f"w{i}" for i in range(model.dim)]
            weight_ax.bar(range(model.dim), model.weights)
            weight_ax.set_xticks(range(model.dim))
            weight_ax.set_xticklabels(names, rotation=45, ha="right")
            weight_ax.axhline(0.0, color="grey", linewidth=0.8)
            weight_ax.set_title(f"Final weights (scale {model.scale:g})")

        fig.tight_layout()
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path
