"""
Ablate the optimizer's components (momentum, L2, weight decay, clipping).

Each variant rebuilds the model from the same seed and trains into its own
run, so all loss curves end up in one history and one plot.

Expected YAML keys (on top of the train_playground.py config):
  ablation:
    momentum: [...]
    l2: [...]
    weight_decay: [...]
    clip_norm: [...]
"""

import argparse
import itertools
from pathlib import Path
from typing import Any, Dict, List, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import torch

from playground.experiments.train_playground import create_points, load_config, optimizer_settings
from playground.utils.data import parse_layers
from playground.utils.training import TrainingSession
from playground.utils.visualization import plot_loss_history


def make_variants(cfg: Dict[str, Any]) -> List[Tuple[str, Dict[str, float]]]:
    """Build (suffix, optimizer_settings) variants from the ablation grid."""
    abl = cfg.get("ablation", {})
    base = optimizer_settings(cfg.get("optimizer", {}))

    grid = {
        "momentum": abl.get("momentum", [base["momentum"]]),
        "l2": abl.get("l2", [base["l2"]]),
        "weight_decay": abl.get("weight_decay", [base["weight_decay"]]),
        "clip_norm": abl.get("clip_norm", [base["clip_norm"]]),
    }

    variants = []
    for mom, l2, wd, clip in itertools.product(*grid.values()):
        settings = dict(base, momentum=mom, l2=l2, weight_decay=wd, clip_norm=clip)
        suffix = f"mom{mom}_l2{l2}_wd{wd}_clip{clip}"
        variants.append((suffix, settings))
    return variants


def main():
    parser = argparse.ArgumentParser(description="Optimizer ablation on the playground")
    parser.add_argument("--config", type=str, required=True, help="Path to configuration YAML file")
    parser.add_argument("--dry_run", action="store_true", help="Only print the variants")
    args = parser.parse_args()

    cfg = load_config(args.config)
    variants = make_variants(cfg)
    print(f"Total variants: {len(variants)}")

    if args.dry_run:
        for suffix, settings in variants:
            print(f"  {suffix}: {settings}")
        return

    seed = cfg.get("experiment", {}).get("seed", 42)
    model_config = cfg.get("model", {})
    training_config = cfg.get("training", {})
    layers = model_config.get("layers", "2,8,8,1")
    sizes = parse_layers(layers) if isinstance(layers, str) else list(layers)

    session = TrainingSession(create_points(cfg.get("dataset", {}), seed), seed=seed)
    final_losses = {}

    for suffix, settings in variants:
        torch.manual_seed(seed)
        session.build(sizes, model_config.get("activation", "relu"), settings)
        run = session.runs.new_run()
        run.name = suffix
        print(f"\n=== {suffix} ===")
        session.run(
            training_config.get("ticks", 200),
            steps_per_tick=training_config.get("steps_per_tick", 10),
            verbose=False
        )
        final_losses[suffix] = run.last[1] if run.last else None
        print(f"Final tick loss: {final_losses[suffix]}")

    save_dir = Path(cfg.get("logging", {}).get("save_dir", "./results/ablation"))
    save_dir.mkdir(parents=True, exist_ok=True)
    fig = plot_loss_history(session.runs, save_path=save_dir / "optimizer_ablation_loss.png")
    plt.close(fig)

    print("\nSummary (final tick loss):")
    for suffix, loss in sorted(final_losses.items(), key=lambda kv: float("inf") if kv[1] is None else kv[1]):
        print(f"  {suffix}: {loss}")


if __name__ == "__main__":
    main()
