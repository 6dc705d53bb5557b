"""
Scripted playground training run.

Builds the point set and model described by a config YAML file, trains with
single-sample SGD tick by tick, records the loss history and saves the
decision-boundary and loss plots. Optionally logs to wandb.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import torch
import wandb
import yaml

from playground.errors import PlaygroundError
from playground.utils.data import create_quadrant_dataset, create_toy_dataset, parse_layers
from playground.utils.training import TrainingSession
from playground.utils.visualization import plot_decision_boundary, plot_loss_history


def load_config(config_path: str) -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Configuration dictionary
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    return config or {}


def create_points(dataset_config: dict, seed: int):
    """
    Create the training points described by the dataset config.

    Args:
        dataset_config: Dataset configuration dictionary
        seed: Random seed

    Returns:
        PointSet
    """
    pattern = dataset_config.get("pattern", "xor")
    if pattern == "quadrants":
        return create_quadrant_dataset()
    return create_toy_dataset(
        n_samples=dataset_config.get("n_samples", 200),
        pattern=pattern,
        noise=dataset_config.get("noise", 0.0),
        seed=seed
    )


def optimizer_settings(optimizer_config: dict) -> dict:
    return {
        "lr": optimizer_config.get("lr", 0.01),
        "momentum": optimizer_config.get("momentum", 0.0),
        "l2": optimizer_config.get("l2", 0.0),
        "weight_decay": optimizer_config.get("weight_decay", 0.0),
        "clip_norm": optimizer_config.get("clip_norm", 0.0),
    }


def run(config: dict) -> TrainingSession:
    """
    Execute one training run from a config dictionary.

    Returns:
        The finished training session
    """
    exp_config = config.get("experiment", {})
    dataset_config = config.get("dataset", {})
    model_config = config.get("model", {})
    optimizer_config = config.get("optimizer", {})
    training_config = config.get("training", {})
    logging_config = config.get("logging", {})

    seed = exp_config.get("seed", 42)
    torch.manual_seed(seed)

    layers = model_config.get("layers", "2,8,8,1")
    sizes = parse_layers(layers) if isinstance(layers, str) else list(layers)
    activation = model_config.get("activation", "relu")

    points = create_points(dataset_config, seed)
    print(f"Points: {len(points)} {points.counts()}")

    session = TrainingSession(points, seed=seed)
    model = session.build(sizes, activation, optimizer_settings(optimizer_config))
    print(f"Model: {model}, parameters: {model.num_parameters():,}")
    print(f"Optimizer: {session.optimizer}")

    exp_name = exp_config.get("name", "playground")
    timestamp = datetime.now().strftime('%m%d_%H%M')
    run_name = f"{exp_name}_{activation}_{'-'.join(map(str, sizes))}_{timestamp}"

    wandb_config = logging_config.get("wandb", {})
    use_wandb = wandb_config.get("enabled", False)
    if use_wandb:
        wandb.init(
            project=wandb_config.get("project", "mlp-playground"),
            name=run_name,
            config=config
        )

    def log_tick(s: TrainingSession, loss):
        if use_wandb and loss is not None:
            wandb.log({"loss": loss}, step=s.step_count)

    num_ticks = training_config.get("ticks", 200)
    steps_per_tick = training_config.get("steps_per_tick", 10)

    print("Starting training...")
    tick_losses = session.run(num_ticks, steps_per_tick=steps_per_tick, on_tick=log_tick)
    recorded = [l for l in tick_losses if l is not None]
    if recorded:
        print(f"Ticks: {len(recorded)}, steps: {session.step_count}, "
              f"first loss={recorded[0]:.4f}, last loss={recorded[-1]:.4f}")

    save_dir = Path(logging_config.get("save_dir", "./results/playground"))
    run_dir = save_dir / run_name
    run_dir.mkdir(parents=True, exist_ok=True)

    config_path = run_dir / f"{run_name}_config.yaml"
    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    print(f"Config saved to {config_path}")

    print("\nGenerating visualizations...")
    boundary_path = run_dir / f"{run_name}_decision_boundary.png"
    fig = plot_decision_boundary(
        session.model,
        session.points,
        resolution=logging_config.get("grid_resolution", 80),
        save_path=boundary_path
    )
    plt.close(fig)

    loss_path = run_dir / f"{run_name}_loss_history.png"
    fig = plot_loss_history(session.runs, save_path=loss_path)
    plt.close(fig)

    if use_wandb:
        wandb.log({
            "decision_boundary": wandb.Image(str(boundary_path)),
            "loss_history": wandb.Image(str(loss_path))
        })
        wandb.finish()

    print("Training completed!")
    return session


def main():
    parser = argparse.ArgumentParser(
        description="Train a playground MLP from a config file"
    )
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file"
    )
    args = parser.parse_args()

    config = load_config(args.config)
    try:
        run(config)
    except PlaygroundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
