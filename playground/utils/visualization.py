"""
Visualization utilities: decision-boundary background and loss history.
"""

import matplotlib.pyplot as plt
import numpy as np
from typing import Iterable, Optional
from pathlib import Path

from ..models.mlp import MLP
from .data import PointSet, grid_coordinates
from .runs import RunHistory


CLASS_COLORS = {0: "#4cc9f0", 1: "#ff4d6d"}
BLUE_RGB = np.array([90, 140, 235])
RED_RGB = np.array([235, 80, 90])


def decision_grid(
    model: MLP,
    resolution: int = 80,
    temperature: float = 10.0,
    contrast: float = 1.15
) -> np.ndarray:
    """
    Evaluate the model over [-1, 1]^2 and map outputs to class probabilities.

    The raw output ``v`` is squashed with ``0.5 * (tanh(temperature * v) + 1)``
    and stretched around 0.5 by ``contrast`` (reduces the grey band).

    Args:
        model: Model with a single output
        resolution: Number of cells per side
        temperature: Saturation of the tanh squashing
        contrast: Extra stretch around 0.5

    Returns:
        Array of shape (resolution, resolution), row 0 at y = +1
    """
    values = np.empty(resolution * resolution)
    for i, (x, y) in enumerate(grid_coordinates(resolution)):
        values[i] = float(model.forward([x, y])[0, 0])

    prob = 0.5 * (np.tanh(temperature * values) + 1.0)
    prob = 0.5 + (prob - 0.5) * contrast
    prob = np.clip(prob, 0.0, 1.0)
    return prob.reshape(resolution, resolution)


def probability_to_rgb(prob: np.ndarray) -> np.ndarray:
    """Blend the class colours; returns uint8 RGB with a trailing channel axis."""
    prob = np.asarray(prob, dtype=float)[..., None]
    rgb = BLUE_RGB * (1 - prob) + RED_RGB * prob
    return np.round(rgb).astype(np.uint8)


def plot_decision_boundary(
    model: Optional[MLP],
    points: PointSet,
    resolution: int = 80,
    show_background: bool = True,
    brush: float = 6.0,
    save_path: Optional[Path] = None
):
    """
    Plot the decision background and the labeled points.

    Args:
        model: Trained model (background skipped if None)
        points: Points to draw
        resolution: Background grid resolution
        show_background: Whether to draw the model's decision background
        brush: Point radius in pixels
        save_path: Path to save the figure
    """
    fig, ax = plt.subplots(figsize=(6, 6))

    if show_background and model is not None and len(points) > 0:
        rgb = probability_to_rgb(decision_grid(model, resolution=resolution))
        ax.imshow(rgb, extent=(-1, 1, -1, 1), origin="upper", interpolation="nearest")

    for label, color in CLASS_COLORS.items():
        xs = [p.x for p in points if p.label == label]
        ys = [p.y for p in points if p.label == label]
        if xs:
            ax.scatter(xs, ys, s=(2 * brush) ** 2, c=color,
                       edgecolors=(0, 0, 0, 0.35), label=f"Class {label}")

    ax.set_xlim(-1, 1)
    ax.set_ylim(-1, 1)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Decision boundary saved to {save_path}")

    return fig


def plot_loss_history(
    runs: RunHistory,
    save_path: Optional[Path] = None
):
    """
    Plot the loss history of every run, the active run emphasized.

    Runs with fewer than two samples are skipped.

    Args:
        runs: Run history
        save_path: Path to save the figure
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    usable = [r for r in runs if len(r.points) >= 2]
    if not usable:
        ax.text(0.02, 0.95, "No run data yet. Train to record loss.",
                transform=ax.transAxes, color=(15 / 255, 23 / 255, 42 / 255, 0.5), va="top")
        ax.set_axis_off()
    else:
        _draw_runs(ax, usable, runs.active_id)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Loss history plot saved to {save_path}")

    return fig


def _draw_runs(ax, usable: Iterable, active_id: Optional[str]):
    usable = list(usable)
    all_steps = [s for r in usable for s in r.steps]
    all_losses = [l for r in usable for l in r.losses]

    min_step, max_step = min(all_steps), max(all_steps)
    min_loss, max_loss = min(all_losses), max(all_losses)
    if max_step == min_step:
        max_step = min_step + 1
    if max_loss == min_loss:
        max_loss = min_loss + 1e-6
    # Loss axis always includes 0
    min_loss = min(0.0, min_loss)

    # Inactive runs first so the active one is drawn on top
    active = None
    for r in usable:
        if r.id == active_id:
            active = r
            continue
        ax.plot(r.steps, r.losses, color=(15 / 255, 23 / 255, 42 / 255, 0.25), linewidth=1, label=r.name)
    if active is not None:
        ax.plot(active.steps, active.losses, color=(37 / 255, 99 / 255, 235 / 255, 0.95),
                linewidth=2, label=active.name)

    ax.set_xlim(min_step, max_step)
    ax.set_ylim(min_loss, max_loss)
    ax.set_xlabel('steps')
    ax.set_ylabel('loss')
    ax.set_title('Loss History')
    ax.legend()
    ax.grid(True, alpha=0.3)
