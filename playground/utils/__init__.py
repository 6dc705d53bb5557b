"""
Utility functions for point data, training and visualization.
"""

from .data import (
    Point,
    PointSet,
    canvas_to_xy,
    xy_to_canvas,
    brush_radius,
    parse_layers,
    create_quadrant_dataset,
    create_toy_dataset,
)
from .runs import Run, RunHistory
from .training import mse_loss, train_step, train_sgd, TrainingSession
from .visualization import decision_grid, plot_decision_boundary, plot_loss_history

__all__ = [
    "Point",
    "PointSet",
    "canvas_to_xy",
    "xy_to_canvas",
    "brush_radius",
    "parse_layers",
    "create_quadrant_dataset",
    "create_toy_dataset",
    "Run",
    "RunHistory",
    "mse_loss",
    "train_step",
    "train_sgd",
    "TrainingSession",
    "decision_grid",
    "plot_decision_boundary",
    "plot_loss_history",
]
