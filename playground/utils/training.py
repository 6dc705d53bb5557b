"""
Single-sample SGD training loop and the interactive training session.
"""

from typing import Callable, Dict, List, Optional, Sequence

import torch
from tqdm import tqdm

from ..errors import ConfigurationError
from ..models.mlp import MLP
from ..optimizers.sgd import Optimizer
from .data import PointSet, label_to_tensor, sample_to_tensor
from .runs import RunHistory


def mse_loss(y_pred: torch.Tensor, y_true: torch.Tensor) -> float:
    """Squared error ``0.5 * (y_pred - y_true)^2`` summed to a scalar."""
    err = y_pred - y_true.reshape(y_pred.shape)
    return float((err * err).sum() * 0.5)


def train_step(model: MLP, optimizer: Optimizer, x: torch.Tensor, y: torch.Tensor) -> float:
    """
    One SGD step on a single sample.

    Returns:
        Loss of the prediction made before the update
    """
    y_pred, cache = model.forward(x, training=True)
    grads = model.backward(y, cache)
    optimizer.apply(model, grads)
    return mse_loss(y_pred, y)


def train_sgd(
    model: MLP,
    optimizer: Optimizer,
    points: PointSet,
    num_steps: int = 500,
    generator: Optional[torch.Generator] = None,
    verbose: bool = False
) -> List[float]:
    """
    Train on randomly drawn points, one sample per step.

    Args:
        model: Model to train
        optimizer: Optimizer bound to ``model``
        points: Training points (must not be empty)
        num_steps: Number of SGD steps
        generator: Random generator for sample selection
        verbose: Whether to print progress

    Returns:
        Per-step loss values
    """
    if len(points) == 0:
        raise ConfigurationError("Cannot train on an empty point set")

    losses = []
    for step in range(num_steps):
        p = points.sample(generator)
        loss = train_step(model, optimizer, sample_to_tensor(p, model.dtype), label_to_tensor(p, model.dtype))
        losses.append(loss)

        if verbose and (step % 100 == 0 or step == num_steps - 1):
            print(f"Step {step:5d}/{num_steps}: Loss={loss:.4f}")

    return losses


class TrainingSession:
    """
    State behind the playground: points, model/optimizer pair and loss runs.

    Training is cooperative: ``run`` executes one tick at a time and checks
    ``is_running`` before each tick, so ``stop`` takes effect at the next
    tick boundary and never interrupts a tick in progress.

    Args:
        points: Initial point set (default: empty)
        seed: Seed for the sample-selection generator
    """

    def __init__(self, points: Optional[PointSet] = None, seed: Optional[int] = None):
        self.points = points if points is not None else PointSet()
        self.runs = RunHistory()
        self.model: Optional[MLP] = None
        self.optimizer: Optional[Optimizer] = None
        self.step_count = 0
        self.status = "Idle"
        self.last_loss: Optional[float] = None
        self._running = False
        self._settings = None

        self.generator = torch.Generator()
        if seed is not None:
            self.generator.manual_seed(seed)

    @property
    def is_running(self) -> bool:
        return self._running

    def build(
        self,
        sizes: Sequence[int],
        activation: str = "relu",
        optimizer_config: Optional[Dict[str, float]] = None
    ) -> MLP:
        """
        Build a fresh model and optimizer.

        Raises:
            ConfigurationError: If the layers do not start with 2 and end
                with 1, or the model/optimizer settings are invalid
        """
        sizes = list(sizes)
        if len(sizes) < 2 or sizes[0] != 2 or sizes[-1] != 1:
            raise ConfigurationError(
                f"Layers must start with 2 and end with 1 (e.g. 2,8,8,1), got {sizes}"
            )
        optimizer_config = dict(optimizer_config or {})

        model = MLP(sizes, activation=activation)
        optimizer = Optimizer(model, **optimizer_config)

        self.model = model
        self.optimizer = optimizer
        self._settings = (sizes, activation, optimizer_config)
        self.step_count = 0
        self.status = "Built model"
        return model

    def reset_weights(self) -> Optional[MLP]:
        """Rebuild the model with the settings of the last ``build``."""
        if self._settings is None:
            return None
        sizes, activation, optimizer_config = self._settings
        model = self.build(sizes, activation, optimizer_config)
        self.status = "Reset weights"
        return model

    def clear_points(self):
        self.points.clear()
        self.last_loss = None
        self.status = "Cleared points"

    def train_tick(self, steps: int = 10) -> Optional[float]:
        """
        Run ``steps`` single-sample updates and record their average loss.

        Returns:
            Average loss of the tick, or None if there is no model or no data
        """
        if self.runs.active is None:
            self.runs.new_run()
        if self.model is None or self.optimizer is None:
            self.status = "Build a model first"
            return None
        if len(self.points) == 0:
            self.status = "Add points first"
            return None

        steps = max(1, int(steps))
        loss_sum = 0.0
        for _ in range(steps):
            p = self.points.sample(self.generator)
            loss_sum += train_step(
                self.model,
                self.optimizer,
                sample_to_tensor(p, self.model.dtype),
                label_to_tensor(p, self.model.dtype)
            )
        self.step_count += steps

        avg_loss = loss_sum / steps
        # One sample per tick, not per SGD step
        self.runs.active.record(self.step_count, avg_loss)
        self.last_loss = avg_loss
        self.status = "Training"
        return avg_loss

    def start(self):
        if self._running:
            return
        if self.runs.active is None:
            self.runs.new_run()
        self._running = True

    def stop(self):
        if not self._running:
            return
        self._running = False
        self.status = "Stopped"

    def run(
        self,
        max_ticks: int,
        steps_per_tick: int = 10,
        on_tick: Optional[Callable[["TrainingSession", Optional[float]], None]] = None,
        verbose: bool = True
    ) -> List[Optional[float]]:
        """
        Start training and run up to ``max_ticks`` ticks.

        ``on_tick`` is called after every tick and may call ``stop``.

        Returns:
            Average loss of each executed tick
        """
        self.start()
        tick_losses = []
        progress = tqdm(range(max_ticks), desc="Training", disable=not verbose)
        for _ in progress:
            if not self._running:
                break
            loss = self.train_tick(steps_per_tick)
            tick_losses.append(loss)
            if loss is not None:
                progress.set_postfix(loss=f"{loss:.4f}", steps=self.step_count)
            if on_tick is not None:
                on_tick(self, loss)
        progress.close()
        self.stop()
        return tick_losses
