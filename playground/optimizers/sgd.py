"""
SGD optimizer for the hand-written MLP.

One update combines, in order:
  1. global gradient-norm clipping (a single scale factor for all tensors)
  2. L2 penalty added to the weight gradients
  3. momentum as an exponential moving average of gradients
  4. decoupled (AdamW-style) weight decay on the weights
  5. the gradient step on weights and biases
"""

from typing import Tuple

import torch

from ..errors import ConfigurationError, ShapeMismatchError
from ..models.mlp import MLP, Gradients


CLIP_EPS = 1e-12


def clip_grad_norm(grads: Gradients, max_norm: float) -> Tuple[Gradients, float]:
    """
    Rescale gradients so their global L2 norm does not exceed ``max_norm``.

    Args:
        grads: Per-layer gradients
        max_norm: Threshold; ``0`` (or less) disables clipping

    Returns:
        Tuple of (possibly rescaled gradients, norm before clipping)
    """
    norm = grads.global_norm()
    if not max_norm or max_norm <= 0 or norm <= max_norm:
        return grads, norm
    return grads.scale(max_norm / (norm + CLIP_EPS)), norm


class Optimizer:
    """
    Gradient descent with EMA momentum, L2, weight decay and clipping.

    The optimizer is bound to the shapes of ``model`` at construction and
    keeps one momentum buffer per weight and bias. ``apply`` refuses a model
    whose layer shapes differ from the bound ones.

    Args:
        model: Model whose parameters will be updated
        lr: Learning rate (default: 0.01)
        momentum: EMA coefficient in [0, 1) (default: 0, disabled)
        l2: L2 penalty coefficient on weights (default: 0)
        weight_decay: Decoupled weight decay coefficient (default: 0)
        clip_norm: Global gradient-norm threshold (default: 0, disabled)
    """

    def __init__(
        self,
        model: MLP,
        lr: float = 0.01,
        momentum: float = 0.0,
        l2: float = 0.0,
        weight_decay: float = 0.0,
        clip_norm: float = 0.0
    ):
        if lr <= 0:
            raise ConfigurationError(f"Learning rate must be positive, got {lr}")
        if not 0.0 <= momentum < 1.0:
            raise ConfigurationError(f"Momentum must be in [0, 1), got {momentum}")
        for name, value in (("l2", l2), ("weight_decay", weight_decay), ("clip_norm", clip_norm)):
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")

        self.lr = lr
        self.momentum = momentum
        self.l2 = l2
        self.weight_decay = weight_decay
        self.clip_norm = clip_norm

        self.signature = model.shape_signature()
        self.vW = [torch.zeros_like(w) for w in model.weights]
        self.vb = [torch.zeros_like(b) for b in model.biases]
        self.last_grad_norm = None

    def apply(self, model: MLP, grads: Gradients):
        """
        Update ``model`` in place from ``grads``.

        Raises:
            ShapeMismatchError: If the model's layer shapes, or the gradient
                shapes, differ from the ones the optimizer was built for
        """
        if model.shape_signature() != self.signature:
            raise ShapeMismatchError(
                f"Optimizer was built for {self.signature}, "
                f"got model with {model.shape_signature()}"
            )
        self._check_gradients(grads)

        if self.clip_norm > 0:
            grads, self.last_grad_norm = clip_grad_norm(grads, self.clip_norm)

        lr = self.lr
        mu = self.momentum
        weight_deltas = []
        bias_deltas = []

        for l in range(model.num_layers):
            gW = grads.dW[l]
            gb = grads.db[l]

            if self.l2:
                gW = gW + model.weights[l] * self.l2

            if mu:
                self.vW[l] = self.vW[l] * mu + gW * (1 - mu)
                self.vb[l] = self.vb[l] * mu + gb * (1 - mu)
                gW = self.vW[l]
                gb = self.vb[l]

            weight_deltas.append(gW * lr)
            bias_deltas.append(gb * lr)

        weight_scale = 1 - lr * self.weight_decay if self.weight_decay else 1.0
        model.apply_update(weight_deltas, bias_deltas, weight_scale=weight_scale)

    def _check_gradients(self, grads: Gradients):
        # Momentum buffers would broadcast a wrong-shaped gradient silently
        if len(grads.dW) != len(self.signature) or len(grads.db) != len(self.signature):
            raise ShapeMismatchError(
                f"Expected gradients for {len(self.signature)} layers, got "
                f"{len(grads.dW)} weight and {len(grads.db)} bias gradients"
            )
        for l, (w_shape, b_shape) in enumerate(self.signature):
            if tuple(grads.dW[l].shape) != w_shape or tuple(grads.db[l].shape) != b_shape:
                raise ShapeMismatchError(
                    f"Layer {l}: gradient shapes {tuple(grads.dW[l].shape)}, "
                    f"{tuple(grads.db[l].shape)} do not match parameters {w_shape}, {b_shape}"
                )

    def state_dict(self) -> dict:
        """Hyperparameters and momentum buffers (in-memory snapshot)."""
        return {
            "lr": self.lr,
            "momentum": self.momentum,
            "l2": self.l2,
            "weight_decay": self.weight_decay,
            "clip_norm": self.clip_norm,
            "vW": [v.clone() for v in self.vW],
            "vb": [v.clone() for v in self.vb],
        }

    def __repr__(self) -> str:
        return (
            f"Optimizer(lr={self.lr}, momentum={self.momentum}, l2={self.l2}, "
            f"weight_decay={self.weight_decay}, clip_norm={self.clip_norm})"
        )
