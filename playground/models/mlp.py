"""
Fully-connected MLP with hand-written backpropagation.

Parameters are plain tensors (no autograd). Each layer applies the same
activation, the output layer included, so the prediction is the activation
output of the last layer.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import torch

from ..errors import ConfigurationError, ShapeMismatchError
from .activations import Activation, ActivationFn, resolve_activation


Shape = Tuple[int, ...]


@dataclass
class ForwardCache:
    """Pre-activations ``z`` and activations ``a`` of one training forward pass."""
    z: List[torch.Tensor] = field(default_factory=list)
    a: List[torch.Tensor] = field(default_factory=list)


@dataclass
class Gradients:
    """Per-layer gradients, shaped like the model's weights and biases."""
    dW: List[torch.Tensor]
    db: List[torch.Tensor]

    def global_norm(self) -> float:
        """L2 norm over the concatenation of every weight and bias gradient."""
        sumsq = 0.0
        for g in self.dW + self.db:
            sumsq += float((g * g).sum())
        return math.sqrt(sumsq)

    def scale(self, factor: float) -> "Gradients":
        return Gradients(
            dW=[g * factor for g in self.dW],
            db=[g * factor for g in self.db],
        )


def as_column(x: torch.Tensor) -> torch.Tensor:
    """Reshape a 1-D tensor to a column; other shapes pass through."""
    return x.reshape(x.shape[0], 1) if x.dim() == 1 else x


class MLP:
    """
    Multi-Layer Perceptron trained one sample at a time.

    Layer ``l`` owns a weight matrix of shape ``(sizes[l+1], sizes[l])`` and a
    bias column of shape ``(sizes[l+1], 1)``. Weights are drawn uniform in
    [-1, 1] and scaled by ``2 / sqrt(fan_in)``; biases start at zero.

    Args:
        sizes: Layer widths, input first (e.g. ``[2, 8, 8, 1]``)
        activation: Activation name, :class:`Activation` or :class:`ActivationFn`
        dtype: Parameter dtype (default: float64)
        generator: Optional generator for reproducible initialization
    """

    def __init__(
        self,
        sizes: Sequence[int],
        activation: Union[str, Activation, ActivationFn] = "relu",
        dtype: torch.dtype = torch.float64,
        generator: Optional[torch.Generator] = None
    ):
        sizes = list(sizes)
        if len(sizes) < 2:
            raise ConfigurationError(f"MLP needs at least 2 layer sizes, got {sizes}")
        for n in sizes:
            if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
                raise ConfigurationError(f"Layer sizes must be positive integers, got {sizes}")

        # Resolved before any weight is allocated
        self.act = resolve_activation(activation)
        self.activation_name = activation.value if isinstance(activation, Activation) else (
            activation if isinstance(activation, str) else "custom"
        )

        self.sizes = sizes
        self.dtype = dtype
        self.weights: List[torch.Tensor] = []
        self.biases: List[torch.Tensor] = []

        for l in range(len(sizes) - 1):
            fan_in = sizes[l]
            fan_out = sizes[l + 1]
            u = torch.rand((fan_out, fan_in), dtype=dtype, generator=generator) * 2 - 1
            self.weights.append(u * (2 / math.sqrt(fan_in)))
            self.biases.append(torch.zeros((fan_out, 1), dtype=dtype))

    @property
    def num_layers(self) -> int:
        return len(self.weights)

    def num_parameters(self) -> int:
        return sum(w.numel() + b.numel() for w, b in zip(self.weights, self.biases))

    def shape_signature(self) -> Tuple[Tuple[Shape, Shape], ...]:
        """Per-layer ``(weight_shape, bias_shape)``."""
        return tuple(
            (tuple(w.shape), tuple(b.shape)) for w, b in zip(self.weights, self.biases)
        )

    def _coerce_input(self, x) -> torch.Tensor:
        if not isinstance(x, torch.Tensor):
            x = torch.tensor(x, dtype=self.dtype)
        a = as_column(x.to(self.dtype))
        if tuple(a.shape) != (self.sizes[0], 1):
            raise ShapeMismatchError(
                f"Expected input of length {self.sizes[0]}, got shape {tuple(x.shape)}"
            )
        return a

    def forward(self, x, training: bool = False):
        """
        Forward pass for a single sample.

        Args:
            x: Input of length ``sizes[0]`` (1-D, column tensor or sequence)
            training: Whether to record the intermediates needed by ``backward``

        Returns:
            Output column of shape ``(sizes[-1], 1)``, or ``(output, cache)``
            when ``training`` is set
        """
        a = self._coerce_input(x)
        cache = ForwardCache(a=[a]) if training else None

        for W, b in zip(self.weights, self.biases):
            z = W @ a + b
            a = as_column(self.act.f(z))
            if training:
                cache.z.append(z)
                cache.a.append(a)

        return (a, cache) if training else a

    __call__ = forward

    def backward(self, y_true, cache: ForwardCache) -> Gradients:
        """
        Backpropagate the squared error of the cached prediction.

        The cache must come from the latest ``forward(..., training=True)`` on
        this model; staleness is not checked.

        Args:
            y_true: Target, shaped like the output (or a scalar for one output)
            cache: Intermediates recorded by the training forward pass

        Returns:
            Gradients for every layer
        """
        L = self.num_layers
        a, z = cache.a, cache.z
        if not isinstance(y_true, torch.Tensor):
            y_true = torch.tensor(y_true, dtype=self.dtype)
        if y_true.numel() != a[L].numel():
            raise ShapeMismatchError(
                f"Expected target with {a[L].numel()} elements, got shape {tuple(y_true.shape)}"
            )
        y_true = y_true.to(self.dtype).reshape(a[L].shape)

        dW: List[torch.Tensor] = [None] * L
        db: List[torch.Tensor] = [None] * L

        # d/dy of 0.5 * (y - t)^2
        delta = a[L] - y_true
        dW[L - 1] = delta @ a[L - 1].T
        db[L - 1] = delta.clone()

        for l in range(L - 2, -1, -1):
            delta = (self.weights[l + 1].T @ delta) * self.act.df(z[l])
            dW[l] = delta @ a[l].T
            db[l] = delta.clone()

        return Gradients(dW=dW, db=db)

    def apply_update(
        self,
        weight_deltas: Sequence[torch.Tensor],
        bias_deltas: Sequence[torch.Tensor],
        weight_scale: float = 1.0
    ):
        """
        Update parameters in place: ``W = W * weight_scale - dW``, ``b = b - db``.

        This is the only way parameters change after construction.
        """
        if len(weight_deltas) != self.num_layers or len(bias_deltas) != self.num_layers:
            raise ShapeMismatchError(
                f"Expected {self.num_layers} layer updates, got "
                f"{len(weight_deltas)} weight and {len(bias_deltas)} bias updates"
            )
        for l in range(self.num_layers):
            if (weight_deltas[l].shape != self.weights[l].shape
                    or bias_deltas[l].shape != self.biases[l].shape):
                raise ShapeMismatchError(
                    f"Layer {l}: update shapes {tuple(weight_deltas[l].shape)}, "
                    f"{tuple(bias_deltas[l].shape)} do not match parameters "
                    f"{tuple(self.weights[l].shape)}, {tuple(self.biases[l].shape)}"
                )

        for l in range(self.num_layers):
            W = self.weights[l]
            if weight_scale != 1.0:
                W = W * weight_scale
            self.weights[l] = W - weight_deltas[l]
            self.biases[l] = self.biases[l] - bias_deltas[l]

    def step(self, grads: Gradients, lr: float = 0.01):
        """Plain gradient descent step without optimizer state."""
        self.apply_update(
            [g * lr for g in grads.dW],
            [g * lr for g in grads.db]
        )

    def __repr__(self) -> str:
        return f"MLP(sizes={self.sizes}, activation={self.activation_name!r})"


def build(sizes: Sequence[int], activation: Union[str, Activation] = "relu", **kwargs) -> MLP:
    """Construct an :class:`MLP`; raises ``ConfigurationError`` on bad input."""
    return MLP(sizes, activation=activation, **kwargs)
