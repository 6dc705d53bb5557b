"""
Activation functions and their derivatives.

Every activation is a pair of elementwise functions ``(f, df)`` over tensors.
``df`` always receives the pre-activation ``z``; tanh and sigmoid recompute
their own output from ``z`` and express the derivative through it.
"""

import math
from enum import Enum
from typing import Callable, NamedTuple, Union

import torch

from ..errors import InvalidActivation


LEAKY_RELU_ALPHA = 0.01
ELU_ALPHA = 1.0
GELU_C = math.sqrt(2.0 / math.pi)
GELU_K = 0.044715


class ActivationFn(NamedTuple):
    """Value function ``f`` and derivative ``df`` of an activation."""
    f: Callable[[torch.Tensor], torch.Tensor]
    df: Callable[[torch.Tensor], torch.Tensor]


class Activation(str, Enum):
    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    ELU = "elu"
    GELU = "gelu"
    SWISH = "swish"
    TANH = "tanh"
    SIGMOID = "sigmoid"
    SOFTSIGN = "softsign"
    LINEAR = "linear"


def _relu(z):
    return torch.where(z > 0, z, torch.zeros_like(z))


def _relu_grad(z):
    return (z > 0).to(z.dtype)


def _leaky_relu(z, alpha: float = LEAKY_RELU_ALPHA):
    return torch.where(z > 0, z, alpha * z)


def _leaky_relu_grad(z, alpha: float = LEAKY_RELU_ALPHA):
    return torch.where(z > 0, torch.ones_like(z), torch.full_like(z, alpha))


def _elu(z, alpha: float = ELU_ALPHA):
    return torch.where(z >= 0, z, alpha * (torch.exp(z) - 1))


def _elu_grad(z, alpha: float = ELU_ALPHA):
    return torch.where(z >= 0, torch.ones_like(z), alpha * torch.exp(z))


def _gelu(z):
    t = torch.tanh(GELU_C * (z + GELU_K * z ** 3))
    return 0.5 * z * (1 + t)


def _gelu_grad(z):
    t = torch.tanh(GELU_C * (z + GELU_K * z ** 3))
    du = GELU_C * (1 + 3 * GELU_K * z ** 2)
    return 0.5 * (1 + t) + 0.5 * z * (1 - t * t) * du


def _swish(z):
    return z * torch.sigmoid(z)


def _swish_grad(z):
    s = torch.sigmoid(z)
    return s + z * s * (1 - s)


def _tanh_grad(z):
    t = torch.tanh(z)
    return 1 - t * t


def _sigmoid_grad(z):
    s = torch.sigmoid(z)
    return s * (1 - s)


def _softsign(z):
    return z / (1 + torch.abs(z))


def _softsign_grad(z):
    d = 1 + torch.abs(z)
    return 1 / (d * d)


def _linear(z):
    return z


def _linear_grad(z):
    return torch.ones_like(z)


ACTIVATIONS = {
    Activation.RELU: ActivationFn(_relu, _relu_grad),
    Activation.LEAKY_RELU: ActivationFn(_leaky_relu, _leaky_relu_grad),
    Activation.ELU: ActivationFn(_elu, _elu_grad),
    Activation.GELU: ActivationFn(_gelu, _gelu_grad),
    Activation.SWISH: ActivationFn(_swish, _swish_grad),
    Activation.TANH: ActivationFn(torch.tanh, _tanh_grad),
    Activation.SIGMOID: ActivationFn(torch.sigmoid, _sigmoid_grad),
    Activation.SOFTSIGN: ActivationFn(_softsign, _softsign_grad),
    Activation.LINEAR: ActivationFn(_linear, _linear_grad),
}


def available_activations() -> list[str]:
    """Names accepted by :func:`resolve_activation`."""
    return [a.value for a in Activation]


def resolve_activation(activation: Union[str, Activation, ActivationFn]) -> ActivationFn:
    """
    Resolve an activation name (or enum member) to its function pair.

    Args:
        activation: Name such as ``"relu"``, an :class:`Activation` member,
            or an :class:`ActivationFn` built by the caller

    Returns:
        The matching :class:`ActivationFn`

    Raises:
        InvalidActivation: If the name is unknown or the object is not an
            ``ActivationFn`` with callable ``f`` and ``df``
    """
    if isinstance(activation, ActivationFn):
        if not (callable(activation.f) and callable(activation.df)):
            raise InvalidActivation("ActivationFn needs callable f and df")
        return activation

    if isinstance(activation, str):
        try:
            return ACTIVATIONS[Activation(activation.strip().lower())]
        except ValueError:
            pass

    raise InvalidActivation(
        f"Unknown activation: {activation!r} "
        f"(expected one of {', '.join(available_activations())})"
    )
