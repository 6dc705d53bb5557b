"""
Model definitions.
"""

from .activations import Activation, ActivationFn, available_activations, resolve_activation
from .mlp import MLP, ForwardCache, Gradients, build

__all__ = [
    "MLP",
    "ForwardCache",
    "Gradients",
    "build",
    "Activation",
    "ActivationFn",
    "available_activations",
    "resolve_activation",
]
