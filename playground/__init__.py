"""
MLP playground: a small hand-written neural network trained on 2-D points.
"""

from .errors import ConfigurationError, InvalidActivation, PlaygroundError, ShapeMismatchError
from .models import MLP, Activation, ActivationFn, build, resolve_activation
from .optimizers import Optimizer, clip_grad_norm

__version__ = "0.1.0"

__all__ = [
    "MLP",
    "Activation",
    "ActivationFn",
    "build",
    "resolve_activation",
    "Optimizer",
    "clip_grad_norm",
    "PlaygroundError",
    "ConfigurationError",
    "InvalidActivation",
    "ShapeMismatchError",
]
