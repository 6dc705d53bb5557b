"""
Optimizers.
"""

from .sgd import Optimizer, clip_grad_norm

__all__ = ["Optimizer", "clip_grad_norm"]
