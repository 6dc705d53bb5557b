"""
Exception hierarchy for the playground.
"""


class PlaygroundError(Exception):
    """Base class for every error raised by the playground."""


class ConfigurationError(PlaygroundError, ValueError):
    """Invalid model, optimizer or session configuration."""


class InvalidActivation(ConfigurationError):
    """Activation name (or object) that cannot be resolved."""


class ShapeMismatchError(PlaygroundError, RuntimeError):
    """Tensor shapes that do not fit the model they are used with."""
