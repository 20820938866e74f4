"""
Error taxonomy for the optimizer coordination layer.

All errors derive from PanglossError so callers can catch the whole family,
while each one also derives from the closest builtin (ValueError or
RuntimeError) so generic handlers keep working.

Hierarchy:
    PanglossError
    ├── ConfigurationError        (ValueError)
    ├── ShapeMismatchError        (ValueError)
    └── NativeCallError           (RuntimeError)
        └── ExternalUpdateFailedError
"""

from typing import Optional, Tuple


class PanglossError(Exception):
    """Base class for all pangloss errors."""


class ConfigurationError(PanglossError, ValueError):
    """
    Raised for invalid optimizer configuration.

    Covers unknown algorithm names on hard-lookup paths, malformed
    declarative multiplier attributes and out-of-range hyperparameters.
    Always raised at construction time, never mid-training.
    """


class ShapeMismatchError(PanglossError, ValueError):
    """
    Raised when a gradient does not have the same shape as its weight.

    Attributes:
        index: Parameter index being updated
        weight_shape: Shape of the weight tensor
        grad_shape: Shape of the gradient tensor
    """

    def __init__(self, index: int, weight_shape: Tuple[int, ...], grad_shape: Tuple[int, ...]):
        self.index = index
        self.weight_shape = tuple(weight_shape)
        self.grad_shape = tuple(grad_shape)
        super().__init__(
            f"Gradient shape {self.grad_shape} does not match weight shape "
            f"{self.weight_shape} for parameter index {index}"
        )


class NativeCallError(PanglossError, RuntimeError):
    """
    Raised when a call into the native optimizer library reports failure.

    Attributes:
        function: Name of the native entry point
        status: Nonzero status code returned by the call
        message: Diagnostic text reported by the native library
    """

    def __init__(self, function: str, status: int, message: Optional[str] = None):
        self.function = function
        self.status = status
        self.message = message or ''
        detail = f": {self.message}" if self.message else ''
        super().__init__(f"{function} failed with status={status}{detail}")


class ExternalUpdateFailedError(NativeCallError):
    """
    Raised when the external optimizer rejects an update for an index.

    The update counter has already been advanced when this is raised.
    """

    def __init__(self, index: int, status: int, message: Optional[str] = None):
        self.index = index
        super().__init__('MXOptimizerUpdate', status, message)
