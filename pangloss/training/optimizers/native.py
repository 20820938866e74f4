"""
Optimizers that delegate the update arithmetic to a native library.

- CCSGD: SGD with momentum, run by the native 'ccsgd' optimizer

The native instance is created once, by name, from string-serialized
parameters. Learning rate and weight decay resolution and the update count
stay in this layer; the native call is stateless with respect to scheduling.

Weights and gradients cross the boundary as NDArray handles: any object with
a ``shape`` and a native ``handle`` attribute. Torch tensors have no handle
and are rejected; use the in-process 'sgd' optimizer for them.
"""

import logging
from typing import Any, List, Optional, Tuple

from ...core.errors import ConfigurationError
from ...native import api as _native
from ...native.api import NativeOptimizerAPI, NativeOptimizerHandle, format_param, ndarray_handle
from .base import Optimizer

logger = logging.getLogger(__name__)

# Wire value for "no clipping"
NO_CLIP = -1.0


class CCSGDOptimizer(Optimizer):
    """
    SGD with momentum delegated to the native 'ccsgd' optimizer.

    Creation parameters, in wire order: ``momentum``, ``rescale_grad``,
    ``clip_gradient`` (``-1`` when unbounded).

    State lives in the native instance, so :meth:`create_state` returns None
    and :meth:`apply` mutates the weight in place through the native call.

    Args:
        momentum: Momentum factor (default: 0.0)
        native_api: Bindings to use; defaults to the shared library bindings
        **kwargs: Common optimizer options, see
            :class:`~pangloss.training.optimizers.base.Optimizer`

    Raises:
        NativeCallError: If the native optimizer cannot be created

    Example:
        >>> with CCSGDOptimizer(momentum=0.9, learning_rate=0.1) as optimizer:
        ...     updater = get_updater(optimizer)
        ...     updater(0, grad_ndarray, weight_ndarray)
    """

    component_name: str = 'ccsgd'
    native_name: str = 'ccsgd'

    def __init__(
        self,
        momentum: float = 0.0,
        native_api: Optional[NativeOptimizerAPI] = None,
        **kwargs
    ):
        if not 0.0 <= momentum <= 1.0:
            raise ConfigurationError(f"Invalid momentum: {momentum}")
        super().__init__(**kwargs)
        self.momentum = float(momentum)

        api = native_api if native_api is not None else _default_api()
        self._handle = NativeOptimizerHandle.create(api, self.native_name, self.native_params())

    def native_params(self) -> List[Tuple[str, str]]:
        """Ordered (key, value) creation parameters sent to the native side."""
        clip = NO_CLIP if self.clip_gradient is None else self.clip_gradient
        return [
            ('momentum', format_param(self.momentum)),
            ('rescale_grad', format_param(self.rescale_grad)),
            ('clip_gradient', format_param(clip)),
        ]

    @property
    def handle(self) -> NativeOptimizerHandle:
        return self._handle

    def create_state(self, index: int, weight: Any) -> None:
        return None

    def update(self, index: int, weight: Any, grad: Any, state: None) -> Tuple[Any, None]:
        """
        Perform one native update for ``index``.

        Raises:
            TypeError: If ``weight`` or ``grad`` carries no NDArray handle;
                nothing is counted
        """
        ndarray_handle(weight)
        ndarray_handle(grad)
        return super().update(index, weight, grad, state)

    def apply(
        self,
        index: int,
        weight: Any,
        grad: Any,
        state: None,
        lr: float,
        wd: float,
    ) -> Tuple[Any, None]:
        self._handle.update(index, ndarray_handle(weight), ndarray_handle(grad), lr, wd)
        return weight, None

    def close(self) -> None:
        """Release the native optimizer instance."""
        self._handle.close()

    def __repr__(self) -> str:
        return (
            f"CCSGDOptimizer(lr={self.learning_rate}, momentum={self.momentum}, "
            f"wd={self.weight_decay}, handle={self._handle!r})"
        )


def _default_api() -> NativeOptimizerAPI:
    return _native.get_optimizer_api()
