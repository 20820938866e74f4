"""
In-process optimizers.

This module provides update rules that do their arithmetic directly on
torch tensors:
- SGD: Stochastic Gradient Descent with optional momentum
"""

from typing import Optional, Tuple

import torch
from torch import Tensor

from ...core.errors import ConfigurationError
from .base import Optimizer


# ============================================================================
# SGD
# ============================================================================

class SGDOptimizer(Optimizer):
    """
    Stochastic Gradient Descent with momentum.

    Update rule, with ``g = clip(rescale_grad * grad) + wd * weight``:

        without momentum:  weight <- weight - lr * g
        with momentum:     mom <- momentum * mom - lr * g
                           weight <- weight + mom

    The momentum buffer is the per-index state; without momentum the state
    is None.

    Args:
        momentum: Momentum factor (default: 0.0)
        **kwargs: Common optimizer options, see
            :class:`~pangloss.training.optimizers.base.Optimizer`

    Example:
        >>> optimizer = SGDOptimizer(
        ...     learning_rate=0.1,
        ...     momentum=0.9,
        ...     weight_decay=0.0001
        ... )
    """

    component_name: str = 'sgd'

    def __init__(self, momentum: float = 0.0, **kwargs):
        if not 0.0 <= momentum <= 1.0:
            raise ConfigurationError(f"Invalid momentum: {momentum}")
        super().__init__(**kwargs)
        self.momentum = float(momentum)

    def create_state(self, index: int, weight: Tensor) -> Optional[Tensor]:
        if self.momentum == 0.0:
            return None
        return torch.zeros_like(weight)

    @torch.no_grad()
    def apply(
        self,
        index: int,
        weight: Tensor,
        grad: Tensor,
        state: Optional[Tensor],
        lr: float,
        wd: float,
    ) -> Tuple[Tensor, Optional[Tensor]]:
        g = grad * self.rescale_grad
        if self.clip_gradient is not None:
            g = g.clamp(-self.clip_gradient, self.clip_gradient)
        if wd != 0:
            g = g.add(weight, alpha=wd)

        if state is None:
            weight.add_(g, alpha=-lr)
        else:
            state.mul_(self.momentum).add_(g, alpha=-lr)
            weight.add_(state)

        return weight, state

    def __repr__(self) -> str:
        return (
            f"SGDOptimizer(lr={self.learning_rate}, momentum={self.momentum}, "
            f"wd={self.weight_decay}, num_update={self.num_update})"
        )
