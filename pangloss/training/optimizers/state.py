"""
Lazy per-index optimizer state.

The :class:`Updater` is what a training loop calls once per parameter index
per step. It owns the state store: state for an index is created by the
optimizer the first time that index is updated, then threaded through every
later update. State is only discarded when the updater is closed.

Example:
    >>> updater = get_updater(SGDOptimizer(learning_rate=0.1, momentum=0.9))
    >>> for index, (weight, grad) in enumerate(zip(weights, grads)):
    ...     updater(index, grad, weight)
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import torch
from torch import Tensor

from ...core.interface import OptimizerComponent

logger = logging.getLogger(__name__)


class Updater:
    """
    Drives an optimizer over indexed parameters and keeps their state.

    At most one state object is live per index. A failed update (shape
    mismatch, external failure) leaves the stored state untouched.

    Args:
        optimizer: Optimizer implementing the OptimizerComponent protocol
    """

    def __init__(self, optimizer: OptimizerComponent):
        self.optimizer = optimizer
        self._states: Dict[int, Optional[Any]] = {}

    def state_for(self, index: int, weight: Tensor) -> Optional[Any]:
        """Return the state for ``index``, creating it on first access."""
        if index not in self._states:
            self._states[index] = self.optimizer.create_state(index, weight)
            logger.debug(
                f"Created {self.optimizer.component_name} state for index {index}"
            )
        return self._states[index]

    def update(self, index: int, weight: Tensor, grad: Tensor) -> Tuple[Tensor, Optional[Any]]:
        """
        Apply one update to ``weight`` and store the new state.

        State for a new index is built locally and only stored once the
        update succeeds, so a rejected call leaves the store untouched.

        Returns:
            (new_weight, new_state)
        """
        created = index not in self._states
        if created:
            state = self.optimizer.create_state(index, weight)
        else:
            state = self._states[index]

        new_weight, new_state = self.optimizer.update(index, weight, grad, state)
        self._states[index] = new_state
        if created:
            logger.debug(
                f"Created {self.optimizer.component_name} state for index {index}"
            )
        return new_weight, new_state

    def __call__(self, index: int, grad: Tensor, weight: Tensor) -> Tuple[Tensor, Optional[Any]]:
        """Updater call convention: ``(index, grad, weight)``."""
        return self.update(index, weight, grad)

    def has_state(self, index: int) -> bool:
        return index in self._states

    @property
    def states(self) -> Mapping[int, Optional[Any]]:
        """Read-only view of per-index state."""
        return MappingProxyType(self._states)

    def state_dict(self) -> Dict[str, Any]:
        """Get updater state (optimizer state plus per-index states)."""
        return {
            'optimizer': self.optimizer.state_dict(),
            'states': {index: _detach(state) for index, state in self._states.items()},
        }

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        """Load updater state; replaces all per-index states."""
        self.optimizer.load_state_dict(state_dict['optimizer'])
        self._states = {int(k): v for k, v in state_dict['states'].items()}

    def close(self) -> None:
        """Tear down: drop all state and release the optimizer."""
        logger.debug(f"Dropping state for {len(self._states)} indices")
        self._states.clear()
        self.optimizer.close()

    def __enter__(self) -> 'Updater':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"Updater({self.optimizer!r}, states={len(self._states)})"


def _detach(state: Any) -> Any:
    """Copy tensors out of a state so checkpoints don't alias live buffers."""
    if isinstance(state, torch.Tensor):
        return state.detach().clone()
    if isinstance(state, dict):
        return {k: _detach(v) for k, v in state.items()}
    if isinstance(state, (list, tuple)):
        return type(state)(_detach(v) for v in state)
    return state


def get_updater(optimizer: OptimizerComponent) -> Updater:
    """
    Create an updater for ``optimizer``.

    Example:
        >>> updater = get_updater(optimizer)
        >>> updater(0, grad, weight)
    """
    return Updater(optimizer)
