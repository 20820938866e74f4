"""
Base classes for optimizers in the pangloss coordination layer.

This module defines:
- OptimizerSpec: declarative configuration for creating an optimizer
- Optimizer: abstract base combining multiplier resolution, update counting
  and learning-rate scheduling around a pluggable update rule

Subclasses only implement the arithmetic (or delegation):

    >>> class MyOptimizer(Optimizer):
    ...     component_name = 'mine'
    ...     def create_state(self, index, weight):
    ...         return None
    ...     def apply(self, index, weight, grad, state, lr, wd):
    ...         weight.sub_(lr * grad)
    ...         return weight, state
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from torch import Tensor

from ...core.errors import ConfigurationError, ShapeMismatchError
from ...core.interface import LearningRateSchedule, ParameterGraph
from .counter import UpdateCounter
from .multipliers import MultiplierTable

logger = logging.getLogger(__name__)

Schedule = Union[LearningRateSchedule, Callable[[int], float]]


# ============================================================================
# OPTIMIZER SPECIFICATION
# ============================================================================

@dataclass
class OptimizerSpec:
    """
    Specification for creating an optimizer.

    Holds everything needed to instantiate an optimizer by name, so optimizer
    choice can live in a config file rather than in code.

    Example:
        >>> spec = OptimizerSpec(
        ...     name='sgd',
        ...     learning_rate=0.1,
        ...     weight_decay=1e-4,
        ...     wd_mult_overrides={'fc_weight': 2.0},
        ...     config={'momentum': 0.9},
        ... )
    """

    name: str
    learning_rate: float = 0.01
    weight_decay: float = 0.0
    rescale_grad: float = 1.0
    clip_gradient: Optional[float] = None
    begin_update_count: int = 0

    lr_mult_overrides: Dict[str, float] = field(default_factory=dict)
    wd_mult_overrides: Dict[str, float] = field(default_factory=dict)

    # Algorithm-specific kwargs (e.g. momentum)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert spec to dictionary."""
        return {
            'name': self.name,
            'learning_rate': self.learning_rate,
            'weight_decay': self.weight_decay,
            'rescale_grad': self.rescale_grad,
            'clip_gradient': self.clip_gradient,
            'begin_update_count': self.begin_update_count,
            'lr_mult_overrides': dict(self.lr_mult_overrides),
            'wd_mult_overrides': dict(self.wd_mult_overrides),
            **self.config
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'OptimizerSpec':
        """Create spec from dictionary; unknown keys go to ``config``."""
        known_fields = {
            'name', 'learning_rate', 'weight_decay', 'rescale_grad',
            'clip_gradient', 'begin_update_count',
            'lr_mult_overrides', 'wd_mult_overrides',
        }

        if 'name' not in config:
            raise ConfigurationError("Optimizer config must contain a 'name' key")

        spec_kwargs = {k: v for k, v in config.items() if k in known_fields}
        extra_kwargs = {k: v for k, v in config.items() if k not in known_fields}

        # YAML gives None for empty mappings
        for key in ('lr_mult_overrides', 'wd_mult_overrides'):
            if spec_kwargs.get(key) is None:
                spec_kwargs.pop(key, None)

        if extra_kwargs:
            spec_kwargs['config'] = extra_kwargs

        return cls(**spec_kwargs)

    def optimizer_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for the optimizer constructor."""
        kwargs = self.to_dict()
        kwargs.pop('name')
        return kwargs


# ============================================================================
# BASE OPTIMIZER
# ============================================================================

class Optimizer(ABC):
    """
    Base class for all update algorithms.

    Owns the immutable configuration (base rate, weight decay, rescale, clip),
    the multiplier table and the update counter. Per-index optimizer state is
    owned by :class:`~pangloss.training.optimizers.state.Updater`.

    Args:
        learning_rate: Base learning rate (default: 0.01)
        weight_decay: Base weight decay (default: 0.0)
        rescale_grad: Factor applied to every gradient (default: 1.0)
        clip_gradient: Clip gradients to [-clip, clip]; None for unbounded
        begin_update_count: Starting update count for every index (default: 0)
        index_name_map: Parameter index -> name
        lr_mult_overrides: Name (or index string) -> learning-rate multiplier
        wd_mult_overrides: Name (or index string) -> weight-decay multiplier
        schedule: Learning rate schedule; supersedes ``learning_rate``
        graph: Parameter graph read for '_lr_mult' / '_wd_mult' attributes

    Raises:
        ConfigurationError: On invalid hyperparameters or malformed
            multiplier attributes
    """

    component_type: str = 'optimizer'
    component_name: str = 'optimizer'

    def __init__(
        self,
        learning_rate: float = 0.01,
        weight_decay: float = 0.0,
        rescale_grad: float = 1.0,
        clip_gradient: Optional[float] = None,
        begin_update_count: int = 0,
        index_name_map: Optional[Mapping[int, str]] = None,
        lr_mult_overrides: Optional[Mapping[str, float]] = None,
        wd_mult_overrides: Optional[Mapping[str, float]] = None,
        schedule: Optional[Schedule] = None,
        graph: Optional[ParameterGraph] = None,
    ):
        if learning_rate < 0.0:
            raise ConfigurationError(f"Invalid learning rate: {learning_rate}")
        if weight_decay < 0.0:
            raise ConfigurationError(f"Invalid weight_decay: {weight_decay}")
        if rescale_grad <= 0.0:
            raise ConfigurationError(f"Invalid rescale_grad: {rescale_grad}")
        if clip_gradient is not None and clip_gradient < 0.0:
            raise ConfigurationError(f"Invalid clip_gradient: {clip_gradient}")

        self.learning_rate = float(learning_rate)
        self.weight_decay = float(weight_decay)
        self.rescale_grad = float(rescale_grad)
        self.clip_gradient = None if clip_gradient is None else float(clip_gradient)

        self.schedule = schedule
        if schedule is not None and getattr(schedule, 'base_lr', 0.0) is None:
            schedule.base_lr = self.learning_rate

        self.counter = UpdateCounter(begin=begin_update_count)
        self.multipliers = MultiplierTable.build(
            index_name_map=index_name_map,
            graph=graph,
            lr_mult_overrides=lr_mult_overrides,
            wd_mult_overrides=wd_mult_overrides,
        )

    # ------------------------------------------------------------------
    # Update algorithm contract
    # ------------------------------------------------------------------

    @abstractmethod
    def create_state(self, index: int, weight: Tensor) -> Optional[Any]:
        """Create the per-index state (None for stateless algorithms)."""

    @abstractmethod
    def apply(
        self,
        index: int,
        weight: Tensor,
        grad: Tensor,
        state: Optional[Any],
        lr: float,
        wd: float,
    ) -> Tuple[Tensor, Optional[Any]]:
        """Apply one step with resolved rates; return (weight, state)."""

    # ------------------------------------------------------------------
    # Coordination
    # ------------------------------------------------------------------

    def update(
        self,
        index: int,
        weight: Tensor,
        grad: Tensor,
        state: Optional[Any],
    ) -> Tuple[Tensor, Optional[Any]]:
        """
        Perform one update for ``index``.

        Shapes are checked before anything is touched. The update count is
        recorded before the learning rate is resolved, so step-keyed
        schedules see the post-increment value.

        Raises:
            ShapeMismatchError: If ``grad`` and ``weight`` shapes differ
        """
        if tuple(grad.shape) != tuple(weight.shape):
            raise ShapeMismatchError(index, tuple(weight.shape), tuple(grad.shape))

        self.record_update(index)
        lr = self.effective_lr(index)
        wd = self.effective_wd(index)
        return self.apply(index, weight, grad, state, lr, wd)

    def record_update(self, index: int) -> int:
        """Record one update attempt for ``index``."""
        return self.counter.record_update(index)

    @property
    def num_update(self) -> int:
        """Global update high-water mark."""
        return self.counter.global_count()

    def base_rate(self) -> float:
        """Learning rate before multipliers: schedule output or the base rate."""
        if self.schedule is None:
            return self.learning_rate
        rate_at = getattr(self.schedule, 'rate_at', None)
        if rate_at is not None:
            return float(rate_at(self.num_update))
        return float(self.schedule(self.num_update))

    def effective_lr(self, index: int) -> float:
        """Learning rate for ``index`` at the current global step."""
        return self.base_rate() * self.multipliers.lr_multiplier(index)

    def effective_wd(self, index: int) -> float:
        """Weight decay for ``index``."""
        return self.weight_decay * self.multipliers.wd_multiplier(index)

    # ------------------------------------------------------------------
    # Checkpointing / lifecycle
    # ------------------------------------------------------------------

    def state_dict(self) -> Dict[str, Any]:
        """Get optimizer state (update counts and schedule state)."""
        state = {
            'component_name': self.component_name,
            'counter': self.counter.state_dict(),
        }
        schedule_state = getattr(self.schedule, 'state_dict', None)
        if schedule_state is not None:
            state['schedule'] = schedule_state()
        return state

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        """Load optimizer state."""
        name = state_dict.get('component_name', self.component_name)
        if name != self.component_name:
            raise ConfigurationError(
                f"State was saved by optimizer {name!r}, cannot load into {self.component_name!r}"
            )
        self.counter.load_state_dict(state_dict['counter'])
        if 'schedule' in state_dict and hasattr(self.schedule, 'load_state_dict'):
            self.schedule.load_state_dict(state_dict['schedule'])

    def close(self) -> None:
        """Release resources. No-op for in-process optimizers."""

    def __enter__(self) -> 'Optimizer':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"lr={self.learning_rate}, wd={self.weight_decay}, "
            f"num_update={self.num_update})"
        )
