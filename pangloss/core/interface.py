"""
Core interfaces for pangloss components.

This module defines the protocols the coordination layer talks to. The design
is protocol-based (duck typing) rather than inheritance-based, so external
graph or scheduler objects can be plugged in without modification.

Key contracts:
- ParameterGraph: source of declarative per-parameter attributes
- LearningRateSchedule: global step -> learning rate
- UpdateAlgorithm: state construction + one update step
- OptimizerComponent: what the training loop sees

Example:
    >>> class MyGraph:
    ...     def list_attr(self, recursive: bool = True):
    ...         return {'fc1_weight_lr_mult': '2.0'}
    >>>
    >>> isinstance(MyGraph(), ParameterGraph)
    True
"""

from typing import Protocol, Mapping, Any, Optional, Tuple, Dict, runtime_checkable
from torch import Tensor


# ============================================================================
# PROTOCOLS
# ============================================================================


@runtime_checkable
class ParameterGraph(Protocol):
    """
    Symbolic view of a model's trainable parameters.

    Only one capability is required: a flat mapping of declarative
    attributes. With ``recursive=True`` keys are ``'{node}_{attr}'``,
    e.g. ``'fc1_weight_lr_mult' -> '2.0'``. Values are the declarative string
    form and are parsed by the consumer.

    The graph is consulted only while an optimizer is constructed.
    """

    def list_attr(self, recursive: bool = True) -> Mapping[str, str]:
        """Return declarative attributes keyed by (flattened) attribute name."""
        ...


@runtime_checkable
class LearningRateSchedule(Protocol):
    """
    Learning rate as a function of the global update count.

    Plain callables ``int -> float`` are accepted wherever a schedule is,
    this protocol describes the richer scheduler objects.
    """

    def rate_at(self, global_step: int) -> float:
        """Return the learning rate to use at ``global_step``."""
        ...


@runtime_checkable
class UpdateAlgorithm(Protocol):
    """
    Pluggable update rule.

    ``create_state`` builds the per-index state (may be ``None``) the first
    time an index is updated. ``apply`` receives the already resolved learning
    rate and weight decay and returns the new weight and the new state.
    """

    def create_state(self, index: int, weight: Tensor) -> Optional[Any]:
        ...

    def apply(
        self,
        index: int,
        weight: Tensor,
        grad: Tensor,
        state: Optional[Any],
        lr: float,
        wd: float,
    ) -> Tuple[Tensor, Optional[Any]]:
        ...


@runtime_checkable
class OptimizerComponent(UpdateAlgorithm, Protocol):
    """
    Optimizer as seen by the training loop.

    All optimizers must implement this interface to be driven by
    :class:`pangloss.training.optimizers.Updater`.
    """

    component_type: str
    component_name: str

    def update(
        self,
        index: int,
        weight: Tensor,
        grad: Tensor,
        state: Optional[Any],
    ) -> Tuple[Tensor, Optional[Any]]:
        """Record the update, resolve rates and apply one step."""
        ...

    def effective_lr(self, index: int) -> float:
        ...

    def effective_wd(self, index: int) -> float:
        ...

    def state_dict(self) -> Dict[str, Any]:
        ...

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        ...

    def close(self) -> None:
        """Release any resources held by the optimizer."""
        ...
