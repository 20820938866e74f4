"""
Optimizers for the pangloss coordination layer.

This module provides the coordination layer and its update algorithms:
- SGD: in-process Stochastic Gradient Descent with momentum
- CCSGD: SGD with momentum delegated to the native 'ccsgd' optimizer

Example:
    >>> from pangloss.training.optimizers import create_optimizer, get_updater
    >>>
    >>> # By name, default configuration
    >>> optimizer = create_optimizer('sgd')
    >>>
    >>> # With per-parameter multipliers
    >>> optimizer = SGDOptimizer(
    ...     learning_rate=0.1,
    ...     index_name_map={0: 'fc_weight', 1: 'fc_bias'},
    ...     wd_mult_overrides={'fc_weight': 2.0},
    ... )
    >>> updater = get_updater(optimizer)
    >>> updater(0, grad, weight)
"""

from .base import Optimizer, OptimizerSpec
from .counter import UpdateCounter
from .multipliers import MultiplierTable
from .state import Updater, get_updater
from .standard import SGDOptimizer
from .native import CCSGDOptimizer

from .factory import (
    create_optimizer,
    create_optimizer_from_config,
    create_optimizer_from_spec,
    get_optimizer_info,
    describe_parameters,
    OPTIMIZER_REGISTRY
)


__all__ = [
    # Base classes
    'Optimizer',
    'OptimizerSpec',
    'UpdateCounter',
    'MultiplierTable',
    'Updater',
    'get_updater',

    # Optimizers
    'SGDOptimizer',
    'CCSGDOptimizer',

    # Factory functions
    'create_optimizer',
    'create_optimizer_from_config',
    'create_optimizer_from_spec',

    # Utilities
    'get_optimizer_info',
    'describe_parameters',

    # Registry
    'OPTIMIZER_REGISTRY',
]
