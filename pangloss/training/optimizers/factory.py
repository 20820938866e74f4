"""
Optimizer factory and creation utilities.

This module provides the optimizer registry and functions for creating
optimizers by name, from config dictionaries and from OptimizerSpec.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...core.interface import ParameterGraph
from ...core.registry import Registry
from .base import Optimizer, OptimizerSpec, Schedule
from .native import CCSGDOptimizer
from .standard import SGDOptimizer


# ============================================================================
# OPTIMIZER REGISTRY
# ============================================================================

OPTIMIZER_REGISTRY = Registry('optimizer', {
    'sgd': SGDOptimizer,
    'ccsgd': CCSGDOptimizer,
})


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_optimizer(name: str, **kwargs) -> Optional[Optimizer]:
    """
    Create an optimizer by name.

    Lookup is case-insensitive. Unknown names return None rather than
    raising; the caller decides whether that is an error.

    Args:
        name: Optimizer name ('sgd', 'ccsgd')
        **kwargs: Constructor arguments; omitted ones take their defaults

    Returns:
        Optimizer instance, or None if ``name`` is not registered

    Example:
        >>> optimizer = create_optimizer('sgd')
        >>> optimizer = create_optimizer('SGD', learning_rate=0.1, momentum=0.9)
        >>> create_optimizer('does-not-exist') is None
        True
    """
    return OPTIMIZER_REGISTRY.create(name, **kwargs)


def create_optimizer_from_spec(
    spec: OptimizerSpec,
    graph: Optional[ParameterGraph] = None,
    index_name_map: Optional[Mapping[int, str]] = None,
    schedule: Optional[Schedule] = None,
) -> Optimizer:
    """
    Create optimizer from OptimizerSpec.

    Unlike :func:`create_optimizer`, an unknown name is an error here:
    a config naming a missing optimizer must not be silently ignored.

    Args:
        spec: OptimizerSpec instance
        graph: Parameter graph providing declarative multipliers
        index_name_map: Parameter index -> name
        schedule: Learning rate schedule

    Raises:
        ConfigurationError: If ``spec.name`` is not registered
    """
    optimizer_class = OPTIMIZER_REGISTRY.get(spec.name)
    return optimizer_class(
        graph=graph,
        index_name_map=index_name_map,
        schedule=schedule,
        **spec.optimizer_kwargs()
    )


def create_optimizer_from_config(
    config: Dict[str, Any],
    graph: Optional[ParameterGraph] = None,
    index_name_map: Optional[Mapping[int, str]] = None,
    schedule: Optional[Schedule] = None,
) -> Optimizer:
    """
    Create optimizer from configuration dictionary.

    Args:
        config: Configuration dictionary with 'name' key and optional parameters
        graph: Parameter graph providing declarative multipliers
        index_name_map: Parameter index -> name
        schedule: Learning rate schedule

    Example:
        >>> config = {
        ...     'name': 'sgd',
        ...     'learning_rate': 0.1,
        ...     'weight_decay': 0.0001,
        ...     'momentum': 0.9,
        ...     'lr_mult_overrides': {'embed_weight': 0.1},
        ... }
        >>> optimizer = create_optimizer_from_config(config, index_name_map={0: 'embed_weight'})
    """
    return create_optimizer_from_spec(
        OptimizerSpec.from_dict(dict(config)),
        graph=graph,
        index_name_map=index_name_map,
        schedule=schedule,
    )


# ============================================================================
# OPTIMIZER UTILITIES
# ============================================================================

def get_optimizer_info(optimizer: Optimizer) -> Dict[str, Any]:
    """
    Get information about an optimizer.

    Example:
        >>> info = get_optimizer_info(optimizer)
        >>> print(info['type'], info['learning_rate'], info['num_update'])
    """
    return {
        'type': optimizer.component_name,
        'learning_rate': optimizer.learning_rate,
        'weight_decay': optimizer.weight_decay,
        'rescale_grad': optimizer.rescale_grad,
        'clip_gradient': optimizer.clip_gradient,
        'scheduled': optimizer.schedule is not None,
        'num_update': optimizer.num_update,
        'num_named_params': len(optimizer.multipliers.index_name_map),
    }


def describe_parameters(
    optimizer: Optimizer,
    indices: Optional[Iterable[int]] = None,
) -> List[Dict[str, Any]]:
    """
    Effective learning rate and weight decay per parameter index.

    Args:
        optimizer: Optimizer to inspect
        indices: Indices to describe (default: every named index)

    Returns:
        One dict per index with 'index', 'name', 'lr_mult', 'wd_mult',
        'lr' and 'wd'
    """
    table = optimizer.multipliers
    if indices is None:
        indices = sorted(table.index_name_map)

    rows = []
    for index in indices:
        rows.append({
            'index': index,
            'name': table.name_of(index),
            'lr_mult': table.lr_multiplier(index),
            'wd_mult': table.wd_multiplier(index),
            'lr': optimizer.effective_lr(index),
            'wd': optimizer.effective_wd(index),
        })
    return rows
