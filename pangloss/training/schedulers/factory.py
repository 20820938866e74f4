"""Scheduler factory and registry."""

from typing import Any, Dict, Optional

from ...core.registry import Registry
from .base import BaseScheduler, SchedulerSpec
from .constant import ConstantScheduler
from .cosine import CosineScheduler
from .factor import FactorScheduler
from .multifactor import MultiFactorScheduler
from .warmup import WarmupScheduler


SCHEDULER_REGISTRY = Registry('scheduler', {
    'constant': ConstantScheduler,
    'factor': FactorScheduler,
    'multifactor': MultiFactorScheduler,
    'warmup': WarmupScheduler,
    'cosine': CosineScheduler,
})


def create_scheduler(name: str, **kwargs) -> BaseScheduler:
    """
    Create a scheduler by name.

    Args:
        name: Scheduler name ('constant', 'factor', 'multifactor', 'warmup', 'cosine')
        **kwargs: Scheduler-specific arguments

    Returns:
        Scheduler instance

    Raises:
        ValueError: If the name is not registered

    Example:
        >>> scheduler = create_scheduler(
        ...     'warmup',
        ...     warmup_steps=1000,
        ...     total_steps=10000,
        ...     decay_style='cosine'
        ... )
    """
    scheduler_class = SCHEDULER_REGISTRY.get(name)
    return scheduler_class(**kwargs)


def create_scheduler_from_config(config: Dict[str, Any]) -> BaseScheduler:
    """
    Create scheduler from config dict.

    Args:
        config: Config with 'name' or 'type' and optional parameters

    Example:
        >>> config = {
        ...     'name': 'factor',
        ...     'step_size': 1000,
        ...     'factor': 0.9,
        ... }
        >>> scheduler = create_scheduler_from_config(config)
    """
    return create_scheduler_from_spec(SchedulerSpec.from_dict(config))


def create_scheduler_from_spec(spec: Optional[SchedulerSpec]) -> Optional[BaseScheduler]:
    """Create scheduler from SchedulerSpec; None passes through."""
    if spec is None:
        return None
    config = spec.to_dict()
    name = config.pop('name')
    return create_scheduler(name, **config)
