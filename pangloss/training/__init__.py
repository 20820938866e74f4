"""Optimizers and learning rate schedules."""

from .optimizers import (
    Optimizer,
    OptimizerSpec,
    Updater,
    get_updater,
    SGDOptimizer,
    CCSGDOptimizer,
    create_optimizer,
    create_optimizer_from_config,
    create_optimizer_from_spec,
    OPTIMIZER_REGISTRY,
)
from .schedulers import (
    BaseScheduler,
    SchedulerSpec,
    create_scheduler,
    create_scheduler_from_config,
    create_scheduler_from_spec,
    SCHEDULER_REGISTRY,
)


__all__ = [
    'Optimizer',
    'OptimizerSpec',
    'Updater',
    'get_updater',
    'SGDOptimizer',
    'CCSGDOptimizer',
    'create_optimizer',
    'create_optimizer_from_config',
    'create_optimizer_from_spec',
    'OPTIMIZER_REGISTRY',
    'BaseScheduler',
    'SchedulerSpec',
    'create_scheduler',
    'create_scheduler_from_config',
    'create_scheduler_from_spec',
    'SCHEDULER_REGISTRY',
]
