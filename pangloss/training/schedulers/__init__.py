"""Learning rate schedules for pangloss optimizers."""

from .base import BaseScheduler, SchedulerSpec
from .constant import ConstantScheduler
from .factor import FactorScheduler
from .multifactor import MultiFactorScheduler
from .warmup import WarmupScheduler
from .cosine import CosineScheduler
from .factory import (
    create_scheduler,
    create_scheduler_from_config,
    create_scheduler_from_spec,
    SCHEDULER_REGISTRY
)


__all__ = [
    # Base
    'BaseScheduler',
    'SchedulerSpec',

    # Scheduler implementations
    'ConstantScheduler',
    'FactorScheduler',
    'MultiFactorScheduler',
    'WarmupScheduler',
    'CosineScheduler',

    # Factory functions
    'create_scheduler',
    'create_scheduler_from_config',
    'create_scheduler_from_spec',

    # Registry
    'SCHEDULER_REGISTRY',
]
