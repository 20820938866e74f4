"""
Pangloss: optimizer coordination for indexed parameters.

Resolves per-parameter learning rate and weight decay multipliers, counts
updates, applies schedules and keeps per-index optimizer state, around
either an in-process update rule or a native optimizer library.
"""

__version__ = "0.1.0"

# ============================================================================
# CORE IMPORTS
# ============================================================================

from .core import (
    PanglossError,
    ConfigurationError,
    ShapeMismatchError,
    NativeCallError,
    ExternalUpdateFailedError,
    AttributeGraph,
    ParameterNode,
    Registry,
)

# Optimizers
from .training.optimizers import (
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

# Schedulers
from .training.schedulers import (
    SchedulerSpec,
    create_scheduler,
    create_scheduler_from_config,
    SCHEDULER_REGISTRY,
)


__all__ = [
    '__version__',

    # Errors
    'PanglossError',
    'ConfigurationError',
    'ShapeMismatchError',
    'NativeCallError',
    'ExternalUpdateFailedError',

    # Core
    'AttributeGraph',
    'ParameterNode',
    'Registry',

    # Optimizers
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

    # Schedulers
    'SchedulerSpec',
    'create_scheduler',
    'create_scheduler_from_config',
    'SCHEDULER_REGISTRY',
]
