"""
Utilities: configuration, checkpointing and logging.

Example:
    >>> from pangloss.utils import load_config, setup_logging
    >>>
    >>> setup_logging('pangloss')
    >>> optimizer = load_config("configs/sgd.yaml").build_optimizer()
"""

from .config import (
    OptimizerConfig,
    load_config,
    save_config,
)

from .checkpoint import (
    load_checkpoint,
    save_checkpoint,
    get_checkpoint_info,
)

from .logging import (
    setup_logging,
    ColoredFormatter,
)


__all__ = [
    # Config
    'OptimizerConfig',
    'load_config',
    'save_config',

    # Checkpoint
    'load_checkpoint',
    'save_checkpoint',
    'get_checkpoint_info',

    # Logging
    'setup_logging',
    'ColoredFormatter',
]
