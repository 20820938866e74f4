"""Cosine annealing scheduler with warmup and restarts."""

import math
from typing import Any, Dict, Optional

from ...core.errors import ConfigurationError
from .base import BaseScheduler


class CosineScheduler(BaseScheduler):
    """
    Cosine annealing learning rate scheduler with optional warmup.

    After warmup the rate follows ``num_cycles`` cosine curves from
    ``base_lr`` down to ``min_lr``, then stays at ``min_lr``.

    Args:
        total_steps: Total training steps
        warmup_steps: Number of warmup steps (default: 0)
        min_lr: Minimum learning rate (default: 0.0)
        warmup_init_lr: Initial warmup LR (default: 0.0)
        num_cycles: Number of cosine cycles (default: 1)
        base_lr: Peak rate; None until seeded by the optimizer
    """

    component_name: str = 'cosine'

    def __init__(
        self,
        total_steps: int,
        warmup_steps: int = 0,
        min_lr: float = 0.0,
        warmup_init_lr: float = 0.0,
        num_cycles: int = 1,
        base_lr: Optional[float] = None,
    ):
        if warmup_steps < 0 or total_steps < warmup_steps:
            raise ConfigurationError(
                f"Need 0 <= warmup_steps <= total_steps, got {warmup_steps} and {total_steps}"
            )
        if num_cycles < 1:
            raise ConfigurationError(f"Invalid num_cycles: {num_cycles}")
        super().__init__(base_lr=base_lr)
        self.total_steps = int(total_steps)
        self.warmup_steps = int(warmup_steps)
        self.min_lr = float(min_lr)
        self.warmup_init_lr = float(warmup_init_lr)
        self.num_cycles = int(num_cycles)

    def get_lr_factor(self, step: int) -> float:
        """
        Compute cosine learning rate factor.

        Args:
            step: Current training step (>= warmup_steps)

        Returns:
            Learning rate multiplier
        """
        span = self.total_steps - self.warmup_steps
        progress = 1.0 if span <= 0 else (step - self.warmup_steps) / span
        if progress >= 1.0:
            return 0.0

        # Apply cycles
        cosine_arg = math.pi * (progress * self.num_cycles % 1.0)
        return 0.5 * (1.0 + math.cos(cosine_arg))

    def compute_rate(self, global_step: int, base_lr: float) -> float:
        if global_step < self.warmup_steps:
            warmup_progress = global_step / self.warmup_steps
            return self.warmup_init_lr + (base_lr - self.warmup_init_lr) * warmup_progress

        return self.min_lr + (base_lr - self.min_lr) * self.get_lr_factor(global_step)

    def hparams(self) -> Dict[str, Any]:
        return {
            'total_steps': self.total_steps,
            'warmup_steps': self.warmup_steps,
            'min_lr': self.min_lr,
            'warmup_init_lr': self.warmup_init_lr,
            'num_cycles': self.num_cycles,
        }
