"""Warmup scheduler with linear warmup and optional decay."""

import math
from typing import Any, Dict, Optional

from ...core.errors import ConfigurationError
from .base import BaseScheduler

DECAY_STYLES = ('constant', 'linear', 'cosine')


class WarmupScheduler(BaseScheduler):
    """
    Learning rate scheduler with warmup and optional decay.

    Supports:
    - Linear warmup from ``warmup_init_lr`` to ``base_lr``
    - Constant LR after warmup
    - Linear decay after warmup
    - Cosine decay after warmup

    Args:
        warmup_steps: Number of warmup steps
        total_steps: Total training steps
        min_lr: Minimum learning rate (default: 0.0)
        warmup_init_lr: Initial warmup LR (default: 0.0)
        decay_style: Decay after warmup ('constant', 'linear', 'cosine')
        base_lr: Peak rate; None until seeded by the optimizer
    """

    component_name: str = 'warmup'

    def __init__(
        self,
        warmup_steps: int,
        total_steps: int,
        min_lr: float = 0.0,
        warmup_init_lr: float = 0.0,
        decay_style: str = 'cosine',
        base_lr: Optional[float] = None,
    ):
        if warmup_steps < 0:
            raise ConfigurationError(f"Invalid warmup_steps: {warmup_steps}")
        if total_steps < warmup_steps:
            raise ConfigurationError(
                f"total_steps ({total_steps}) must be >= warmup_steps ({warmup_steps})"
            )
        if decay_style not in DECAY_STYLES:
            raise ConfigurationError(
                f"Unknown decay_style: {decay_style}. Available: {', '.join(DECAY_STYLES)}"
            )
        super().__init__(base_lr=base_lr)
        self.warmup_steps = int(warmup_steps)
        self.total_steps = int(total_steps)
        self.min_lr = float(min_lr)
        self.warmup_init_lr = float(warmup_init_lr)
        self.decay_style = decay_style

    def get_lr_factor(self, step: int) -> float:
        """
        Compute the post-warmup decay factor for given step.

        Args:
            step: Current training step (>= warmup_steps)

        Returns:
            Multiplier in [0, 1] between ``min_lr`` and ``base_lr``
        """
        if self.decay_style == 'constant':
            return 1.0

        span = self.total_steps - self.warmup_steps
        progress = 1.0 if span <= 0 else (step - self.warmup_steps) / span
        progress = min(progress, 1.0)

        if self.decay_style == 'linear':
            return max(0.0, 1.0 - progress)

        # Cosine decay
        return 0.5 * (1.0 + math.cos(math.pi * progress))

    def compute_rate(self, global_step: int, base_lr: float) -> float:
        if global_step < self.warmup_steps:
            warmup_progress = global_step / self.warmup_steps
            return self.warmup_init_lr + (base_lr - self.warmup_init_lr) * warmup_progress

        return self.min_lr + (base_lr - self.min_lr) * self.get_lr_factor(global_step)

    def hparams(self) -> Dict[str, Any]:
        return {
            'warmup_steps': self.warmup_steps,
            'total_steps': self.total_steps,
            'min_lr': self.min_lr,
            'warmup_init_lr': self.warmup_init_lr,
            'decay_style': self.decay_style,
        }
