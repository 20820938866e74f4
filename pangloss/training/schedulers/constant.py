"""Constant learning rate scheduler (no changes)."""

from .base import BaseScheduler


class ConstantScheduler(BaseScheduler):
    """
    Constant learning rate scheduler (no LR changes).

    Useful as a baseline or when you don't want scheduling.

    Args:
        base_lr: Learning rate returned for every step
    """

    component_name: str = 'constant'

    def compute_rate(self, global_step: int, base_lr: float) -> float:
        return base_lr
