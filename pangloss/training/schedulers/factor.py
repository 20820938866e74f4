"""Step decay: multiply the rate by a constant factor every fixed number of updates."""

from typing import Any, Dict, Optional

from ...core.errors import ConfigurationError
from .base import BaseScheduler


class FactorScheduler(BaseScheduler):
    """
    Reduce the learning rate by ``factor`` every ``step_size`` updates.

        rate(step) = max(base_lr * factor ** ((step - 1) // step_size), stop_factor_lr)

    A reduction applies once ``step`` passes a multiple of ``step_size``, so
    ``rate(step_size)`` is still ``base_lr``.

    Args:
        step_size: Updates between two reductions (>= 1)
        factor: Multiplier applied at each reduction, in (0, 1]
        stop_factor_lr: Floor for the learning rate (default: 1e-8)
        base_lr: Starting rate; None until seeded by the optimizer

    Example:
        >>> schedule = FactorScheduler(step_size=100, factor=0.5, base_lr=0.1)
        >>> schedule.rate_at(250)
        0.025
    """

    component_name: str = 'factor'
    log_changes: bool = True

    def __init__(
        self,
        step_size: int,
        factor: float = 1.0,
        stop_factor_lr: float = 1e-8,
        base_lr: Optional[float] = None,
    ):
        if step_size < 1:
            raise ConfigurationError("Schedule step must be greater or equal than 1 round")
        if not 0.0 < factor <= 1.0:
            raise ConfigurationError(f"Factor must be in (0, 1], got {factor}")
        super().__init__(base_lr=base_lr)
        self.step_size = int(step_size)
        self.factor = float(factor)
        self.stop_factor_lr = float(stop_factor_lr)

    def compute_rate(self, global_step: int, base_lr: float) -> float:
        rate = base_lr * self.factor ** max(0, (global_step - 1) // self.step_size)
        return max(rate, self.stop_factor_lr)

    def hparams(self) -> Dict[str, Any]:
        return {
            'step_size': self.step_size,
            'factor': self.factor,
            'stop_factor_lr': self.stop_factor_lr,
        }
