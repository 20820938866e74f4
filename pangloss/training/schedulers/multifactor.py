"""Piecewise decay at an explicit list of update counts."""

from bisect import bisect_left
from typing import Any, Dict, Optional, Sequence

from ...core.errors import ConfigurationError
from .base import BaseScheduler


class MultiFactorScheduler(BaseScheduler):
    """
    Multiply the learning rate by ``factor`` at each listed step.

    Once ``global_step`` passes ``steps[i]`` the rate has been reduced
    ``i + 1`` times.

    Args:
        steps: Strictly increasing update counts, each >= 1
        factor: Multiplier applied at each boundary, in (0, 1]
        base_lr: Starting rate; None until seeded by the optimizer

    Example:
        >>> schedule = MultiFactorScheduler(steps=[10, 20], factor=0.5, base_lr=1.0)
        >>> [schedule.rate_at(s) for s in (10, 11, 25)]
        [1.0, 0.5, 0.25]
    """

    component_name: str = 'multifactor'
    log_changes: bool = True

    def __init__(
        self,
        steps: Sequence[int],
        factor: float = 1.0,
        base_lr: Optional[float] = None,
    ):
        steps = [int(s) for s in steps]
        if not steps:
            raise ConfigurationError("MultiFactorScheduler needs at least one step")
        for i, s in enumerate(steps):
            if s < 1:
                raise ConfigurationError("Schedule step must be greater or equal than 1 round")
            if i > 0 and s <= steps[i - 1]:
                raise ConfigurationError("Schedule steps must be an increasing integer list")
        if not 0.0 < factor <= 1.0:
            raise ConfigurationError(f"Factor must be in (0, 1], got {factor}")
        super().__init__(base_lr=base_lr)
        self.steps = steps
        self.factor = float(factor)

    def compute_rate(self, global_step: int, base_lr: float) -> float:
        return base_lr * self.factor ** bisect_left(self.steps, global_step)

    def hparams(self) -> Dict[str, Any]:
        return {'steps': list(self.steps), 'factor': self.factor}
