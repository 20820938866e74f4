"""Base classes for learning rate schedules."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class SchedulerSpec:
    """
    Specification for creating a scheduler.

    ``base_lr`` may be left as None; the optimizer the schedule is attached
    to then seeds it with its own learning rate.
    """

    name: str
    base_lr: Optional[float] = None
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        d = {'name': self.name}
        if self.base_lr is not None:
            d['base_lr'] = self.base_lr
        d.update(self.config)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SchedulerSpec':
        """Create from dictionary. Accepts 'type' as an alias for 'name'."""
        d = dict(d)
        name = d.pop('name', None)
        alias = d.pop('type', None)
        if name is None:
            name = alias
        if name is None:
            raise ConfigurationError("Scheduler config must contain 'name' or 'type' key")
        base_lr = d.pop('base_lr', None)
        return cls(name=name, base_lr=base_lr, config=d)


class BaseScheduler(ABC):
    """
    Base class for step-keyed learning rate schedules.

    A schedule maps the optimizer's global update count to a learning rate
    through :meth:`rate_at`. Its output supersedes the optimizer's base rate.

    Args:
        base_lr: Rate the schedule starts from; None until seeded
    """

    component_type: str = 'scheduler'
    component_name: str = 'scheduler'
    log_changes: bool = False

    def __init__(self, base_lr: Optional[float] = None):
        if base_lr is not None and base_lr < 0.0:
            raise ConfigurationError(f"Invalid base_lr: {base_lr}")
        self.base_lr = base_lr
        self._last_rate: Optional[float] = None

    @abstractmethod
    def compute_rate(self, global_step: int, base_lr: float) -> float:
        """Learning rate at ``global_step`` for a schedule starting at ``base_lr``."""

    def rate_at(self, global_step: int) -> float:
        """
        Learning rate at ``global_step``.

        Raises:
            ConfigurationError: If ``base_lr`` was never set
        """
        if self.base_lr is None:
            raise ConfigurationError(
                f"{type(self).__name__} has no base_lr; pass one or attach it to an optimizer"
            )
        rate = float(self.compute_rate(global_step, self.base_lr))
        if self.log_changes and self._last_rate is not None and rate != self._last_rate:
            logger.info(f"Update[{global_step}]: learning rate changed to {rate:.5e}")
        self._last_rate = rate
        return rate

    def __call__(self, global_step: int) -> float:
        return self.rate_at(global_step)

    def get_last_rate(self) -> Optional[float]:
        """Rate returned by the most recent :meth:`rate_at` call."""
        return self._last_rate

    def hparams(self) -> Dict[str, Any]:
        """Constructor arguments other than ``base_lr``."""
        return {}

    def state_dict(self) -> Dict[str, Any]:
        """Get scheduler state."""
        return {
            'base_lr': self.base_lr,
            '_last_rate': self._last_rate,
            **self.hparams(),
        }

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        """Load scheduler state."""
        self.base_lr = state_dict['base_lr']
        self._last_rate = state_dict.get('_last_rate')
        for key in self.hparams():
            if key in state_dict:
                setattr(self, key, state_dict[key])

    def __repr__(self) -> str:
        args = ', '.join(f"{k}={v!r}" for k, v in self.hparams().items())
        prefix = f"base_lr={self.base_lr}"
        return f"{type(self).__name__}({prefix}{', ' + args if args else ''})"
