"""
Configuration management for pangloss optimizers.

An optimizer config file names the update algorithm, its hyperparameters,
an optional learning rate schedule and the parameter layout it applies to:

.. code-block:: yaml

    name: resnet-sgd
    optimizer:
      name: sgd
      learning_rate: 0.1
      weight_decay: 0.0001
      momentum: 0.9
      lr_mult_overrides:
        fc_weight: 2.0
    schedule:
      name: factor
      step_size: 1000
      factor: 0.9
    index_name_map:
      0: conv0_weight
      1: conv0_bias
      2: fc_weight
    graph:
      conv0_weight:
        lr_mult: '0.5'

Example:
    >>> from pangloss.utils import load_config
    >>>
    >>> config = load_config('configs/sgd.yaml')
    >>> optimizer = config.build_optimizer()
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..core.errors import ConfigurationError
from ..core.graph import AttributeGraph
from ..training.optimizers import Optimizer, OptimizerSpec, create_optimizer_from_spec
from ..training.schedulers import BaseScheduler, SchedulerSpec, create_scheduler_from_spec

logger = logging.getLogger(__name__)


# ============================================================================
# OPTIMIZER CONFIGURATION
# ============================================================================

@dataclass
class OptimizerConfig:
    """
    Complete optimizer configuration.

    Args:
        optimizer: Optimizer specification
        schedule: Learning rate schedule specification (optional)
        index_name_map: Parameter index -> name
        graph: Node name -> attribute mapping (e.g. ``{'fc': {'lr_mult': '2'}}``)
        name: Config name
        description: Config description
    """

    optimizer: OptimizerSpec
    schedule: Optional[SchedulerSpec] = None
    index_name_map: Dict[int, str] = field(default_factory=dict)
    graph: Dict[str, Dict[str, str]] = field(default_factory=dict)

    # Metadata
    name: str = "optimizer"
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'description': self.description,
            'optimizer': self.optimizer.to_dict(),
            'schedule': self.schedule.to_dict() if self.schedule is not None else None,
            'index_name_map': dict(self.index_name_map),
            'graph': {node: dict(attrs) for node, attrs in self.graph.items()},
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'OptimizerConfig':
        """
        Create from dictionary.

        Raises:
            ConfigurationError: If the optimizer section is missing or a
                section has the wrong shape
        """
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Config must be a mapping, got {type(config_dict).__name__}")
        if 'optimizer' not in config_dict:
            raise ConfigurationError("Config must contain an 'optimizer' section")

        known_keys = {'name', 'description', 'optimizer', 'schedule', 'index_name_map', 'graph'}
        for key in config_dict:
            if key not in known_keys:
                logger.warning(f"Ignoring unknown config key: {key!r}")

        schedule = config_dict.get('schedule')
        return cls(
            optimizer=OptimizerSpec.from_dict(_section(config_dict, 'optimizer')),
            schedule=SchedulerSpec.from_dict(schedule) if schedule else None,
            index_name_map=_parse_index_name_map(config_dict.get('index_name_map')),
            graph=_parse_graph(config_dict.get('graph')),
            name=config_dict.get('name', 'optimizer'),
            description=config_dict.get('description', ''),
        )

    def build_graph(self) -> Optional[AttributeGraph]:
        """Attribute graph for the configured nodes, or None if there are none."""
        if not self.graph:
            return None
        return AttributeGraph.from_dict(self.graph)

    def build_schedule(self) -> Optional[BaseScheduler]:
        return create_scheduler_from_spec(self.schedule)

    def build_optimizer(self) -> Optimizer:
        """
        Create the configured optimizer with its schedule and multipliers.

        Raises:
            ConfigurationError: If a name is unknown or a value is invalid
        """
        return create_optimizer_from_spec(
            self.optimizer,
            graph=self.build_graph(),
            index_name_map=self.index_name_map,
            schedule=self.build_schedule(),
        )


def _section(config_dict: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = config_dict.get(key)
    if not isinstance(value, dict):
        raise ConfigurationError(f"Config section {key!r} must be a mapping")
    return value


def _parse_index_name_map(value: Any) -> Dict[int, str]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError("'index_name_map' must be a mapping of index -> name")
    try:
        return {int(index): str(name) for index, name in value.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid parameter index in 'index_name_map': {e}") from e


def _parse_graph(value: Any) -> Dict[str, Dict[str, str]]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError("'graph' must be a mapping of node -> attributes")
    graph = {}
    for node, attrs in value.items():
        if not isinstance(attrs, dict):
            raise ConfigurationError(f"Attributes of graph node {node!r} must be a mapping")
        graph[str(node)] = {str(k): str(v) for k, v in attrs.items()}
    return graph


# ============================================================================
# YAML UTILITIES
# ============================================================================

def load_config(config_path: Union[str, Path]) -> OptimizerConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        OptimizerConfig instance

    Raises:
        ConfigurationError: If the file is not valid YAML or not a valid config

    Example:
        >>> config = load_config('configs/sgd.yaml')
        >>> print(config.optimizer.name)  # sgd
    """
    with open(config_path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    return OptimizerConfig.from_dict(config_dict)


def save_config(config: OptimizerConfig, config_path: Union[str, Path]) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: OptimizerConfig instance
        config_path: Path to save YAML file

    Example:
        >>> save_config(config, 'configs/my_config.yaml')
    """
    config_dict = config.to_dict()

    # Create directory if needed
    Path(config_path).parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Config saved to: {config_path}")
